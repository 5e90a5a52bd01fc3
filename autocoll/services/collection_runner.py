"""
Orchestration d'une exécution complète.

Traite les définitions une par une, jusqu'au bout (calcul de la cible,
déduplication, réconciliation, validation) avant de passer à la suivante :
collections simples, puis collections par expression, puis collections
auto-découvertes.

Une définition en échec est consignée dans le rapport et l'exécution continue.
L'annulation est coopérative et vérifiée entre deux définitions uniquement ;
les collections déjà traitées restent en l'état.
"""

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Protocol, Sequence

from loguru import logger

from autocoll.core.entities.collection import DiscoveredCollection
from autocoll.core.entities.media import MediaEntity, MediaKind
from autocoll.core.errors import CollaboratorError
from autocoll.core.ports.catalog import ICatalog
from autocoll.core.ports.collection_store import ICollectionStore
from autocoll.core.ports.user_data import IUserDataProvider
from autocoll.core.value_objects.entity_query import EntityQuery
from autocoll.services.auto_discovery import AutoDiscoveryService
from autocoll.services.criteria_evaluator import CriteriaEvaluator
from autocoll.services.deduplicator import dedupe
from autocoll.services.definitions import (
    AutoDiscoverySettings,
    CollectionDefinitions,
    ExpressionCollectionDefinition,
    SimpleCollectionDefinition,
)
from autocoll.services.expressions import Expression, ExpressionParser
from autocoll.services.person_cache import PersonMembershipCache
from autocoll.services.reconciliation import ReconciliationEngine, ReconciliationReport
from autocoll.services.simple_matcher import SimpleMatcher
from autocoll.utils.constants import (
    AUTO_DISCOVERY_TAG,
    DEFAULT_VALIDATION_SAMPLE_SIZE,
    MANAGED_COLLECTION_TAG,
)

ProgressCallback = Callable[[float], None]


class CancellationSignal(Protocol):
    """Signal d'annulation coopératif (threading.Event convient)."""

    def is_set(self) -> bool:
        ...


class DefinitionKind(str, Enum):
    SIMPLE = "simple"
    EXPRESSION = "expression"
    DISCOVERED = "discovered"


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    PARSE_ERROR = "parse_error"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class CollectionOutcome:
    """
    Résultat du traitement d'une définition.

    Attributes:
        name: Nom de la collection
        kind: Origine de la définition
        status: Statut du traitement
        candidates: Nombre de membres cibles après déduplication
        report: Rapport de réconciliation (si la réconciliation a eu lieu)
        errors: Erreurs de syntaxe ou d'exécution
    """

    name: str
    kind: DefinitionKind
    status: OutcomeStatus
    candidates: int = 0
    report: Optional[ReconciliationReport] = None
    errors: list[str] = field(default_factory=list)

    @property
    def added(self) -> int:
        return len(self.report.added) if self.report else 0

    @property
    def removed(self) -> int:
        return len(self.report.removed) if self.report else 0

    @property
    def final_size(self) -> int:
        return self.report.final_size if self.report else 0

    @property
    def failed(self) -> bool:
        return self.status in (OutcomeStatus.FAILED, OutcomeStatus.PARSE_ERROR)

    def to_dict(self) -> dict:
        validation = self.report.validation if self.report else None
        return {
            "name": self.name,
            "kind": self.kind.value,
            "status": self.status.value,
            "added": self.added,
            "removed": self.removed,
            "final_size": self.final_size,
            "validation": validation.to_dict() if validation else None,
            "errors": self.errors,
        }


@dataclass
class RunReport:
    """Rapport d'une exécution : un résultat par définition traitée."""

    outcomes: list[CollectionOutcome] = field(default_factory=list)
    cancelled: bool = False
    total: int = 0

    @property
    def failed(self) -> list[CollectionOutcome]:
        return [o for o in self.outcomes if o.failed]

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)

    def to_json(self) -> str:
        """Sérialise le rapport en JSON."""
        return json.dumps(
            {
                "total": self.total,
                "processed": len(self.outcomes),
                "cancelled": self.cancelled,
                "collections": [o.to_dict() for o in self.outcomes],
            },
            indent=2,
            ensure_ascii=False,
        )


_Task = tuple[str, DefinitionKind, Callable[[], CollectionOutcome]]


class CollectionRunner:
    """
    Service d'exécution des définitions de collections.

    Args:
        catalog: Catalogue multimédia
        store: Stockage des collections
        user_data: États de lecture (optionnel)
        marker_tag: Tag des collections gérées
        discovery_tag: Tag supplémentaire des collections auto-découvertes
        sample_size: Exemples journalisés par catégorie d'écart de validation
        clock: Horloge locale des critères de date
    """

    def __init__(
        self,
        catalog: ICatalog,
        store: ICollectionStore,
        user_data: Optional[IUserDataProvider] = None,
        marker_tag: str = MANAGED_COLLECTION_TAG,
        discovery_tag: str = AUTO_DISCOVERY_TAG,
        sample_size: int = DEFAULT_VALIDATION_SAMPLE_SIZE,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._catalog = catalog
        self._store = store
        self._marker_tag = marker_tag
        self._discovery_tag = discovery_tag
        self._parser = ExpressionParser()
        self._evaluator = CriteriaEvaluator(catalog, user_data, clock)
        self._engine = ReconciliationEngine(store, marker_tag, sample_size)
        self._matcher = SimpleMatcher(catalog)
        self._discovery = AutoDiscoveryService(catalog)

    def run(
        self,
        definitions: CollectionDefinitions,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancellationSignal] = None,
    ) -> RunReport:
        """
        Exécute toutes les définitions actives.

        Args:
            definitions: Définitions à traiter
            progress: Callback recevant l'avancement en pourcentage (0 à 100)
            cancel: Signal d'annulation, vérifié avant chaque définition

        Returns:
            RunReport avec un résultat par définition traitée.
        """
        tasks = self._build_tasks(definitions)
        report = RunReport(total=len(tasks))
        logger.info(f"Démarrage de l'exécution : {len(tasks)} collection(s)")
        _report_progress(progress, 0.0)

        for index, (name, kind, task) in enumerate(tasks, start=1):
            if cancel is not None and cancel.is_set():
                logger.info(f"Exécution annulée après {index - 1} collection(s)")
                report.cancelled = True
                return report

            logger.info(f"Collection {kind.value} '{name}' ({index} sur {len(tasks)})")
            report.outcomes.append(self._run_task(name, kind, task))

            percentage = index / len(tasks) * 100
            logger.debug(f"Progression : {index}/{len(tasks)} ({percentage:.1f}%)")
            _report_progress(progress, percentage)

        _report_progress(progress, 100.0)
        logger.info(
            f"Exécution terminée : {len(report.outcomes)} collection(s), "
            f"{len(report.failed)} en échec"
        )
        return report

    def process_simple(self, definition: SimpleCollectionDefinition) -> CollectionOutcome:
        """Traite une collection simple."""
        candidates = self._matcher.find(definition)
        return self._apply(definition.name, DefinitionKind.SIMPLE, candidates)

    def process_expression(self, definition: ExpressionCollectionDefinition) -> CollectionOutcome:
        """
        Traite une collection par expression.

        Une expression invalide laisse la collection intacte : aucune lecture
        ni écriture du stockage n'a lieu.
        """
        name = definition.name
        result = self._parser.parse(definition.expression)
        if not result.ok:
            logger.error(f"Expression invalide pour '{name}' : {definition.expression!r}")
            for error in result.errors:
                logger.error(f"  {error}")
            return CollectionOutcome(
                name=name,
                kind=DefinitionKind.EXPRESSION,
                status=OutcomeStatus.PARSE_ERROR,
                errors=result.error_messages,
            )

        candidates = self.evaluate_expression(result.expression, definition.case_sensitive)
        return self._apply(name, DefinitionKind.EXPRESSION, candidates)

    def process_discovered(
        self, discovered: DiscoveredCollection, skip_existing_manual: bool = True
    ) -> CollectionOutcome:
        """Traite une collection auto-découverte."""
        if skip_existing_manual:
            existing = self._store.find_collection_by_name(discovered.name)
            if existing is not None and not existing.is_managed(self._marker_tag):
                logger.info(f"Collection manuelle '{discovered.name}' existante, ignorée")
                return CollectionOutcome(
                    name=discovered.name,
                    kind=DefinitionKind.DISCOVERED,
                    status=OutcomeStatus.SKIPPED,
                )

        return self._apply(
            discovered.name,
            DefinitionKind.DISCOVERED,
            discovered.entities,
            extra_tags=(self._discovery_tag,),
        )

    def evaluate_expression(self, expression: Expression, case_sensitive: bool) -> list[MediaEntity]:
        """
        Évalue une expression sur tous les films puis toutes les séries.

        Le cache des personnes est créé pour cette évaluation et libéré
        immédiatement après.
        """
        movies = self._catalog.query_entities(EntityQuery.of_kind(MediaKind.MOVIE))
        series = self._catalog.query_entities(EntityQuery.of_kind(MediaKind.SERIES))
        logger.debug(f"Évaluation de {expression} sur {len(movies)} film(s) et {len(series)} série(s)")

        matched = []
        with PersonMembershipCache(self._catalog) as cache:
            for entity in movies + series:
                predicate = self._evaluator.predicate_for(entity, case_sensitive, cache)
                if expression.evaluate(predicate):
                    logger.debug(f"  ✓ {entity.kind.value} retenu : {entity} (id {entity.id})")
                    matched.append(entity)
        return matched

    def _apply(
        self,
        name: str,
        kind: DefinitionKind,
        candidates: Sequence[MediaEntity],
        extra_tags: Sequence[str] = (),
    ) -> CollectionOutcome:
        target = dedupe(list(candidates))
        collection = self._engine.ensure_collection(name, extra_tags)
        report = self._engine.reconcile(collection.id, target, name)
        return CollectionOutcome(
            name=name,
            kind=kind,
            status=OutcomeStatus.SUCCESS if report.succeeded else OutcomeStatus.FAILED,
            candidates=len(target),
            report=report,
            errors=[report.error] if report.error else [],
        )

    def _run_task(
        self, name: str, kind: DefinitionKind, task: Callable[[], CollectionOutcome]
    ) -> CollectionOutcome:
        try:
            return task()
        except CollaboratorError as e:
            logger.error(f"Échec de la collection '{name}' : {e}")
            return CollectionOutcome(name=name, kind=kind, status=OutcomeStatus.FAILED, errors=[str(e)])
        except Exception as e:
            logger.exception(f"Erreur inattendue pour la collection '{name}' : {e}")
            return CollectionOutcome(name=name, kind=kind, status=OutcomeStatus.FAILED, errors=[str(e)])

    def _build_tasks(self, definitions: CollectionDefinitions) -> list[_Task]:
        tasks: list[_Task] = []

        if definitions.enable_simple_collections:
            for simple in definitions.simple:
                tasks.append((simple.name, DefinitionKind.SIMPLE, lambda d=simple: self.process_simple(d)))

        if definitions.enable_advanced_collections:
            for expression in definitions.expression:
                tasks.append(
                    (
                        expression.name,
                        DefinitionKind.EXPRESSION,
                        lambda d=expression: self.process_expression(d),
                    )
                )

        settings = definitions.auto_discovery
        for discovered in self._discover(settings):
            tasks.append(
                (
                    discovered.name,
                    DefinitionKind.DISCOVERED,
                    lambda d=discovered: self.process_discovered(
                        d, settings.skip_existing_manual_collections
                    ),
                )
            )
        return tasks

    def _discover(self, settings: AutoDiscoverySettings) -> list[DiscoveredCollection]:
        try:
            return self._discovery.discover(settings)
        except CollaboratorError as e:
            logger.error(f"Auto-découverte impossible : {e}")
            return []


def _report_progress(progress: Optional[ProgressCallback], percentage: float) -> None:
    if progress is not None:
        progress(percentage)
