"""
Moteur de réconciliation des collections gérées.

Fait converger la liste persistée des membres d'une collection vers une liste
cible fraîchement calculée, avec un minimum de mutations :

1. Retrait (en un seul appel) des membres absents de la cible
2. Ajout (en un seul appel) des membres manquants, triés par année puis date décroissantes
3. Re-tri minimal : seul le suffixe à partir du premier écart avec l'ordre
   canonique est retiré puis ré-ajouté
4. Validation : comparaison de la collection relue avec la cible

Un échec du stockage (CollaboratorError) interrompt la réconciliation de la
collection concernée ; il est consigné dans le rapport et n'est pas propagé.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from loguru import logger

from autocoll.core.entities.collection import ManagedCollection
from autocoll.core.entities.media import MediaEntity
from autocoll.core.errors import CollaboratorError
from autocoll.core.ports.collection_store import ICollectionStore
from autocoll.utils.constants import DEFAULT_VALIDATION_SAMPLE_SIZE, MANAGED_COLLECTION_TAG
from autocoll.utils.helpers import format_examples, to_naive_utc

_MISSING_YEAR = -1


def _date_key(value: Optional[datetime]) -> datetime:
    moment = to_naive_utc(value)
    return datetime.min if moment is None else moment


def canonical_sort_key(entity: MediaEntity) -> tuple[int, datetime]:
    """Clé de tri : année de production puis date de sortie (absentes = minimum)."""
    year = entity.production_year if entity.production_year is not None else _MISSING_YEAR
    return year, _date_key(entity.premiere_date)


def sort_canonical(entities: Sequence[MediaEntity]) -> list[MediaEntity]:
    """
    Trie les entités par année puis date décroissantes.

    Le tri est stable : les ex-aequo conservent leur ordre d'origine.
    """
    return sorted(entities, key=canonical_sort_key, reverse=True)


@dataclass
class ValidationReport:
    """
    Comparaison du contenu relu d'une collection avec la cible.

    Attributes:
        expected: Nombre de membres attendus
        actual: Nombre de membres présents
        matching: Nombre de membres attendus et présents
        missing: Entités attendues mais absentes
        extra: Entités présentes mais non attendues
    """

    expected: int = 0
    actual: int = 0
    matching: int = 0
    missing: list[MediaEntity] = field(default_factory=list)
    extra: list[MediaEntity] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.missing and not self.extra

    @property
    def missing_ids(self) -> list[str]:
        return [e.id for e in self.missing]

    @property
    def extra_ids(self) -> list[str]:
        return [e.id for e in self.extra]

    def to_dict(self) -> dict:
        return {
            "expected": self.expected,
            "actual": self.actual,
            "matching": self.matching,
            "missing": len(self.missing),
            "extra": len(self.extra),
        }


@dataclass
class ReconciliationReport:
    """
    Résultat de la réconciliation d'une collection.

    Attributes:
        collection_id: Identifiant de la collection
        collection_name: Nom de la collection
        added: Identifiants ajoutés
        removed: Identifiants retirés
        reordered: Nombre de membres déplacés par le re-tri
        final_size: Taille de la collection après réconciliation
        validation: Rapport de validation (None si interrompu avant)
        error: Message d'erreur du stockage si la réconciliation a échoué
    """

    collection_id: str
    collection_name: str = ""
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    reordered: int = 0
    final_size: int = 0
    validation: Optional[ValidationReport] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class ReconciliationEngine:
    """
    Réconciliation d'une collection gérée avec sa cible.

    Args:
        store: Stockage des collections
        marker_tag: Tag identifiant les collections gérées
        sample_size: Nombre d'exemples journalisés par catégorie d'écart
    """

    def __init__(
        self,
        store: ICollectionStore,
        marker_tag: str = MANAGED_COLLECTION_TAG,
        sample_size: int = DEFAULT_VALIDATION_SAMPLE_SIZE,
    ) -> None:
        self._store = store
        self._marker_tag = marker_tag
        self._sample_size = sample_size

    def ensure_collection(self, name: str, extra_tags: Sequence[str] = ()) -> ManagedCollection:
        """
        Retourne la collection gérée de ce nom, en la créant si nécessaire.

        Une collection créée reçoit le tag marqueur et les tags supplémentaires.

        Raises:
            CollaboratorError: si le stockage échoue
        """
        collection = self._store.find_managed_collection_by_name(name, self._marker_tag)
        if collection is not None:
            return collection

        tags = (self._marker_tag, *[t for t in extra_tags if t != self._marker_tag])
        logger.info(f"Collection '{name}' introuvable, création")
        return self._store.create_collection(name, tags)

    def reconcile(
        self,
        collection_id: str,
        target: Sequence[MediaEntity],
        collection_name: str = "",
    ) -> ReconciliationReport:
        """
        Fait converger une collection vers la liste cible.

        Args:
            collection_id: Identifiant de la collection gérée
            target: Membres cibles, déjà dédupliqués, dans leur ordre de découverte
            collection_name: Nom utilisé dans les logs et le rapport

        Returns:
            ReconciliationReport ; son champ error est renseigné si le stockage a échoué.
        """
        name = collection_name or collection_id
        report = ReconciliationReport(collection_id=collection_id, collection_name=name)
        target = _unique_by_id(target)

        try:
            current = self._store.get_members(collection_id)
            report.removed = self.remove_unwanted(collection_id, current, target)
            report.added = self.add_wanted(collection_id, current, target)
            report.reordered = self.sort_collection(collection_id)
            report.validation = self.validate(collection_id, target, name)
            report.final_size = report.validation.actual
        except CollaboratorError as e:
            logger.error(f"Échec de la réconciliation de '{name}' : {e}")
            report.error = str(e)
            return report

        logger.info(
            f"Collection '{name}' : +{len(report.added)} / -{len(report.removed)}, "
            f"{report.final_size} membre(s)"
        )
        return report

    def remove_unwanted(
        self,
        collection_id: str,
        current: Sequence[MediaEntity],
        target: Sequence[MediaEntity],
    ) -> list[str]:
        """Retire en un seul appel les membres absents de la cible."""
        target_ids = {e.id for e in target}
        unwanted = [e for e in current if e.id not in target_ids]
        if not unwanted:
            return []

        for entity in unwanted:
            logger.debug(f"Retrait de '{entity}' (id {entity.id})")
        ids = [e.id for e in unwanted]
        self._store.remove_members(collection_id, ids)
        return ids

    def add_wanted(
        self,
        collection_id: str,
        current: Sequence[MediaEntity],
        target: Sequence[MediaEntity],
    ) -> list[str]:
        """Ajoute en un seul appel, dans l'ordre canonique, les membres manquants."""
        current_ids = {e.id for e in current}
        wanted = sort_canonical([e for e in target if e.id not in current_ids])
        if not wanted:
            return []

        for entity in wanted:
            logger.debug(f"Ajout de '{entity}' (id {entity.id})")
        ids = [e.id for e in wanted]
        self._store.add_members(collection_id, ids)
        return ids

    def sort_collection(self, collection_id: str) -> int:
        """
        Rétablit l'ordre canonique en ne réécrivant que le suffixe désordonné.

        Les membres situés avant le premier écart avec l'ordre canonique ne sont
        jamais touchés, même si leurs attributs ont changé depuis leur insertion.

        Returns:
            Nombre de membres retirés puis ré-ajoutés.
        """
        members = self._store.get_members(collection_id)
        if len(members) <= 1:
            return 0

        canonical = sort_canonical(members)
        first_difference = next(
            (i for i, (a, b) in enumerate(zip(members, canonical)) if a.id != b.id),
            None,
        )
        if first_difference is None:
            logger.debug(f"Collection {collection_id} déjà triée")
            return 0

        suffix = canonical[first_difference:]
        logger.debug(
            f"Re-tri de la collection {collection_id} à partir de l'index {first_difference} "
            f"({len(suffix)} membre(s))"
        )
        self._store.remove_members(collection_id, [e.id for e in members[first_difference:]])
        self._store.add_members(collection_id, [e.id for e in suffix])
        return len(suffix)

    def validate(
        self,
        collection_id: str,
        target: Sequence[MediaEntity],
        collection_name: str = "",
    ) -> ValidationReport:
        """
        Relit la collection et la compare à la cible.

        Un écart est journalisé comme avertissement, jamais comme échec.
        """
        name = collection_name or collection_id
        actual = self._store.get_members(collection_id)
        actual_ids = {e.id for e in actual}
        expected_ids = {e.id for e in target}

        report = ValidationReport(
            expected=len(expected_ids),
            actual=len(actual_ids),
            matching=len(expected_ids & actual_ids),
            missing=[e for e in target if e.id not in actual_ids],
            extra=[e for e in actual if e.id not in expected_ids],
        )

        logger.info(
            f"Validation de '{name}' : {report.expected} attendu(s), {report.actual} présent(s), "
            f"{report.matching} correspondant(s)"
        )
        if report.is_valid:
            logger.info(f"Validation réussie pour '{name}'")
            return report

        if report.missing:
            logger.warning(f"{len(report.missing)} membre(s) manquant(s) dans '{name}' :")
            for line in format_examples([str(e) for e in report.missing], self._sample_size):
                logger.warning(f"  - {line}")
        if report.extra:
            logger.warning(f"{len(report.extra)} membre(s) en trop dans '{name}' :")
            for line in format_examples([str(e) for e in report.extra], self._sample_size):
                logger.warning(f"  - {line}")
        logger.warning(f"Validation en échec pour '{name}'")
        return report


def _unique_by_id(entities: Sequence[MediaEntity]) -> list[MediaEntity]:
    seen: set[str] = set()
    unique = []
    for entity in entities:
        if entity.id not in seen:
            seen.add(entity.id)
            unique.append(entity)
    return unique
