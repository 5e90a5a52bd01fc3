"""
Cache d'appartenance des personnes (acteurs, réalisateurs).

Pendant l'évaluation d'une expression sur tout le catalogue, chaque critère
ACTOR/DIRECTOR serait résolu par une recherche catalogue par entité. Le cache
mémorise, pour une exécution, l'ensemble des entités créditant une personne
dont le nom contient un fragment donné dans un rôle donné.

Le cache est construit explicitement avant l'évaluation par lot et fermé
explicitement après (gestionnaire de contexte). Sans cache, la vérification
directe via les crédits de l'entité reste disponible.
"""

from dataclasses import dataclass

from loguru import logger

from autocoll.core.entities.media import MediaEntity, MediaKind, PersonRole
from autocoll.core.ports.catalog import ICatalog
from autocoll.core.value_objects.entity_query import EntityQuery
from autocoll.utils.helpers import text_contains

# Clé : (fragment de nom, rôle, sensible à la casse, type d'entité)
CacheKey = tuple[str, PersonRole, bool, MediaKind]


@dataclass
class PersonCacheStats:
    """Statistiques d'utilisation du cache pour une exécution."""

    hits: int = 0
    misses: int = 0

    @property
    def lookups(self) -> int:
        return self.hits + self.misses


def find_entity_ids_with_person(
    catalog: ICatalog,
    name_fragment: str,
    role: PersonRole,
    case_sensitive: bool,
    kind: MediaKind,
) -> set[str]:
    """
    Recherche les entités créditant une personne dans un rôle.

    Toutes les personnes dont le nom contient le fragment sont retenues,
    puis les entités qui créditent chacune d'elles dans le rôle sont réunies.

    Args:
        catalog: Catalogue à interroger
        name_fragment: Fragment du nom de la personne
        role: Rôle recherché
        case_sensitive: Comparaison des noms sensible à la casse
        kind: Type d'entités recherchées

    Returns:
        Ensemble des identifiants d'entités.
    """
    persons = [
        name
        for name in catalog.list_person_names()
        if text_contains(name, name_fragment, case_sensitive)
    ]
    logger.debug(
        f"{len(persons)} personne(s) correspondant à '{name_fragment}' "
        f"pour le rôle {role.value}"
    )

    entity_ids: set[str] = set()
    for person in persons:
        query = EntityQuery(kinds=(kind,), person_name=person, person_roles=(role,))
        for entity in catalog.query_entities(query):
            entity_ids.add(entity.id)
    return entity_ids


def has_person_direct(
    catalog: ICatalog,
    entity: MediaEntity,
    name_fragment: str,
    role: PersonRole,
    case_sensitive: bool,
) -> bool:
    """Vérification sans cache, à partir des crédits de l'entité."""
    return any(
        credit.role == role and text_contains(credit.person_name, name_fragment, case_sensitive)
        for credit in catalog.get_credits(entity.id)
    )


class PersonMembershipCache:
    """
    Cache (fragment, rôle, casse, type) -> identifiants d'entités.

    Portée : une évaluation par lot. Le premier accès à une clé déclenche une
    recherche catalogue ; les accès suivants sont des tests d'appartenance.

    Utilisation :
        with PersonMembershipCache(catalog) as cache:
            cache.has_person(entity, "Nolan", PersonRole.DIRECTOR, False)
    """

    def __init__(self, catalog: ICatalog) -> None:
        self._catalog = catalog
        self._entries: dict[CacheKey, frozenset[str]] = {}
        self._closed = False
        self.stats = PersonCacheStats()

    def __enter__(self) -> "PersonMembershipCache":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def closed(self) -> bool:
        return self._closed

    def entity_ids(
        self,
        name_fragment: str,
        role: PersonRole,
        case_sensitive: bool,
        kind: MediaKind,
    ) -> frozenset[str]:
        """Retourne (en le calculant au premier accès) l'ensemble des entités d'une clé."""
        if self._closed:
            raise RuntimeError("Cache des personnes utilisé après sa fermeture")

        key: CacheKey = (name_fragment, role, case_sensitive, kind)
        cached = self._entries.get(key)
        if cached is not None:
            self.stats.hits += 1
            return cached

        self.stats.misses += 1
        label = "films" if kind == MediaKind.MOVIE else "séries"
        logger.info(f"Chargement des {label} avec {role.value} correspondant à '{name_fragment}'...")
        ids = frozenset(
            find_entity_ids_with_person(self._catalog, name_fragment, role, case_sensitive, kind)
        )
        self._entries[key] = ids
        logger.info(f"{len(ids)} {label} avec {role.value} correspondant à '{name_fragment}'")
        return ids

    def has_person(
        self,
        entity: MediaEntity,
        name_fragment: str,
        role: PersonRole,
        case_sensitive: bool,
    ) -> bool:
        """Vrai si l'entité crédite une personne correspondante dans le rôle."""
        return entity.id in self.entity_ids(name_fragment, role, case_sensitive, entity.kind)

    def close(self) -> None:
        """Libère le contenu du cache. Idempotent."""
        if not self._closed:
            logger.debug(
                f"Fermeture du cache des personnes : {len(self._entries)} clé(s), "
                f"{self.stats.hits} hit(s), {self.stats.misses} miss"
            )
        self._entries.clear()
        self._closed = True
