"""
Auto-découverte de collections.

Analyse le catalogue pour proposer des collections sans définition explicite :
- sagas de films (détecteur de sagas)
- genres, studios : regroupement insensible à la casse (première orthographe conservée)
- décennies : à partir de l'année de sortie, à défaut de l'année de production

Les collections découvertes suivent ensuite le même chemin que les autres :
déduplication puis réconciliation.
"""

from collections.abc import Callable, Iterable
from typing import Optional

from loguru import logger

from autocoll.core.entities.collection import DiscoveredCollection, DiscoveryCategory
from autocoll.core.entities.media import MediaEntity, MediaKind
from autocoll.core.ports.catalog import ICatalog
from autocoll.core.value_objects.entity_query import EntityQuery
from autocoll.services.definitions import AutoDiscoverySettings
from autocoll.services.franchise_detector import FranchiseDetector


def _with_prefix(name: str, prefix: str) -> str:
    return prefix + name if prefix else name


def decade_of(entity: MediaEntity) -> Optional[int]:
    """Décennie d'une entité (année de sortie, sinon année de production)."""
    if entity.premiere_date is not None:
        return (entity.premiere_date.year // 10) * 10
    if entity.production_year is not None:
        return (entity.production_year // 10) * 10
    return None


def group_by_names(
    entities: Iterable[MediaEntity],
    names_of: Callable[[MediaEntity], Iterable[str]],
) -> dict[str, list[MediaEntity]]:
    """
    Regroupe les entités par nom (genre, studio), sans tenir compte de la casse.

    Le nom affiché d'un groupe est la première orthographe rencontrée.
    Les noms vides sont ignorés.
    """
    labels: dict[str, str] = {}
    groups: dict[str, list[MediaEntity]] = {}
    for entity in entities:
        for name in names_of(entity):
            if not name or not name.strip():
                continue
            key = name.casefold()
            if key not in labels:
                labels[key] = name
                groups[key] = []
            groups[key].append(entity)
    return {labels[key]: members for key, members in groups.items()}


class AutoDiscoveryService:
    """
    Service d'auto-découverte.

    Args:
        catalog: Catalogue à analyser
        detector: Détecteur de sagas
    """

    def __init__(self, catalog: ICatalog, detector: Optional[FranchiseDetector] = None) -> None:
        self._catalog = catalog
        self._detector = detector or FranchiseDetector()

    def discover(self, settings: AutoDiscoverySettings) -> list[DiscoveredCollection]:
        """
        Propose les collections découvertes selon les paramètres.

        Args:
            settings: Paramètres d'auto-découverte

        Returns:
            Collections découvertes (sagas, genres, studios, décennies dans cet ordre).
        """
        if not settings.enabled:
            logger.debug("Auto-découverte désactivée")
            return []

        logger.info("Démarrage de l'auto-découverte des collections")
        movies = self._catalog.query_entities(EntityQuery.of_kind(MediaKind.MOVIE))
        series = self._catalog.query_entities(EntityQuery.of_kind(MediaKind.SERIES))
        logger.info(f"{len(movies)} film(s) et {len(series)} série(s) dans le catalogue")

        discovered: list[DiscoveredCollection] = []
        if settings.detect_movie_series:
            discovered.extend(self.discover_movie_series(movies, settings))
        if settings.create_genre_collections:
            discovered.extend(self.discover_genres(movies + series, settings))
        if settings.create_studio_collections:
            discovered.extend(self.discover_studios(movies + series, settings))
        if settings.create_decade_collections:
            discovered.extend(self.discover_decades(movies + series, settings))

        logger.info(f"Auto-découverte terminée : {len(discovered)} collection(s)")
        return discovered

    def discover_movie_series(
        self, movies: list[MediaEntity], settings: AutoDiscoverySettings
    ) -> list[DiscoveredCollection]:
        """Sagas de films, nommées selon le motif {Title}."""
        logger.info(f"Détection des sagas (minimum {settings.min_movies_in_series} films)")
        franchises = self._detector.detect(
            movies,
            min_size=settings.min_movies_in_series,
            include_unnumbered_first=settings.include_first_movie_without_number,
            include_spinoffs=settings.include_spinoffs,
            naming_pattern=settings.movie_series_naming_pattern,
            prefix=settings.prefix,
        )
        return [
            DiscoveredCollection(
                name=franchise.collection_name,
                category=DiscoveryCategory.MOVIE_SERIES,
                entities=franchise.entities,
            )
            for franchise in franchises
        ]

    def discover_genres(
        self, entities: list[MediaEntity], settings: AutoDiscoverySettings
    ) -> list[DiscoveredCollection]:
        logger.info(f"Détection des collections par genre (minimum {settings.min_items_per_genre})")
        groups = group_by_names(entities, lambda e: e.genres)
        return self._named_groups(
            groups,
            settings.min_items_per_genre,
            lambda genre: settings.genre_naming_pattern.replace("{Genre}", genre),
            settings.prefix,
            DiscoveryCategory.GENRE,
        )

    def discover_studios(
        self, entities: list[MediaEntity], settings: AutoDiscoverySettings
    ) -> list[DiscoveredCollection]:
        logger.info(f"Détection des collections par studio (minimum {settings.min_items_per_studio})")
        groups = group_by_names(entities, lambda e: e.studios)
        return self._named_groups(
            groups,
            settings.min_items_per_studio,
            lambda studio: settings.studio_naming_pattern.replace("{Studio}", studio),
            settings.prefix,
            DiscoveryCategory.STUDIO,
        )

    def discover_decades(
        self, entities: list[MediaEntity], settings: AutoDiscoverySettings
    ) -> list[DiscoveredCollection]:
        """Collections par décennie, dans l'ordre chronologique."""
        logger.info(f"Détection des collections par décennie (minimum {settings.min_items_per_decade})")
        decades: dict[int, list[MediaEntity]] = {}
        for entity in entities:
            decade = decade_of(entity)
            if decade is not None:
                decades.setdefault(decade, []).append(entity)

        groups = {str(decade): decades[decade] for decade in sorted(decades)}
        return self._named_groups(
            groups,
            settings.min_items_per_decade,
            lambda decade: settings.decade_naming_pattern.replace("{Decade}", decade),
            settings.prefix,
            DiscoveryCategory.DECADE,
        )

    def _named_groups(
        self,
        groups: dict[str, list[MediaEntity]],
        min_items: int,
        name_of: Callable[[str], str],
        prefix: str,
        category: DiscoveryCategory,
    ) -> list[DiscoveredCollection]:
        collections = []
        for label, members in groups.items():
            if len(members) < min_items:
                continue
            name = _with_prefix(name_of(label), prefix)
            collections.append(DiscoveredCollection(name=name, category=category, entities=members))
            logger.debug(f"Collection découverte : {name} ({len(members)} entité(s))")
        return collections
