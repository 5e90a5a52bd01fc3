"""
Sélection des membres d'une collection simple.

Une collection simple retient les entités dont le titre, un genre ou un studio
contient la chaîne recherchée, ou qui créditent une personne correspondante
comme acteur ou réalisateur. Un filtre limite la sélection aux films, aux
séries ou aux deux.
"""

from loguru import logger

from autocoll.core.entities.media import MediaEntity, MediaKind, PersonRole
from autocoll.core.ports.catalog import ICatalog
from autocoll.core.value_objects.entity_query import EntityQuery
from autocoll.services.definitions import MatchType, MediaTypeFilter, SimpleCollectionDefinition
from autocoll.services.person_cache import find_entity_ids_with_person
from autocoll.utils.helpers import any_text_contains, text_contains

_KINDS = {
    MediaTypeFilter.ALL: (MediaKind.MOVIE, MediaKind.SERIES),
    MediaTypeFilter.MOVIES: (MediaKind.MOVIE,),
    MediaTypeFilter.SERIES: (MediaKind.SERIES,),
}

_ROLES = {
    MatchType.ACTOR: PersonRole.ACTOR,
    MatchType.DIRECTOR: PersonRole.DIRECTOR,
}


class SimpleMatcher:
    """Service de sélection des collections simples."""

    def __init__(self, catalog: ICatalog) -> None:
        self._catalog = catalog

    def find(self, definition: SimpleCollectionDefinition) -> list[MediaEntity]:
        """
        Retourne les entités correspondant à une définition simple.

        Args:
            definition: Définition (chaîne, type de correspondance, filtre de média)

        Returns:
            Films puis séries correspondants, dans l'ordre du catalogue.
        """
        matches: list[MediaEntity] = []
        for kind in _KINDS[definition.media_type]:
            found = self._find_kind(definition, kind)
            logger.debug(
                f"{len(found)} {kind.value}(s) pour {definition.match_type.value} "
                f"'{definition.match}'"
            )
            matches.extend(found)
        return matches

    def _find_kind(self, definition: SimpleCollectionDefinition, kind: MediaKind) -> list[MediaEntity]:
        entities = self._catalog.query_entities(EntityQuery.of_kind(kind))
        fragment = definition.match
        case_sensitive = definition.case_sensitive

        if definition.match_type in _ROLES:
            ids = find_entity_ids_with_person(
                self._catalog, fragment, _ROLES[definition.match_type], case_sensitive, kind
            )
            return [e for e in entities if e.id in ids]

        if definition.match_type == MatchType.GENRE:
            return [e for e in entities if any_text_contains(e.genres, fragment, case_sensitive)]

        if definition.match_type == MatchType.STUDIO:
            return [e for e in entities if any_text_contains(e.studios, fragment, case_sensitive)]

        return [e for e in entities if text_contains(e.title, fragment, case_sensitive)]
