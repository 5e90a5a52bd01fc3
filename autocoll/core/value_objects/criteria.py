"""
Objets valeur pour les critères d'expression.

Un critère est un prédicat typé à un seul opérande sur les attributs d'une entité.
Les mots-clés textuels (et leurs alias) sont résolus une fois pour toutes au parsing
vers un ensemble fermé de types canoniques.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CriterionType(str, Enum):
    """Types canoniques de critères."""

    TITLE = "Title"
    FILENAME = "Filename"
    GENRE = "Genre"
    STUDIO = "Studio"
    ACTOR = "Actor"
    DIRECTOR = "Director"
    TAG = "Tag"
    PARENTAL_RATING = "ParentalRating"
    COMMUNITY_RATING = "CommunityRating"
    CRITICS_RATING = "CriticsRating"
    CUSTOM_RATING = "CustomRating"
    PRODUCTION_LOCATION = "ProductionLocation"
    AUDIO_LANGUAGE = "AudioLanguage"
    SUBTITLE = "Subtitle"
    YEAR = "Year"
    RELEASE_DATE = "ReleaseDate"
    ADDED_DATE = "AddedDate"
    EPISODE_AIR_DATE = "EpisodeAirDate"
    MEDIA_KIND_MOVIE = "MediaKindMovie"
    MEDIA_KIND_SHOW = "MediaKindShow"
    UNPLAYED = "Unplayed"
    WATCHED = "Watched"

    @property
    def is_state(self) -> bool:
        """Vrai pour les critères sans opérande (type de média, état de lecture)."""
        return self in STATE_CRITERIA

    @property
    def keyword(self) -> str:
        """Mot-clé canonique utilisé pour la sérialisation."""
        return CANONICAL_KEYWORDS[self]


STATE_CRITERIA = frozenset(
    {
        CriterionType.MEDIA_KIND_MOVIE,
        CriterionType.MEDIA_KIND_SHOW,
        CriterionType.UNPLAYED,
        CriterionType.WATCHED,
    }
)

CANONICAL_KEYWORDS: dict[CriterionType, str] = {
    CriterionType.TITLE: "TITLE",
    CriterionType.FILENAME: "FILENAME",
    CriterionType.GENRE: "GENRE",
    CriterionType.STUDIO: "STUDIO",
    CriterionType.ACTOR: "ACTOR",
    CriterionType.DIRECTOR: "DIRECTOR",
    CriterionType.TAG: "TAG",
    CriterionType.PARENTAL_RATING: "PARENTALRATING",
    CriterionType.COMMUNITY_RATING: "COMMUNITYRATING",
    CriterionType.CRITICS_RATING: "CRITICSRATING",
    CriterionType.CUSTOM_RATING: "CUSTOMRATING",
    CriterionType.PRODUCTION_LOCATION: "PRODUCTIONLOCATION",
    CriterionType.AUDIO_LANGUAGE: "AUDIOLANGUAGE",
    CriterionType.SUBTITLE: "SUBTITLE",
    CriterionType.YEAR: "YEAR",
    CriterionType.RELEASE_DATE: "RELEASEDATE",
    CriterionType.ADDED_DATE: "ADDEDDATE",
    CriterionType.EPISODE_AIR_DATE: "EPISODEAIRDATE",
    CriterionType.MEDIA_KIND_MOVIE: "MOVIE",
    CriterionType.MEDIA_KIND_SHOW: "SHOW",
    CriterionType.UNPLAYED: "UNPLAYED",
    CriterionType.WATCHED: "WATCHED",
}

# Alias acceptés en plus des mots-clés canoniques (comparaison insensible à la casse)
KEYWORD_ALIASES: dict[str, CriterionType] = {
    "NAME": CriterionType.TITLE,
    "FILE": CriterionType.FILENAME,
    "PATH": CriterionType.FILENAME,
    "PARENTAL": CriterionType.PARENTAL_RATING,
    "RATING": CriterionType.PARENTAL_RATING,
    "COMMUNITY": CriterionType.COMMUNITY_RATING,
    "USERRATING": CriterionType.COMMUNITY_RATING,
    "CRITICS": CriterionType.CRITICS_RATING,
    "CRITICRATING": CriterionType.CRITICS_RATING,
    "CUSTOM": CriterionType.CUSTOM_RATING,
    "LOCATION": CriterionType.PRODUCTION_LOCATION,
    "COUNTRY": CriterionType.PRODUCTION_LOCATION,
    "AUDIO": CriterionType.AUDIO_LANGUAGE,
    "LANGUAGE": CriterionType.AUDIO_LANGUAGE,
    "SUBTITLES": CriterionType.SUBTITLE,
    "RELEASE": CriterionType.RELEASE_DATE,
    "PREMIERE": CriterionType.RELEASE_DATE,
    "ADDED": CriterionType.ADDED_DATE,
    "AIRDATE": CriterionType.EPISODE_AIR_DATE,
    "EPISODEAIR": CriterionType.EPISODE_AIR_DATE,
    "MOVIES": CriterionType.MEDIA_KIND_MOVIE,
    "FILM": CriterionType.MEDIA_KIND_MOVIE,
    "SHOWS": CriterionType.MEDIA_KIND_SHOW,
    "SERIES": CriterionType.MEDIA_KIND_SHOW,
    "UNWATCHED": CriterionType.UNPLAYED,
    "PLAYED": CriterionType.WATCHED,
}

_KEYWORDS: dict[str, CriterionType] = {
    **{keyword: ctype for ctype, keyword in CANONICAL_KEYWORDS.items()},
    **KEYWORD_ALIASES,
}


def resolve_keyword(word: str) -> Optional[CriterionType]:
    """
    Résout un mot-clé (ou un alias) vers son type canonique.

    Args:
        word: Mot-clé tel qu'écrit dans l'expression (casse indifférente)

    Returns:
        Le type de critère, ou None si le mot n'est pas un mot-clé connu
    """
    return _KEYWORDS.get(word.upper())


@dataclass(frozen=True)
class Criterion:
    """
    Critère typé avec son opérande littéral.

    Attributes:
        type: Type canonique du critère
        value: Opérande (vide pour les critères d'état)
    """

    type: CriterionType
    value: str = ""

    def __str__(self) -> str:
        if self.type.is_state:
            return self.type.keyword
        return f'{self.type.keyword} "{self.value}"'
