"""
Définitions des collections à maintenir.

Les définitions sont stockées dans un fichier JSON éditable par l'utilisateur et
validées par des modèles pydantic :
- collections simples (correspondance titre/genre/studio/acteur/réalisateur)
- collections par expression de critères
- paramètres de l'auto-découverte (sagas, genres, studios, décennies)
"""

import json
from enum import Enum
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from autocoll.core.errors import DefinitionsError
from autocoll.utils.constants import (
    DEFAULT_DECADE_PATTERN,
    DEFAULT_GENRE_PATTERN,
    DEFAULT_MOVIE_SERIES_PATTERN,
    DEFAULT_STUDIO_PATTERN,
    FALLBACK_COLLECTION_NAME,
)


class MatchType(str, Enum):
    """Champ examiné par une collection simple."""

    TITLE = "title"
    GENRE = "genre"
    STUDIO = "studio"
    ACTOR = "actor"
    DIRECTOR = "director"


class MediaTypeFilter(str, Enum):
    """Types d'entités retenus par une collection simple."""

    ALL = "all"
    MOVIES = "movies"
    SERIES = "series"


_DEFAULT_NAME_FORMATS = {
    MatchType.TITLE: "{} Movies",
    MatchType.GENRE: "{} Genre",
    MatchType.STUDIO: "{} Studio Productions",
    MatchType.ACTOR: "{} Acting",
    MatchType.DIRECTOR: "{} Directed",
}


class SimpleCollectionDefinition(BaseModel):
    """Collection définie par une simple correspondance de texte."""

    model_config = ConfigDict(extra="forbid")

    match: str
    match_type: MatchType = MatchType.TITLE
    media_type: MediaTypeFilter = MediaTypeFilter.ALL
    case_sensitive: bool = False
    collection_name: str = ""

    @property
    def name(self) -> str:
        """Nom de la collection, ou nom par défaut selon le type de correspondance."""
        if self.collection_name.strip():
            return self.collection_name.strip()
        if not self.match:
            return FALLBACK_COLLECTION_NAME
        return _DEFAULT_NAME_FORMATS[self.match_type].format(self.match)


class ExpressionCollectionDefinition(BaseModel):
    """Collection définie par une expression de critères."""

    model_config = ConfigDict(extra="forbid")

    collection_name: str = Field(min_length=1)
    expression: str
    case_sensitive: bool = False

    @property
    def name(self) -> str:
        return self.collection_name.strip()


class AutoDiscoverySettings(BaseModel):
    """Paramètres de l'auto-découverte de collections."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = False

    # Sagas de films
    detect_movie_series: bool = True
    min_movies_in_series: int = Field(default=2, ge=1)
    movie_series_naming_pattern: str = DEFAULT_MOVIE_SERIES_PATTERN
    include_first_movie_without_number: bool = True
    include_spinoffs: bool = False

    # Genres
    create_genre_collections: bool = False
    min_items_per_genre: int = Field(default=3, ge=1)
    genre_naming_pattern: str = DEFAULT_GENRE_PATTERN

    # Studios
    create_studio_collections: bool = False
    min_items_per_studio: int = Field(default=5, ge=1)
    studio_naming_pattern: str = DEFAULT_STUDIO_PATTERN

    # Décennies
    create_decade_collections: bool = False
    min_items_per_decade: int = Field(default=3, ge=1)
    decade_naming_pattern: str = DEFAULT_DECADE_PATTERN

    prefix: str = ""
    skip_existing_manual_collections: bool = True


class CollectionDefinitions(BaseModel):
    """Ensemble des définitions d'une exécution."""

    model_config = ConfigDict(extra="forbid")

    enable_simple_collections: bool = True
    enable_advanced_collections: bool = True
    simple: list[SimpleCollectionDefinition] = Field(default_factory=list)
    expression: list[ExpressionCollectionDefinition] = Field(default_factory=list)
    auto_discovery: AutoDiscoverySettings = Field(default_factory=AutoDiscoverySettings)


def load_definitions(path: Path) -> CollectionDefinitions:
    """
    Charge les définitions depuis un fichier JSON.

    Args:
        path: Chemin du fichier de définitions

    Returns:
        Définitions validées ; un fichier absent donne des définitions vides.

    Raises:
        DefinitionsError: si le fichier est illisible ou invalide
    """
    if not path.exists():
        logger.warning(f"Fichier de définitions introuvable : {path}")
        return CollectionDefinitions()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise DefinitionsError(f"Fichier de définitions illisible ({path}) : {e}") from e

    try:
        definitions = CollectionDefinitions.model_validate(data)
    except ValidationError as e:
        raise DefinitionsError(f"Définitions invalides ({path}) : {e}") from e

    logger.debug(
        f"Définitions chargées : {len(definitions.simple)} simple(s), "
        f"{len(definitions.expression)} expression(s)",
    )
    return definitions
