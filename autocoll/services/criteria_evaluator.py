"""
Évaluateur de critères.

Répond à la question « cette entité satisfait-elle ce critère ? » avec une
sémantique propre à chaque famille de critères :

- texte (sous-chaîne) : Title, Filename, Genre, Studio, Tag, ProductionLocation,
  AudioLanguage, Subtitle
- égalité : ParentalRating (jamais de sous-chaîne)
- comparaison numérique : CommunityRating, CriticsRating, Year, CustomRating numérique
- comparaison en jours relatifs : ReleaseDate, AddedDate, EpisodeAirDate
- appartenance de personne : Actor, Director (via le cache des personnes)
- type de média : MediaKindMovie, MediaKindShow
- état de lecture : Unplayed, Watched

Les films et les séries exposent la même surface d'attributs (MediaAttributes) ;
les séries agrègent certains attributs sur leurs épisodes.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime
from typing import Optional

from loguru import logger

from autocoll.core.entities.media import Episode, MediaEntity, MediaKind, PersonRole
from autocoll.core.errors import CollaboratorError
from autocoll.core.ports.catalog import ICatalog
from autocoll.core.ports.user_data import IUserDataProvider
from autocoll.core.value_objects.criteria import Criterion, CriterionType
from autocoll.services.expressions.nodes import Predicate
from autocoll.services.person_cache import PersonMembershipCache, has_person_direct
from autocoll.utils.helpers import any_text_contains, text_contains, to_datetime, to_naive_utc

# Ordre de test significatif : ">=" avant ">"
COMPARISON_OPERATORS = (">=", "<=", ">", "<", "=")

NUMERIC_TOLERANCE = 0.1
DAYS_TOLERANCE = 1.0
SECONDS_PER_DAY = 86400


# ============================================================================
# Comparaisons
# ============================================================================


def split_operator(operand: str, default: str) -> tuple[str, str]:
    """
    Sépare l'opérateur de comparaison de l'opérande.

    Args:
        operand: Opérande brut (ex: ">=7.5", "2000", " < 30 ")
        default: Opérateur utilisé en l'absence d'opérateur explicite

    Returns:
        Tuple (opérateur, reste de l'opérande sans espaces).
    """
    text = operand.strip()
    for operator in COMPARISON_OPERATORS:
        if text.startswith(operator):
            return operator, text[len(operator):].strip()
    return default, text


def _parse_float(text: str) -> Optional[float]:
    try:
        return float(text)
    except ValueError:
        return None


def _apply_operator(operator: str, actual: float, target: float, tolerance: float) -> bool:
    if operator == ">=":
        return actual >= target
    if operator == "<=":
        return actual <= target
    if operator == ">":
        return actual > target
    if operator == "<":
        return actual < target
    return abs(actual - target) < tolerance


def compare_numeric(actual: Optional[float], operand: str) -> bool:
    """
    Compare une valeur numérique à un opérande "[op]nombre".

    L'opérateur par défaut est "=" ; l'égalité tolère un écart < 0.1.
    Une valeur absente ou un opérande non numérique ne correspondent jamais.
    """
    if actual is None:
        return False
    operator, number = split_operator(operand, "=")
    target = _parse_float(number)
    if target is None:
        logger.debug(f"Opérande numérique invalide : {operand!r}")
        return False
    return _apply_operator(operator, float(actual), target, NUMERIC_TOLERANCE)


def compare_relative_days(actual: Optional[datetime], operand: str, now: datetime) -> bool:
    """
    Compare l'ancienneté d'une date (en jours) à un opérande "[op]jours".

    L'ancienneté est le nombre de jours (fractionnaire) écoulés entre la date et
    `now`. L'opérateur par défaut est ">" ; l'égalité tolère un écart < 1 jour.

    Exemple : avec une date vieille de 10 jours, ">7" et "=10" correspondent,
    "<5" ne correspond pas.
    """
    actual = to_datetime(actual)
    if actual is None:
        return False
    operator, number = split_operator(operand, ">")
    try:
        target = int(number)
    except ValueError:
        logger.debug(f"Opérande de date invalide : {operand!r}")
        return False

    if actual.tzinfo is not None and now.tzinfo is None:
        now = now.astimezone(actual.tzinfo)
    elif actual.tzinfo is None and now.tzinfo is not None:
        actual = actual.astimezone(now.tzinfo)

    days = (now - actual).total_seconds() / SECONDS_PER_DAY
    return _apply_operator(operator, days, float(target), DAYS_TOLERANCE)


# ============================================================================
# Surface d'attributs (films / séries)
# ============================================================================


class MediaAttributes(ABC):
    """
    Surface d'attributs d'une entité vue par les critères.

    Les attributs directs sont lus sur l'entité ; les attributs qui dépendent
    du type d'entité (fichiers, pistes, diffusion) sont fournis par les
    sous-classes.
    """

    def __init__(self, entity: MediaEntity) -> None:
        self.entity = entity

    @property
    def kind(self) -> MediaKind:
        return self.entity.kind

    @abstractmethod
    def file_paths(self) -> list[str]:
        ...

    @abstractmethod
    def audio_languages(self) -> list[str]:
        ...

    @abstractmethod
    def subtitle_languages(self) -> list[str]:
        ...

    @abstractmethod
    def episode_air_date(self) -> Optional[datetime]:
        ...


class MovieAttributes(MediaAttributes):
    """Attributs d'un film : lecture directe des champs."""

    def file_paths(self) -> list[str]:
        return [self.entity.path] if self.entity.path else []

    def audio_languages(self) -> list[str]:
        return list(self.entity.audio_languages)

    def subtitle_languages(self) -> list[str]:
        return list(self.entity.subtitle_languages)

    def episode_air_date(self) -> Optional[datetime]:
        return None


class SeriesAttributes(MediaAttributes):
    """
    Attributs d'une série : agrégation sur les épisodes.

    Les épisodes sont chargés une seule fois, au premier attribut qui en a besoin.
    """

    def __init__(self, entity: MediaEntity, catalog: ICatalog) -> None:
        super().__init__(entity)
        self._catalog = catalog
        self._episodes: Optional[list[Episode]] = None

    @property
    def episodes(self) -> list[Episode]:
        if self._episodes is None:
            self._episodes = self._catalog.get_episodes(self.entity.id)
        return self._episodes

    def file_paths(self) -> list[str]:
        return [e.path for e in self.episodes if e.path]

    def audio_languages(self) -> list[str]:
        return [lang for e in self.episodes for lang in e.audio_languages]

    def subtitle_languages(self) -> list[str]:
        return [lang for e in self.episodes for lang in e.subtitle_languages]

    def episode_air_date(self) -> Optional[datetime]:
        """Date de diffusion la plus récente parmi les épisodes."""
        dates = [to_datetime(e.premiere_date) for e in self.episodes if e.premiere_date]
        # Dates naïves et avec fuseau peuvent coexister : comparaison en UTC
        return max(dates, key=to_naive_utc) if dates else None


def attributes_for(entity: MediaEntity, catalog: ICatalog) -> MediaAttributes:
    """Construit la surface d'attributs adaptée au type de l'entité."""
    if entity.kind == MediaKind.SERIES:
        return SeriesAttributes(entity, catalog)
    return MovieAttributes(entity)


# Critères texte : valeurs examinées pour chaque type
_TEXT_VALUES: dict[CriterionType, Callable[[MediaAttributes], list[Optional[str]]]] = {
    CriterionType.TITLE: lambda a: [a.entity.title],
    CriterionType.FILENAME: lambda a: a.file_paths(),
    CriterionType.GENRE: lambda a: list(a.entity.genres),
    CriterionType.STUDIO: lambda a: list(a.entity.studios),
    CriterionType.TAG: lambda a: list(a.entity.tags),
    CriterionType.PRODUCTION_LOCATION: lambda a: list(a.entity.production_locations),
    CriterionType.AUDIO_LANGUAGE: lambda a: a.audio_languages(),
    CriterionType.SUBTITLE: lambda a: a.subtitle_languages(),
}

_NUMERIC_VALUES: dict[CriterionType, Callable[[MediaAttributes], Optional[float]]] = {
    CriterionType.COMMUNITY_RATING: lambda a: a.entity.community_rating,
    CriterionType.CRITICS_RATING: lambda a: a.entity.critic_rating,
    CriterionType.YEAR: lambda a: a.entity.production_year,
}

_DATE_VALUES: dict[CriterionType, Callable[[MediaAttributes], Optional[datetime]]] = {
    CriterionType.RELEASE_DATE: lambda a: a.entity.premiere_date,
    CriterionType.ADDED_DATE: lambda a: a.entity.date_added,
    CriterionType.EPISODE_AIR_DATE: lambda a: a.episode_air_date(),
}

_PERSON_ROLES = {
    CriterionType.ACTOR: PersonRole.ACTOR,
    CriterionType.DIRECTOR: PersonRole.DIRECTOR,
}


# ============================================================================
# Évaluateur
# ============================================================================


class CriteriaEvaluator:
    """
    Évaluateur de critères pour une entité.

    Args:
        catalog: Catalogue (épisodes, crédits, personnes)
        user_data: Fournisseur des états de lecture (optionnel)
        clock: Horloge locale utilisée pour les comparaisons de dates
    """

    def __init__(
        self,
        catalog: ICatalog,
        user_data: Optional[IUserDataProvider] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._catalog = catalog
        self._user_data = user_data
        self._clock = clock
        self._degraded_logged = False

    def matches(
        self,
        entity: MediaEntity,
        criterion: Criterion,
        case_sensitive: bool = False,
        person_cache: Optional[PersonMembershipCache] = None,
    ) -> bool:
        """
        Évalue un critère pour une entité.

        Args:
            entity: Entité évaluée
            criterion: Critère typé avec son opérande
            case_sensitive: Comparaisons de texte sensibles à la casse
            person_cache: Cache des personnes de l'évaluation par lot en cours.
                Sans cache, les critères de personne sont vérifiés directement.

        Returns:
            True si l'entité satisfait le critère.
        """
        attributes = attributes_for(entity, self._catalog)
        return self._match(attributes, criterion, case_sensitive, person_cache)

    def predicate_for(
        self,
        entity: MediaEntity,
        case_sensitive: bool = False,
        person_cache: Optional[PersonMembershipCache] = None,
    ) -> Predicate:
        """
        Construit le prédicat d'évaluation d'une expression pour une entité.

        La surface d'attributs est partagée entre les feuilles de l'expression :
        les épisodes d'une série ne sont chargés qu'une fois.
        """
        attributes = attributes_for(entity, self._catalog)
        return lambda criterion: self._match(attributes, criterion, case_sensitive, person_cache)

    def is_unplayed(self, entity: MediaEntity) -> bool:
        """
        Vrai si aucun utilisateur n'a lu l'entité.

        En l'absence de données utilisateur (fournisseur absent, aucun
        utilisateur, échec de lecture), l'entité est considérée non lue.
        """
        if self._user_data is None:
            if not self._degraded_logged:
                logger.warning(
                    "Données utilisateur indisponibles : toutes les entités sont considérées non lues"
                )
                self._degraded_logged = True
            return True

        try:
            users = self._user_data.list_users()
            if not users:
                logger.debug(f"Aucun utilisateur, '{entity.title}' considéré non lu")
                return True
            for user in users:
                if self._user_data.is_played(user, entity):
                    logger.debug(f"'{entity.title}' lu par {user.name}")
                    return False
            return True
        except CollaboratorError as e:
            logger.warning(f"État de lecture illisible pour '{entity.title}', considéré non lu : {e}")
            return True

    def _match(
        self,
        attributes: MediaAttributes,
        criterion: Criterion,
        case_sensitive: bool,
        person_cache: Optional[PersonMembershipCache],
    ) -> bool:
        ctype = criterion.type
        value = criterion.value
        entity = attributes.entity

        if ctype in _TEXT_VALUES:
            return any_text_contains(_TEXT_VALUES[ctype](attributes), value, case_sensitive)

        if ctype in _NUMERIC_VALUES:
            return compare_numeric(_NUMERIC_VALUES[ctype](attributes), value)

        if ctype in _DATE_VALUES:
            return compare_relative_days(_DATE_VALUES[ctype](attributes), value, self._clock())

        if ctype in _PERSON_ROLES:
            role = _PERSON_ROLES[ctype]
            if person_cache is not None:
                return person_cache.has_person(entity, value, role, case_sensitive)
            return has_person_direct(self._catalog, entity, value, role, case_sensitive)

        if ctype == CriterionType.PARENTAL_RATING:
            return _rating_equals(entity.official_rating, value, case_sensitive)

        if ctype == CriterionType.CUSTOM_RATING:
            return _custom_rating_matches(entity.custom_rating, value, case_sensitive)

        if ctype == CriterionType.MEDIA_KIND_MOVIE:
            return attributes.kind == MediaKind.MOVIE

        if ctype == CriterionType.MEDIA_KIND_SHOW:
            return attributes.kind == MediaKind.SERIES

        if ctype == CriterionType.UNPLAYED:
            return self.is_unplayed(entity)

        if ctype == CriterionType.WATCHED:
            return not self.is_unplayed(entity)

        return False


def _rating_equals(rating: Optional[str], value: str, case_sensitive: bool) -> bool:
    """Égalité stricte de classification (jamais de sous-chaîne)."""
    if not rating:
        return False
    if case_sensitive:
        return rating == value
    return rating.casefold() == value.casefold()


def _custom_rating_matches(rating: Optional[str], value: str, case_sensitive: bool) -> bool:
    """
    Note personnalisée : comparaison numérique si l'opérande et la note sont
    numériques, sous-chaîne sinon.
    """
    if not rating or not rating.strip():
        return False
    numeric_operand = value.startswith((">", "<", "=")) or _parse_float(value) is not None
    if numeric_operand:
        actual = _parse_float(rating)
        if actual is not None:
            return compare_numeric(actual, value)
    return text_contains(rating, value, case_sensitive)
