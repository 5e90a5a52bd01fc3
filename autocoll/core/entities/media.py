"""
Media catalog entities.

Read-only snapshot of the catalog (movies, series, their episodes and credits)
as seen by one collection run. The core never mutates these objects.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class MediaKind(str, Enum):
    """Kind of a top-level catalog entity."""

    MOVIE = "movie"
    SERIES = "series"


class PersonRole(str, Enum):
    """Role of a person credited on an entity."""

    ACTOR = "Actor"
    DIRECTOR = "Director"
    WRITER = "Writer"
    PRODUCER = "Producer"
    GUEST_STAR = "GuestStar"
    COMPOSER = "Composer"


@dataclass
class MediaEntity:
    """
    Movie or series of the catalog.

    Attributes:
        id: Stable unique identifier
        kind: Movie or series
        title: Display title
        premiere_date: First release / first air date
        production_year: Production year
        date_added: Date the entity was added to the catalog
        genres: Genre names
        studios: Studio names
        tags: Free tags
        official_rating: Parental rating (e.g. "PG-13", "FR-12")
        custom_rating: Free custom rating, numeric or not
        community_rating: Community rating (0-10)
        critic_rating: Critics rating (0-100)
        production_locations: Production countries
        audio_languages: Languages of the audio streams
        subtitle_languages: Languages of the subtitle streams
        path: Path of the media file (movies) or folder (series)
        is_virtual: True for placeholder items without media
    """

    id: str
    kind: MediaKind = MediaKind.MOVIE
    title: str = ""
    premiere_date: Optional[datetime] = None
    production_year: Optional[int] = None
    date_added: Optional[datetime] = None
    genres: tuple[str, ...] = ()
    studios: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    official_rating: Optional[str] = None
    custom_rating: Optional[str] = None
    community_rating: Optional[float] = None
    critic_rating: Optional[float] = None
    production_locations: tuple[str, ...] = ()
    audio_languages: tuple[str, ...] = ()
    subtitle_languages: tuple[str, ...] = ()
    path: Optional[str] = None
    is_virtual: bool = False

    @property
    def is_movie(self) -> bool:
        return self.kind == MediaKind.MOVIE

    @property
    def is_series(self) -> bool:
        return self.kind == MediaKind.SERIES

    @property
    def year(self) -> Optional[int]:
        """Production year, falling back to the premiere year."""
        if self.production_year is not None:
            return self.production_year
        if self.premiere_date is not None:
            return self.premiere_date.year
        return None

    def __str__(self) -> str:
        year = self.year if self.year is not None else "Unknown year"
        return f"{self.title} ({year})"


@dataclass
class Episode:
    """
    Episode of a series.

    Attributes:
        id: Stable unique identifier
        series_id: Parent series identifier
        title: Episode title
        premiere_date: Air date
        path: Path of the media file
        audio_languages: Languages of the audio streams
        subtitle_languages: Languages of the subtitle streams
        is_virtual: True for missing (not downloaded) episodes
    """

    id: str
    series_id: str
    title: str = ""
    premiere_date: Optional[datetime] = None
    path: Optional[str] = None
    audio_languages: tuple[str, ...] = ()
    subtitle_languages: tuple[str, ...] = ()
    is_virtual: bool = False


@dataclass(frozen=True)
class Credit:
    """A person credited on an entity in a given role."""

    person_name: str
    role: PersonRole


@dataclass(frozen=True)
class User:
    """A catalog user owning play states."""

    id: str
    name: str
