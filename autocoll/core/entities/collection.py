"""
Collection entities.

Managed collections persisted by the collection store, and the candidate
collections produced by auto-discovery.
"""

from dataclasses import dataclass, field
from enum import Enum

from autocoll.core.entities.media import MediaEntity


@dataclass
class ManagedCollection:
    """
    Named ordered set of entity references.

    The member order is derived from the entities (see the reconciliation
    engine) and is not authoritative. A collection is system-managed when it
    carries the marker tag; otherwise it was created by a user.

    Attributes:
        id: Stable unique identifier
        name: Display name
        tags: Tags of the collection (marker tag for managed ones)
    """

    id: str
    name: str
    tags: tuple[str, ...] = ()

    def is_managed(self, marker_tag: str) -> bool:
        return marker_tag in self.tags


@dataclass(frozen=True)
class FranchiseMember:
    """Entity of a franchise with its in-franchise sequence number (0 = unnumbered)."""

    entity: MediaEntity
    sequence: int


@dataclass
class DiscoveredFranchise:
    """
    Group of entities sharing a base title differentiated by sequence numbering.

    Attributes:
        base_title: Canonical base title (e.g. "John Wick")
        collection_name: Name of the collection to maintain
        members: Members ordered by sequence number
    """

    base_title: str
    collection_name: str
    members: list[FranchiseMember] = field(default_factory=list)

    @property
    def member_ids(self) -> list[str]:
        return [m.entity.id for m in self.members]

    @property
    def entities(self) -> list[MediaEntity]:
        return [m.entity for m in self.members]

    @property
    def sequences(self) -> list[int]:
        return [m.sequence for m in self.members]


class DiscoveryCategory(str, Enum):
    """Origin of an auto-discovered collection."""

    MOVIE_SERIES = "MovieSeries"
    GENRE = "Genre"
    STUDIO = "Studio"
    DECADE = "Decade"


@dataclass
class DiscoveredCollection:
    """Candidate collection produced by auto-discovery."""

    name: str
    category: DiscoveryCategory
    entities: list[MediaEntity] = field(default_factory=list)
