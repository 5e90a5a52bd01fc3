"""
Business entities representing core domain concepts.

Exports:
- MediaEntity: Movie or series of the catalog snapshot
- MediaKind: Movie / series discriminator
- Episode: Episode of a series
- Credit, PersonRole: Cast and crew credits
- User: Owner of play states
- ManagedCollection: Persisted collection (managed or user-created)
- DiscoveredFranchise, FranchiseMember: Detected franchise
- DiscoveredCollection, DiscoveryCategory: Auto-discovered collection
"""

from autocoll.core.entities.media import (
    Credit,
    Episode,
    MediaEntity,
    MediaKind,
    PersonRole,
    User,
)
from autocoll.core.entities.collection import (
    DiscoveredCollection,
    DiscoveredFranchise,
    DiscoveryCategory,
    FranchiseMember,
    ManagedCollection,
)

__all__ = [
    "Credit",
    "Episode",
    "MediaEntity",
    "MediaKind",
    "PersonRole",
    "User",
    "DiscoveredCollection",
    "DiscoveredFranchise",
    "DiscoveryCategory",
    "FranchiseMember",
    "ManagedCollection",
]
