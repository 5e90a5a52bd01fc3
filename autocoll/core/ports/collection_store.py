"""
Port de persistance des collections.

Le stockage des collections conserve des ensembles nommés et ordonnés de
références d'entités et applique les mutations d'ajout/retrait. Il sérialise
lui-même ses écritures.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from autocoll.core.entities.collection import ManagedCollection
from autocoll.core.entities.media import MediaEntity


class ICollectionStore(ABC):
    """
    Interface de stockage des collections.

    Toutes les méthodes lèvent CollaboratorError en cas d'échec.
    """

    @abstractmethod
    def find_managed_collection_by_name(
        self, name: str, marker_tag: str
    ) -> Optional[ManagedCollection]:
        """Recherche une collection portant ce nom et le tag marqueur."""
        ...

    @abstractmethod
    def find_collection_by_name(self, name: str) -> Optional[ManagedCollection]:
        """Recherche une collection par nom, gérée ou créée par un utilisateur."""
        ...

    @abstractmethod
    def create_collection(self, name: str, tags: Sequence[str] = ()) -> ManagedCollection:
        """Crée une collection vide avec les tags donnés."""
        ...

    @abstractmethod
    def add_members(self, collection_id: str, entity_ids: Sequence[str]) -> None:
        """Ajoute des membres en fin de collection, dans l'ordre donné."""
        ...

    @abstractmethod
    def remove_members(self, collection_id: str, entity_ids: Sequence[str]) -> None:
        """Retire des membres de la collection."""
        ...

    @abstractmethod
    def get_members(self, collection_id: str) -> list[MediaEntity]:
        """Retourne les membres dans l'ordre persisté."""
        ...
