"""
Port des données utilisateur (état de lecture).

Collaborateur optionnel : en son absence, les critères d'état de lecture
considèrent les entités comme non lues.
"""

from abc import ABC, abstractmethod

from autocoll.core.entities.media import MediaEntity, User


class IUserDataProvider(ABC):
    """Interface d'accès aux états de lecture par utilisateur."""

    @abstractmethod
    def list_users(self) -> list[User]:
        """Liste les utilisateurs du catalogue."""
        ...

    @abstractmethod
    def is_played(self, user: User, entity: MediaEntity) -> bool:
        """Indique si l'utilisateur a marqué l'entité comme lue."""
        ...
