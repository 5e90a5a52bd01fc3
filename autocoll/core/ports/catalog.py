"""
Port du catalogue multimédia.

Interface abstraite du catalogue qui stocke les entités et répond aux requêtes
d'attributs, de personnes et d'épisodes. L'implémentation concrète (SQLModel,
serveur multimédia, mémoire pour les tests) est fournie par un adaptateur.
"""

from abc import ABC, abstractmethod

from autocoll.core.entities.media import Credit, Episode, MediaEntity
from autocoll.core.value_objects.entity_query import EntityQuery


class ICatalog(ABC):
    """
    Interface de lecture du catalogue.

    Toutes les méthodes lèvent CollaboratorError en cas d'échec de lecture.
    """

    @abstractmethod
    def query_entities(self, query: EntityQuery) -> list[MediaEntity]:
        """Retourne les entités correspondant au filtre, dans l'ordre du catalogue."""
        ...

    @abstractmethod
    def get_credits(self, entity_id: str) -> list[Credit]:
        """Retourne les personnes créditées sur une entité avec leur rôle."""
        ...

    @abstractmethod
    def list_person_names(self) -> list[str]:
        """Retourne le nom de toutes les personnes connues du catalogue."""
        ...

    @abstractmethod
    def get_episodes(self, series_id: str) -> list[Episode]:
        """Retourne les épisodes non virtuels d'une série."""
        ...
