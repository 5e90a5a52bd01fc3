"""
Ports (interfaces abstraites) définissant les contrats pour les adaptateurs.

Les ports sont les frontières de l'architecture hexagonale. Ils définissent
ce dont le domaine a besoin du monde extérieur sans spécifier
comment ces besoins sont satisfaits.

- ICatalog : Lecture du catalogue (entités, crédits, personnes, épisodes)
- ICollectionStore : Persistance des collections et de leurs membres
- IUserDataProvider : États de lecture par utilisateur (optionnel)
"""

from autocoll.core.ports.catalog import ICatalog
from autocoll.core.ports.collection_store import ICollectionStore
from autocoll.core.ports.user_data import IUserDataProvider

__all__ = [
    "ICatalog",
    "ICollectionStore",
    "IUserDataProvider",
]
