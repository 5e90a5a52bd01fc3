"""
Implémentations SQLModel des ports.

Chaque implémentation :
- Hérite de l'interface ABC correspondante du domaine
- Reçoit une session SQLModel via injection de dépendances
- Convertit les modèles DB en entités du domaine
- Traduit les erreurs SQLAlchemy en CollaboratorError
"""

from autocoll.infrastructure.persistence.repositories.catalog_repository import (
    SQLModelCatalog,
)
from autocoll.infrastructure.persistence.repositories.collection_repository import (
    SQLModelCollectionStore,
)
from autocoll.infrastructure.persistence.repositories.user_data_repository import (
    SQLModelUserDataProvider,
)

__all__ = [
    "SQLModelCatalog",
    "SQLModelCollectionStore",
    "SQLModelUserDataProvider",
]
