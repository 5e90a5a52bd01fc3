"""
Container d'injection de dépendances via dependency-injector.

Assemble la configuration, la base SQLite, les adaptateurs SQLModel des ports
et les services du domaine pour la CLI.
"""

from dependency_injector import containers, providers

from .config import Settings
from .infrastructure.persistence.database import get_session, init_db
from .infrastructure.persistence.repositories import (
    SQLModelCatalog,
    SQLModelCollectionStore,
    SQLModelUserDataProvider,
)
from .services.collection_runner import CollectionRunner
from .services.expressions import ExpressionParser
from .services.franchise_detector import FranchiseDetector


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Utilisation :
        container = Container()
        container.database.init()  # Initialise la DB une fois
        runner = container.collection_runner()
    """

    # Configuration - singleton chargé une seule fois
    config = providers.Singleton(Settings)

    # Database - Resource pour initialisation unique
    database = providers.Resource(init_db)

    # Session factory - nouvelle session à chaque appel
    session = providers.Factory(lambda: next(get_session()))

    # Adaptateurs des ports - Factory pour une session fraîche
    catalog = providers.Factory(SQLModelCatalog, session=session)
    collection_store = providers.Factory(SQLModelCollectionStore, session=session)
    user_data = providers.Factory(SQLModelUserDataProvider, session=session)

    # Services sans état - Singletons
    expression_parser = providers.Singleton(ExpressionParser)
    franchise_detector = providers.Singleton(FranchiseDetector)

    # Exécution des collections - Factory car dépend des adaptateurs
    collection_runner = providers.Factory(
        CollectionRunner,
        catalog=catalog,
        store=collection_store,
        user_data=user_data,
        marker_tag=config.provided.managed_tag,
        discovery_tag=config.provided.discovery_tag,
        sample_size=config.provided.validation_sample_size,
    )
