"""
Configuration de la base de données SQLite d'AutoColl.

Ce module fournit :
- Engine SQLite partagé, créé à la demande
- Générateur de session
- Initialisation des tables

La base de données est configurée via AUTOCOLL_DATABASE_URL (défaut: sqlite:///autocoll.db).
"""

from collections.abc import Generator
from pathlib import Path
from typing import Optional

from sqlalchemy import Engine
from sqlmodel import Session, SQLModel, create_engine

# Engine global - initialisé lors du premier appel à get_engine()
_engine: Optional[Engine] = None


def get_engine() -> Engine:
    """
    Retourne l'engine SQLite, en le créant si nécessaire.

    Utilise la configuration de l'application pour l'URL de la base.
    """
    global _engine
    if _engine is None:
        from autocoll.config import Settings

        settings = Settings()

        # Créer le répertoire parent si l'URL est un fichier SQLite
        db_url = settings.database_url
        if db_url.startswith("sqlite:///") and not db_url.startswith("sqlite:///:memory:"):
            db_path = Path(db_url.replace("sqlite:///", ""))
            db_path.parent.mkdir(exist_ok=True, parents=True)

        _engine = create_engine(
            db_url,
            echo=False,
            connect_args={"check_same_thread": False},
        )
    return _engine


def get_session() -> Generator[Session, None, None]:
    """
    Générateur de session SQLModel.

    Utilisation :
        session = next(get_session())

    Yields:
        Session SQLModel connectée à l'engine
    """
    with Session(get_engine()) as session:
        yield session


def init_db() -> None:
    """
    Crée les tables si elles n'existent pas.

    Doit être appelée une fois au démarrage de l'application.
    """
    # Import des modèles pour enregistrer leurs métadonnées
    from autocoll.infrastructure.persistence import models  # noqa: F401

    SQLModel.metadata.create_all(get_engine())
