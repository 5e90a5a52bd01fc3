"""
Configuration de l'application via pydantic-settings.

La configuration est chargée depuis les variables d'environnement avec le préfixe AUTOCOLL_,
et peut optionnellement être fournie via un fichier .env.

Les définitions de collections (simples, expressions, auto-découverte) ne font pas
partie de ces paramètres : elles sont lues depuis le fichier JSON definitions_file.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from autocoll.utils.constants import (
    AUTO_DISCOVERY_TAG,
    DEFAULT_VALIDATION_SAMPLE_SIZE,
    MANAGED_COLLECTION_TAG,
)

# Fichier .env à la racine du projet (parent du package)
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Paramètres de l'application avec support des variables d'environnement.

    Tous les paramètres peuvent être surchargés via des variables d'environnement
    avec le préfixe AUTOCOLL_.
    Exemple : AUTOCOLL_LOG_LEVEL=DEBUG

    Les chemins sont automatiquement étendus (~ -> répertoire home).
    """

    model_config = SettingsConfigDict(
        env_prefix="AUTOCOLL_",
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Base de données du catalogue et des collections
    database_url: str = Field(default="sqlite:///autocoll.db")

    # Définitions des collections
    definitions_file: Path = Field(default=Path("collections.json"))

    # Tags
    managed_tag: str = Field(default=MANAGED_COLLECTION_TAG, min_length=1)
    discovery_tag: str = Field(default=AUTO_DISCOVERY_TAG, min_length=1)

    # Validation après réconciliation
    validation_sample_size: int = Field(default=DEFAULT_VALIDATION_SAMPLE_SIZE, ge=1)

    # Logging (fichier + stderr, rotation 10MB, 5 fichiers de rétention)
    log_level: str = Field(default="INFO")
    log_file: Path = Field(default=Path("logs/autocoll.log"))
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5)

    @field_validator("definitions_file", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Étend ~ vers le répertoire home dans les chemins."""
        return Path(v).expanduser()
