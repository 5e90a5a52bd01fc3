"""
Configuration du logging de l'application via loguru.

Deux sorties :
- console : colorée, niveau configurable, pour suivre une exécution
- fichier : JSON avec rotation, tous niveaux, pour l'analyse après coup
"""

import sys
from pathlib import Path

from loguru import logger


def configure_logging(
    log_level: str = "INFO",
    log_file: Path = Path("logs/autocoll.log"),
    rotation_size: str = "10 MB",
    retention_count: int = 5,
) -> None:
    """Configure le logging de l'application.

    Args :
        log_level : Niveau minimum de la sortie console (DEBUG, INFO, WARNING, ERROR)
        log_file : Chemin du fichier de log
        rotation_size : Taille maximale du fichier avant rotation (ex: "10 MB")
        retention_count : Nombre de fichiers rotatifs conservés
    """
    logger.remove()

    logger.add(
        sys.stderr,
        level=log_level,
        format=(
            "<green>{time:HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan> | "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        level="DEBUG",  # Détail par entité uniquement dans le fichier
        format="{message}",
        serialize=True,
        rotation=rotation_size,
        retention=retention_count,
        compression="zip",
        enqueue=True,
    )

    logger.debug("Logging configuré", log_file=str(log_file), rotation=rotation_size)


def console_level(verbose: int, quiet: bool, default: str = "INFO") -> str:
    """Niveau console selon les options -v / -q de la CLI."""
    if quiet:
        return "ERROR"
    if verbose >= 1:
        return "DEBUG"
    return default
