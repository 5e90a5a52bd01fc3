"""
Point d'entrée CLI d'AutoColl.

Initialise le container DI, configure le logging et fournit les commandes CLI.
"""

from typing import Annotated

import typer
from loguru import logger

from . import __version__
from .adapters.cli.commands import check, franchises, run
from .config import Settings
from .container import Container
from .logging_config import configure_logging, console_level

app = typer.Typer(
    name="autocoll",
    help="Collections automatiques d'un catalogue multimédia",
)
container = Container()

# Etat global pour les options de verbosité
state = {"verbose": 0, "quiet": False}


def _configure_logging(settings: Settings) -> None:
    configure_logging(
        log_level=console_level(state["verbose"], state["quiet"], settings.log_level),
        log_file=settings.log_file,
        rotation_size=settings.log_rotation_size,
        retention_count=settings.log_retention_count,
    )


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Augmenter la verbosité (-v)"),
    ] = 0,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Mode silencieux (erreurs uniquement)"),
    ] = False,
) -> None:
    """AutoColl - Collections automatiques."""
    state["quiet"] = quiet
    state["verbose"] = 0 if quiet else verbose
    _configure_logging(get_config())


app.command()(run)
app.command()(check)
app.command()(franchises)


def get_config() -> Settings:
    """Récupère les paramètres de l'application depuis le container DI."""
    return container.config()


@app.command()
def info() -> None:
    """Affiche la configuration actuelle."""
    config = get_config()
    typer.echo(f"Base de données : {config.database_url}")
    typer.echo(f"Définitions : {config.definitions_file}")
    typer.echo(f"Tag des collections gérées : {config.managed_tag}")
    typer.echo(f"Tag de l'auto-découverte : {config.discovery_tag}")
    typer.echo(f"Exemples de validation : {config.validation_sample_size}")
    typer.echo(f"Niveau de log : {config.log_level}")


@app.command()
def version() -> None:
    """Affiche les informations de version."""
    typer.echo(f"AutoColl v{__version__}")


def main() -> None:
    """Point d'entrée de l'application."""
    settings = container.config()
    _configure_logging(settings)

    # Initialise la base de données (crée les tables si nécessaire)
    container.database.init()

    logger.info("Démarrage d'AutoColl", version=__version__)

    app()


if __name__ == "__main__":
    main()
