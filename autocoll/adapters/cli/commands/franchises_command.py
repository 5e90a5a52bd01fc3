"""Commande CLI franchises : aperçu des sagas détectées parmi les films."""

from typing import Annotated

import typer

from autocoll.adapters.cli.display import console, display_franchises
from autocoll.core.entities.media import MediaKind
from autocoll.core.errors import CollaboratorError
from autocoll.core.value_objects.entity_query import EntityQuery


def franchises(
    min_size: Annotated[
        int,
        typer.Option("--min-size", min=1, help="Nombre minimum de films par saga"),
    ] = 2,
    spinoffs: Annotated[
        bool,
        typer.Option("--spinoffs/--no-spinoffs", help="Rattacher les films dérivés"),
    ] = False,
    first: Annotated[
        bool,
        typer.Option("--first/--no-first", help="Rattacher le premier film non numéroté"),
    ] = True,
) -> None:
    """Affiche les sagas détectées sans créer de collection."""
    from autocoll.main import container

    try:
        movies = container.catalog().query_entities(EntityQuery.of_kind(MediaKind.MOVIE))
    except CollaboratorError as e:
        console.print(f"[red]Erreur: {e}[/red]")
        raise typer.Exit(1)

    detected = container.franchise_detector().detect(
        movies,
        min_size=min_size,
        include_unnumbered_first=first,
        include_spinoffs=spinoffs,
    )
    display_franchises(detected)
