"""Commande CLI run : exécution de toutes les définitions de collections."""

import threading
from pathlib import Path
from typing import Annotated, Optional

import typer
from loguru import logger
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from autocoll.adapters.cli.display import console, display_run_report
from autocoll.core.errors import DefinitionsError
from autocoll.services.collection_runner import RunReport
from autocoll.services.definitions import load_definitions


def run(
    definitions: Annotated[
        Optional[Path],
        typer.Option(
            "--definitions",
            "-d",
            help="Fichier JSON des définitions (défaut: definitions_file de la config)",
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Affiche le rapport au format JSON"),
    ] = False,
) -> None:
    """Met à jour toutes les collections automatiques."""
    from autocoll.main import container

    config = container.config()
    path = definitions if definitions else config.definitions_file

    try:
        collection_definitions = load_definitions(path)
    except DefinitionsError as e:
        console.print(f"[red]Erreur: {e}[/red]")
        raise typer.Exit(2)

    runner = container.collection_runner()
    cancel = threading.Event()

    if json_output:
        report = runner.run(collection_definitions, cancel=cancel)
        typer.echo(report.to_json())
    else:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("Mise à jour des collections", total=100)
            report = _run_interruptible(
                lambda: runner.run(
                    collection_definitions,
                    progress=lambda percentage: progress.update(task, completed=percentage),
                    cancel=cancel,
                ),
                cancel,
            )
        display_run_report(report)

    if report.has_failures:
        raise typer.Exit(1)


def _run_interruptible(target, cancel: threading.Event) -> RunReport:
    """
    Exécute le runner dans un thread ; Ctrl+C demande l'annulation.

    La collection en cours est terminée avant l'arrêt.
    """
    result: dict[str, RunReport] = {}
    failure: list[BaseException] = []

    def worker() -> None:
        try:
            result["report"] = target()
        except BaseException as e:
            failure.append(e)

    thread = threading.Thread(target=worker, name="autocoll-run", daemon=True)
    thread.start()
    while thread.is_alive():
        try:
            thread.join(timeout=0.2)
        except KeyboardInterrupt:
            logger.warning("Annulation demandée, fin de la collection en cours...")
            console.print("[yellow]Annulation demandée, fin de la collection en cours...[/yellow]")
            cancel.set()

    if failure:
        raise failure[0]
    return result["report"]
