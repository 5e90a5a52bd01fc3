"""
Affichage Rich des résultats de la CLI.

- Rapport d'exécution des collections (tableau)
- Erreurs de syntaxe d'une expression, avec repère de position
- Sagas détectées (arborescence)
"""

from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from autocoll.core.entities.collection import DiscoveredFranchise
from autocoll.services.collection_runner import OutcomeStatus, RunReport
from autocoll.services.expressions import ParseResult

# Console globale pour tous les affichages
console = Console()

_STATUS_STYLES = {
    OutcomeStatus.SUCCESS: "green",
    OutcomeStatus.PARSE_ERROR: "red",
    OutcomeStatus.FAILED: "red",
    OutcomeStatus.SKIPPED: "yellow",
}


def display_run_report(report: RunReport) -> None:
    """Affiche le rapport d'exécution sous forme de tableau."""
    table = Table(title="Collections", show_header=True)
    table.add_column("Collection", style="cyan")
    table.add_column("Origine")
    table.add_column("Statut")
    table.add_column("Ajouts", justify="right", style="green")
    table.add_column("Retraits", justify="right", style="red")
    table.add_column("Taille", justify="right")
    table.add_column("Validation")

    for outcome in report.outcomes:
        style = _STATUS_STYLES[outcome.status]
        validation = outcome.report.validation if outcome.report else None
        if validation is None:
            check = "-"
        elif validation.is_valid:
            check = "[green]OK[/green]"
        else:
            check = f"[yellow]{len(validation.missing)} manquant(s), {len(validation.extra)} en trop[/yellow]"
        table.add_row(
            outcome.name,
            outcome.kind.value,
            f"[{style}]{outcome.status.value}[/{style}]",
            str(outcome.added),
            str(outcome.removed),
            str(outcome.final_size),
            check,
        )

    console.print(table)

    for outcome in report.failed:
        console.print(f"\n[red]{outcome.name}[/red]")
        for error in outcome.errors:
            console.print(f"  [dim]{error}[/dim]")

    if report.cancelled:
        console.print(
            f"\n[yellow]Exécution annulée : {len(report.outcomes)} sur {report.total} "
            f"collection(s) traitée(s)[/yellow]"
        )


def display_parse_result(result: ParseResult) -> None:
    """Affiche l'expression normalisée ou les erreurs avec un repère sous le texte."""
    if result.ok:
        console.print("[green]Expression valide[/green]")
        console.print(f"  Forme normalisée : [cyan]{result.expression.to_text()}[/cyan]")
        criteria = sorted({c.type.keyword for c in result.expression.criteria()})
        console.print(f"  Critères : {', '.join(criteria)}")
        return

    console.print(f"[red]Expression invalide : {len(result.errors)} erreur(s)[/red]")
    console.print(f"  {result.text}", highlight=False, markup=False)
    for error in result.errors:
        caret = " " * (error.position + 2) + "^"
        console.print(caret, style="red", highlight=False)
        console.print(f"  [red]{error}[/red]", highlight=False)


def display_franchises(franchises: list[DiscoveredFranchise]) -> None:
    """Affiche les sagas détectées et leurs membres ordonnés."""
    if not franchises:
        console.print("[green]Aucune saga détectée.[/green]")
        return

    tree = Tree(f"[bold]{len(franchises)} saga(s)[/bold]")
    for franchise in franchises:
        branch = tree.add(f"[cyan]{franchise.collection_name}[/cyan] ({len(franchise.members)})")
        for member in franchise.members:
            sequence = member.sequence if member.sequence else "-"
            branch.add(f"[dim]{sequence}[/dim] {member.entity}")
    console.print(tree)
