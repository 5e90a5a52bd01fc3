"""Commande CLI check : validation d'une expression de critères."""

from typing import Annotated

import typer

from autocoll.adapters.cli.display import display_parse_result


def check(
    expression: Annotated[
        str,
        typer.Argument(help='Expression à vérifier (ex: \'GENRE "Action" AND NOT WATCHED\')'),
    ],
) -> None:
    """Vérifie la syntaxe d'une expression sans rien modifier."""
    from autocoll.main import container

    result = container.expression_parser().parse(expression)
    display_parse_result(result)
    if not result.ok:
        raise typer.Exit(1)
