"""Sous-package CLI commands - ré-exporte les commandes publiques."""

from autocoll.adapters.cli.commands.check_command import check
from autocoll.adapters.cli.commands.franchises_command import franchises
from autocoll.adapters.cli.commands.run_command import run

__all__ = [
    "check",
    "franchises",
    "run",
]
