"""
Fonctions utilitaires partagées dans le projet AutoColl.

Ce module centralise les fonctions réutilisées à travers le codebase :
- text_contains / any_text_contains : recherche de sous-chaîne sensible ou non à la casse
- to_datetime : normalisation des dates (date -> datetime à minuit)
- to_naive_utc : datetime naïf en UTC, comparable quel que soit le fuseau d'origine
- format_examples : liste d'exemples tronquée pour les logs
"""

from collections.abc import Iterable, Sequence
from datetime import date, datetime, timezone
from typing import Optional


def text_contains(value: Optional[str], fragment: str, case_sensitive: bool = False) -> bool:
    """
    Vérifie si une chaîne contient un fragment.

    Args:
        value: Chaîne à examiner (None ou vide -> False)
        fragment: Fragment recherché
        case_sensitive: Comparaison sensible à la casse

    Returns:
        True si le fragment apparaît dans la chaîne.
    """
    if not value:
        return False
    if case_sensitive:
        return fragment in value
    return fragment.casefold() in value.casefold()


def any_text_contains(
    values: Iterable[Optional[str]], fragment: str, case_sensitive: bool = False
) -> bool:
    """Vrai si au moins une des valeurs contient le fragment."""
    return any(text_contains(v, fragment, case_sensitive) for v in values)


def to_datetime(value: date | datetime | None) -> Optional[datetime]:
    """Convertit une date en datetime (minuit), laisse un datetime inchangé."""
    if value is None or isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


def to_naive_utc(value: date | datetime | None) -> Optional[datetime]:
    """Convertit en datetime naïf exprimé en UTC (les valeurs naïves sont conservées)."""
    moment = to_datetime(value)
    if moment is not None and moment.tzinfo is not None:
        return moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def format_examples(items: Sequence[str], limit: int) -> list[str]:
    """
    Tronque une liste d'exemples pour les logs.

    Retourne au plus `limit` éléments, suivis de "... and N more"
    si la liste est plus longue.
    """
    lines = list(items[:limit])
    if len(items) > limit:
        lines.append(f"... and {len(items) - limit} more")
    return lines
