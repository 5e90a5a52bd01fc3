"""
Déduplication des listes de membres candidats.

Deux entités de même titre (casse et espaces ignorés) et de même date de
première diffusion sont considérées comme la même oeuvre, même si le catalogue
les modélise comme deux enregistrements distincts. Les entités sans titre
exploitable ou sans date ne peuvent pas être dédupliquées et sont toujours
conservées.
"""

from datetime import datetime
from typing import Optional

from loguru import logger

from autocoll.core.entities.media import MediaEntity

DedupKey = tuple[str, datetime]


def dedup_key(entity: MediaEntity) -> Optional[DedupKey]:
    """Clé naturelle (titre normalisé, date) ou None si non dédupliquable."""
    title = (entity.title or "").strip()
    if not title or entity.premiere_date is None:
        return None
    return title.casefold(), entity.premiere_date


def dedupe(candidates: list[MediaEntity]) -> list[MediaEntity]:
    """
    Canonicalise une liste de candidats.

    Pour chaque clé (titre, date), le premier candidat rencontré est conservé.
    Les candidats sans titre ou sans date sont ajoutés après les représentants
    uniques, dans leur ordre d'origine.

    Args:
        candidates: Candidats, dans leur ordre de découverte

    Returns:
        Liste dédupliquée.
    """
    unique: dict[DedupKey, MediaEntity] = {}
    kept_as_is: list[MediaEntity] = []
    dropped = 0

    for entity in candidates:
        key = dedup_key(entity)
        if key is None:
            kept_as_is.append(entity)
            continue
        kept = unique.get(key)
        if kept is None:
            unique[key] = entity
            continue
        dropped += 1
        logger.debug(
            f"Doublon : '{entity.title}' ({entity.premiere_date:%Y-%m-%d}) - "
            f"conservé {kept.id}, écarté {entity.id}"
        )

    if dropped:
        logger.info(f"{dropped} doublon(s) écarté(s) sur {len(candidates)} candidat(s)")
    return list(unique.values()) + kept_as_is
