"""
Objets valeur immutables représentant des concepts du domaine sans identité.

Exports :
- Criterion : Critère typé avec son opérande
- CriterionType : Types canoniques de critères
- resolve_keyword : Résolution d'un mot-clé ou alias vers son type canonique
- EntityQuery : Filtre de requête sur le catalogue
"""

from autocoll.core.value_objects.criteria import (
    Criterion,
    CriterionType,
    resolve_keyword,
)
from autocoll.core.value_objects.entity_query import EntityQuery

__all__ = [
    "Criterion",
    "CriterionType",
    "resolve_keyword",
    "EntityQuery",
]
