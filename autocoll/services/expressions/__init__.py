"""
Langage d'expressions de critères.

Exports :
- parse / ExpressionParser / ParseResult : analyse d'une expression textuelle
- Expression, Leaf, And, Or, Not, Group : noeuds de l'arbre syntaxique
- evaluate : évaluation d'une expression avec un prédicat par critère
- serialize : forme textuelle canonique
"""

from autocoll.services.expressions.nodes import (
    And,
    Expression,
    Group,
    Leaf,
    Not,
    Or,
    Predicate,
    evaluate,
    serialize,
)
from autocoll.services.expressions.parser import ExpressionParser, ParseResult, parse

__all__ = [
    "And",
    "Expression",
    "Group",
    "Leaf",
    "Not",
    "Or",
    "Predicate",
    "evaluate",
    "serialize",
    "ExpressionParser",
    "ParseResult",
    "parse",
]
