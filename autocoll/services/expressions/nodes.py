"""
Arbre syntaxique des expressions de critères.

Les noeuds sont immutables. Une expression analysée avec succès est sans effet
de bord : son évaluation pour une entité donnée ne dépend que du prédicat fourni
par l'appelant.

Noeuds :
- Leaf : un critère
- And / Or : conjonction / disjonction, évaluées de gauche à droite avec court-circuit
- Not : négation
- Group : parenthèses explicites (évalue son contenu sans le modifier)
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Optional

from autocoll.core.value_objects.criteria import Criterion

# Réponse d'un prédicat pour un critère. None signifie "pas de réponse" (faux).
Predicate = Callable[[Criterion], Optional[bool]]

_PRECEDENCE_OR = 1
_PRECEDENCE_AND = 2
_PRECEDENCE_NOT = 3
_PRECEDENCE_ATOM = 4


def quote_value(value: str) -> str:
    """Entoure une valeur de guillemets doubles en échappant \\ et \"."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class Expression(ABC):
    """Noeud d'expression."""

    precedence: int = _PRECEDENCE_ATOM

    @abstractmethod
    def evaluate(self, predicate: Predicate) -> bool:
        """Évalue l'expression en déléguant chaque feuille au prédicat."""
        ...

    @abstractmethod
    def to_text(self) -> str:
        """Forme textuelle canonique, ré-analysable par le parseur."""
        ...

    @abstractmethod
    def criteria(self) -> Iterator[Criterion]:
        """Parcourt les critères des feuilles de gauche à droite."""
        ...

    def _wrapped(self, min_precedence: int) -> str:
        text = self.to_text()
        if self.precedence < min_precedence:
            return f"({text})"
        return text

    def __str__(self) -> str:
        return self.to_text()


@dataclass(frozen=True)
class Leaf(Expression):
    criterion: Criterion

    def evaluate(self, predicate: Predicate) -> bool:
        return bool(predicate(self.criterion))

    def to_text(self) -> str:
        keyword = self.criterion.type.keyword
        if self.criterion.type.is_state:
            return keyword
        return f"{keyword} {quote_value(self.criterion.value)}"

    def criteria(self) -> Iterator[Criterion]:
        yield self.criterion


@dataclass(frozen=True)
class And(Expression):
    left: Expression
    right: Expression

    precedence = _PRECEDENCE_AND

    def evaluate(self, predicate: Predicate) -> bool:
        return self.left.evaluate(predicate) and self.right.evaluate(predicate)

    def to_text(self) -> str:
        # L'associativité est à gauche : un membre droit de même niveau doit être parenthésé
        left = self.left._wrapped(_PRECEDENCE_AND)
        right = self.right._wrapped(_PRECEDENCE_AND + 1)
        return f"{left} AND {right}"

    def criteria(self) -> Iterator[Criterion]:
        yield from self.left.criteria()
        yield from self.right.criteria()


@dataclass(frozen=True)
class Or(Expression):
    left: Expression
    right: Expression

    precedence = _PRECEDENCE_OR

    def evaluate(self, predicate: Predicate) -> bool:
        return self.left.evaluate(predicate) or self.right.evaluate(predicate)

    def to_text(self) -> str:
        left = self.left._wrapped(_PRECEDENCE_OR)
        right = self.right._wrapped(_PRECEDENCE_OR + 1)
        return f"{left} OR {right}"

    def criteria(self) -> Iterator[Criterion]:
        yield from self.left.criteria()
        yield from self.right.criteria()


@dataclass(frozen=True)
class Not(Expression):
    operand: Expression

    precedence = _PRECEDENCE_NOT

    def evaluate(self, predicate: Predicate) -> bool:
        return not self.operand.evaluate(predicate)

    def to_text(self) -> str:
        return f"NOT {self.operand._wrapped(_PRECEDENCE_NOT)}"

    def criteria(self) -> Iterator[Criterion]:
        yield from self.operand.criteria()


@dataclass(frozen=True)
class Group(Expression):
    inner: Expression

    def evaluate(self, predicate: Predicate) -> bool:
        return self.inner.evaluate(predicate)

    def to_text(self) -> str:
        return f"({self.inner.to_text()})"

    def criteria(self) -> Iterator[Criterion]:
        yield from self.inner.criteria()


def evaluate(expression: Expression, predicate: Predicate) -> bool:
    """
    Évalue une expression pour une entité.

    Args:
        expression: Expression analysée
        predicate: Réponse de l'appelant pour chaque critère de l'entité courante.
            Une réponse None est traitée comme fausse.

    Returns:
        Le résultat booléen de l'expression.
    """
    return expression.evaluate(predicate)


def serialize(expression: Expression) -> str:
    """Retourne la forme textuelle canonique d'une expression."""
    return expression.to_text()
