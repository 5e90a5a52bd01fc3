"""
Parseur des expressions de critères.

Grammaire (mots-clés insensibles à la casse) :

    expr     := term (OR term)*
    term     := factor (AND factor)*
    factor   := NOT factor | '(' expr ')' | CRITERION "valeur" | CRITERE_D_ETAT

NOT lie plus fort que AND, qui lie plus fort que OR ; les parenthèses priment.
AND et OR sont associatifs à gauche.

Le parsing ne réussit jamais partiellement : à la moindre erreur, le résultat
ne contient aucune expression mais la liste ordonnée de toutes les erreurs
rencontrées (le parseur se resynchronise après chaque erreur). L'imbrication des
parenthèses et des NOT est bornée à MAX_NESTING_DEPTH niveaux.
"""

from dataclasses import dataclass, field
from typing import Optional

from loguru import logger

from autocoll.core.errors import ExpressionSyntaxError
from autocoll.core.value_objects.criteria import Criterion
from autocoll.services.expressions.nodes import And, Expression, Group, Leaf, Not, Or
from autocoll.services.expressions.tokenizer import Token, TokenKind, tokenize


@dataclass
class ParseResult:
    """
    Résultat du parsing d'une expression.

    Attributes:
        text: Expression source
        expression: Arbre syntaxique (None si erreurs)
        errors: Erreurs de syntaxe dans l'ordre du texte
    """

    text: str
    expression: Optional[Expression] = None
    errors: list[ExpressionSyntaxError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.expression is not None and not self.errors

    @property
    def error_messages(self) -> list[str]:
        return [str(e) for e in self.errors]


class ExpressionParser:
    """
    Parseur d'expressions de critères.

    Sans état entre deux appels : chaque appel à parse() travaille sur
    ses propres tokens et sa propre liste d'erreurs.
    """

    def parse(self, text: str) -> ParseResult:
        """
        Analyse une expression.

        Args:
            text: Expression source (ex: 'GENRE "Action" AND NOT WATCHED')

        Returns:
            ParseResult avec l'expression, ou la liste complète des erreurs.
        """
        tokens, errors = tokenize(text)
        expression = _RecursiveDescent(tokens, errors).parse()

        errors.sort(key=lambda e: e.position)
        if errors:
            logger.debug(f"Expression invalide ({len(errors)} erreur(s)) : {text!r}")
            return ParseResult(text=text, errors=errors)
        return ParseResult(text=text, expression=expression)


def parse(text: str) -> ParseResult:
    """Raccourci : analyse une expression avec un parseur neuf."""
    return ExpressionParser().parse(text)


MAX_NESTING_DEPTH = 100

_FACTOR_STARTS = (TokenKind.CRITERION, TokenKind.NOT, TokenKind.LPAREN)


class _NestingTooDeep(Exception):
    """Interrompt l'analyse quand l'imbrication dépasse MAX_NESTING_DEPTH."""


class _RecursiveDescent:
    """Descente récursive sur une liste de tokens, avec reprise après erreur."""

    def __init__(self, tokens: list[Token], errors: list[ExpressionSyntaxError]) -> None:
        self._tokens = tokens
        self._errors = errors
        self._index = 0
        self._depth = 0

    def parse(self) -> Optional[Expression]:
        if self._peek().kind == TokenKind.EOF:
            if not self._errors:
                self._error("expression is empty", self._peek())
            return None

        try:
            expression = self._parse_or()

            # Tokens restants : chaque cas est signalé puis l'analyse reprend
            while self._peek().kind != TokenKind.EOF:
                token = self._peek()
                if token.kind == TokenKind.RPAREN:
                    self._error("unbalanced ')' without matching '('", token)
                    self._advance()
                elif token.kind == TokenKind.STRING:
                    self._error(f"quoted value {token.describe()} has no criterion", token)
                    self._advance()
                elif token.kind == TokenKind.UNKNOWN:
                    self._advance()
                else:
                    self._error(f"expected AND or OR before {token.describe()}", token)
                    self._parse_or()
        except _NestingTooDeep:
            # L'erreur est déjà consignée, la suite du texte n'est pas analysée
            return None
        return expression

    def _parse_or(self) -> Optional[Expression]:
        left = self._parse_and()
        while self._peek().kind == TokenKind.OR:
            self._advance()
            right = self._parse_and()
            left = Or(left, right) if left is not None and right is not None else None
        return left

    def _parse_and(self) -> Optional[Expression]:
        left = self._parse_factor()
        while self._peek().kind == TokenKind.AND:
            self._advance()
            right = self._parse_factor()
            left = And(left, right) if left is not None and right is not None else None
        return left

    def _parse_factor(self) -> Optional[Expression]:
        token = self._peek()

        if token.kind in (TokenKind.NOT, TokenKind.LPAREN):
            if self._depth >= MAX_NESTING_DEPTH:
                self._error("expression is nested too deeply", token)
                raise _NestingTooDeep()
            self._depth += 1
            try:
                if token.kind == TokenKind.LPAREN:
                    return self._parse_group()
                self._advance()
                operand = self._parse_factor()
                return Not(operand) if operand is not None else None
            finally:
                self._depth -= 1

        if token.kind == TokenKind.CRITERION:
            return self._parse_criterion()

        if token.kind == TokenKind.STRING:
            self._advance()
            self._error(f"quoted value {token.describe()} has no criterion", token)
            return None

        if token.kind == TokenKind.UNKNOWN:
            # Déjà signalé par l'analyse lexicale
            self._advance()
            return None

        if token.kind == TokenKind.EOF:
            self._error("unexpected end of expression, expected a criterion", token)
            return None

        # AND, OR, ')' : pas consommés, l'appelant se resynchronise dessus
        self._error(f"expected a criterion before {token.describe()}", token)
        return None

    def _parse_group(self) -> Optional[Expression]:
        opening = self._advance()
        if self._peek().kind == TokenKind.RPAREN:
            self._error("empty parentheses", opening)
            self._advance()
            return None

        inner = self._parse_or()

        # Facteur juxtaposé dans le groupe : opérateur manquant, l'analyse continue jusqu'à ')'
        while self._peek().kind in _FACTOR_STARTS:
            self._error(f"expected AND or OR before {self._peek().describe()}", self._peek())
            self._parse_or()
            inner = None

        if self._peek().kind != TokenKind.RPAREN:
            self._error(f"missing ')' for '(' at position {opening.position}", self._peek())
            return None
        self._advance()
        return Group(inner) if inner is not None else None

    def _parse_criterion(self) -> Optional[Expression]:
        token = self._advance()
        criterion_type = token.criterion_type
        if criterion_type.is_state:
            return Leaf(Criterion(criterion_type))

        if self._peek().kind != TokenKind.STRING:
            self._error(
                f"{token.text.upper()} expects a quoted value, found {self._peek().describe()}",
                token,
            )
            return None
        value = self._advance().value
        return Leaf(Criterion(criterion_type, value))

    def _peek(self) -> Token:
        return self._tokens[self._index]

    def _advance(self) -> Token:
        token = self._tokens[self._index]
        if token.kind != TokenKind.EOF:
            self._index += 1
        return token

    def _error(self, message: str, token: Token) -> None:
        self._errors.append(ExpressionSyntaxError(message, token.position, token.text))
