"""
Analyse lexicale des expressions de critères.

Produit la liste des tokens d'une expression et collecte les erreurs lexicales
(mot inconnu, chaîne non terminée, caractère inattendu) sans s'arrêter à la
première : le parseur reçoit toujours une liste de tokens terminée par EOF.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from autocoll.core.errors import ExpressionSyntaxError
from autocoll.core.value_objects.criteria import CriterionType, resolve_keyword

_OPERATOR_WORDS = {"AND": "AND", "OR": "OR", "NOT": "NOT"}
_SYMBOLS = {"&&": "AND", "||": "OR", "!": "NOT"}
_QUOTES = ('"', "'")


class TokenKind(str, Enum):
    """Nature d'un token."""

    CRITERION = "criterion"
    AND = "AND"
    OR = "OR"
    NOT = "NOT"
    LPAREN = "("
    RPAREN = ")"
    STRING = "string"
    UNKNOWN = "unknown"
    EOF = "end of expression"


@dataclass(frozen=True)
class Token:
    """
    Token d'une expression.

    Attributes:
        kind: Nature du token
        text: Texte source du token
        position: Position du premier caractère dans l'expression
        criterion_type: Type canonique (tokens CRITERION)
        value: Valeur décodée (tokens STRING)
    """

    kind: TokenKind
    text: str
    position: int
    criterion_type: Optional[CriterionType] = None
    value: str = ""

    def describe(self) -> str:
        if self.kind == TokenKind.EOF:
            return "end of expression"
        return f"'{self.text}'"


def tokenize(text: str) -> tuple[list[Token], list[ExpressionSyntaxError]]:
    """
    Découpe une expression en tokens.

    Args:
        text: Expression source

    Returns:
        Tuple (tokens terminés par EOF, erreurs lexicales dans l'ordre du texte).
    """
    tokens: list[Token] = []
    errors: list[ExpressionSyntaxError] = []
    pos = 0
    length = len(text)

    while pos < length:
        char = text[pos]

        if char.isspace():
            pos += 1
            continue

        if char == "(":
            tokens.append(Token(TokenKind.LPAREN, char, pos))
            pos += 1
            continue

        if char == ")":
            tokens.append(Token(TokenKind.RPAREN, char, pos))
            pos += 1
            continue

        symbol = text[pos:pos + 2] if text[pos:pos + 2] in _SYMBOLS else char
        if symbol in _SYMBOLS:
            tokens.append(Token(TokenKind(_SYMBOLS[symbol]), symbol, pos))
            pos += len(symbol)
            continue

        if char in _QUOTES:
            token, pos, error = _read_string(text, pos)
            tokens.append(token)
            if error is not None:
                errors.append(error)
            continue

        if char.isalnum() or char == "_":
            start = pos
            while pos < length and (text[pos].isalnum() or text[pos] == "_"):
                pos += 1
            word = text[start:pos]
            tokens.append(_word_token(word, start, errors))
            continue

        errors.append(
            ExpressionSyntaxError(f"unexpected character '{char}'", pos, char)
        )
        pos += 1

    tokens.append(Token(TokenKind.EOF, "", length))
    return tokens, errors


def _word_token(word: str, position: int, errors: list[ExpressionSyntaxError]) -> Token:
    """Classe un mot : opérateur, mot-clé de critère ou mot inconnu."""
    upper = word.upper()
    if upper in _OPERATOR_WORDS:
        return Token(TokenKind(_OPERATOR_WORDS[upper]), word, position)

    criterion_type = resolve_keyword(word)
    if criterion_type is not None:
        return Token(TokenKind.CRITERION, word, position, criterion_type=criterion_type)

    errors.append(ExpressionSyntaxError(f"unknown keyword '{word}'", position, word))
    return Token(TokenKind.UNKNOWN, word, position)


def _read_string(text: str, start: int) -> tuple[Token, int, Optional[ExpressionSyntaxError]]:
    """
    Lit une chaîne entre guillemets (doubles ou simples).

    Le caractère \\ échappe le guillemet ouvrant et lui-même ; devant tout
    autre caractère il est conservé tel quel (chemins Windows).

    Returns:
        Tuple (token STRING, position après la chaîne, erreur si non terminée).
    """
    quote = text[start]
    chars: list[str] = []
    pos = start + 1
    length = len(text)

    while pos < length:
        char = text[pos]
        if char == "\\" and pos + 1 < length and text[pos + 1] in (quote, "\\"):
            chars.append(text[pos + 1])
            pos += 2
            continue
        if char == quote:
            pos += 1
            value = "".join(chars)
            return Token(TokenKind.STRING, text[start:pos], start, value=value), pos, None
        chars.append(char)
        pos += 1

    value = "".join(chars)
    error = ExpressionSyntaxError("unterminated quoted value", start, text[start:])
    return Token(TokenKind.STRING, text[start:], start, value=value), length, error
