"""
Taxonomie des erreurs du domaine.

- AutoCollError : base de toutes les erreurs levées par AutoColl
- CollaboratorError : échec de lecture/écriture d'un collaborateur externe
  (catalogue, stockage des collections, données utilisateur). Interrompt la
  réconciliation de la collection courante, l'exécution continue.
- DefinitionsError : fichier de définitions illisible ou invalide
- ExpressionSyntaxError : description d'une erreur de syntaxe (jamais levée,
  collectée par le parseur)
"""

from dataclasses import dataclass


class AutoCollError(Exception):
    """Erreur de base d'AutoColl."""


class CollaboratorError(AutoCollError):
    """Échec d'un collaborateur externe (lecture ou écriture)."""


class DefinitionsError(AutoCollError):
    """Fichier de définitions de collections illisible ou invalide."""


@dataclass(frozen=True)
class ExpressionSyntaxError:
    """
    Erreur de syntaxe dans une expression de critères.

    Attributes:
        message: Description lisible de l'erreur
        position: Position (caractère, base 0) dans le texte source
        token: Texte du token fautif (vide en fin d'expression)
    """

    message: str
    position: int
    token: str = ""

    def __str__(self) -> str:
        return f"position {self.position}: {self.message}"
