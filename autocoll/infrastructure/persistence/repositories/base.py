"""
Conversion des erreurs SQLAlchemy en erreurs du domaine.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from autocoll.core.errors import CollaboratorError


@contextmanager
def collaborator_errors(action: str, session: Optional[Session] = None) -> Iterator[None]:
    """
    Traduit une SQLAlchemyError en CollaboratorError.

    Args:
        action: Description de l'opération (pour le message)
        session: Session à annuler (rollback) en cas d'échec d'écriture
    """
    try:
        yield
    except SQLAlchemyError as e:
        if session is not None:
            session.rollback()
        logger.debug(f"Erreur SQL pendant '{action}' : {e}")
        raise CollaboratorError(f"{action} : {e}") from e
