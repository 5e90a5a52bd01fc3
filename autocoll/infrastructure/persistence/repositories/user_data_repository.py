"""
Implémentation SQLModel des états de lecture.
"""

from sqlmodel import Session, select

from autocoll.core.entities.media import MediaEntity, User
from autocoll.core.ports.user_data import IUserDataProvider
from autocoll.infrastructure.persistence.models import PlayStateModel, UserModel
from autocoll.infrastructure.persistence.repositories.base import collaborator_errors


class SQLModelUserDataProvider(IUserDataProvider):
    """États de lecture stockés dans les tables users et play_states."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_users(self) -> list[User]:
        with collaborator_errors("Lecture des utilisateurs"):
            models = self._session.exec(select(UserModel).order_by(UserModel.id)).all()
        return [User(id=str(m.id), name=m.name) for m in models]

    def is_played(self, user: User, entity: MediaEntity) -> bool:
        statement = (
            select(PlayStateModel)
            .where(PlayStateModel.user_id == int(user.id))
            .where(PlayStateModel.media_item_id == int(entity.id))
            .where(PlayStateModel.played == True)  # noqa: E712
        )
        with collaborator_errors(f"Lecture de l'état de lecture de {entity.id}"):
            return self._session.exec(statement).first() is not None
