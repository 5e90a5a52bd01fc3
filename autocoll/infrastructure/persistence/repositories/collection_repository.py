"""
Implémentation SQLModel du stockage des collections.

Chaque mutation est validée (commit) immédiatement ; un échec annule la
transaction en cours et lève CollaboratorError.
"""

from typing import Optional, Sequence

from sqlalchemy import func
from sqlmodel import Session, col, select

from autocoll.core.entities.collection import ManagedCollection
from autocoll.core.entities.media import MediaEntity
from autocoll.core.ports.collection_store import ICollectionStore
from autocoll.infrastructure.persistence.models import (
    CollectionMemberModel,
    CollectionModel,
    MediaItemModel,
)
from autocoll.infrastructure.persistence.repositories.base import collaborator_errors
from autocoll.infrastructure.persistence.repositories.catalog_repository import to_media_entity


class SQLModelCollectionStore(ICollectionStore):
    """Stockage SQLModel des collections et de leurs membres ordonnés."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def _to_entity(self, model: CollectionModel) -> ManagedCollection:
        return ManagedCollection(id=str(model.id), name=model.name, tags=tuple(model.tags))

    def _find_by_name(self, name: str) -> list[CollectionModel]:
        statement = select(CollectionModel).where(CollectionModel.name == name).order_by(CollectionModel.id)
        with collaborator_errors(f"Recherche de la collection '{name}'"):
            return list(self._session.exec(statement).all())

    def find_managed_collection_by_name(
        self, name: str, marker_tag: str
    ) -> Optional[ManagedCollection]:
        for model in self._find_by_name(name):
            if marker_tag in model.tags:
                return self._to_entity(model)
        return None

    def find_collection_by_name(self, name: str) -> Optional[ManagedCollection]:
        models = self._find_by_name(name)
        if models:
            return self._to_entity(models[0])
        return None

    def create_collection(self, name: str, tags: Sequence[str] = ()) -> ManagedCollection:
        model = CollectionModel(name=name)
        model.tags = list(tags)
        with collaborator_errors(f"Création de la collection '{name}'", self._session):
            self._session.add(model)
            self._session.commit()
            self._session.refresh(model)
        return self._to_entity(model)

    def add_members(self, collection_id: str, entity_ids: Sequence[str]) -> None:
        """Ajoute les membres après la dernière position occupée."""
        cid = int(collection_id)
        with collaborator_errors(f"Ajout de membres à la collection {collection_id}", self._session):
            last = self._session.exec(
                select(func.max(CollectionMemberModel.position)).where(
                    CollectionMemberModel.collection_id == cid
                )
            ).one()
            start = 0 if last is None else last + 1
            for offset, entity_id in enumerate(entity_ids):
                self._session.add(
                    CollectionMemberModel(
                        collection_id=cid, media_item_id=int(entity_id), position=start + offset
                    )
                )
            self._session.commit()

    def remove_members(self, collection_id: str, entity_ids: Sequence[str]) -> None:
        ids = [int(entity_id) for entity_id in entity_ids]
        with collaborator_errors(f"Retrait de membres de la collection {collection_id}", self._session):
            members = self._session.exec(
                select(CollectionMemberModel)
                .where(CollectionMemberModel.collection_id == int(collection_id))
                .where(col(CollectionMemberModel.media_item_id).in_(ids))
            ).all()
            for member in members:
                self._session.delete(member)
            self._session.commit()

    def get_members(self, collection_id: str) -> list[MediaEntity]:
        statement = (
            select(MediaItemModel)
            .join(CollectionMemberModel, CollectionMemberModel.media_item_id == MediaItemModel.id)
            .where(CollectionMemberModel.collection_id == int(collection_id))
            .order_by(CollectionMemberModel.position)
        )
        with collaborator_errors(f"Lecture des membres de la collection {collection_id}"):
            models = self._session.exec(statement).all()
        return [to_media_entity(model) for model in models]
