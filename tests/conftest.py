"""
Fixtures pytest partagées pour les tests AutoColl.

Ce module contient les fixtures communes utilisées dans les tests :
- Fabrique d'entités (films, séries)
- Catalogue en mémoire et mock de ICatalog
- Stockage de collections en mémoire (enregistre les appels d'écriture)
- Settings de test avec chemins temporaires
"""

import itertools
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Sequence
from unittest.mock import MagicMock

import pytest

from autocoll.config import Settings
from autocoll.core.entities import (
    Credit,
    Episode,
    ManagedCollection,
    MediaEntity,
    MediaKind,
)
from autocoll.core.errors import CollaboratorError
from autocoll.core.ports.catalog import ICatalog
from autocoll.core.ports.collection_store import ICollectionStore
from autocoll.core.value_objects.entity_query import EntityQuery


class InMemoryCatalog(ICatalog):
    """Catalogue en mémoire respectant la sémantique de EntityQuery."""

    def __init__(self) -> None:
        self.entities: list[MediaEntity] = []
        self.credits: dict[str, list[Credit]] = {}
        self.episodes: dict[str, list[Episode]] = {}
        self.fail = False

    def add(self, *entities: MediaEntity) -> None:
        self.entities.extend(entities)

    def credit(self, entity: MediaEntity, *credits: Credit) -> None:
        self.credits.setdefault(entity.id, []).extend(credits)

    def _check(self) -> None:
        if self.fail:
            raise CollaboratorError("catalogue indisponible")

    def query_entities(self, query: EntityQuery) -> list[MediaEntity]:
        self._check()
        result = []
        for entity in self.entities:
            if query.kinds and entity.kind not in query.kinds:
                continue
            if entity.is_virtual and not query.include_virtual:
                continue
            if query.person_name is not None and not any(
                c.person_name == query.person_name
                and (not query.person_roles or c.role in query.person_roles)
                for c in self.credits.get(entity.id, [])
            ):
                continue
            if query.genres and not set(entity.genres) & set(query.genres):
                continue
            if query.tags and not set(entity.tags) & set(query.tags):
                continue
            if query.studios and not set(entity.studios) & set(query.studios):
                continue
            result.append(entity)
        return result

    def get_credits(self, entity_id: str) -> list[Credit]:
        self._check()
        return list(self.credits.get(entity_id, []))

    def list_person_names(self) -> list[str]:
        self._check()
        names = {c.person_name for credits in self.credits.values() for c in credits}
        return sorted(names)

    def get_episodes(self, series_id: str) -> list[Episode]:
        self._check()
        return [e for e in self.episodes.get(series_id, []) if not e.is_virtual]


class InMemoryCollectionStore(ICollectionStore):
    """
    Stockage de collections en mémoire.

    Les membres sont résolus via les entités enregistrées (register).
    Chaque écriture est tracée dans `calls` ; `fail_writes` simule une panne.
    """

    def __init__(self) -> None:
        self.collections: dict[str, ManagedCollection] = {}
        self.members: dict[str, list[str]] = {}
        self.known: dict[str, MediaEntity] = {}
        self.calls: list[tuple[str, str, list[str]]] = []
        self.fail_writes = False
        self._ids = itertools.count(1)

    def register(self, entities: Sequence[MediaEntity]) -> None:
        for entity in entities:
            self.known[entity.id] = entity

    def seed(self, name: str, tags: Sequence[str], entities: Sequence[MediaEntity]) -> ManagedCollection:
        """Crée directement une collection avec des membres (sans tracer d'appel)."""
        collection = ManagedCollection(id=f"c{next(self._ids)}", name=name, tags=tuple(tags))
        self.collections[collection.id] = collection
        self.register(entities)
        self.members[collection.id] = [e.id for e in entities]
        return collection

    def member_ids(self, collection_id: str) -> list[str]:
        return list(self.members.get(collection_id, []))

    def find_managed_collection_by_name(
        self, name: str, marker_tag: str
    ) -> Optional[ManagedCollection]:
        for collection in self.collections.values():
            if collection.name == name and marker_tag in collection.tags:
                return collection
        return None

    def find_collection_by_name(self, name: str) -> Optional[ManagedCollection]:
        for collection in self.collections.values():
            if collection.name == name:
                return collection
        return None

    def create_collection(self, name: str, tags: Sequence[str] = ()) -> ManagedCollection:
        if self.fail_writes:
            raise CollaboratorError("création impossible")
        collection = ManagedCollection(id=f"c{next(self._ids)}", name=name, tags=tuple(tags))
        self.collections[collection.id] = collection
        self.members[collection.id] = []
        self.calls.append(("create", collection.id, [name]))
        return collection

    def add_members(self, collection_id: str, entity_ids: Sequence[str]) -> None:
        if self.fail_writes:
            raise CollaboratorError("ajout impossible")
        self.calls.append(("add", collection_id, list(entity_ids)))
        self.members.setdefault(collection_id, []).extend(entity_ids)

    def remove_members(self, collection_id: str, entity_ids: Sequence[str]) -> None:
        if self.fail_writes:
            raise CollaboratorError("retrait impossible")
        self.calls.append(("remove", collection_id, list(entity_ids)))
        removed = set(entity_ids)
        self.members[collection_id] = [i for i in self.members.get(collection_id, []) if i not in removed]

    def get_members(self, collection_id: str) -> list[MediaEntity]:
        return [self.known[i] for i in self.members.get(collection_id, [])]

    def writes(self, kind: str) -> list[tuple[str, str, list[str]]]:
        return [call for call in self.calls if call[0] == kind]


@pytest.fixture
def make_entity() -> Callable[..., MediaEntity]:
    """
    Fabrique d'entités.

    Identifiants générés automatiquement ("e1", "e2"...) si non fournis.
    Une année seule renseigne production_year et premiere_date (1er janvier).
    """
    counter = itertools.count(1)

    def factory(
        title: str = "Film",
        year: Optional[int] = None,
        kind: MediaKind = MediaKind.MOVIE,
        id: Optional[str] = None,
        **kwargs,
    ) -> MediaEntity:
        if year is not None:
            kwargs.setdefault("production_year", year)
            kwargs.setdefault("premiere_date", datetime(year, 1, 1))
        return MediaEntity(id=id or f"e{next(counter)}", kind=kind, title=title, **kwargs)

    return factory


@pytest.fixture
def catalog() -> InMemoryCatalog:
    """Catalogue en mémoire vide."""
    return InMemoryCatalog()


@pytest.fixture
def mock_catalog() -> MagicMock:
    """
    Mock de ICatalog pour les tests.

    Retourne des listes vides par défaut ; configurer le mock dans chaque test.
    """
    mock = MagicMock(spec=ICatalog)
    mock.query_entities.return_value = []
    mock.get_credits.return_value = []
    mock.list_person_names.return_value = []
    mock.get_episodes.return_value = []
    return mock


@pytest.fixture
def store() -> InMemoryCollectionStore:
    """Stockage de collections en mémoire vide."""
    return InMemoryCollectionStore()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings de test avec chemins temporaires."""
    return Settings(
        database_url=f"sqlite:///{tmp_path}/test.db",
        definitions_file=tmp_path / "collections.json",
        log_file=tmp_path / "logs" / "test.log",
    )
