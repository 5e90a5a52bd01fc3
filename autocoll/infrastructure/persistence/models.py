"""
Modèles SQLModel de la base AutoColl.

Ces modèles représentent les tables SQLite. Ils sont distincts des entités
du domaine (dataclass dans core/entities/) selon l'architecture hexagonale.

Tables:
- media_items: Films et séries du catalogue
- episodes: Épisodes des séries
- credits: Personnes créditées sur un film ou une série
- users / play_states: Utilisateurs et états de lecture
- collections / collection_members: Collections et membres ordonnés

Les champs JSON (*_json) stockent des listes (genres, langues, tags)
sérialisées dans SQLite. Les dates sont stockées naïves (NaiveDatetime).
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Optional

from pydantic import NaiveDatetime
from sqlmodel import Field, Index, SQLModel


def _load_list(value: Optional[str]) -> list[str]:
    if value:
        return json.loads(value)
    return []


def _dump_list(value: list[str] | tuple[str, ...]) -> Optional[str]:
    return json.dumps(list(value)) if value else None


class MediaItemModel(SQLModel, table=True):
    """
    Film ou série du catalogue.

    Le champ kind distingue les films ("movie") des séries ("series").
    """

    __tablename__ = "media_items"

    id: int | None = Field(default=None, primary_key=True)
    kind: str = Field(default="movie", index=True)
    title: str = Field(default="", index=True)
    premiere_date: NaiveDatetime | None = None
    production_year: int | None = None
    date_added: NaiveDatetime | None = Field(default_factory=datetime.now)
    genres_json: str | None = None  # JSON: ["Action", "Science-Fiction"]
    studios_json: str | None = None
    tags_json: str | None = None
    official_rating: str | None = None  # ex: "PG-13"
    custom_rating: str | None = None
    community_rating: float | None = None  # 0-10
    critic_rating: float | None = None  # 0-100
    locations_json: str | None = None  # JSON: ["France", "USA"]
    audio_languages_json: str | None = None
    subtitle_languages_json: str | None = None
    path: str | None = None
    is_virtual: bool = Field(default=False, index=True)

    @property
    def genres(self) -> list[str]:
        """Retourne les genres désérialisés."""
        return _load_list(self.genres_json)

    @genres.setter
    def genres(self, value: list[str]) -> None:
        self.genres_json = _dump_list(value)

    @property
    def studios(self) -> list[str]:
        """Retourne les studios désérialisés."""
        return _load_list(self.studios_json)

    @studios.setter
    def studios(self, value: list[str]) -> None:
        self.studios_json = _dump_list(value)

    @property
    def tags(self) -> list[str]:
        return _load_list(self.tags_json)

    @tags.setter
    def tags(self, value: list[str]) -> None:
        self.tags_json = _dump_list(value)

    @property
    def production_locations(self) -> list[str]:
        return _load_list(self.locations_json)

    @production_locations.setter
    def production_locations(self, value: list[str]) -> None:
        self.locations_json = _dump_list(value)

    @property
    def audio_languages(self) -> list[str]:
        return _load_list(self.audio_languages_json)

    @audio_languages.setter
    def audio_languages(self, value: list[str]) -> None:
        self.audio_languages_json = _dump_list(value)

    @property
    def subtitle_languages(self) -> list[str]:
        return _load_list(self.subtitle_languages_json)

    @subtitle_languages.setter
    def subtitle_languages(self, value: list[str]) -> None:
        self.subtitle_languages_json = _dump_list(value)


class EpisodeModel(SQLModel, table=True):
    """
    Épisode d'une série.

    Lié à une série via series_id (foreign key vers media_items).
    """

    __tablename__ = "episodes"

    id: int | None = Field(default=None, primary_key=True)
    series_id: int = Field(foreign_key="media_items.id", index=True)
    title: str = ""
    premiere_date: NaiveDatetime | None = None
    path: str | None = None
    audio_languages_json: str | None = None
    subtitle_languages_json: str | None = None
    is_virtual: bool = Field(default=False)

    @property
    def audio_languages(self) -> list[str]:
        return _load_list(self.audio_languages_json)

    @audio_languages.setter
    def audio_languages(self, value: list[str]) -> None:
        self.audio_languages_json = _dump_list(value)

    @property
    def subtitle_languages(self) -> list[str]:
        return _load_list(self.subtitle_languages_json)

    @subtitle_languages.setter
    def subtitle_languages(self, value: list[str]) -> None:
        self.subtitle_languages_json = _dump_list(value)


class CreditModel(SQLModel, table=True):
    """Personne créditée sur un film ou une série, avec son rôle."""

    __tablename__ = "credits"
    __table_args__ = (Index("ix_credits_person_role", "person_name", "role"),)

    id: int | None = Field(default=None, primary_key=True)
    media_item_id: int = Field(foreign_key="media_items.id", index=True)
    person_name: str
    role: str  # ex: "Actor", "Director"


class UserModel(SQLModel, table=True):
    """Utilisateur du catalogue."""

    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True)


class PlayStateModel(SQLModel, table=True):
    """État de lecture d'une entité pour un utilisateur."""

    __tablename__ = "play_states"
    __table_args__ = (Index("ix_play_states_user_item", "user_id", "media_item_id"),)

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id")
    media_item_id: int = Field(foreign_key="media_items.id")
    played: bool = Field(default=False)


class CollectionModel(SQLModel, table=True):
    """
    Collection nommée.

    Les collections gérées portent le tag marqueur dans tags_json.
    """

    __tablename__ = "collections"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    tags_json: str | None = None
    created_at: NaiveDatetime | None = Field(default_factory=datetime.now)

    @property
    def tags(self) -> list[str]:
        """Retourne les tags désérialisés."""
        return _load_list(self.tags_json)

    @tags.setter
    def tags(self, value: list[str]) -> None:
        self.tags_json = _dump_list(value)


class CollectionMemberModel(SQLModel, table=True):
    """Membre d'une collection ; position donne l'ordre persisté."""

    __tablename__ = "collection_members"
    __table_args__ = (
        Index("ix_collection_members_collection_position", "collection_id", "position"),
    )

    id: int | None = Field(default=None, primary_key=True)
    collection_id: int = Field(foreign_key="collections.id", index=True)
    media_item_id: int = Field(foreign_key="media_items.id")
    position: int = 0
