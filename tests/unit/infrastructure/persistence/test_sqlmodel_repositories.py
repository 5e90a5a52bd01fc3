"""
Tests des implémentations SQLModel des ports (base SQLite en mémoire).

Vérifie :
- Les filtres du catalogue (type, éléments virtuels, personne, genres)
- La conversion des modèles en entités
- Les collections : création, recherche par nom/tag, membres ordonnés
- Les états de lecture
- La traduction des erreurs SQL en CollaboratorError
"""

from datetime import datetime

import pytest
from sqlmodel import Session, SQLModel, create_engine

from autocoll.core.entities import MediaKind, PersonRole, User
from autocoll.core.errors import CollaboratorError
from autocoll.core.value_objects.entity_query import EntityQuery
from autocoll.infrastructure.persistence.models import (
    CollectionModel,
    CreditModel,
    EpisodeModel,
    MediaItemModel,
    PlayStateModel,
    UserModel,
)
from autocoll.infrastructure.persistence.repositories import (
    SQLModelCatalog,
    SQLModelCollectionStore,
    SQLModelUserDataProvider,
)


@pytest.fixture
def session():
    """Session sur une base SQLite en mémoire avec toutes les tables."""
    engine = create_engine("sqlite:///:memory:")
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture
def items(session):
    """Deux films, une série avec épisodes, un film virtuel, des crédits."""
    alien = MediaItemModel(
        title="Alien",
        production_year=1979,
        premiere_date=datetime(1979, 5, 25),
        genres_json='["Horror", "Science Fiction"]',
        studios_json='["20th Century Fox"]',
        audio_languages_json='["eng"]',
        path="/films/Alien.mkv",
    )
    heat = MediaItemModel(title="Heat", production_year=1995, genres_json='["Crime"]')
    dark = MediaItemModel(kind="series", title="Dark", production_year=2017, genres_json='["Drama"]')
    ghost = MediaItemModel(title="Fantôme", is_virtual=True)
    session.add_all([alien, heat, dark, ghost])
    session.commit()

    session.add_all(
        [
            CreditModel(media_item_id=alien.id, person_name="Ridley Scott", role="Director"),
            CreditModel(media_item_id=alien.id, person_name="Sigourney Weaver", role="Actor"),
            CreditModel(media_item_id=heat.id, person_name="Al Pacino", role="Actor"),
            CreditModel(media_item_id=heat.id, person_name="Michael Mann", role="Director"),
            CreditModel(media_item_id=dark.id, person_name="Louis Hofmann", role="Actor"),
            EpisodeModel(series_id=dark.id, title="Secrets", premiere_date=datetime(2017, 12, 1)),
            EpisodeModel(series_id=dark.id, title="Lies", premiere_date=datetime(2017, 12, 1)),
            EpisodeModel(series_id=dark.id, title="À venir", is_virtual=True),
        ]
    )
    session.commit()
    return {"alien": alien, "heat": heat, "dark": dark, "ghost": ghost}


# ============================================================================
# Catalogue
# ============================================================================


class TestSQLModelCatalog:
    """Tests du catalogue SQLModel."""

    def test_query_by_kind_excludes_virtual(self, session, items) -> None:
        catalog = SQLModelCatalog(session)

        movies = catalog.query_entities(EntityQuery.of_kind(MediaKind.MOVIE))
        series = catalog.query_entities(EntityQuery.of_kind(MediaKind.SERIES))

        assert [e.title for e in movies] == ["Alien", "Heat"]
        assert [e.title for e in series] == ["Dark"]

    def test_query_including_virtual(self, session, items) -> None:
        catalog = SQLModelCatalog(session)

        entities = catalog.query_entities(EntityQuery(include_virtual=True))

        assert len(entities) == 4

    def test_query_by_person_and_role(self, session, items) -> None:
        catalog = SQLModelCatalog(session)

        directed = catalog.query_entities(
            EntityQuery(person_name="Ridley Scott", person_roles=(PersonRole.DIRECTOR,))
        )
        acted = catalog.query_entities(
            EntityQuery(person_name="Ridley Scott", person_roles=(PersonRole.ACTOR,))
        )

        assert [e.title for e in directed] == ["Alien"]
        assert acted == []

    def test_query_by_genre(self, session, items) -> None:
        catalog = SQLModelCatalog(session)

        entities = catalog.query_entities(EntityQuery(genres=("Crime", "Drama")))

        assert [e.title for e in entities] == ["Heat", "Dark"]

    def test_entity_conversion(self, session, items) -> None:
        catalog = SQLModelCatalog(session)

        alien = catalog.query_entities(EntityQuery.of_kind(MediaKind.MOVIE))[0]

        assert alien.id == str(items["alien"].id)
        assert alien.kind == MediaKind.MOVIE
        assert alien.genres == ("Horror", "Science Fiction")
        assert alien.studios == ("20th Century Fox",)
        assert alien.audio_languages == ("eng",)
        assert alien.tags == ()
        assert alien.premiere_date == datetime(1979, 5, 25)

    def test_get_credits(self, session, items) -> None:
        catalog = SQLModelCatalog(session)

        credits = catalog.get_credits(str(items["alien"].id))

        assert [(c.person_name, c.role) for c in credits] == [
            ("Ridley Scott", PersonRole.DIRECTOR),
            ("Sigourney Weaver", PersonRole.ACTOR),
        ]

    def test_list_person_names_is_sorted_and_distinct(self, session, items) -> None:
        session.add(CreditModel(media_item_id=items["dark"].id, person_name="Al Pacino", role="Actor"))
        session.commit()

        names = SQLModelCatalog(session).list_person_names()

        assert names == ["Al Pacino", "Louis Hofmann", "Michael Mann", "Ridley Scott", "Sigourney Weaver"]

    def test_get_episodes_excludes_virtual(self, session, items) -> None:
        episodes = SQLModelCatalog(session).get_episodes(str(items["dark"].id))

        assert [e.title for e in episodes] == ["Secrets", "Lies"]
        assert episodes[0].series_id == str(items["dark"].id)


# ============================================================================
# Collections
# ============================================================================


class TestSQLModelCollectionStore:
    """Tests du stockage des collections."""

    def test_create_and_find(self, session) -> None:
        store = SQLModelCollectionStore(session)

        created = store.create_collection("Horreur", ("Autocollection",))

        assert created.tags == ("Autocollection",)
        assert store.find_managed_collection_by_name("Horreur", "Autocollection") == created
        assert store.find_managed_collection_by_name("Horreur", "Autre") is None
        assert store.find_collection_by_name("Horreur") == created
        assert store.find_collection_by_name("Inconnue") is None

    def test_timestamps_are_stored_naive(self, session, items) -> None:
        """Les horodatages par défaut et les dates de sortie sont relus sans fuseau."""
        store = SQLModelCollectionStore(session)
        created = store.create_collection("Horreur", ("Autocollection",))

        model = session.get(CollectionModel, int(created.id))
        session.refresh(items["alien"])

        assert model.created_at is not None
        assert model.created_at.tzinfo is None
        assert items["alien"].date_added.tzinfo is None
        assert items["alien"].premiere_date == datetime(1979, 5, 25)

    def test_managed_lookup_skips_manual_homonym(self, session) -> None:
        session.add(CollectionModel(name="Horreur"))
        session.commit()
        store = SQLModelCollectionStore(session)

        managed = store.create_collection("Horreur", ("Autocollection",))

        assert store.find_managed_collection_by_name("Horreur", "Autocollection") == managed
        assert store.find_collection_by_name("Horreur").tags == ()

    def test_members_keep_insertion_order(self, session, items) -> None:
        store = SQLModelCollectionStore(session)
        collection = store.create_collection("Sélection", ("Autocollection",))
        heat, alien, dark = (str(items[k].id) for k in ("heat", "alien", "dark"))

        store.add_members(collection.id, [heat, alien])
        store.add_members(collection.id, [dark])

        assert [e.title for e in store.get_members(collection.id)] == ["Heat", "Alien", "Dark"]

    def test_remove_then_add_appends_at_end(self, session, items) -> None:
        store = SQLModelCollectionStore(session)
        collection = store.create_collection("Sélection", ("Autocollection",))
        heat, alien, dark = (str(items[k].id) for k in ("heat", "alien", "dark"))
        store.add_members(collection.id, [heat, alien, dark])

        store.remove_members(collection.id, [heat])
        store.add_members(collection.id, [heat])

        assert [e.title for e in store.get_members(collection.id)] == ["Alien", "Dark", "Heat"]

    def test_members_of_other_collections_are_untouched(self, session, items) -> None:
        store = SQLModelCollectionStore(session)
        first = store.create_collection("Un", ("Autocollection",))
        second = store.create_collection("Deux", ("Autocollection",))
        alien = str(items["alien"].id)
        store.add_members(first.id, [alien])
        store.add_members(second.id, [alien])

        store.remove_members(first.id, [alien])

        assert store.get_members(first.id) == []
        assert [e.title for e in store.get_members(second.id)] == ["Alien"]


# ============================================================================
# États de lecture
# ============================================================================


class TestSQLModelUserDataProvider:
    """Tests des états de lecture."""

    def test_users_and_play_states(self, session, items) -> None:
        alice = UserModel(name="alice")
        bob = UserModel(name="bob")
        session.add_all([alice, bob])
        session.commit()
        session.add(PlayStateModel(user_id=alice.id, media_item_id=items["alien"].id, played=True))
        session.add(PlayStateModel(user_id=bob.id, media_item_id=items["alien"].id, played=False))
        session.commit()

        provider = SQLModelUserDataProvider(session)
        users = provider.list_users()
        catalog = SQLModelCatalog(session)
        alien = catalog.query_entities(EntityQuery.of_kind(MediaKind.MOVIE))[0]

        assert users == [User(id=str(alice.id), name="alice"), User(id=str(bob.id), name="bob")]
        assert provider.is_played(users[0], alien) is True
        assert provider.is_played(users[1], alien) is False


# ============================================================================
# Erreurs
# ============================================================================


class TestErrors:
    """Tests de la traduction des erreurs SQL."""

    def test_missing_tables_raise_collaborator_error(self) -> None:
        engine = create_engine("sqlite:///:memory:")

        with Session(engine) as session:
            with pytest.raises(CollaboratorError, match="Lecture du catalogue"):
                SQLModelCatalog(session).query_entities(EntityQuery())
            with pytest.raises(CollaboratorError):
                SQLModelCollectionStore(session).create_collection("Horreur", ("Autocollection",))
