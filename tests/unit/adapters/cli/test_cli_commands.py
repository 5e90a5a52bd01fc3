"""
Tests unitaires des commandes CLI.

Le container DI global est surchargé : configuration de test, catalogue et
stockage en mémoire. Aucune base n'est ouverte.

Tests couvrant:
- version / info
- check : expression valide ou invalide
- run : rapport JSON, définitions invalides, échecs, affichage Rich
- franchises : aperçu des sagas
"""

import json

import pytest
from dependency_injector import providers
from loguru import logger
from typer.testing import CliRunner

from autocoll.main import app, container

runner = CliRunner()


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def cli_container(test_settings, catalog, store):
    """Surcharge les providers du container global pour la durée du test."""
    overridden = {
        container.config: test_settings,
        container.catalog: catalog,
        container.collection_store: store,
        container.user_data: None,
    }
    for provider, value in overridden.items():
        provider.override(providers.Object(value))
    yield container
    for provider in overridden:
        provider.reset_override()
    logger.remove()


@pytest.fixture
def alien_library(catalog, store, make_entity):
    entities = [make_entity("Alien", year=1979), make_entity("Alien 2", year=1986)]
    catalog.add(*entities)
    store.register(entities)
    return entities


def write_definitions(path, data) -> str:
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


# ============================================================================
# Commandes simples
# ============================================================================


class TestInfoCommands:
    """Tests des commandes version et info."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "AutoColl v0.1.0" in result.output

    def test_info(self, test_settings) -> None:
        result = runner.invoke(app, ["info"])

        assert result.exit_code == 0
        assert "Autocollection" in result.output
        assert test_settings.database_url in result.output


class TestCheckCommand:
    """Tests de la commande check."""

    def test_valid_expression(self) -> None:
        result = runner.invoke(app, ["-q", "check", 'genre "Action" and not watched'])

        assert result.exit_code == 0
        assert "Expression valide" in result.output
        assert 'GENRE "Action" AND NOT WATCHED' in result.output

    def test_invalid_expression(self) -> None:
        result = runner.invoke(app, ["-q", "check", 'GENRE "Action" AND'])

        assert result.exit_code == 1
        assert "Expression invalide" in result.output


# ============================================================================
# run
# ============================================================================


class TestRunCommand:
    """Tests de la commande run."""

    def test_json_report(self, tmp_path, store, alien_library) -> None:
        path = write_definitions(tmp_path / "defs.json", {"simple": [{"match": "Alien"}]})

        result = runner.invoke(app, ["-q", "run", "--json", "-d", path])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["collections"][0]["name"] == "Alien Movies"
        assert data["collections"][0]["status"] == "success"
        assert data["collections"][0]["added"] == 2
        collection = store.find_collection_by_name("Alien Movies")
        assert len(store.member_ids(collection.id)) == 2

    def test_default_definitions_file_from_config(self, test_settings, store, alien_library) -> None:
        write_definitions(
            test_settings.definitions_file,
            {"expression": [{"collection_name": "Années 70", "expression": 'YEAR "<1980"'}]},
        )

        result = runner.invoke(app, ["-q", "run", "--json"])

        assert result.exit_code == 0
        collection = store.find_collection_by_name("Années 70")
        assert [e.title for e in store.get_members(collection.id)] == ["Alien"]

    def test_invalid_definitions_file(self, tmp_path) -> None:
        path = tmp_path / "defs.json"
        path.write_text("{", encoding="utf-8")

        result = runner.invoke(app, ["-q", "run", "-d", str(path)])

        assert result.exit_code == 2
        assert "illisible" in result.output

    def test_failures_give_exit_code_1(self, tmp_path, alien_library) -> None:
        path = write_definitions(
            tmp_path / "defs.json",
            {"expression": [{"collection_name": "Cassée", "expression": "GENRE"}]},
        )

        result = runner.invoke(app, ["-q", "run", "--json", "-d", path])

        assert result.exit_code == 1
        assert '"parse_error"' in result.output

    def test_rich_report(self, tmp_path, alien_library) -> None:
        path = write_definitions(tmp_path / "defs.json", {"simple": [{"match": "Alien"}]})

        result = runner.invoke(app, ["-q", "run", "-d", path])

        assert result.exit_code == 0
        assert "Collections" in result.output


# ============================================================================
# franchises
# ============================================================================


class TestFranchisesCommand:
    """Tests de la commande franchises."""

    def test_detected_franchises(self, catalog, make_entity) -> None:
        catalog.add(make_entity("Rocky"), make_entity("Rocky II"), make_entity("Heat"))

        result = runner.invoke(app, ["-q", "franchises"])

        assert result.exit_code == 0
        assert "Rocky Collection" in result.output

    def test_min_size(self, catalog, make_entity) -> None:
        catalog.add(make_entity("Rocky"), make_entity("Rocky II"))

        result = runner.invoke(app, ["-q", "franchises", "--min-size", "3"])

        assert result.exit_code == 0
        assert "Aucune saga détectée." in result.output

    def test_catalog_failure(self, catalog) -> None:
        catalog.fail = True

        result = runner.invoke(app, ["-q", "franchises"])

        assert result.exit_code == 1
        assert "catalogue indisponible" in result.output
