"""
Tests for ConfigurationStore.
"""

import pytest

from services.configurations import normalize_scopes
from services.results import Err, ErrorKind, Ok

CREDENTIALS = {"clientId": "a", "clientSecret": "b"}


class TestNormalizeScopes:
    def test_none_means_no_scopes(self):
        assert normalize_scopes(None) == []

    def test_non_list_rejected(self):
        assert normalize_scopes("repo") is None
        assert normalize_scopes({"repo": True}) is None

    def test_non_string_items_rejected(self):
        assert normalize_scopes(["repo", 3]) is None

    def test_embedded_newlines_split(self):
        assert normalize_scopes(["repo\nuser", "repo"]) == ["repo", "user"]


class TestCreateConfiguration:
    @pytest.mark.asyncio
    async def test_create_dedupes_scopes(self, configuration_store, configurations_table):
        result = await configuration_store.create("github", ["read", "write", "read"], dict(CREDENTIALS))

        assert isinstance(result, Ok)
        configuration = result.value
        assert configuration.scopes == ["read", "write"]
        assert configuration.setup_id

        stored = await configurations_table.get({"integration_id": "github", "setup_id": configuration.setup_id})
        assert stored["scopes"] == ["read", "write"]
        assert stored["credentials"] == CREDENTIALS

    @pytest.mark.asyncio
    async def test_create_generates_unique_setup_ids(self, configuration_store):
        first = await configuration_store.create("github", [], dict(CREDENTIALS))
        second = await configuration_store.create("github", [], dict(CREDENTIALS))
        assert first.value.setup_id != second.value.setup_id

    @pytest.mark.asyncio
    async def test_to_dict_shape(self, configuration_store):
        result = await configuration_store.create("github", None, dict(CREDENTIALS))
        data = result.value.to_dict()
        assert data["object"] == "configuration"
        assert data["id"] == data["setup_id"]
        assert data["scopes"] == []
        assert data["created_at"] == "2026-01-01T00:00:00+00:00"

    @pytest.mark.asyncio
    async def test_unknown_integration(self, configuration_store, configurations_table):
        result = await configuration_store.create("nope", [], dict(CREDENTIALS))
        assert result == Err(ErrorKind.UNKNOWN_INTEGRATION)
        assert configurations_table.writes == 0

    @pytest.mark.asyncio
    async def test_invalid_scopes(self, configuration_store, configurations_table):
        result = await configuration_store.create("github", "repo", dict(CREDENTIALS))
        assert result == Err(ErrorKind.INVALID_SCOPES)
        assert configurations_table.writes == 0

    @pytest.mark.asyncio
    async def test_invalid_credentials(self, configuration_store, configurations_table):
        result = await configuration_store.create("github", [], {"clientId": "a"})
        assert result == Err(ErrorKind.INVALID_CREDENTIALS)
        assert configurations_table.writes == 0

    @pytest.mark.asyncio
    async def test_scopes_checked_before_credentials(self, configuration_store):
        result = await configuration_store.create("github", 7, None)
        assert result == Err(ErrorKind.INVALID_SCOPES)


class TestReadUpdateDelete:
    @pytest.mark.asyncio
    async def test_get_round_trip(self, configuration_store, github_setup_id):
        result = await configuration_store.get("github", github_setup_id)
        assert isinstance(result, Ok)
        assert result.value.credentials == CREDENTIALS
        assert result.value.scopes == ["repo"]

    @pytest.mark.asyncio
    async def test_get_missing(self, configuration_store):
        assert await configuration_store.get("github", "missing") == Err(ErrorKind.UNKNOWN_CONFIGURATION)

    @pytest.mark.asyncio
    async def test_get_scoped_by_integration(self, configuration_store, github_setup_id):
        result = await configuration_store.get("slack", github_setup_id)
        assert result == Err(ErrorKind.UNKNOWN_CONFIGURATION)

    @pytest.mark.asyncio
    async def test_get_unknown_integration(self, configuration_store, github_setup_id):
        assert await configuration_store.get("nope", github_setup_id) == Err(ErrorKind.UNKNOWN_INTEGRATION)

    @pytest.mark.asyncio
    async def test_update_replaces_scopes_and_credentials(self, configuration_store, github_setup_id):
        new_credentials = {"clientId": "c", "clientSecret": "d"}
        result = await configuration_store.update("github", github_setup_id, ["gist"], new_credentials)

        assert isinstance(result, Ok)
        assert result.value.scopes == ["gist"]

        stored = (await configuration_store.get("github", github_setup_id)).value
        assert stored.scopes == ["gist"]
        assert stored.credentials == new_credentials
        assert stored.updated_at > stored.created_at
        assert result.value == stored

    @pytest.mark.asyncio
    async def test_update_returns_original_created_at(self, configuration_store, github_setup_id):
        created = (await configuration_store.get("github", github_setup_id)).value

        updated = (await configuration_store.update("github", github_setup_id, [], dict(CREDENTIALS))).value

        assert updated.created_at == created.created_at
        assert updated.to_dict()["created_at"] is not None

    @pytest.mark.asyncio
    async def test_update_missing_does_not_insert(self, configuration_store, configurations_table):
        result = await configuration_store.update("github", "missing", [], dict(CREDENTIALS))
        assert result == Err(ErrorKind.UNKNOWN_CONFIGURATION)
        assert configurations_table.rows == {}

    @pytest.mark.asyncio
    async def test_update_validates_before_writing(self, configuration_store, configurations_table, github_setup_id):
        writes = configurations_table.writes
        result = await configuration_store.update("github", github_setup_id, [], {"clientId": "a", "x": "y"})
        assert result == Err(ErrorKind.INVALID_CREDENTIALS)
        assert configurations_table.writes == writes

    @pytest.mark.asyncio
    async def test_delete(self, configuration_store, github_setup_id):
        assert await configuration_store.delete("github", github_setup_id) == Ok(None)
        assert await configuration_store.get("github", github_setup_id) == Err(ErrorKind.UNKNOWN_CONFIGURATION)

    @pytest.mark.asyncio
    async def test_delete_missing(self, configuration_store):
        assert await configuration_store.delete("github", "missing") == Err(ErrorKind.UNKNOWN_CONFIGURATION)
