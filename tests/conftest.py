"""
Shared fixtures: an in-memory table store, a deterministic clock and the
service components wired on top of them.
"""

import copy
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Sequence, Tuple

import pytest
import pytest_asyncio

from integrations.registry import IntegrationCatalog
from services.authentications import AuthenticationStore
from services.configurations import ConfigurationStore

GITHUB_CREDENTIALS = {"clientId": "a", "clientSecret": "b"}


class InMemoryTable:
    """Dict-backed stand-in for ``database.store.SqlTable``."""

    def __init__(self, key_fields: Sequence[str]) -> None:
        self.key_fields = tuple(key_fields)
        self.rows: Dict[Tuple[Any, ...], Dict[str, Any]] = {}
        self.writes = 0

    def _key(self, key: Dict[str, Any]) -> Tuple[Any, ...]:
        return tuple(key[f] for f in self.key_fields)

    async def get(self, key: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        row = self.rows.get(self._key(key))
        return copy.deepcopy(row) if row is not None else None

    async def insert(self, row: Dict[str, Any]) -> None:
        k = self._key(row)
        if k in self.rows:
            raise ValueError(f"duplicate key {k}")
        self.rows[k] = copy.deepcopy(row)
        self.writes += 1

    async def update(self, key: Dict[str, Any], values: Dict[str, Any]) -> int:
        row = self.rows.get(self._key(key))
        if row is None:
            return 0
        row.update(copy.deepcopy(values))
        self.writes += 1
        return 1

    async def delete(self, key: Dict[str, Any]) -> int:
        if self.rows.pop(self._key(key), None) is None:
            return 0
        self.writes += 1
        return 1

    async def upsert(
        self,
        key: Dict[str, Any],
        insert_values: Dict[str, Any],
        update_values: Dict[str, Any],
    ) -> Dict[str, Any]:
        k = self._key(key)
        if k in self.rows:
            self.rows[k].update(copy.deepcopy(update_values))
        else:
            self.rows[k] = copy.deepcopy({**key, **insert_values})
        self.writes += 1
        return copy.deepcopy(self.rows[k])


class TickingClock:
    """Returns a new whole second on every call."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, tzinfo=timezone.utc)) -> None:
        self.current = start

    def __call__(self) -> datetime:
        now = self.current
        self.current = self.current + timedelta(seconds=1)
        return now


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def catalog() -> IntegrationCatalog:
    return IntegrationCatalog()


@pytest.fixture
def configurations_table() -> InMemoryTable:
    return InMemoryTable(("integration_id", "setup_id"))


@pytest.fixture
def authentications_table() -> InMemoryTable:
    return InMemoryTable(("integration_id", "auth_id"))


@pytest.fixture
def configuration_store(configurations_table, catalog, clock) -> ConfigurationStore:
    return ConfigurationStore(configurations_table, catalog, clock=clock)


@pytest.fixture
def authentication_store(authentications_table, configurations_table, catalog, clock) -> AuthenticationStore:
    return AuthenticationStore(authentications_table, configurations_table, catalog, clock=clock)


@pytest_asyncio.fixture
async def github_setup_id(configuration_store) -> str:
    result = await configuration_store.create("github", ["repo"], dict(GITHUB_CREDENTIALS))
    return result.value.setup_id
