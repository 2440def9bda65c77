"""
Tests for the SQLAlchemy table store on an in-memory SQLite database.
"""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from cryptography.fernet import Fernet
from sqlalchemy import text
from sqlalchemy.pool import StaticPool
from sqlalchemy.ext.asyncio import create_async_engine

from database.encryption import SecretCipher
from database.session import build_session_factory, create_tables
from database.store import authentications_table, configurations_table

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)
T1 = T0 + timedelta(seconds=5)


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def cipher():
    return SecretCipher(Fernet.generate_key().decode())


class TestSqlTable:
    @pytest.mark.asyncio
    async def test_insert_get_update_delete(self, session_factory, cipher):
        table = configurations_table(session_factory, cipher)
        key = {"integration_id": "github", "setup_id": "s1"}
        await table.insert(
            {**key, "scopes": ["repo"], "credentials": {"clientId": "a", "clientSecret": "b"},
             "created_at": T0, "updated_at": T0}
        )

        row = await table.get(key)
        assert row["scopes"] == ["repo"]
        assert row["credentials"] == {"clientId": "a", "clientSecret": "b"}

        assert await table.update(key, {"scopes": ["gist"], "updated_at": T1}) == 1
        assert (await table.get(key))["scopes"] == ["gist"]

        assert await table.update({"integration_id": "github", "setup_id": "nope"}, {"scopes": []}) == 0
        assert await table.delete(key) == 1
        assert await table.delete(key) == 0
        assert await table.get(key) is None

    @pytest.mark.asyncio
    async def test_upsert_preserves_created_at(self, session_factory, cipher):
        table = authentications_table(session_factory, cipher)
        key = {"integration_id": "github", "auth_id": "user-1"}

        first = await table.upsert(
            key,
            {"setup_id": "s1", "payload": {"accessToken": "a"}, "created_at": T0, "updated_at": T0},
            {"setup_id": "s1", "payload": {"accessToken": "a"}, "updated_at": T0},
        )
        second = await table.upsert(
            key,
            {"setup_id": "s2", "payload": {"accessToken": "b"}, "created_at": T1, "updated_at": T1},
            {"setup_id": "s2", "payload": {"accessToken": "b"}, "updated_at": T1},
        )

        assert _naive_utc(first["created_at"]) == _naive_utc(T0)
        assert _naive_utc(second["created_at"]) == _naive_utc(T0)
        assert _naive_utc(second["updated_at"]) == _naive_utc(T1)
        assert second["setup_id"] == "s2"
        assert second["payload"] == {"accessToken": "b"}

        async with session_factory() as session:
            count = (await session.execute(text("SELECT COUNT(*) FROM authentications"))).scalar_one()
        assert count == 1

    @pytest.mark.asyncio
    async def test_secrets_encrypted_at_rest(self, session_factory, cipher):
        table = authentications_table(session_factory, cipher)
        await table.insert(
            {"integration_id": "github", "auth_id": "u", "setup_id": "s",
             "payload": {"accessToken": "super-secret-token"}, "created_at": T0, "updated_at": T0}
        )

        async with session_factory() as session:
            raw = (await session.execute(text("SELECT payload FROM authentications"))).scalar_one()
        assert "super-secret-token" not in raw

        row = await table.get({"integration_id": "github", "auth_id": "u"})
        assert row["payload"] == {"accessToken": "super-secret-token"}

    @pytest.mark.asyncio
    async def test_plaintext_rows_still_readable_after_enabling_key(self, session_factory, cipher):
        plain = authentications_table(session_factory, SecretCipher(None))
        await plain.insert(
            {"integration_id": "github", "auth_id": "u", "setup_id": "s",
             "payload": {"accessToken": "t"}, "created_at": T0, "updated_at": T0}
        )

        encrypted = authentications_table(session_factory, cipher)
        row = await encrypted.get({"integration_id": "github", "auth_id": "u"})
        assert row["payload"] == {"accessToken": "t"}
