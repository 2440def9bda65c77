"""
Table store: the persistence capability handed to the service layer.

A ``Table`` is scoped to one logical table and only knows exact-match
lookups by key, single-statement writes and affected-row counts.
``SqlTable`` implements it on SQLAlchemy async sessions; every call runs in
its own transaction so concurrent processes see a consistent view.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional, Protocol, Type

from sqlalchemy import delete, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from database.encryption import SecretCipher, default_cipher
from database.models import AuthenticationRecord, Base, ConfigurationRecord

logger = logging.getLogger(__name__)

Row = Dict[str, Any]

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class Table(Protocol):
    async def get(self, key: Row) -> Optional[Row]:
        ...

    async def insert(self, row: Row) -> None:
        ...

    async def update(self, key: Row, values: Row) -> int:
        """Update the row matching ``key``; return the affected-row count."""
        ...

    async def delete(self, key: Row) -> int:
        ...

    async def upsert(self, key: Row, insert_values: Row, update_values: Row) -> Row:
        """
        Insert ``key + insert_values`` or, if the key exists, apply
        ``update_values`` to it, as one atomic write. Returns the final row.
        """
        ...


class SqlTable:
    """``Table`` over one ORM model."""

    def __init__(
        self,
        model: Type[Base],
        session_factory: async_sessionmaker[AsyncSession],
        *,
        encrypted: Iterable[str] = (),
        cipher: Optional[SecretCipher] = None,
    ) -> None:
        self._model = model
        self._session_factory = session_factory
        self._encrypted = frozenset(encrypted)
        self._cipher = cipher

    @property
    def cipher(self) -> SecretCipher:
        if self._cipher is None:
            self._cipher = default_cipher()
        return self._cipher

    # ── Encoding ────────────────────────────────────────────────────────

    def _encode(self, values: Row) -> Row:
        encoded = dict(values)
        for name in self._encrypted.intersection(encoded):
            encoded[name] = self.cipher.dumps(encoded[name])
        return encoded

    def _decode(self, row: Any) -> Row:
        decoded = {c.name: row[c.name] for c in self._model.__table__.columns}
        for name in self._encrypted:
            if decoded.get(name) is not None:
                decoded[name] = self.cipher.loads(decoded[name])
        return decoded

    def _where(self, key: Row) -> list:
        return [getattr(self._model, name) == value for name, value in key.items()]

    # ── Operations ──────────────────────────────────────────────────────

    async def get(self, key: Row) -> Optional[Row]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(*self._model.__table__.columns).where(*self._where(key)).limit(1)
            )
            row = result.mappings().first()
        return self._decode(row) if row is not None else None

    async def insert(self, row: Row) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                await session.execute(self._model.__table__.insert().values(**self._encode(row)))

    async def update(self, key: Row, values: Row) -> int:
        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    update(self._model).where(*self._where(key)).values(**self._encode(values))
                )
        return result.rowcount

    async def delete(self, key: Row) -> int:
        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(delete(self._model).where(*self._where(key)))
        return result.rowcount

    async def upsert(self, key: Row, insert_values: Row, update_values: Row) -> Row:
        async with self._session_factory() as session:
            insert = _UPSERT_DIALECTS.get(session.bind.dialect.name)
            if insert is None:
                raise NotImplementedError(
                    f"Upsert is not supported on dialect '{session.bind.dialect.name}'"
                )
            stmt = insert(self._model).values(**key, **self._encode(insert_values))
            stmt = stmt.on_conflict_do_update(
                index_elements=list(key),
                set_=self._encode(update_values),
            ).returning(*self._model.__table__.columns)
            async with session.begin():
                result = await session.execute(stmt)
                row = result.mappings().one()
        return self._decode(row)


def configurations_table(
    session_factory: async_sessionmaker[AsyncSession],
    cipher: Optional[SecretCipher] = None,
) -> SqlTable:
    return SqlTable(ConfigurationRecord, session_factory, encrypted=("credentials",), cipher=cipher)


def authentications_table(
    session_factory: async_sessionmaker[AsyncSession],
    cipher: Optional[SecretCipher] = None,
) -> SqlTable:
    return SqlTable(AuthenticationRecord, session_factory, encrypted=("payload",), cipher=cipher)
