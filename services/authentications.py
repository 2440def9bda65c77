"""
AuthenticationStore: CRUD over stored OAuth grants.

An authentication is one end user's token bundle under one configuration,
keyed by (integration_id, auth_id).
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Callable, Dict

from database.store import Table
from integrations.registry import IntegrationCatalog
from services.results import Err, ErrorKind, Ok, Result
from services.schemas import Authentication, utcnow

logger = logging.getLogger(__name__)


def is_oauth_payload(payload: Dict[str, Any]) -> bool:
    token = payload.get("accessToken")
    return isinstance(token, str) and bool(token)


class AuthenticationStore:
    def __init__(
        self,
        table: Table,
        configurations: Table,
        catalog: IntegrationCatalog,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._table = table
        self._configurations = configurations
        self._catalog = catalog
        self._clock = clock

    async def _validate(self, integration_id: str, setup_id: Any, payload: Any) -> Result[None]:
        """Write preconditions, checked in order; the first failure wins."""
        if integration_id not in self._catalog:
            return Err(ErrorKind.UNKNOWN_INTEGRATION)

        if not setup_id or not isinstance(setup_id, str):
            return Err(ErrorKind.MISSING_SETUP_ID)

        if not isinstance(payload, dict):
            return Err(ErrorKind.MISSING_OAUTH_PAYLOAD)

        if not is_oauth_payload(payload):
            return Err(ErrorKind.INVALID_OAUTH_PAYLOAD)

        configuration = await self._configurations.get(
            {"integration_id": integration_id, "setup_id": setup_id}
        )
        if configuration is None:
            return Err(ErrorKind.UNKNOWN_CONFIGURATION)

        return Ok(None)

    async def create(self, integration_id: str, setup_id: Any, payload: Any) -> Result[Authentication]:
        validated = await self._validate(integration_id, setup_id, payload)
        if isinstance(validated, Err):
            return validated

        now = self._clock()
        row = {
            "integration_id": integration_id,
            "auth_id": str(uuid.uuid4()),
            "setup_id": setup_id,
            "payload": payload,
            "created_at": now,
            "updated_at": now,
        }
        await self._table.insert(row)
        logger.info("Created authentication %s for %s", row["auth_id"], integration_id)
        return Ok(Authentication.from_row(row))

    async def get(self, integration_id: str, auth_id: str) -> Result[Authentication]:
        if integration_id not in self._catalog:
            return Err(ErrorKind.UNKNOWN_INTEGRATION)

        row = await self._table.get({"integration_id": integration_id, "auth_id": auth_id})
        if row is None:
            return Err(ErrorKind.UNKNOWN_AUTHENTICATION)
        return Ok(Authentication.from_row(row))

    async def upsert(
        self,
        integration_id: str,
        auth_id: str,
        setup_id: Any,
        payload: Any,
    ) -> Result[Authentication]:
        """
        Save an authentication under a caller-supplied ``auth_id``.

        An existing row keeps its ``created_at``; a new row gets
        ``created_at = updated_at = now``. Both paths are one conditional
        write, so concurrent upserts of the same key never duplicate it.
        """
        validated = await self._validate(integration_id, setup_id, payload)
        if isinstance(validated, Err):
            return validated

        now = self._clock()
        row = await self._table.upsert(
            {"integration_id": integration_id, "auth_id": auth_id},
            {"setup_id": setup_id, "payload": payload, "created_at": now, "updated_at": now},
            {"setup_id": setup_id, "payload": payload, "updated_at": now},
        )
        logger.info("Saved authentication %s for %s", auth_id, integration_id)
        return Ok(Authentication.from_row(row))

    async def replace_payload(
        self,
        authentication: Authentication,
        payload: Dict[str, Any],
    ) -> Result[Authentication]:
        """Swap the payload of an existing record, keeping its identity and ``created_at``."""
        now = self._clock()
        affected = await self._table.update(
            {"integration_id": authentication.integration_id, "auth_id": authentication.auth_id},
            {"payload": payload, "updated_at": now},
        )
        if not affected:
            return Err(ErrorKind.UNKNOWN_AUTHENTICATION)

        return Ok(authentication.model_copy(update={"payload": payload, "updated_at": now}))

    async def delete(self, integration_id: str, auth_id: str) -> Result[None]:
        if integration_id not in self._catalog:
            return Err(ErrorKind.UNKNOWN_INTEGRATION)

        affected = await self._table.delete({"integration_id": integration_id, "auth_id": auth_id})
        if not affected:
            return Err(ErrorKind.UNKNOWN_AUTHENTICATION)

        logger.info("Deleted authentication %s for %s", auth_id, integration_id)
        return Ok(None)
