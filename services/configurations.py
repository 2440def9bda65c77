"""
ConfigurationStore: CRUD over per-integration OAuth app configurations.

A configuration holds the client credentials and scopes of one OAuth
application registered with a provider. Its ``setup_id`` is the reference
authentications use.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from database.store import Table
from integrations.registry import IntegrationCatalog, validate_credentials, validate_scopes
from services.results import Err, ErrorKind, Ok, Result
from services.schemas import Configuration, utcnow

logger = logging.getLogger(__name__)


def normalize_scopes(raw: Any) -> Optional[List[str]]:
    """
    Turn the request's ``scopes`` into the stored ordered set.

    ``None`` means no scopes. Anything other than a list of strings is
    rejected with ``None``.
    """
    if raw is None:
        return []
    if not isinstance(raw, list) or not all(isinstance(s, str) for s in raw):
        return None
    return validate_scopes("\n".join(raw))


class ConfigurationStore:
    def __init__(
        self,
        table: Table,
        catalog: IntegrationCatalog,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._table = table
        self._catalog = catalog
        self._clock = clock

    def _validate(self, integration_id: str, scopes: Any, credentials: Any) -> Result[Dict[str, Any]]:
        integration = self._catalog.get(integration_id)
        if integration is None:
            return Err(ErrorKind.UNKNOWN_INTEGRATION)

        normalized = normalize_scopes(scopes)
        if normalized is None:
            return Err(ErrorKind.INVALID_SCOPES)

        checked = validate_credentials(credentials, integration)
        if isinstance(checked, Err):
            return checked

        return Ok({"scopes": normalized, "credentials": checked.value})

    async def create(self, integration_id: str, scopes: Any, credentials: Any) -> Result[Configuration]:
        validated = self._validate(integration_id, scopes, credentials)
        if isinstance(validated, Err):
            return validated

        now = self._clock()
        row = {
            "integration_id": integration_id,
            "setup_id": str(uuid.uuid4()),
            **validated.value,
            "created_at": now,
            "updated_at": now,
        }
        await self._table.insert(row)
        logger.info("Created configuration %s for %s", row["setup_id"], integration_id)
        return Ok(Configuration.from_row(row))

    async def get(self, integration_id: str, setup_id: str) -> Result[Configuration]:
        if integration_id not in self._catalog:
            return Err(ErrorKind.UNKNOWN_INTEGRATION)

        row = await self._table.get({"integration_id": integration_id, "setup_id": setup_id})
        if row is None:
            return Err(ErrorKind.UNKNOWN_CONFIGURATION)
        return Ok(Configuration.from_row(row))

    async def update(
        self,
        integration_id: str,
        setup_id: str,
        scopes: Any,
        credentials: Any,
    ) -> Result[Configuration]:
        """Full replace of scopes and credentials. Never inserts."""
        validated = self._validate(integration_id, scopes, credentials)
        if isinstance(validated, Err):
            return validated

        now = self._clock()
        key = {"integration_id": integration_id, "setup_id": setup_id}
        affected = await self._table.update(key, {**validated.value, "updated_at": now})
        if not affected:
            return Err(ErrorKind.UNKNOWN_CONFIGURATION)

        logger.info("Updated configuration %s for %s", setup_id, integration_id)
        row = await self._table.get(key)
        if row is None:
            return Err(ErrorKind.UNKNOWN_CONFIGURATION)
        return Ok(Configuration.from_row(row))

    async def delete(self, integration_id: str, setup_id: str) -> Result[None]:
        if integration_id not in self._catalog:
            return Err(ErrorKind.UNKNOWN_INTEGRATION)

        affected = await self._table.delete({"integration_id": integration_id, "setup_id": setup_id})
        if not affected:
            return Err(ErrorKind.UNKNOWN_CONFIGURATION)

        logger.info("Deleted configuration %s for %s", setup_id, integration_id)
        return Ok(None)
