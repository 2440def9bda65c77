"""
IntegrationCatalog: lookup of provider definitions plus the validators
that guard configuration writes.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from integrations.base import Integration
from integrations.providers import ALL_INTEGRATIONS
from services.results import Err, ErrorKind, Ok, Result

logger = logging.getLogger(__name__)


class IntegrationCatalog:
    """Read-only map of integration id to ``Integration``."""

    def __init__(self, integrations: Iterable[Integration] = ALL_INTEGRATIONS) -> None:
        self._integrations: Dict[str, Integration] = {}
        for integration in integrations:
            if integration.id in self._integrations:
                raise ValueError(f"Duplicate integration id '{integration.id}'")
            self._integrations[integration.id] = integration
        logger.debug("Integration catalog loaded: %d integrations", len(self._integrations))

    def get(self, integration_id: str) -> Optional[Integration]:
        return self._integrations.get(integration_id)

    def list(self) -> List[Integration]:
        return [self._integrations[k] for k in sorted(self._integrations)]

    def __contains__(self, integration_id: object) -> bool:
        return integration_id in self._integrations

    # ── Validation ──────────────────────────────────────────────────────

    @staticmethod
    def validate_credentials(candidate: Any, integration: Integration) -> Result[Dict[str, str]]:
        return validate_credentials(candidate, integration)

    @staticmethod
    def validate_scopes(raw_scope_blob: str) -> List[str]:
        return validate_scopes(raw_scope_blob)


def validate_credentials(candidate: Any, integration: Integration) -> Result[Dict[str, str]]:
    """
    Check ``candidate`` against the integration's credential schema.

    The keys must equal the declared field names exactly and every value
    must be a non-empty string. Missing and extra fields are the same
    ``invalid_credentials`` rejection.

    Returns
    -------
    ``Ok`` with a fresh dict ordered like the schema, or ``Err``.
    """
    if not isinstance(candidate, dict):
        return Err(ErrorKind.INVALID_CREDENTIALS)

    if set(candidate) != set(integration.credential_names):
        return Err(ErrorKind.INVALID_CREDENTIALS)

    credentials: Dict[str, str] = {}
    for field in integration.credential_fields:
        value = candidate[field.name]
        if not isinstance(value, str) or not value:
            return Err(ErrorKind.INVALID_CREDENTIALS)
        credentials[field.name] = value

    return Ok(credentials)


def validate_scopes(raw_scope_blob: str) -> List[str]:
    """Split on newlines, trim, drop empties, dedupe keeping first-seen order."""
    scopes: List[str] = []
    seen = set()
    for line in (raw_scope_blob or "").split("\n"):
        scope = line.strip()
        if not scope or scope in seen:
            continue
        seen.add(scope)
        scopes.append(scope)
    return scopes


_default_catalog: Optional[IntegrationCatalog] = None


def default_catalog() -> IntegrationCatalog:
    """Process-wide catalog built from the built-in providers."""
    global _default_catalog
    if _default_catalog is None:
        _default_catalog = IntegrationCatalog()
    return _default_catalog
