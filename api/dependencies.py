"""
FastAPI dependencies (shared across routes).

Stores are built per request from process-wide tables; tests override
``get_configurations_table`` / ``get_authentications_table`` to swap in
fakes.
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Any, Dict

from fastapi import Depends, HTTPException, Request, status

from config.settings import config
from database.session import async_session_factory
from database.store import Table, authentications_table, configurations_table
from integrations.registry import IntegrationCatalog, default_catalog
from services.authentications import AuthenticationStore
from services.configurations import ConfigurationStore
from services.refresh import RefreshOrchestrator


def get_catalog() -> IntegrationCatalog:
    return default_catalog()


@lru_cache
def get_configurations_table() -> Table:
    return configurations_table(async_session_factory)


@lru_cache
def get_authentications_table() -> Table:
    return authentications_table(async_session_factory)


def get_configuration_store(
    table: Table = Depends(get_configurations_table),
    catalog: IntegrationCatalog = Depends(get_catalog),
) -> ConfigurationStore:
    return ConfigurationStore(table, catalog)


def get_authentication_store(
    table: Table = Depends(get_authentications_table),
    configurations: Table = Depends(get_configurations_table),
    catalog: IntegrationCatalog = Depends(get_catalog),
) -> AuthenticationStore:
    return AuthenticationStore(table, configurations, catalog)


def get_refresh_orchestrator(
    authentications: AuthenticationStore = Depends(get_authentication_store),
    configurations: Table = Depends(get_configurations_table),
) -> RefreshOrchestrator:
    return RefreshOrchestrator(
        authentications,
        configurations,
        timeout=config.refresh_timeout_seconds,
    )


async def request_fields(request: Request) -> Dict[str, Any]:
    """
    Top-level fields of the request body.

    JSON and urlencoded bodies are accepted. An empty body, or a JSON body
    that is not an object, has no fields.
    """
    content_type = request.headers.get("Content-Type", "")
    if content_type.startswith("application/x-www-form-urlencoded"):
        form = await request.form()
        return dict(form)

    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Bad request")
    return data if isinstance(data, dict) else {}
