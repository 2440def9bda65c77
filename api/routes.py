"""
Integration API routes: integrations, configurations, authentications.

Route prefix: /api

- GET    /{integration_id}
- POST   /{integration_id}/authentications
- GET    /{integration_id}/authentications/{auth_id}
- PUT    /{integration_id}/authentications/{auth_id}
- POST   /{integration_id}/authentications/{auth_id}/refresh
- DELETE /{integration_id}/authentications/{auth_id}
- POST   /{integration_id}/configurations
- GET    /{integration_id}/configurations/{setup_id}
- PUT    /{integration_id}/configurations/{setup_id}
- DELETE /{integration_id}/configurations/{setup_id}
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from api.dependencies import (
    get_authentication_store,
    get_catalog,
    get_configuration_store,
    get_refresh_orchestrator,
    request_fields,
)
from api.errors import error_response
from integrations.registry import IntegrationCatalog
from services.authentications import AuthenticationStore
from services.configurations import ConfigurationStore
from services.refresh import RefreshOrchestrator
from services.results import Err, ErrorKind
from services.schemas import AuthenticationBody, ConfigurationBody

logger = logging.getLogger(__name__)

router = APIRouter(tags=["integrations"])


@router.get("/")
async def api_status() -> dict:
    """Connectivity check for API clients."""
    return {"message": "Successfully connected to the integrations API."}


@router.get("/{integration_id}")
async def get_integration(
    integration_id: str,
    catalog: IntegrationCatalog = Depends(get_catalog),
):
    integration = catalog.get(integration_id)
    if integration is None:
        return error_response(ErrorKind.UNKNOWN_INTEGRATION)
    return integration.to_dict()


# ── Authentications ────────────────────────────────────────────────────


@router.post("/{integration_id}/authentications")
async def create_authentication(
    integration_id: str,
    fields: Dict[str, Any] = Depends(request_fields),
    store: AuthenticationStore = Depends(get_authentication_store),
):
    """Save a new authentication; the auth_id is generated."""
    body = AuthenticationBody.model_validate(fields)
    result = await store.create(integration_id, body.setup_id, body.payload)
    if isinstance(result, Err):
        return error_response(result.kind)

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={"message": "Authentication created", "authentication": result.value.to_dict()},
    )


@router.get("/{integration_id}/authentications/{auth_id}")
async def get_authentication(
    integration_id: str,
    auth_id: str,
    store: AuthenticationStore = Depends(get_authentication_store),
):
    """Retrieve an authentication, OAuth payload included."""
    result = await store.get(integration_id, auth_id)
    if isinstance(result, Err):
        return error_response(result.kind)
    return result.value.to_dict()


@router.put("/{integration_id}/authentications/{auth_id}")
async def save_authentication(
    integration_id: str,
    auth_id: str,
    fields: Dict[str, Any] = Depends(request_fields),
    store: AuthenticationStore = Depends(get_authentication_store),
):
    """Create or update an authentication under the given auth_id."""
    body = AuthenticationBody.model_validate(fields)
    result = await store.upsert(integration_id, auth_id, body.setup_id, body.payload)
    if isinstance(result, Err):
        return error_response(result.kind)
    return {"message": "Authentication saved", "authentication": result.value.to_dict()}


@router.post("/{integration_id}/authentications/{auth_id}/refresh")
async def refresh_authentication(
    integration_id: str,
    auth_id: str,
    catalog: IntegrationCatalog = Depends(get_catalog),
    store: AuthenticationStore = Depends(get_authentication_store),
    orchestrator: RefreshOrchestrator = Depends(get_refresh_orchestrator),
):
    """Refresh an authentication using its refresh token."""
    integration = catalog.get(integration_id)
    if integration is None:
        return error_response(ErrorKind.UNKNOWN_INTEGRATION)

    current = await store.get(integration_id, auth_id)
    if isinstance(current, Err):
        return error_response(current.kind)

    result = await orchestrator.refresh(integration, current.value)
    if isinstance(result, Err):
        return error_response(result.kind)
    return {"message": "Authentication refreshed", "authentication": result.value.to_dict()}


@router.delete("/{integration_id}/authentications/{auth_id}")
async def delete_authentication(
    integration_id: str,
    auth_id: str,
    store: AuthenticationStore = Depends(get_authentication_store),
):
    """Delete an authentication; later requests with the same auth_id fail."""
    result = await store.delete(integration_id, auth_id)
    if isinstance(result, Err):
        return error_response(result.kind)
    return {"message": "Authentication removed"}


# ── Configurations ─────────────────────────────────────────────────────


@router.post("/{integration_id}/configurations")
async def create_configuration(
    integration_id: str,
    fields: Dict[str, Any] = Depends(request_fields),
    store: ConfigurationStore = Depends(get_configuration_store),
):
    body = ConfigurationBody.model_validate(fields)
    result = await store.create(integration_id, body.scopes, body.credentials)
    if isinstance(result, Err):
        return error_response(result.kind)

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={"message": "Configuration created", "configuration": result.value.to_dict()},
    )


@router.get("/{integration_id}/configurations/{setup_id}")
async def get_configuration(
    integration_id: str,
    setup_id: str,
    store: ConfigurationStore = Depends(get_configuration_store),
):
    result = await store.get(integration_id, setup_id)
    if isinstance(result, Err):
        return error_response(result.kind)
    return result.value.to_dict()


@router.put("/{integration_id}/configurations/{setup_id}")
async def update_configuration(
    integration_id: str,
    setup_id: str,
    fields: Dict[str, Any] = Depends(request_fields),
    store: ConfigurationStore = Depends(get_configuration_store),
):
    body = ConfigurationBody.model_validate(fields)
    result = await store.update(integration_id, setup_id, body.scopes, body.credentials)
    if isinstance(result, Err):
        return error_response(result.kind)
    return {"message": "Configuration updated", "configuration": result.value.to_dict()}


@router.delete("/{integration_id}/configurations/{setup_id}")
async def delete_configuration(
    integration_id: str,
    setup_id: str,
    store: ConfigurationStore = Depends(get_configuration_store),
):
    result = await store.delete(integration_id, setup_id)
    if isinstance(result, Err):
        return error_response(result.kind)
    return {"message": "Configuration removed"}
