"""
RefreshOrchestrator: renew an authentication's access token at the
provider's token endpoint and persist the new payload.

One exchange per call, bounded by ``refresh_timeout_seconds``. On any
exchange failure the stored authentication is left untouched.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

import httpx

from config.settings import config
from database.store import Table
from integrations.base import BodyFormat, Integration, RefreshStrategy
from services.authentications import AuthenticationStore
from services.results import Err, ErrorKind, Result
from services.schemas import Authentication, isoformat, utcnow

logger = logging.getLogger(__name__)


class TokenExchangeError(Exception):
    """The provider call failed or returned something unusable."""


# Ten years.
_MAX_EXPIRES_IN = 10 * 365 * 24 * 3600


def _expires_in(value: Any) -> Optional[int]:
    """Token lifetime in seconds, or None when the provider gave none."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not math.isfinite(value):
            raise TokenExchangeError(f"expires_in is not a finite number: {value!r}")
        value = int(value)
    elif isinstance(value, str) and value.isdecimal():
        value = int(value)
    if not isinstance(value, int):
        return None
    if not 0 <= value <= _MAX_EXPIRES_IN:
        raise TokenExchangeError(f"expires_in out of range: {value}")
    return value


class RefreshOrchestrator:
    def __init__(
        self,
        authentications: AuthenticationStore,
        configurations: Table,
        *,
        timeout: float = config.refresh_timeout_seconds,
        client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._authentications = authentications
        self._configurations = configurations
        self._timeout = timeout
        self._client_factory = client_factory or (lambda: httpx.AsyncClient(timeout=timeout))
        self._clock = clock

    async def refresh(self, integration: Integration, authentication: Authentication) -> Result[Authentication]:
        if integration.refresh_strategy is RefreshStrategy.NONE:
            logger.warning("Integration %s does not support token refresh", integration.id)
            return Err(ErrorKind.TOKEN_REFRESH_FAILED)

        configuration = await self._configurations.get(
            {"integration_id": integration.id, "setup_id": authentication.setup_id}
        )
        if configuration is None:
            return Err(ErrorKind.UNKNOWN_CONFIGURATION)

        refresh_token = authentication.refresh_token
        if refresh_token is None:
            logger.warning(
                "Authentication %s/%s has no refresh token", integration.id, authentication.auth_id
            )
            return Err(ErrorKind.TOKEN_REFRESH_FAILED)

        try:
            token_data = await self._exchange(integration, configuration["credentials"], refresh_token)
        except TokenExchangeError as exc:
            logger.warning(
                "Token refresh failed for %s/%s: %s", integration.id, authentication.auth_id, exc
            )
            return Err(ErrorKind.TOKEN_REFRESH_FAILED)

        payload = self._build_payload(authentication.payload, token_data)
        result = await self._authentications.replace_payload(authentication, payload)
        if not isinstance(result, Err):
            logger.info("Refreshed %s token for authentication %s", integration.id, authentication.auth_id)
        return result

    async def _exchange(
        self,
        integration: Integration,
        credentials: Dict[str, str],
        refresh_token: str,
    ) -> Dict[str, Any]:
        """POST the refresh-token grant and return the parsed token response."""
        params: Dict[str, str] = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            **integration.token_params,
        }
        client_id = credentials.get(integration.client_id_field, "")
        client_secret = credentials.get(integration.client_secret_field, "")

        request: Dict[str, Any] = {
            "headers": {"Accept": "application/json"},
            "timeout": self._timeout,
        }
        if integration.refresh_strategy is RefreshStrategy.REFRESH_TOKEN_BASIC:
            request["auth"] = (client_id, client_secret)
        else:
            params["client_id"] = client_id
            params["client_secret"] = client_secret

        if integration.body_format is BodyFormat.JSON:
            request["json"] = params
        else:
            request["data"] = params

        try:
            async with self._client_factory() as client:
                resp = await client.post(integration.token_url, **request)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as exc:
            raise TokenExchangeError(f"{type(exc).__name__}: {exc}") from exc
        except ValueError as exc:
            raise TokenExchangeError("token endpoint returned a non-JSON body") from exc

        if not isinstance(data, dict):
            raise TokenExchangeError("token endpoint returned a non-object body")

        # Some providers (GitHub) report errors with a 200.
        if "error" in data:
            raise TokenExchangeError(str(data.get("error_description") or data["error"]))

        if not isinstance(data.get("access_token"), str) or not data["access_token"]:
            raise TokenExchangeError("token response has no access_token")

        _expires_in(data.get("expires_in"))
        return data

    def _build_payload(self, previous: Dict[str, Any], token_data: Dict[str, Any]) -> Dict[str, Any]:
        payload = dict(previous)
        payload["accessToken"] = token_data["access_token"]

        # Providers that rotate refresh tokens return a new one.
        rotated = token_data.get("refresh_token")
        if isinstance(rotated, str) and rotated:
            payload["refreshToken"] = rotated

        expires_in = _expires_in(token_data.get("expires_in"))
        if expires_in is not None:
            payload["expiresIn"] = expires_in
            payload["expiresAt"] = isoformat(self._clock() + timedelta(seconds=expires_in))
        else:
            payload.pop("expiresIn", None)
            payload.pop("expiresAt", None)

        id_token = token_data.get("id_token")
        if isinstance(id_token, str) and id_token:
            payload["idToken"] = id_token

        payload["tokenResponse"] = token_data
        return payload
