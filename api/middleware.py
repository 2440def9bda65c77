"""
Global middleware: request timing, the secret-key gate and the legacy
bearer-token check.
"""

from __future__ import annotations

import binascii
import hmac
import logging
import time
from base64 import b64decode
from typing import Optional

import httpx
from fastapi import FastAPI, Request, status

from api.errors import envelope
from config.settings import config

logger = logging.getLogger(__name__)

_VERIFY_TIMEOUT = 5.0


def _presented_key(authorization: str) -> Optional[str]:
    """Pull the secret out of ``Basic base64(key:)`` or ``Bearer key``."""
    scheme, _, credentials = authorization.partition(" ")
    scheme = scheme.lower()
    if scheme == "bearer":
        return credentials.strip()
    if scheme == "basic":
        try:
            decoded = b64decode(credentials.strip(), validate=True).decode()
        except (binascii.Error, UnicodeDecodeError):
            return None
        return decoded.partition(":")[0]
    return None


def secret_key_accepted(authorization: Optional[str], secret_key: str) -> bool:
    """
    Check the caller against ``secret_key``. An empty key leaves the API open.

    The key is sent as the Basic-auth username (password empty) or as a
    Bearer token.
    """
    if not secret_key:
        return True
    presented = _presented_key(authorization) if authorization else None
    return presented is not None and hmac.compare_digest(presented, secret_key)


async def verify_bearer_token(authorization: str, url: str) -> bool:
    """Forward the caller's bearer token to ``url``; any 2xx accepts it."""
    token = authorization
    if token.startswith("Bearer "):
        token = token[7:]

    try:
        async with httpx.AsyncClient(timeout=_VERIFY_TIMEOUT) as client:
            resp = await client.get(url, headers={"Authorization": f"Bearer {token}"})
            resp.raise_for_status()
    except httpx.HTTPError as exc:
        logger.info("Token verification rejected: %s", exc)
        return False
    return True


def register_middleware(app: FastAPI, api_prefix: str = "/api") -> None:
    """Attach any app-level middleware. The last one registered runs first."""

    @app.middleware("http")
    async def legacy_token_check(request: Request, call_next):
        url = config.verify_token_url
        if url and request.url.path.startswith(api_prefix):
            authorization = request.headers.get("Authorization", "")
            if not await verify_bearer_token(authorization, url):
                return envelope(status.HTTP_401_UNAUTHORIZED, "unauthorized", "user is not authorized")
        return await call_next(request)

    @app.middleware("http")
    async def secret_key_check(request: Request, call_next):
        if request.url.path.startswith(api_prefix) and not secret_key_accepted(
            request.headers.get("Authorization"), config.secret_key
        ):
            return envelope(
                status.HTTP_401_UNAUTHORIZED,
                "unauthorized",
                "You are not authenticated. Provide the secret key to access the API.",
                headers={"WWW-Authenticate": 'Basic realm="Secure Area"'},
            )
        return await call_next(request)

    @app.middleware("http")
    async def request_timer(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        logger.debug("%s %s %d %.3fs", request.method, request.url.path, response.status_code, elapsed)
        return response
