"""
Result types and the closed error taxonomy.

Store and refresh operations return ``Ok(value)`` or ``Err(kind)``.
``ErrorKind`` carries the HTTP status and caller-facing message so the
boundary layer only has to look them up.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    UNKNOWN_INTEGRATION = "unknown_integration"
    UNKNOWN_CONFIGURATION = "unknown_configuration"
    UNKNOWN_AUTHENTICATION = "unknown_authentication"
    MISSING_SETUP_ID = "missing_setup_id"
    MISSING_OAUTH_PAYLOAD = "missing_oauth_payload"
    INVALID_OAUTH_PAYLOAD = "invalid_oauth_payload"
    INVALID_SCOPES = "invalid_scopes"
    INVALID_CREDENTIALS = "invalid_credentials"
    TOKEN_REFRESH_FAILED = "token_refresh_failed"

    @property
    def status(self) -> int:
        return _STATUS[self]

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_STATUS = {
    ErrorKind.UNKNOWN_INTEGRATION: 404,
    ErrorKind.UNKNOWN_CONFIGURATION: 404,
    ErrorKind.UNKNOWN_AUTHENTICATION: 404,
    ErrorKind.MISSING_SETUP_ID: 400,
    ErrorKind.MISSING_OAUTH_PAYLOAD: 400,
    ErrorKind.INVALID_OAUTH_PAYLOAD: 400,
    ErrorKind.INVALID_SCOPES: 400,
    ErrorKind.INVALID_CREDENTIALS: 400,
    ErrorKind.TOKEN_REFRESH_FAILED: 422,
}

_MESSAGES = {
    ErrorKind.UNKNOWN_INTEGRATION: "That integration is unknown. Make sure the integration id is spelled correctly.",
    ErrorKind.UNKNOWN_CONFIGURATION: "No configuration matches that setup_id for this integration.",
    ErrorKind.UNKNOWN_AUTHENTICATION: "No authentication matches that auth_id for this integration.",
    ErrorKind.MISSING_SETUP_ID: "A setup_id (string) must be provided in the request body.",
    ErrorKind.MISSING_OAUTH_PAYLOAD: "An OAuth payload (object) must be provided in the request body.",
    ErrorKind.INVALID_OAUTH_PAYLOAD: "The OAuth payload must contain an accessToken (string).",
    ErrorKind.INVALID_SCOPES: "Scopes must be provided as an array of strings.",
    ErrorKind.INVALID_CREDENTIALS: "Credentials do not match the fields required by this integration.",
    ErrorKind.TOKEN_REFRESH_FAILED: "The provider refused or failed to refresh the token.",
}


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    kind: ErrorKind


Result = Union[Ok[T], Err]
