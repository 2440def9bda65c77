"""
Integration: immutable description of one OAuth provider.

An integration carries everything the service needs to validate a
configuration and to refresh a token, and nothing per-user.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class AuthType(str, Enum):
    OAUTH1 = "OAUTH1"
    OAUTH2 = "OAUTH2"


class RefreshStrategy(str, Enum):
    """How the provider expects a refresh-token grant to be sent."""

    REFRESH_TOKEN = "refresh_token"              # client credentials in the body
    REFRESH_TOKEN_BASIC = "refresh_token_basic"  # client credentials as HTTP Basic auth
    NONE = "none"                                # tokens never expire


class BodyFormat(str, Enum):
    FORM = "form"
    JSON = "json"


class CredentialField(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: str = "string"


OAUTH2_CREDENTIALS: Tuple[CredentialField, ...] = (
    CredentialField(name="clientId"),
    CredentialField(name="clientSecret"),
)

OAUTH1_CREDENTIALS: Tuple[CredentialField, ...] = (
    CredentialField(name="consumerKey"),
    CredentialField(name="consumerSecret"),
)


class Integration(BaseModel):
    """A provider definition from the static catalog. Never mutated."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    auth_type: AuthType = AuthType.OAUTH2
    authorization_url: str
    token_url: str
    refresh_strategy: RefreshStrategy = RefreshStrategy.REFRESH_TOKEN
    body_format: BodyFormat = BodyFormat.FORM
    credential_fields: Tuple[CredentialField, ...] = OAUTH2_CREDENTIALS
    token_params: Dict[str, str] = Field(default_factory=dict)
    docs_url: Optional[str] = None

    @property
    def credential_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.credential_fields)

    @property
    def client_id_field(self) -> str:
        return self.credential_fields[0].name

    @property
    def client_secret_field(self) -> str:
        return self.credential_fields[1].name

    def to_dict(self) -> Dict[str, Any]:
        """Public JSON representation, tagged with ``object: "integration"``."""
        return {
            "object": "integration",
            "id": self.id,
            "name": self.name,
            "auth_type": self.auth_type.value,
            "authorization_url": self.authorization_url,
            "token_url": self.token_url,
            "refresh_strategy": self.refresh_strategy.value,
            "credential_fields": [f.name for f in self.credential_fields],
            "docs_url": self.docs_url,
        }
