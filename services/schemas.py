"""
Pydantic schemas for configurations and authentications.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    """Current UTC time truncated to whole seconds."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    """ISO-8601 with second precision; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).replace(microsecond=0).isoformat()


# ═══════════════════════════════════════════════════════════════════════════════
# Records
# ═══════════════════════════════════════════════════════════════════════════════


class Configuration(BaseModel):
    setup_id: str
    integration_id: str
    scopes: List[str] = Field(default_factory=list)
    credentials: Dict[str, str] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Configuration":
        return cls(
            setup_id=row["setup_id"],
            integration_id=row["integration_id"],
            scopes=row.get("scopes") or [],
            credentials=row.get("credentials") or {},
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "object": "configuration",
            "id": self.setup_id,
            "setup_id": self.setup_id,
            "integration_id": self.integration_id,
            "scopes": list(self.scopes),
            "credentials": dict(self.credentials),
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }


class Authentication(BaseModel):
    auth_id: str
    integration_id: str
    setup_id: str
    payload: Dict[str, Any]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Authentication":
        return cls(
            auth_id=row["auth_id"],
            integration_id=row["integration_id"],
            setup_id=row["setup_id"],
            payload=row["payload"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @property
    def refresh_token(self) -> Optional[str]:
        token = self.payload.get("refreshToken")
        return token if isinstance(token, str) and token else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "object": "authentication",
            "id": self.auth_id,
            "auth_id": self.auth_id,
            "integration_id": self.integration_id,
            "setup_id": self.setup_id,
            "payload": self.payload,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }


# ═══════════════════════════════════════════════════════════════════════════════
# Request bodies
# ═══════════════════════════════════════════════════════════════════════════════


class AuthenticationBody(BaseModel):
    """Field shapes are checked by the authentication store, not here."""

    setup_id: Any = None
    payload: Any = None


class ConfigurationBody(BaseModel):
    scopes: Any = None
    credentials: Any = None
