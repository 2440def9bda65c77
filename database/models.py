"""
SQLAlchemy ORM models for configurations and authentications.

Secrets (``credentials``, ``payload``) are stored as text so the table
store can encrypt them; see ``database.encryption``.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Index, String, Text
from sqlalchemy.orm import DeclarativeBase


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


class Base(DeclarativeBase):
    pass


class ConfigurationRecord(Base):
    __tablename__ = "configurations"

    integration_id = Column(String(64), primary_key=True)
    setup_id = Column(String(64), primary_key=True)
    scopes = Column(JSON, nullable=False, default=list)
    credentials = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class AuthenticationRecord(Base):
    __tablename__ = "authentications"

    integration_id = Column(String(64), primary_key=True)
    auth_id = Column(String(128), primary_key=True)
    setup_id = Column(String(64), nullable=False)
    payload = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        Index("ix_authentications_setup", "integration_id", "setup_id"),
    )
