"""
Database schema for the engagement bounded context.

Declares the tables behind the engagement ports and creates them at
startup. Works on SQLite (development, tests) and PostgreSQL.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
)
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

metadata = MetaData()

message_metrics = Table(
    "message_metrics",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("conversation_id", String(128), nullable=False, index=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("word_count", Integer, nullable=False),
    Column("character_count", Integer, nullable=False),
    Column("has_question", Boolean, nullable=False),
    Column("question_depth", String(16), nullable=False),
    Column("technical_term_count", Integer, nullable=False),
    Column("urgency_signals", String(255), nullable=False, default=""),
    Column("response_time_seconds", Integer, nullable=True),
    Column("social_signal_count", Integer, nullable=False, default=0),
)

conversation_scores = Table(
    "conversation_scores",
    metadata,
    Column("conversation_id", String(128), primary_key=True),
    Column("hurried_score", Float, nullable=False),
    Column("analytical_score", Float, nullable=False),
    Column("conversational_score", Float, nullable=False),
    Column("message_count", Integer, nullable=False),
    Column("last_message_at", DateTime(timezone=True), nullable=True),
    Column("last_recommended_mode", String(16), nullable=True),
    Column("last_suggestion_at", DateTime(timezone=True), nullable=True),
    Column("suggestion_message_count", Integer, nullable=True),
    Column("pending_mode", String(16), nullable=True),
    Column("pending_reason", Text, nullable=True),
    Column("version", Integer, nullable=False),
)

suggestion_dismissals = Table(
    "suggestion_dismissals",
    metadata,
    Column("conversation_id", String(128), primary_key=True),
    Column("dismissed_modes", String(64), nullable=False, default=""),
    Column("dismissed_at", DateTime(timezone=True), nullable=True),
)


def build_engine(database_url: str) -> Engine:
    """Build a SQLAlchemy engine for the configured database URL.

    In-memory SQLite shares one connection so every session sees the
    same tables.
    """
    if database_url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    return create_engine(database_url, pool_pre_ping=True)


def create_schema(engine: Engine) -> None:
    """Create the engagement tables if they do not exist."""
    metadata.create_all(engine)
    logger.info("Engagement tables created / verified.")


def to_storage_time(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a timestamp to UTC before writing it."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def from_storage_time(value: Optional[datetime]) -> Optional[datetime]:
    """Re-attach UTC to timestamps read back from SQLite, which drops offsets."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
