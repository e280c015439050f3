"""Base models and mixins for all database models."""

import uuid
from datetime import datetime

import pytz
from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(pytz.UTC)


def create_id(prefix: str) -> str:
    """Prefixed text primary key, e.g. ``pm_3f2a...``."""
    return f"{prefix}_{uuid.uuid4().hex}"


class TimestampMixin(SQLModel):
    """Mixin that adds created_at and updated_at timestamps."""

    created_at: datetime = Field(
        default_factory=utc_now,
        nullable=False,
        sa_type=DateTime(timezone=True),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        nullable=False,
        sa_column_kwargs={"onupdate": utc_now},
        sa_type=DateTime(timezone=True),
    )
