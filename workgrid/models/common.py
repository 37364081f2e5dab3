"""Shared types, enums, and base models used across WorkGrid domain models."""

from datetime import datetime, timezone
from enum import StrEnum
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field
from uuid_extensions import uuid7


def utc_now() -> datetime:
    """Return the current UTC timestamp (timezone-aware)."""
    return datetime.now(tz=timezone.utc)


def new_uuid7() -> UUID:
    """Generate a new time-sortable UUID v7."""
    return uuid7()


# --- Reusable annotated types ---

UUIDv7 = Annotated[UUID, Field(description="Time-sortable UUID v7.")]
UTCTimestamp = Annotated[
    datetime, Field(description="UTC timezone-aware timestamp.")
]

# Value held in a dynamic row cell. Dates are stored as ISO strings.
CellValue = str | int | float


# --- Shared enums ---


class SystemRole(StrEnum):
    """Coarse capability tier, orthogonal to the business group."""

    MEMBER = "MEMBER"
    LEADER = "LEADER"
    ADMIN = "ADMIN"


class RowStatus(StrEnum):
    """Row lifecycle states."""

    DRAFT = "Draft"
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class AccessLevel(StrEnum):
    """Per-cell access level."""

    NONE = "NONE"
    READ = "READ"
    WRITE = "WRITE"


class FieldType(StrEnum):
    """Column value types."""

    TEXT = "text"
    NUMBER = "number"
    SELECT = "select"
    DATE = "date"


# --- Reserved row fields (wire names) ---

STATUS_FIELD = "status"

# Visible on every row but never directly editable by regular users
META_FIELDS: frozenset[str] = frozenset({"id", "updatedAt", "ownerId", "version"})

RESERVED_FIELDS: frozenset[str] = META_FIELDS | {STATUS_FIELD}


# --- Base model ---


class WorkGridBase(BaseModel):
    """Base model with common configuration for all WorkGrid Pydantic models."""

    model_config = {
        "populate_by_name": True,
        "protected_namespaces": (),
    }
