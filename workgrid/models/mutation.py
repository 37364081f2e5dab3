"""Cell mutation request and result types for the batch mutation engine."""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from workgrid.models.audit import AuditLogEntry


class SkipReason(StrEnum):
    """Why a proposed cell write was dropped."""

    NO_WRITE_ACCESS = "NO_WRITE_ACCESS"
    UNKNOWN_ROW = "UNKNOWN_ROW"
    UNKNOWN_FIELD = "UNKNOWN_FIELD"
    ROW_NOT_VISIBLE = "ROW_NOT_VISIBLE"
    INVALID_VALUE = "INVALID_VALUE"
    ILLEGAL_TRANSITION = "ILLEGAL_TRANSITION"


@dataclass(frozen=True)
class CellUpdate:
    """A proposed write of ``value`` into ``field`` of row ``row_id``."""

    row_id: str
    field: str
    value: Any


@dataclass(frozen=True)
class SkippedUpdate:
    """A dropped write and the reason it was dropped."""

    update: CellUpdate
    reason: SkipReason
    detail: str = ""


@dataclass
class BatchUpdateResult:
    """Outcome of one batch: counts, emitted audit entries, dropped writes."""

    applied_count: int = 0
    skipped_count: int = 0
    audit_entries: list[AuditLogEntry] = field(default_factory=list)
    skipped: list[SkippedUpdate] = field(default_factory=list)
    changed_row_ids: list[str] = field(default_factory=list)

    def summary(self) -> str:
        """User feedback line for the batch."""
        if self.skipped_count > 0:
            return (
                f"{self.applied_count} updated, {self.skipped_count} skipped "
                "(insufficient permission)."
            )
        if self.applied_count > 0:
            return f"{self.applied_count} cell(s) updated."
        return "No changes."
