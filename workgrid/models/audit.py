"""Audit log entry — append-only record of an accepted cell change."""

from pydantic import Field

from workgrid.models.common import UTCTimestamp, UUIDv7, WorkGridBase, new_uuid7, utc_now


class AuditLogEntry(WorkGridBase):
    """One accepted field change. Old and new values are stored stringified."""

    id: UUIDv7 = Field(default_factory=new_uuid7)
    row_id: str
    workspace_id: str
    operator_id: str
    operator_name: str
    field: str
    old_value: str
    new_value: str
    timestamp: UTCTimestamp = Field(default_factory=utc_now)

    model_config = {"frozen": True}

    def describe(self) -> str:
        """Human-readable line for an audit history view."""
        return (
            f"{self.operator_name} changed {self.field} "
            f'from "{self.old_value}" to "{self.new_value}"'
        )
