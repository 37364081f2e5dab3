"""TableRow model — one record flowing through the approval lifecycle."""

from pydantic import Field

from workgrid.models.common import (
    STATUS_FIELD,
    CellValue,
    RowStatus,
    UTCTimestamp,
    WorkGridBase,
    utc_now,
)


class TableRow(WorkGridBase):
    """A row of a workspace.

    Schema-defined values live in ``cells`` keyed by column field. Meta
    fields are addressed by their wire names through :meth:`get`.
    """

    id: str = Field(..., min_length=1)
    workspace_id: str
    status: RowStatus = RowStatus.DRAFT
    owner_id: str
    version: int = Field(default=1, ge=1)
    updated_at: UTCTimestamp = Field(default_factory=utc_now)
    cells: dict[str, CellValue] = Field(default_factory=dict)

    model_config = {"frozen": True}

    def get(self, field: str) -> CellValue | None:
        """Read a meta or cell value by wire name; None when absent."""
        if field == "id":
            return self.id
        if field == STATUS_FIELD:
            return self.status.value
        if field == "ownerId":
            return self.owner_id
        if field == "version":
            return self.version
        if field == "updatedAt":
            return self.updated_at.isoformat()
        return self.cells.get(field)

    def is_owned_by(self, user_id: str) -> bool:
        return self.owner_id == user_id
