"""Workspace model — a business process with its own schema and permission matrix."""

from pydantic import Field, model_validator

from workgrid.models.common import (
    RESERVED_FIELDS,
    AccessLevel,
    FieldType,
    WorkGridBase,
)


class ColumnSpec(WorkGridBase):
    """A typed column and its per-group permission table."""

    field: str = Field(..., min_length=1, max_length=100)
    label: str = Field(..., min_length=1, max_length=255)
    type: FieldType = FieldType.TEXT
    options: list[str] = Field(default_factory=list)
    is_sensitive: bool = False
    group_permissions: dict[str, AccessLevel] = Field(
        default_factory=dict,
        description="Group id -> configured access level. Unset groups get NONE.",
    )

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _field_not_reserved(self) -> "ColumnSpec":
        if self.field in RESERVED_FIELDS:
            msg = f"Column field '{self.field}' collides with a reserved row field."
            raise ValueError(msg)
        return self

    def permission_for(self, group_id: str) -> AccessLevel:
        """Configured permission for a group, NONE when unset."""
        return self.group_permissions.get(group_id, AccessLevel.NONE)


class Workspace(WorkGridBase):
    """Workspace definition.

    An empty ``active_group_ids`` makes the workspace visible to every user;
    otherwise only members of the listed groups see it. ``admin_ids`` grants
    admin rights scoped to this workspace only.
    """

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=255)
    icon: str = Field(default="Layers")
    columns: list[ColumnSpec] = Field(default_factory=list)
    active_group_ids: frozenset[str] = Field(default_factory=frozenset)
    admin_ids: frozenset[str] = Field(default_factory=frozenset)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _unique_fields(self) -> "Workspace":
        seen: set[str] = set()
        for column in self.columns:
            if column.field in seen:
                msg = f"Duplicate column field '{column.field}' in workspace {self.id}."
                raise ValueError(msg)
            seen.add(column.field)
        return self

    def get_column(self, field: str) -> ColumnSpec | None:
        """Column spec for a field, or None when the schema has no such column."""
        for column in self.columns:
            if column.field == field:
                return column
        return None

    @property
    def fields(self) -> list[str]:
        """Schema field names in column order."""
        return [c.field for c in self.columns]
