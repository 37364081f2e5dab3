"""Workspace registry — schema definitions and their permission matrices.

Workspaces are immutable; updates validate a new copy and swap it in.
"""

from collections.abc import Iterable
from typing import Any

from workgrid.access.control import visible_workspaces
from workgrid.models.common import AccessLevel
from workgrid.models.directory import User
from workgrid.models.workspace import Workspace


class WorkspaceRegistry:
    """In-memory workspace register."""

    def __init__(self, workspaces: Iterable[Workspace] = ()) -> None:
        self._store: dict[str, Workspace] = {}
        for workspace in workspaces:
            self.register(workspace)

    def register(self, workspace: Workspace) -> None:
        """Register a new workspace (must be unique)."""
        if workspace.id in self._store:
            msg = f"Workspace {workspace.id} already registered."
            raise ValueError(msg)
        self._store[workspace.id] = workspace

    def get(self, workspace_id: str) -> Workspace:
        """Get a workspace by ID. Raises KeyError if not found."""
        try:
            return self._store[workspace_id]
        except KeyError:
            msg = f"Workspace {workspace_id} not found."
            raise KeyError(msg) from None

    def list_all(self) -> list[Workspace]:
        return list(self._store.values())

    def visible_for(self, user: User) -> list[Workspace]:
        """Workspaces shown to ``user`` after the active-group filter."""
        return visible_workspaces(user, self._store.values())

    def update_workspace(self, workspace_id: str, **changes: Any) -> Workspace:
        """Replace selected attributes (name, columns, admin_ids, ...).

        The result is re-validated, so duplicate or reserved column fields
        are rejected.
        """
        current = self.get(workspace_id)
        if "id" in changes and changes["id"] != workspace_id:
            msg = "Workspace id cannot be changed."
            raise ValueError(msg)
        data = current.model_dump()
        data.update(changes)
        updated = Workspace.model_validate(data)
        self._store[workspace_id] = updated
        return updated

    def set_column_permission(
        self,
        workspace_id: str,
        field: str,
        group_id: str,
        level: AccessLevel,
    ) -> Workspace:
        """Set one cell of the permission matrix."""
        workspace = self.get(workspace_id)
        column = workspace.get_column(field)
        if column is None:
            msg = f"Workspace {workspace_id} has no column '{field}'."
            raise KeyError(msg)

        updated_column = column.model_copy(update={
            "group_permissions": {**column.group_permissions, group_id: level},
        })
        columns = [updated_column if c.field == field else c for c in workspace.columns]
        updated = workspace.model_copy(update={"columns": columns})
        self._store[workspace_id] = updated
        return updated
