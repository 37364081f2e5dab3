"""Grid service — the operations a grid front end calls, with an explicit actor.

There is no ambient "current user": every method takes the acting user's
id, resolved against the directory on each call so role or group changes
take effect immediately.
"""

import logging

from workgrid.access.control import column_access_map, filter_visible_rows
from workgrid.config.settings import Settings, get_settings
from workgrid.directory.registry import Directory
from workgrid.engine.mutation import BatchMutationEngine
from workgrid.engine.store import RowStore
from workgrid.engine.values import stringify_cell_value
from workgrid.export.spreadsheet import export_rows, parse_import
from workgrid.grid.clipboard import (
    GridSelection,
    clear_selection,
    copy_selection,
    expand_paste,
    parse_clipboard_text,
)
from workgrid.models.audit import AuditLogEntry
from workgrid.models.common import STATUS_FIELD, AccessLevel
from workgrid.models.mutation import BatchUpdateResult, CellUpdate
from workgrid.models.row import TableRow
from workgrid.models.workspace import Workspace
from workgrid.schema.registry import WorkspaceRegistry

logger = logging.getLogger(__name__)


class GridService:
    """Wire directory, workspaces, row store and mutation engine together."""

    def __init__(
        self,
        directory: Directory,
        workspaces: WorkspaceRegistry,
        store: RowStore | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.directory = directory
        self.workspaces = workspaces
        self.store = store or RowStore()
        self.engine = BatchMutationEngine.from_settings(
            self.store, self.directory, self.settings,
        )

    # ----- Reads -----

    def visible_workspaces(self, actor_id: str) -> list[Workspace]:
        return self.workspaces.visible_for(self.directory.get_user(actor_id))

    def visible_rows(
        self,
        actor_id: str,
        workspace_id: str,
        search: str = "",
    ) -> list[TableRow]:
        """Rows of a workspace the actor may see, optionally text-filtered."""
        user = self.directory.get_user(actor_id)
        workspace = self.workspaces.get(workspace_id)
        rows = filter_visible_rows(
            user,
            self.store.list_by_workspace(workspace.id),
            self.directory.list_users(),
            workspace,
        )
        needle = search.strip().lower()
        if not needle:
            return rows
        return [r for r in rows if needle in self._searchable_text(r)]

    @staticmethod
    def _searchable_text(row: TableRow) -> str:
        values = [row.id, row.workspace_id, row.status.value, row.owner_id, str(row.version)]
        values.extend(stringify_cell_value(v) for v in row.cells.values())
        return " ".join(values).lower()

    def grid_fields(self, workspace_id: str) -> list[str]:
        """Displayed column order: status first, then the schema columns."""
        return [STATUS_FIELD, *self.workspaces.get(workspace_id).fields]

    def cell_access(self, actor_id: str, row_id: str) -> dict[str, AccessLevel]:
        row = self.store.get(row_id)
        return column_access_map(
            self.directory.get_user(actor_id),
            row,
            self.workspaces.get(row.workspace_id),
        )

    def row_history(self, row_id: str) -> list[AuditLogEntry]:
        """Audit entries of a row, newest first."""
        return self.store.audit_log.for_row(row_id)

    # ----- Writes -----

    def update_cells(
        self,
        actor_id: str,
        workspace_id: str,
        updates: list[CellUpdate],
    ) -> BatchUpdateResult:
        return self.engine.perform_batch_update(
            updates,
            self.directory.get_user(actor_id),
            self.workspaces.get(workspace_id),
        )

    def create_row(self, actor_id: str, workspace_id: str) -> TableRow:
        return self.engine.create_row(
            self.directory.get_user(actor_id),
            self.workspaces.get(workspace_id),
        )

    def submit_drafts(self, actor_id: str, workspace_id: str) -> BatchUpdateResult:
        return self.engine.submit_drafts(
            self.directory.get_user(actor_id),
            self.workspaces.get(workspace_id),
        )

    # ----- Clipboard -----

    def paste(
        self,
        actor_id: str,
        workspace_id: str,
        selection: GridSelection,
        text: str,
        search: str = "",
    ) -> BatchUpdateResult:
        """Paste clipboard text onto the actor's current grid view."""
        rows = self.visible_rows(actor_id, workspace_id, search)
        updates = expand_paste(
            parse_clipboard_text(text),
            selection,
            [r.id for r in rows],
            self.grid_fields(workspace_id),
        )
        return self.update_cells(actor_id, workspace_id, updates)

    def clear(
        self,
        actor_id: str,
        workspace_id: str,
        selection: GridSelection,
        search: str = "",
    ) -> BatchUpdateResult:
        rows = self.visible_rows(actor_id, workspace_id, search)
        updates = clear_selection(
            selection,
            [r.id for r in rows],
            self.grid_fields(workspace_id),
        )
        return self.update_cells(actor_id, workspace_id, updates)

    def copy(
        self,
        actor_id: str,
        workspace_id: str,
        selection: GridSelection,
        search: str = "",
    ) -> str:
        rows = self.visible_rows(actor_id, workspace_id, search)
        return copy_selection(selection, rows, self.grid_fields(workspace_id))

    # ----- Spreadsheets -----

    def export_workbook(self, actor_id: str, workspace_id: str) -> bytes:
        """Workbook of the rows the actor can currently see."""
        return export_rows(
            self.workspaces.get(workspace_id),
            self.visible_rows(actor_id, workspace_id),
        )

    def import_workbook(self, actor_id: str, workspace_id: str, data: bytes) -> list[TableRow]:
        """Import every row of a workbook as the actor's drafts, or none of them."""
        user = self.directory.get_user(actor_id)
        workspace = self.workspaces.get(workspace_id)
        rows = parse_import(
            data,
            workspace,
            user,
            max_rows=self.settings.IMPORT_MAX_ROWS,
        )
        self.engine.import_rows(rows)
        logger.info("Workbook imported into %s by %s: %d row(s)", workspace.id, user.id, len(rows))
        return rows
