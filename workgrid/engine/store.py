"""In-memory row store and append-only audit log.

Only the batch mutation engine writes here; everyone else reads.
"""

from collections.abc import Iterable

from workgrid.models.audit import AuditLogEntry
from workgrid.models.row import TableRow


class AuditLog:
    """Append-only audit trail. Entries are never changed or removed."""

    def __init__(self) -> None:
        self._entries: list[AuditLogEntry] = []

    def append(self, entries: Iterable[AuditLogEntry]) -> None:
        self._entries.extend(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def list_all(self) -> list[AuditLogEntry]:
        """All entries in the order they were recorded."""
        return list(self._entries)

    def for_row(self, row_id: str) -> list[AuditLogEntry]:
        """History of one row, newest first."""
        entries = [e for e in self._entries if e.row_id == row_id]
        return sorted(entries, key=lambda e: e.timestamp, reverse=True)

    def for_workspace(self, workspace_id: str) -> list[AuditLogEntry]:
        return [e for e in self._entries if e.workspace_id == workspace_id]


class RowStore:
    """Rows keyed by id; newest inserts come first, as the grid lists them."""

    def __init__(self, rows: Iterable[TableRow] = ()) -> None:
        self._rows: dict[str, TableRow] = {}
        self.audit_log = AuditLog()
        self.insert(list(rows))

    def __contains__(self, row_id: object) -> bool:
        return row_id in self._rows

    def __len__(self) -> int:
        return len(self._rows)

    def get(self, row_id: str) -> TableRow:
        """Get a row by ID. Raises KeyError if not found."""
        try:
            return self._rows[row_id]
        except KeyError:
            msg = f"Row {row_id} not found."
            raise KeyError(msg) from None

    def find(self, row_id: str) -> TableRow | None:
        return self._rows.get(row_id)

    def list_all(self) -> list[TableRow]:
        return list(self._rows.values())

    def list_by_workspace(self, workspace_id: str) -> list[TableRow]:
        return [r for r in self._rows.values() if r.workspace_id == workspace_id]

    def insert(self, rows: list[TableRow]) -> None:
        """Insert new rows ahead of existing ones, all or nothing.

        Raises:
            ValueError: If any id is already stored or repeated in ``rows``.
        """
        ids = [r.id for r in rows]
        duplicates = {i for i in ids if i in self._rows or ids.count(i) > 1}
        if duplicates:
            msg = f"Row id(s) already present: {', '.join(sorted(duplicates))}."
            raise ValueError(msg)
        merged = {r.id: r for r in rows}
        merged.update(self._rows)
        self._rows = merged

    def replace(self, rows: Iterable[TableRow]) -> None:
        """Swap in new revisions of existing rows, keeping their position."""
        for row in rows:
            if row.id not in self._rows:
                msg = f"Row {row.id} not found."
                raise KeyError(msg)
            self._rows[row.id] = row
