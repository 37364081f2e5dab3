"""Spreadsheet export and import for workspace rows (xlsx via openpyxl).

Export writes one sheet named after the workspace with an ``ID`` and a
``Status`` column followed by one column per schema column label.

Import reads the first sheet, matches headers to columns by label first and
field name second, and parses every data row into a new DRAFT row owned by
the importer. Parsing is all or nothing: the first bad row aborts the whole
import with MalformedImportError and no row is returned.
"""

import io
import logging
import re
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any
from zipfile import BadZipFile

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from workgrid.engine.values import (
    InvalidCellValueError,
    coerce_cell_value,
    stringify_cell_value,
)
from workgrid.models.common import CellValue, FieldType, RowStatus, new_uuid7, utc_now
from workgrid.models.directory import User
from workgrid.models.row import TableRow
from workgrid.models.workspace import ColumnSpec, Workspace

logger = logging.getLogger(__name__)

ID_HEADER = "ID"
STATUS_HEADER = "Status"

_INVALID_SHEET_CHARS = re.compile(r"[\[\]:*?/\\]")
_MAX_SHEET_TITLE = 31


class MalformedImportError(ValueError):
    """Raised when an uploaded workbook cannot be imported as a whole."""


def _sheet_title(name: str) -> str:
    title = _INVALID_SHEET_CHARS.sub("_", name).strip()[:_MAX_SHEET_TITLE]
    return title or "Sheet1"


def export_filename(workspace: Workspace, on: datetime | None = None) -> str:
    """Download name, e.g. ``Expenses_Export_2024-03-15.xlsx``."""
    day = (on or utc_now()).date().isoformat()
    return f"{workspace.name}_Export_{day}.xlsx"


def export_rows(workspace: Workspace, rows: Iterable[TableRow]) -> bytes:
    """Generate workbook bytes for the given (already visibility-filtered) rows."""
    wb = Workbook()
    ws = wb.active
    ws.title = _sheet_title(workspace.name)

    headers = [ID_HEADER, STATUS_HEADER, *(c.label for c in workspace.columns)]
    ws.append(headers)

    for row in rows:
        values: list[Any] = [row.id, row.status.value]
        for column in workspace.columns:
            value = row.cells.get(column.field)
            values.append("" if value is None else value)
        ws.append(values)

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def _header_positions(
    header: tuple[Any, ...],
    columns: list[ColumnSpec],
) -> dict[str, int]:
    """Column field -> sheet column index, matching labels before field names."""
    names = [stringify_cell_value(h).strip() for h in header]
    positions: dict[str, int] = {}
    for column in columns:
        if column.label in names:
            positions[column.field] = names.index(column.label)
        elif column.field in names:
            positions[column.field] = names.index(column.field)
    return positions


def _missing_value(column: ColumnSpec) -> CellValue:
    return 0 if column.type == FieldType.NUMBER else ""


def _read_sheet(data: bytes) -> list[tuple[Any, ...]]:
    try:
        wb = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile, KeyError, OSError, ValueError) as exc:
        msg = f"Failed to parse workbook: {exc}"
        raise MalformedImportError(msg) from exc
    try:
        if not wb.worksheets:
            msg = "Workbook has no sheets."
            raise MalformedImportError(msg)
        return list(wb.worksheets[0].iter_rows(values_only=True))
    finally:
        wb.close()


def parse_import(
    data: bytes,
    workspace: Workspace,
    owner: User,
    *,
    max_rows: int = 10_000,
    clock: Callable[[], datetime] = utc_now,
) -> list[TableRow]:
    """Parse workbook bytes into new DRAFT rows for ``workspace``.

    Raises:
        MalformedImportError: If the workbook is unreadable, has no matching
            header, exceeds ``max_rows`` or any cell fails its column type.
    """
    sheet_rows = _read_sheet(data)
    if not sheet_rows:
        msg = "Workbook is empty."
        raise MalformedImportError(msg)

    positions = _header_positions(sheet_rows[0], workspace.columns)
    if workspace.columns and not positions:
        msg = f"No header matches a column of workspace {workspace.name}."
        raise MalformedImportError(msg)

    data_rows = [
        (line, values)
        for line, values in enumerate(sheet_rows[1:], start=2)
        if any(v is not None and str(v).strip() != "" for v in values)
    ]
    if len(data_rows) > max_rows:
        msg = f"Workbook has {len(data_rows)} rows; the limit is {max_rows}."
        raise MalformedImportError(msg)

    now = clock()
    parsed: list[TableRow] = []
    for line, values in data_rows:
        cells: dict[str, CellValue] = {}
        for column in workspace.columns:
            index = positions.get(column.field)
            raw = values[index] if index is not None and index < len(values) else None
            if raw is None:
                cells[column.field] = _missing_value(column)
                continue
            try:
                cells[column.field] = coerce_cell_value(column, raw)
            except InvalidCellValueError as exc:
                logger.warning("Import into %s rejected at row %d: %s", workspace.id, line, exc)
                msg = f"Row {line}: {exc}"
                raise MalformedImportError(msg) from exc

        parsed.append(TableRow(
            id=f"R-IMP-{new_uuid7()}",
            workspace_id=workspace.id,
            status=RowStatus.DRAFT,
            owner_id=owner.id,
            version=1,
            updated_at=now,
            cells=cells,
        ))
    return parsed
