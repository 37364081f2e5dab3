"""Typed cell values — coercion of raw input against a column's type.

Raw values arrive from direct edits, clipboard text and spreadsheet cells,
so strings are the common case. Empty input clears a cell of any type.
"""

from datetime import date, datetime
from typing import Any

from workgrid.models.common import CellValue, FieldType, RowStatus
from workgrid.models.workspace import ColumnSpec


class InvalidCellValueError(ValueError):
    """Raised when a raw value cannot be stored in a column."""


def stringify_cell_value(value: Any) -> str:
    """Render a value the way comparisons and the audit log see it."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _coerce_number(column: ColumnSpec, raw: Any) -> CellValue:
    if isinstance(raw, bool):
        msg = f"Column '{column.field}' expects a number, got a boolean."
        raise InvalidCellValueError(msg)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        number = raw
    else:
        text = str(raw).strip().replace(",", "")
        # int() first: exact beyond 2**53
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            msg = f"Column '{column.field}' expects a number, got '{raw}'."
            raise InvalidCellValueError(msg) from None
    if number != number or number in (float("inf"), float("-inf")):
        msg = f"Column '{column.field}' expects a finite number, got '{raw}'."
        raise InvalidCellValueError(msg)
    return int(number) if number.is_integer() else number


def _coerce_date(column: ColumnSpec, raw: Any) -> CellValue:
    if isinstance(raw, datetime):
        return raw.date().isoformat()
    if isinstance(raw, date):
        return raw.isoformat()
    text = str(raw).strip()
    try:
        if len(text) == 10:
            return date.fromisoformat(text).isoformat()
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        msg = f"Column '{column.field}' expects an ISO date (YYYY-MM-DD), got '{raw}'."
        raise InvalidCellValueError(msg) from None


def _coerce_select(column: ColumnSpec, raw: Any) -> CellValue:
    text = stringify_cell_value(raw).strip()
    if column.options and text not in column.options:
        msg = f"'{text}' is not an option of column '{column.field}'."
        raise InvalidCellValueError(msg)
    return text


def coerce_cell_value(column: ColumnSpec, raw: Any) -> CellValue:
    """Convert ``raw`` to the stored representation for ``column``.

    Raises:
        InvalidCellValueError: If the value does not fit the column type.
    """
    if raw is None or (isinstance(raw, str) and raw.strip() == ""):
        return ""

    if column.type == FieldType.NUMBER:
        return _coerce_number(column, raw)
    if column.type == FieldType.DATE:
        return _coerce_date(column, raw)
    if column.type == FieldType.SELECT:
        return _coerce_select(column, raw)
    return stringify_cell_value(raw)


def coerce_status(raw: Any) -> RowStatus:
    """Parse a status value by value ("Pending") or by name ("PENDING").

    Raises:
        InvalidCellValueError: If the value names no known status.
    """
    if isinstance(raw, RowStatus):
        return raw
    text = stringify_cell_value(raw).strip()
    for status in RowStatus:
        if text == status.value or text.upper() == status.name:
            return status
    msg = f"'{text}' is not a valid row status."
    raise InvalidCellValueError(msg)


def default_cell_value(column: ColumnSpec, today: date) -> CellValue:
    """Initial value of a column in a freshly created row."""
    if column.type == FieldType.NUMBER:
        return 0
    if column.type == FieldType.DATE:
        return today.isoformat()
    return ""
