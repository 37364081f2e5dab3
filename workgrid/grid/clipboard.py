"""Normalise grid selections and clipboard text into cell updates.

The grid addresses cells by (row index, column index) into the rows and
columns currently displayed. Column 0 is the status column.
"""

import re
from dataclasses import dataclass

from workgrid.engine.values import stringify_cell_value
from workgrid.models.mutation import CellUpdate
from workgrid.models.row import TableRow

_LINE_BREAK = re.compile(r"\r?\n")


@dataclass(frozen=True)
class GridSelection:
    """A rectangular selection between two corner cells (inclusive)."""

    start_row: int
    start_col: int
    end_row: int
    end_col: int

    @property
    def min_row(self) -> int:
        return min(self.start_row, self.end_row)

    @property
    def max_row(self) -> int:
        return max(self.start_row, self.end_row)

    @property
    def min_col(self) -> int:
        return min(self.start_col, self.end_col)

    @property
    def max_col(self) -> int:
        return max(self.start_col, self.end_col)

    @property
    def is_multi_cell(self) -> bool:
        return self.max_row > self.min_row or self.max_col > self.min_col

    def cells(self, n_rows: int, n_cols: int) -> list[tuple[int, int]]:
        """Selected (row, col) pairs clipped to the grid, row-major."""
        return [
            (r, c)
            for r in range(max(self.min_row, 0), min(self.max_row, n_rows - 1) + 1)
            for c in range(max(self.min_col, 0), min(self.max_col, n_cols - 1) + 1)
        ]


def parse_clipboard_text(text: str) -> list[list[str]]:
    """Split tab-separated clipboard text into a matrix.

    A single trailing line break (as spreadsheets append) is dropped.
    """
    if not text:
        return []
    lines = _LINE_BREAK.split(text)
    if lines and lines[-1] == "":
        lines.pop()
    return [line.split("\t") for line in lines]


def expand_paste(
    matrix: list[list[str]],
    selection: GridSelection,
    row_ids: list[str],
    fields: list[str],
) -> list[CellUpdate]:
    """Turn a pasted matrix into updates.

    A single copied value fills every cell of a multi-cell selection.
    Otherwise the matrix is anchored at the selection's top-left corner and
    anything falling outside the grid, negative indexes included, is
    dropped. Values are trimmed.
    """
    if not matrix:
        return []

    if len(matrix) == 1 and len(matrix[0]) == 1 and selection.is_multi_cell:
        value = matrix[0][0].strip()
        return [
            CellUpdate(row_id=row_ids[r], field=fields[c], value=value)
            for r, c in selection.cells(len(row_ids), len(fields))
        ]

    updates: list[CellUpdate] = []
    for r_offset, values in enumerate(matrix):
        target_row = selection.min_row + r_offset
        if target_row >= len(row_ids):
            break
        if target_row < 0:
            continue
        for c_offset, value in enumerate(values):
            target_col = selection.min_col + c_offset
            if target_col >= len(fields):
                break
            if target_col < 0:
                continue
            updates.append(CellUpdate(
                row_id=row_ids[target_row],
                field=fields[target_col],
                value=value.strip(),
            ))
    return updates


def clear_selection(
    selection: GridSelection,
    row_ids: list[str],
    fields: list[str],
) -> list[CellUpdate]:
    """Updates blanking every selected cell except the status column."""
    return [
        CellUpdate(row_id=row_ids[r], field=fields[c], value="")
        for r, c in selection.cells(len(row_ids), len(fields))
        if c != 0
    ]


def copy_selection(
    selection: GridSelection,
    rows: list[TableRow],
    fields: list[str],
) -> str:
    """Render the selected cells as tab-separated text."""
    lines: list[str] = []
    for r in range(max(selection.min_row, 0), min(selection.max_row, len(rows) - 1) + 1):
        values = [
            stringify_cell_value(rows[r].get(fields[c]))
            for c in range(max(selection.min_col, 0), min(selection.max_col, len(fields) - 1) + 1)
        ]
        lines.append("\t".join(values))
    return "\n".join(lines)
