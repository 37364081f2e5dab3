"""Batch cell-mutation engine.

Applies proposed cell writes one logical revision per row:

- every write is re-checked against the access engine at apply time, using
  the row as it stood when the batch started;
- values are coerced to the column type and compared stringified, so a
  write of the current value is a no-op (no version bump, no audit entry);
- a row with at least one accepted change gets exactly one version bump and
  one timestamp, however many of its fields changed;
- denied writes are counted and reported, never raised.

This engine is the only writer of rows, versions, timestamps and audit
entries. A re-entrant lock serialises batches for threaded hosts.
"""

import logging
import threading
from collections.abc import Callable, Iterable
from datetime import datetime

from workgrid.access.control import can_view_row_within_workspace, get_column_access
from workgrid.access.transitions import StatusTransitionPolicy
from workgrid.config.settings import Settings
from workgrid.directory.registry import Directory
from workgrid.engine.store import RowStore
from workgrid.engine.values import (
    InvalidCellValueError,
    coerce_cell_value,
    coerce_status,
    default_cell_value,
    stringify_cell_value,
)
from workgrid.models.audit import AuditLogEntry
from workgrid.models.common import (
    STATUS_FIELD,
    AccessLevel,
    RowStatus,
    new_uuid7,
    utc_now,
)
from workgrid.models.directory import User
from workgrid.models.mutation import (
    BatchUpdateResult,
    CellUpdate,
    SkippedUpdate,
    SkipReason,
)
from workgrid.models.row import TableRow
from workgrid.models.workspace import Workspace

logger = logging.getLogger(__name__)


def _group_by_row(updates: Iterable[CellUpdate]) -> dict[str, list[CellUpdate]]:
    """Group updates per row, rows in first-reference order."""
    grouped: dict[str, list[CellUpdate]] = {}
    for update in updates:
        grouped.setdefault(update.row_id, []).append(update)
    return grouped


class BatchMutationEngine:
    """Apply batches of cell writes to the row store."""

    def __init__(
        self,
        store: RowStore,
        directory: Directory,
        *,
        policy: StatusTransitionPolicy | None = None,
        enforce_row_visibility: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._directory = directory
        self._policy = policy or StatusTransitionPolicy()
        self._enforce_row_visibility = enforce_row_visibility
        self._clock = clock
        self._lock = threading.RLock()

    @classmethod
    def from_settings(
        cls,
        store: RowStore,
        directory: Directory,
        settings: Settings,
    ) -> "BatchMutationEngine":
        return cls(
            store,
            directory,
            policy=StatusTransitionPolicy(settings.STATUS_TRANSITION_MODE),
            enforce_row_visibility=settings.ENFORCE_ROW_VISIBILITY_ON_WRITE,
        )

    # ----- Batch writes -----

    def perform_batch_update(
        self,
        updates: Iterable[CellUpdate],
        user: User,
        workspace: Workspace,
    ) -> BatchUpdateResult:
        """Apply every permitted write in ``updates`` as one revision per row.

        Column access alone does not admit a write while row visibility is
        enforced (``ENFORCE_ROW_VISIBILITY_ON_WRITE``, on by default): rows
        the user cannot see are skipped as ROW_NOT_VISIBLE even where the
        permission matrix grants WRITE. Turn enforcement off to gate writes
        on column access only.

        Returns:
            BatchUpdateResult with applied/skipped counts, the audit entries
            emitted and the ids of rows that changed.
        """
        result = BatchUpdateResult()

        with self._lock:
            all_users = self._directory.list_users()
            now = self._clock()
            revisions: list[TableRow] = []

            for row_id, row_updates in _group_by_row(updates).items():
                row = self._store.find(row_id)
                if row is None or row.workspace_id != workspace.id:
                    self._skip_all(result, row_updates, SkipReason.UNKNOWN_ROW)
                    continue
                if self._enforce_row_visibility and not can_view_row_within_workspace(
                    user, row, all_users, workspace,
                ):
                    self._skip_all(result, row_updates, SkipReason.ROW_NOT_VISIBLE)
                    continue

                revision = self._apply_row(
                    row, row_updates, user, workspace, all_users, now, result,
                )
                if revision is not None:
                    revisions.append(revision)

            self._store.replace(revisions)
            self._store.audit_log.append(result.audit_entries)

        logger.info(
            "Batch update on %s by %s: %d applied, %d skipped, %d row(s) changed",
            workspace.id,
            user.id,
            result.applied_count,
            result.skipped_count,
            len(result.changed_row_ids),
        )
        return result

    def _apply_row(
        self,
        row: TableRow,
        updates: list[CellUpdate],
        user: User,
        workspace: Workspace,
        all_users: list[User],
        now: datetime,
        result: BatchUpdateResult,
    ) -> TableRow | None:
        """Fold one row's updates into a single new revision, or None if unchanged."""
        status = row.status
        cells = dict(row.cells)
        entries: list[AuditLogEntry] = []

        for update in updates:
            access = get_column_access(user, row, update.field, workspace)
            if access != AccessLevel.WRITE:
                self._skip(result, update, SkipReason.NO_WRITE_ACCESS, f"access is {access}")
                continue

            raw = "" if update.value is None else update.value

            if update.field == STATUS_FIELD:
                try:
                    target = coerce_status(raw)
                except InvalidCellValueError as exc:
                    self._skip(result, update, SkipReason.INVALID_VALUE, str(exc))
                    continue
                if target == status:
                    continue
                if not self._policy.is_allowed(
                    user=user,
                    owner_id=row.owner_id,
                    current=status,
                    target=target,
                    workspace=workspace,
                    all_users=all_users,
                ):
                    self._skip(
                        result, update, SkipReason.ILLEGAL_TRANSITION,
                        f"{status} -> {target}",
                    )
                    continue
                old_value, new_value = status.value, target.value
                status = target
            else:
                column = workspace.get_column(update.field)
                if column is None:
                    self._skip(
                        result, update, SkipReason.UNKNOWN_FIELD,
                        f"'{update.field}' is not an editable column",
                    )
                    continue
                try:
                    value = coerce_cell_value(column, raw)
                except InvalidCellValueError as exc:
                    self._skip(result, update, SkipReason.INVALID_VALUE, str(exc))
                    continue
                old_value = stringify_cell_value(cells.get(update.field))
                new_value = stringify_cell_value(value)
                if old_value == new_value:
                    continue
                cells[update.field] = value

            entries.append(AuditLogEntry(
                row_id=row.id,
                workspace_id=row.workspace_id,
                operator_id=user.id,
                operator_name=user.name,
                field=update.field,
                old_value=old_value,
                new_value=new_value,
                timestamp=now,
            ))

        if not entries:
            return None

        result.applied_count += len(entries)
        result.audit_entries.extend(entries)
        result.changed_row_ids.append(row.id)
        return row.model_copy(update={
            "status": status,
            "cells": cells,
            "version": row.version + 1,
            "updated_at": now,
        })

    @staticmethod
    def _skip(
        result: BatchUpdateResult,
        update: CellUpdate,
        reason: SkipReason,
        detail: str = "",
    ) -> None:
        logger.debug("Skipped %s.%s: %s %s", update.row_id, update.field, reason, detail)
        result.skipped.append(SkippedUpdate(update=update, reason=reason, detail=detail))
        result.skipped_count += 1

    def _skip_all(
        self,
        result: BatchUpdateResult,
        updates: list[CellUpdate],
        reason: SkipReason,
    ) -> None:
        for update in updates:
            self._skip(result, update, reason)

    # ----- Row lifecycle -----

    def create_row(self, user: User, workspace: Workspace) -> TableRow:
        """Insert a blank DRAFT row owned by ``user`` with per-type defaults."""
        now = self._clock()
        row = TableRow(
            id=f"R-{new_uuid7()}",
            workspace_id=workspace.id,
            status=RowStatus.DRAFT,
            owner_id=user.id,
            version=1,
            updated_at=now,
            cells={c.field: default_cell_value(c, now.date()) for c in workspace.columns},
        )
        with self._lock:
            self._store.insert([row])
        logger.info("Row %s created in %s by %s", row.id, workspace.id, user.id)
        return row

    def submit_drafts(self, user: User, workspace: Workspace) -> BatchUpdateResult:
        """Move every DRAFT row the user owns in ``workspace`` to PENDING."""
        with self._lock:
            updates = [
                CellUpdate(row_id=r.id, field=STATUS_FIELD, value=RowStatus.PENDING)
                for r in self._store.list_by_workspace(workspace.id)
                if r.owner_id == user.id and r.status == RowStatus.DRAFT
            ]
            return self.perform_batch_update(updates, user, workspace)

    def import_rows(self, rows: list[TableRow]) -> int:
        """Insert parsed rows in one step; nothing is stored if any id clashes."""
        with self._lock:
            self._store.insert(rows)
        logger.info("Imported %d row(s)", len(rows))
        return len(rows)
