"""Access control engine — row visibility and per-cell access levels.

Row visibility (first match wins):
1. Global ADMIN sees every row.
2. A workspace admin sees every row of that workspace (only when the
   workspace is known to the caller).
3. The owner sees their own row.
4. A LEADER sees rows owned by anyone in their reporting subtree.

Cell access follows the group permission matrix of the workspace, with a
lifecycle lock that only ever downgrades WRITE to READ.

Pure functions: no I/O, no mutation, no exceptions for well-typed input.
"""

from collections.abc import Iterable, Sequence

from workgrid.access.hierarchy import SubordinateIndex
from workgrid.models.common import (
    META_FIELDS,
    STATUS_FIELD,
    AccessLevel,
    RowStatus,
    SystemRole,
)
from workgrid.models.directory import User
from workgrid.models.row import TableRow
from workgrid.models.workspace import Workspace

# Statuses in which a configured WRITE is locked to READ for everyone
_LOCKED_STATUSES = frozenset({RowStatus.APPROVED, RowStatus.REJECTED})


def is_workspace_admin(user: User, workspace: Workspace) -> bool:
    """Global admins are admins of every workspace."""
    if user.system_role == SystemRole.ADMIN:
        return True
    return user.id in workspace.admin_ids


def _is_leader_over(user: User, owner_id: str, all_users: Iterable[User]) -> bool:
    if user.system_role != SystemRole.LEADER:
        return False
    return owner_id in SubordinateIndex(all_users).subordinates_of(user.id)


def can_view_row_global(
    user: User,
    row: TableRow,
    all_users: Iterable[User],
) -> bool:
    """Visibility without workspace context: admin, owner, or leader over owner."""
    if user.system_role == SystemRole.ADMIN:
        return True
    if user.id == row.owner_id:
        return True
    return _is_leader_over(user, row.owner_id, all_users)


def can_view_row_within_workspace(
    user: User,
    row: TableRow,
    all_users: Iterable[User],
    workspace: Workspace,
) -> bool:
    """Visibility including the workspace-admin override."""
    if user.system_role == SystemRole.ADMIN:
        return True
    if is_workspace_admin(user, workspace):
        return True
    return can_view_row_global(user, row, all_users)


def can_view_row(
    user: User,
    row: TableRow,
    all_users: Iterable[User],
    workspace: Workspace | None = None,
) -> bool:
    """Dispatch to the workspace-aware or global visibility rule."""
    if workspace is None:
        return can_view_row_global(user, row, all_users)
    return can_view_row_within_workspace(user, row, all_users, workspace)


def get_column_access(
    user: User,
    row: TableRow,
    field: str,
    workspace: Workspace,
) -> AccessLevel:
    """Access level of ``user`` on ``field`` of ``row``.

    The status column is always WRITE here; which transitions are legal is
    decided by the mutation engine's transition policy.
    """
    if is_workspace_admin(user, workspace):
        return AccessLevel.WRITE

    if field == STATUS_FIELD:
        return AccessLevel.WRITE

    if field in META_FIELDS:
        return AccessLevel.READ

    column = workspace.get_column(field)
    if column is None:
        return AccessLevel.NONE

    permission = column.permission_for(user.group_id)

    if permission == AccessLevel.WRITE:
        if row.status == RowStatus.DRAFT:
            return AccessLevel.WRITE if row.is_owned_by(user.id) else AccessLevel.READ
        if row.status in _LOCKED_STATUSES:
            return AccessLevel.READ

    return permission


def column_access_map(
    user: User,
    row: TableRow,
    workspace: Workspace,
) -> dict[str, AccessLevel]:
    """Access level for the status column and every schema column."""
    fields = [STATUS_FIELD, *workspace.fields]
    return {f: get_column_access(user, row, f, workspace) for f in fields}


# ---------------------------------------------------------------------------
# Collection helpers
# ---------------------------------------------------------------------------


def can_view_workspace(user: User, workspace: Workspace) -> bool:
    """Sidebar visibility: admins always; otherwise the active-group filter."""
    if user.system_role == SystemRole.ADMIN:
        return True
    if not workspace.active_group_ids:
        return True
    return user.group_id in workspace.active_group_ids


def visible_workspaces(user: User, workspaces: Iterable[Workspace]) -> list[Workspace]:
    return [ws for ws in workspaces if can_view_workspace(user, ws)]


def filter_visible_rows(
    user: User,
    rows: Iterable[TableRow],
    all_users: Sequence[User],
    workspace: Workspace | None = None,
) -> list[TableRow]:
    """Rows the user may see, in their original order.

    The subordinate set is resolved once for the whole collection.
    """
    if user.system_role == SystemRole.ADMIN:
        return list(rows)
    if workspace is not None and is_workspace_admin(user, workspace):
        return list(rows)

    subordinates: set[str] = set()
    if user.system_role == SystemRole.LEADER:
        subordinates = SubordinateIndex(all_users).subordinates_of(user.id)

    return [
        row for row in rows
        if row.owner_id == user.id or row.owner_id in subordinates
    ]
