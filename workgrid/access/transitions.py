"""Status transition policy for row lifecycle writes.

The access engine grants WRITE on the status column to everyone. This
policy decides which status changes a given actor may actually make.

STRICT transition table (workspace admins may make any change):

    DRAFT    -> PENDING    owner submits
    PENDING  -> DRAFT      owner withdraws
    REJECTED -> DRAFT      owner reworks
    PENDING  -> APPROVED   leader over the owner
    PENDING  -> REJECTED   leader over the owner

PERMISSIVE accepts every status write.
"""

from collections.abc import Sequence

from workgrid.access.control import is_workspace_admin
from workgrid.access.hierarchy import SubordinateIndex
from workgrid.config.settings import StatusTransitionMode
from workgrid.models.common import RowStatus, SystemRole
from workgrid.models.directory import User
from workgrid.models.workspace import Workspace

OWNER_TRANSITIONS: frozenset[tuple[RowStatus, RowStatus]] = frozenset({
    (RowStatus.DRAFT, RowStatus.PENDING),
    (RowStatus.PENDING, RowStatus.DRAFT),
    (RowStatus.REJECTED, RowStatus.DRAFT),
})

REVIEWER_TRANSITIONS: frozenset[tuple[RowStatus, RowStatus]] = frozenset({
    (RowStatus.PENDING, RowStatus.APPROVED),
    (RowStatus.PENDING, RowStatus.REJECTED),
})


class StatusTransitionPolicy:
    """Decide whether an actor may move a row from one status to another."""

    def __init__(self, mode: StatusTransitionMode = StatusTransitionMode.STRICT) -> None:
        self.mode = mode

    def is_allowed(
        self,
        *,
        user: User,
        owner_id: str,
        current: RowStatus,
        target: RowStatus,
        workspace: Workspace,
        all_users: Sequence[User],
    ) -> bool:
        """Check one transition. Unchanged status is always allowed."""
        if current == target:
            return True
        if self.mode == StatusTransitionMode.PERMISSIVE:
            return True
        if is_workspace_admin(user, workspace):
            return True

        transition = (current, target)
        if transition in OWNER_TRANSITIONS and user.id == owner_id:
            return True
        if transition in REVIEWER_TRANSITIONS and user.id != owner_id:
            return self._reviews(user, owner_id, all_users)
        return False

    @staticmethod
    def _reviews(user: User, owner_id: str, all_users: Sequence[User]) -> bool:
        if user.system_role != SystemRole.LEADER:
            return False
        return owner_id in SubordinateIndex(all_users).subordinates_of(user.id)
