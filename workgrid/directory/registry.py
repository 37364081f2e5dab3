"""Directory of role groups and users.

Users and groups are immutable models; every change goes through an
explicit operation here that swaps in a new copy. Changes touching manager
links are validated so the reporting graph stays acyclic.

Deleting a user does not cascade: reports keep their dangling
``manager_id`` and simply resolve to "no manager".
"""

from collections.abc import Iterable
from typing import Any

from workgrid.access.hierarchy import SubordinateIndex, ensure_acyclic
from workgrid.models.common import SystemRole
from workgrid.models.directory import RoleGroup, User


class Directory:
    """In-memory user and group directory."""

    def __init__(
        self,
        groups: Iterable[RoleGroup] = (),
        users: Iterable[User] = (),
    ) -> None:
        self._groups: dict[str, RoleGroup] = {}
        self._users: dict[str, User] = {}
        for group in groups:
            self.add_group(group)
        self.replace_users(list(users))

    # ----- Groups -----

    def add_group(self, group: RoleGroup) -> None:
        """Register a new group (id must be unique)."""
        if group.id in self._groups:
            msg = f"Group {group.id} already registered."
            raise ValueError(msg)
        self._groups[group.id] = group

    def get_group(self, group_id: str) -> RoleGroup:
        """Get a group by ID. Raises KeyError if not found."""
        try:
            return self._groups[group_id]
        except KeyError:
            msg = f"Group {group_id} not found."
            raise KeyError(msg) from None

    def list_groups(self) -> list[RoleGroup]:
        return list(self._groups.values())

    def delete_group(self, group_id: str) -> None:
        """Remove a group.

        Raises:
            ValueError: If any user still belongs to the group.
        """
        self.get_group(group_id)
        members = [u.id for u in self._users.values() if u.group_id == group_id]
        if members:
            msg = f"Group {group_id} still has {len(members)} member(s)."
            raise ValueError(msg)
        del self._groups[group_id]

    # ----- Users -----

    def get_user(self, user_id: str) -> User:
        """Get a user by ID. Raises KeyError if not found."""
        try:
            return self._users[user_id]
        except KeyError:
            msg = f"User {user_id} not found."
            raise KeyError(msg) from None

    def find_user(self, user_id: str | None) -> User | None:
        """Look up a possibly dangling reference; None when no such user."""
        if user_id is None:
            return None
        return self._users.get(user_id)

    def list_users(self) -> list[User]:
        return list(self._users.values())

    def manager_of(self, user_id: str) -> User | None:
        """Direct manager, or None when unset or no longer in the directory."""
        return self.find_user(self.get_user(user_id).manager_id)

    def add_user(self, user: User) -> None:
        """Register a new user.

        Raises:
            ValueError: If the id is taken or the group is unknown.
            CyclicManagementError: If the manager link closes a cycle.
        """
        if user.id in self._users:
            msg = f"User {user.id} already registered."
            raise ValueError(msg)
        self._check_group(user)
        self._commit({**self._users, user.id: user})

    def update_user(self, user_id: str, **changes: Any) -> User:
        """Apply field changes to a user and return the new copy."""
        current = self.get_user(user_id)
        if "id" in changes and changes["id"] != user_id:
            msg = "User id cannot be changed."
            raise ValueError(msg)
        updated = User.model_validate({**current.model_dump(), **changes})
        self._check_group(updated)
        self._commit({**self._users, user_id: updated})
        return updated

    def set_user_group(self, user_id: str, group_id: str) -> User:
        return self.update_user(user_id, group_id=group_id)

    def set_system_role(self, user_id: str, role: SystemRole) -> User:
        return self.update_user(user_id, system_role=role)

    def delete_user(self, user_id: str) -> None:
        """Remove a user without touching their reports' manager links."""
        self.get_user(user_id)
        del self._users[user_id]

    def replace_users(self, users: list[User]) -> None:
        """Replace the whole user list at once (bulk sync), all or nothing."""
        ids = [u.id for u in users]
        if len(set(ids)) != len(ids):
            msg = "Duplicate user ids in bulk replacement."
            raise ValueError(msg)
        for user in users:
            self._check_group(user)
        self._commit({u.id: u for u in users})

    def subordinate_index(self) -> SubordinateIndex:
        """Children adjacency over the current user population."""
        return SubordinateIndex(self._users.values())

    # ----- Internals -----

    def _check_group(self, user: User) -> None:
        if self._groups and user.group_id not in self._groups:
            msg = f"User {user.id} references unknown group {user.group_id}."
            raise ValueError(msg)

    def _commit(self, users: dict[str, User]) -> None:
        ensure_acyclic(users.values())
        self._users = users
