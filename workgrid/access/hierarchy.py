"""Subordinate resolver over the manager-link forest.

Reporting lines are stored upward (each user points at its manager). The
resolver inverts them into a children adjacency and walks it breadth-first.
A visited set bounds the walk, so a corrupt cyclic graph terminates instead
of recursing forever.

Deterministic, no side effects.
"""

from collections import deque
from collections.abc import Iterable

from workgrid.models.directory import User


class CyclicManagementError(ValueError):
    """Raised when manager links would form a cycle."""


class SubordinateIndex:
    """Children adjacency built once over a user population.

    Reuse one index for many queries against the same users; build a new
    one whenever the directory changes.
    """

    def __init__(self, users: Iterable[User]) -> None:
        self._children: dict[str, list[str]] = {}
        for user in users:
            if user.manager_id is not None:
                self._children.setdefault(user.manager_id, []).append(user.id)

    def direct_reports(self, leader_id: str) -> list[str]:
        """Ids of users whose manager is ``leader_id``."""
        return list(self._children.get(leader_id, []))

    def subordinates_of(self, leader_id: str) -> set[str]:
        """Every user whose reporting chain reaches ``leader_id``.

        The leader is never reported as its own subordinate, even when the
        graph loops back to it.
        """
        visited: set[str] = {leader_id}
        result: set[str] = set()
        queue: deque[str] = deque([leader_id])
        while queue:
            current = queue.popleft()
            for child in self._children.get(current, []):
                if child in visited:
                    continue
                visited.add(child)
                result.add(child)
                queue.append(child)
        return result


def get_all_subordinates(leader_id: str, all_users: Iterable[User]) -> set[str]:
    """Transitive subordinates of ``leader_id`` within ``all_users``."""
    return SubordinateIndex(all_users).subordinates_of(leader_id)


def find_management_cycle(users: Iterable[User]) -> list[str] | None:
    """Return the user ids forming a manager cycle, or None if acyclic.

    Dangling manager ids (pointing at users not in the population) end a
    chain and are not cycles.
    """
    manager_of: dict[str, str | None] = {u.id: u.manager_id for u in users}
    cleared: set[str] = set()

    for start in manager_of:
        if start in cleared:
            continue
        path: list[str] = []
        on_path: set[str] = set()
        current: str | None = start
        while current is not None and current in manager_of and current not in cleared:
            if current in on_path:
                return path[path.index(current):]
            path.append(current)
            on_path.add(current)
            current = manager_of[current]
        cleared.update(path)
    return None


def ensure_acyclic(users: Iterable[User]) -> None:
    """Raise CyclicManagementError if manager links contain a cycle."""
    cycle = find_management_cycle(users)
    if cycle is not None:
        msg = f"Cyclic management graph: {' -> '.join(cycle)} -> {cycle[0]}."
        raise CyclicManagementError(msg)
