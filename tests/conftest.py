"""Shared pytest fixtures for the WorkGrid test suite.

Provides a small org chart, an expense workspace and a wired-up row store
and mutation engine:

    1 admin (ADMIN, G-AUDIT)
    2 leader (LEADER, G-MANAGER)      -> 3, 4
    5 tech lead (LEADER, G-MANAGER)   -> 7 -> 9
    6 finance (MEMBER, G-AUDIT)
    8 vp (LEADER, G-VP)
"""

from datetime import datetime, timezone

import pytest

from workgrid.directory.registry import Directory
from workgrid.engine.mutation import BatchMutationEngine
from workgrid.engine.store import RowStore
from workgrid.models.common import AccessLevel, FieldType, RowStatus, SystemRole
from workgrid.models.directory import RoleGroup, User
from workgrid.models.row import TableRow
from workgrid.models.workspace import ColumnSpec, Workspace

FIXED_NOW = datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc)
EARLIER = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)

R, W, N = AccessLevel.READ, AccessLevel.WRITE, AccessLevel.NONE


@pytest.fixture
def groups() -> list[RoleGroup]:
    return [
        RoleGroup(id="G-GENERAL", name="General"),
        RoleGroup(id="G-MANAGER", name="Managers"),
        RoleGroup(id="G-AUDIT", name="Finance"),
        RoleGroup(id="G-VP", name="VPs"),
    ]


@pytest.fixture
def users() -> list[User]:
    return [
        User(id="1", name="Admin", system_role=SystemRole.ADMIN, group_id="G-AUDIT"),
        User(id="2", name="Leader", system_role=SystemRole.LEADER, group_id="G-MANAGER"),
        User(id="3", name="Li", group_id="G-GENERAL", manager_id="2"),
        User(id="4", name="Wang", group_id="G-GENERAL", manager_id="2"),
        User(id="5", name="Chen", system_role=SystemRole.LEADER, group_id="G-MANAGER",
             manager_id="1"),
        User(id="6", name="Sarah", group_id="G-AUDIT"),
        User(id="7", name="Mike", system_role=SystemRole.LEADER, group_id="G-GENERAL",
             manager_id="5"),
        User(id="8", name="Liu", system_role=SystemRole.LEADER, group_id="G-VP"),
        User(id="9", name="Nina", group_id="G-GENERAL", manager_id="7"),
    ]


@pytest.fixture
def by_id(users: list[User]) -> dict[str, User]:
    return {u.id: u for u in users}


@pytest.fixture
def workspace() -> Workspace:
    return Workspace(
        id="WS-FINANCE",
        name="Expenses",
        columns=[
            ColumnSpec(field="title", label="Purpose",
                       group_permissions={"G-GENERAL": W, "G-MANAGER": R, "G-AUDIT": R}),
            ColumnSpec(field="category", label="Category", type=FieldType.SELECT,
                       options=["Travel", "Office", "Meals"],
                       group_permissions={"G-GENERAL": W, "G-AUDIT": W}),
            ColumnSpec(field="date", label="Date", type=FieldType.DATE,
                       group_permissions={"G-GENERAL": W}),
            ColumnSpec(field="amount", label="Amount", type=FieldType.NUMBER, is_sensitive=True,
                       group_permissions={"G-GENERAL": W, "G-MANAGER": R, "G-AUDIT": W}),
            ColumnSpec(field="approvalNote", label="Review note",
                       group_permissions={"G-GENERAL": R, "G-MANAGER": W, "G-AUDIT": W}),
        ],
    )


@pytest.fixture
def other_workspace() -> Workspace:
    return Workspace(
        id="WS-HR",
        name="Salary",
        columns=[
            ColumnSpec(field="reason", label="Reason", group_permissions={"G-MANAGER": W}),
        ],
        active_group_ids=frozenset({"G-MANAGER", "G-AUDIT"}),
        admin_ids=frozenset({"6"}),
    )


def make_row(row_id: str = "R-1", **overrides: object) -> TableRow:
    defaults: dict[str, object] = {
        "id": row_id,
        "workspace_id": "WS-FINANCE",
        "status": RowStatus.DRAFT,
        "owner_id": "3",
        "version": 1,
        "updated_at": EARLIER,
        "cells": {
            "title": "Client visit",
            "category": "Travel",
            "date": "2024-03-10",
            "amount": 1500,
            "approvalNote": "",
        },
    }
    defaults.update(overrides)
    return TableRow(**defaults)  # type: ignore[arg-type]


@pytest.fixture
def row_factory():
    return make_row


@pytest.fixture
def directory(groups: list[RoleGroup], users: list[User]) -> Directory:
    return Directory(groups=groups, users=users)


@pytest.fixture
def store() -> RowStore:
    return RowStore([
        make_row("R-DRAFT", status=RowStatus.DRAFT),
        make_row("R-PENDING", status=RowStatus.PENDING),
        make_row("R-APPROVED", status=RowStatus.APPROVED),
        make_row("R-OTHER", owner_id="6"),
    ])


@pytest.fixture
def engine(store: RowStore, directory: Directory) -> BatchMutationEngine:
    return BatchMutationEngine(store, directory, clock=lambda: FIXED_NOW)
