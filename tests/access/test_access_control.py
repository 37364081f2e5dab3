"""Tests for the access control engine.

Covers: workspace admin checks, row visibility with and without workspace
context, column access with the lifecycle lock, workspace sidebar filter.
"""

import pytest

from workgrid.access.control import (
    can_view_row,
    can_view_row_global,
    can_view_row_within_workspace,
    can_view_workspace,
    column_access_map,
    filter_visible_rows,
    get_column_access,
    is_workspace_admin,
    visible_workspaces,
)
from workgrid.models.common import AccessLevel, RowStatus
from workgrid.models.directory import User
from workgrid.models.workspace import Workspace


# ===================================================================
# Workspace admin
# ===================================================================


class TestIsWorkspaceAdmin:

    def test_global_admin_is_admin_everywhere(
        self, by_id: dict[str, User], workspace: Workspace, other_workspace: Workspace,
    ) -> None:
        assert is_workspace_admin(by_id["1"], workspace)
        assert is_workspace_admin(by_id["1"], other_workspace)

    def test_listed_user_is_admin_of_that_workspace_only(
        self, by_id: dict[str, User], workspace: Workspace, other_workspace: Workspace,
    ) -> None:
        assert is_workspace_admin(by_id["6"], other_workspace)
        assert not is_workspace_admin(by_id["6"], workspace)

    def test_leader_is_not_admin(self, by_id: dict[str, User], workspace: Workspace) -> None:
        assert not is_workspace_admin(by_id["2"], workspace)


# ===================================================================
# Row visibility
# ===================================================================


class TestCanViewRow:
    """First matching rule wins: admin, workspace admin, owner, leader."""

    def test_admin_sees_any_row(self, by_id, users, row_factory) -> None:
        row = row_factory(owner_id="8")
        assert can_view_row(by_id["1"], row, users)
        assert can_view_row_global(by_id["1"], row, users)

    def test_owner_always_sees_own_row(self, users, row_factory) -> None:
        for user in users:
            row = row_factory(owner_id=user.id)
            assert can_view_row(user, row, users)

    def test_leader_sees_direct_report_row(self, by_id, users, row_factory) -> None:
        assert can_view_row(by_id["2"], row_factory(owner_id="3"), users)

    def test_leader_sees_transitive_report_row(self, by_id, users, row_factory) -> None:
        # 5 manages 7, 7 manages 9
        assert can_view_row(by_id["5"], row_factory(owner_id="9"), users)

    def test_leader_does_not_see_peer_row(self, by_id, users, row_factory) -> None:
        assert not can_view_row(by_id["2"], row_factory(owner_id="7"), users)

    def test_member_does_not_see_others_row(self, by_id, users, row_factory, workspace) -> None:
        row = row_factory(owner_id="4")
        assert not can_view_row(by_id["3"], row, users)
        assert not can_view_row(by_id["3"], row, users, workspace)

    def test_member_with_reports_is_not_a_leader(self, users, row_factory) -> None:
        member_manager = User(id="10", name="Ops", group_id="G-GENERAL")
        report = User(id="11", name="Intern", group_id="G-GENERAL", manager_id="10")
        population = [*users, member_manager, report]
        assert not can_view_row(member_manager, row_factory(owner_id="11"), population)

    def test_workspace_admin_needs_workspace_context(
        self, by_id, users, row_factory, other_workspace,
    ) -> None:
        row = row_factory(workspace_id="WS-HR", owner_id="4")
        assert can_view_row(by_id["6"], row, users, other_workspace)
        assert can_view_row_within_workspace(by_id["6"], row, users, other_workspace)
        assert not can_view_row(by_id["6"], row, users)
        assert not can_view_row_global(by_id["6"], row, users)

    def test_dangling_owner_is_not_visible_to_leader(self, by_id, users, row_factory) -> None:
        assert not can_view_row(by_id["2"], row_factory(owner_id="ghost"), users)


class TestFilterVisibleRows:

    def test_leader_gets_own_and_subtree_rows(self, by_id, users, row_factory) -> None:
        rows = [
            row_factory("a", owner_id="2"),
            row_factory("b", owner_id="3"),
            row_factory("c", owner_id="6"),
            row_factory("d", owner_id="4"),
        ]
        visible = filter_visible_rows(by_id["2"], rows, users)
        assert [r.id for r in visible] == ["a", "b", "d"]

    def test_admin_gets_everything(self, by_id, users, row_factory) -> None:
        rows = [row_factory("a", owner_id="2"), row_factory("b", owner_id="6")]
        assert len(filter_visible_rows(by_id["1"], rows, users)) == 2

    def test_workspace_admin_gets_everything_in_workspace(
        self, by_id, users, row_factory, other_workspace,
    ) -> None:
        rows = [row_factory("a", owner_id="2"), row_factory("b", owner_id="3")]
        assert len(filter_visible_rows(by_id["6"], rows, users, other_workspace)) == 2
        assert filter_visible_rows(by_id["6"], rows, users) == []

    def test_matches_single_row_rule(self, users, row_factory, workspace) -> None:
        rows = [row_factory(f"r{u.id}", owner_id=u.id) for u in users]
        for user in users:
            expected = [r.id for r in rows if can_view_row(user, r, users, workspace)]
            actual = [r.id for r in filter_visible_rows(user, rows, users, workspace)]
            assert actual == expected


# ===================================================================
# Column access
# ===================================================================


class TestColumnAccessOverrides:

    @pytest.mark.parametrize("status", list(RowStatus))
    @pytest.mark.parametrize("field", ["amount", "id", "version", "status", "nonexistent"])
    def test_admin_always_writes(self, by_id, row_factory, workspace, status, field) -> None:
        row = row_factory(status=status, owner_id="3")
        assert get_column_access(by_id["1"], row, field, workspace) == AccessLevel.WRITE

    def test_status_is_writable_by_anyone(self, by_id, row_factory, workspace) -> None:
        row = row_factory(status=RowStatus.APPROVED, owner_id="3")
        assert get_column_access(by_id["8"], row, "status", workspace) == AccessLevel.WRITE

    @pytest.mark.parametrize("field", ["id", "updatedAt", "ownerId", "version"])
    def test_meta_fields_are_read_only(self, by_id, row_factory, workspace, field) -> None:
        row = row_factory(owner_id="3")
        assert get_column_access(by_id["3"], row, field, workspace) == AccessLevel.READ

    def test_unknown_field_is_none(self, by_id, row_factory, workspace) -> None:
        row = row_factory(owner_id="3")
        assert get_column_access(by_id["3"], row, "bogus", workspace) == AccessLevel.NONE

    def test_unset_group_permission_is_none(self, by_id, row_factory, workspace) -> None:
        row = row_factory(status=RowStatus.PENDING, owner_id="3")
        # G-VP has no entry on "amount"
        assert get_column_access(by_id["8"], row, "amount", workspace) == AccessLevel.NONE


class TestLifecycleLock:
    """WRITE is downgraded by status and ownership; READ/NONE never upgrade."""

    def test_owner_writes_draft(self, by_id, row_factory, workspace) -> None:
        row = row_factory(status=RowStatus.DRAFT, owner_id="3")
        assert get_column_access(by_id["3"], row, "amount", workspace) == AccessLevel.WRITE

    def test_non_owner_reads_draft(self, by_id, row_factory, workspace) -> None:
        row = row_factory(status=RowStatus.DRAFT, owner_id="3")
        assert get_column_access(by_id["4"], row, "amount", workspace) == AccessLevel.READ

    def test_pending_keeps_write(self, by_id, row_factory, workspace) -> None:
        row = row_factory(status=RowStatus.PENDING, owner_id="3")
        assert get_column_access(by_id["3"], row, "amount", workspace) == AccessLevel.WRITE
        # Reviewer channel: managers annotate pending rows they do not own
        assert get_column_access(by_id["2"], row, "approvalNote", workspace) == AccessLevel.WRITE

    @pytest.mark.parametrize("status", [RowStatus.APPROVED, RowStatus.REJECTED])
    def test_closed_rows_are_locked(self, by_id, row_factory, workspace, status) -> None:
        row = row_factory(status=status, owner_id="3")
        assert get_column_access(by_id["3"], row, "amount", workspace) == AccessLevel.READ
        assert get_column_access(by_id["2"], row, "approvalNote", workspace) == AccessLevel.READ

    @pytest.mark.parametrize("status", list(RowStatus))
    def test_read_is_never_upgraded(self, by_id, row_factory, workspace, status) -> None:
        row = row_factory(status=status, owner_id="2")
        # G-MANAGER has READ on "amount"
        assert get_column_access(by_id["2"], row, "amount", workspace) == AccessLevel.READ

    @pytest.mark.parametrize("status", list(RowStatus))
    def test_none_is_never_upgraded(self, by_id, row_factory, workspace, status) -> None:
        row = row_factory(status=status, owner_id="2")
        # G-MANAGER has no entry on "date"
        assert get_column_access(by_id["2"], row, "date", workspace) == AccessLevel.NONE

    def test_submit_then_approve_scenario(self, by_id, row_factory, workspace) -> None:
        member = by_id["3"]
        draft = row_factory(status=RowStatus.DRAFT, owner_id="3")
        assert get_column_access(member, draft, "amount", workspace) == AccessLevel.WRITE

        pending = draft.model_copy(update={"status": RowStatus.PENDING})
        assert get_column_access(member, pending, "amount", workspace) == AccessLevel.WRITE

        approved = draft.model_copy(update={"status": RowStatus.APPROVED})
        assert get_column_access(member, approved, "amount", workspace) == AccessLevel.READ


class TestWorkspaceScopedAdmin:

    def test_workspace_admin_bypasses_lock_in_own_workspace(
        self, by_id, row_factory, other_workspace,
    ) -> None:
        row = row_factory(workspace_id="WS-HR", status=RowStatus.APPROVED, owner_id="4")
        for field in ["reason", "version", "anything"]:
            assert get_column_access(by_id["6"], row, field, other_workspace) == AccessLevel.WRITE

    def test_workspace_admin_follows_group_rules_elsewhere(
        self, by_id, row_factory, workspace,
    ) -> None:
        row = row_factory(status=RowStatus.APPROVED, owner_id="4")
        # G-AUDIT has WRITE on "amount" but the row is locked
        assert get_column_access(by_id["6"], row, "amount", workspace) == AccessLevel.READ
        assert get_column_access(by_id["6"], row, "date", workspace) == AccessLevel.NONE


class TestColumnAccessMap:

    def test_covers_status_and_every_column(self, by_id, row_factory, workspace) -> None:
        row = row_factory(status=RowStatus.DRAFT, owner_id="3")
        access = column_access_map(by_id["3"], row, workspace)
        assert list(access) == ["status", *workspace.fields]
        assert access["status"] == AccessLevel.WRITE
        assert access["approvalNote"] == AccessLevel.READ
        assert access["title"] == AccessLevel.WRITE


# ===================================================================
# Workspace visibility
# ===================================================================


class TestWorkspaceVisibility:

    def test_open_workspace_visible_to_all(self, users, workspace) -> None:
        assert all(can_view_workspace(u, workspace) for u in users)

    def test_active_groups_restrict_visibility(self, by_id, other_workspace) -> None:
        assert can_view_workspace(by_id["2"], other_workspace)
        assert can_view_workspace(by_id["6"], other_workspace)
        assert not can_view_workspace(by_id["3"], other_workspace)
        assert not can_view_workspace(by_id["8"], other_workspace)

    def test_admin_sees_restricted_workspace(self, by_id, other_workspace) -> None:
        assert can_view_workspace(by_id["1"], other_workspace)

    def test_visible_workspaces_keeps_order(self, by_id, workspace, other_workspace) -> None:
        result = visible_workspaces(by_id["3"], [workspace, other_workspace])
        assert [ws.id for ws in result] == ["WS-FINANCE"]
