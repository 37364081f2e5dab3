"""Seed script — build an in-memory WorkGrid with demo data.

Creates:
1. Four role groups (general staff, department managers, finance/HR, VPs)
2. Eight users in two reporting trees plus a global admin
3. Two workspaces: expense approval and salary adjustment
4. A handful of rows across every lifecycle state

Usage:
    python -m scripts           # print a summary of the seeded grid
    pytest tests/scripts/test_seed.py
"""

from workgrid.config.settings import Settings, get_settings
from workgrid.directory.registry import Directory
from workgrid.engine.store import RowStore
from workgrid.grid.service import GridService
from workgrid.models.common import AccessLevel, FieldType, RowStatus, SystemRole
from workgrid.models.directory import RoleGroup, User
from workgrid.models.row import TableRow
from workgrid.models.workspace import ColumnSpec, Workspace
from workgrid.observability.logging_setup import configure_logging
from workgrid.schema.registry import WorkspaceRegistry

R, W = AccessLevel.READ, AccessLevel.WRITE

DEMO_GROUPS = [
    RoleGroup(id="G-GENERAL", name="General staff", display_color="bg-blue-500",
              description="Raises requests"),
    RoleGroup(id="G-MANAGER", name="Department managers", display_color="bg-emerald-500",
              description="Approves requests"),
    RoleGroup(id="G-AUDIT", name="Finance / HR", display_color="bg-amber-500",
              description="Functional review"),
    RoleGroup(id="G-VP", name="Vice presidents", display_color="bg-purple-500",
              description="Senior decision makers"),
]

DEMO_USERS = [
    User(id="1", name="System Admin", system_role=SystemRole.ADMIN, group_id="G-AUDIT"),
    User(id="2", name="Zhang Wei (East manager)", system_role=SystemRole.LEADER,
         group_id="G-MANAGER"),
    User(id="3", name="Li Fang (Sales)", group_id="G-GENERAL", manager_id="2"),
    User(id="4", name="Wang Chao (Sales)", group_id="G-GENERAL", manager_id="2"),
    User(id="5", name="Chen Jing (Tech lead)", system_role=SystemRole.LEADER,
         group_id="G-MANAGER", manager_id="1"),
    User(id="6", name="Sarah (Finance)", group_id="G-AUDIT"),
    User(id="7", name="Mike (R&D)", group_id="G-GENERAL", manager_id="5"),
    User(id="8", name="Liu (VP)", system_role=SystemRole.LEADER, group_id="G-VP"),
]


def _perms(general: AccessLevel, manager: AccessLevel, audit: AccessLevel,
           vp: AccessLevel) -> dict[str, AccessLevel]:
    return {"G-GENERAL": general, "G-MANAGER": manager, "G-AUDIT": audit, "G-VP": vp}


DEMO_WORKSPACES = [
    Workspace(
        id="WS-FINANCE",
        name="Expense approval",
        icon="Calculator",
        columns=[
            ColumnSpec(field="title", label="Purpose", group_permissions=_perms(W, R, R, R)),
            ColumnSpec(field="category", label="Category", type=FieldType.SELECT,
                       options=["Travel", "Office", "Meals", "Benefits", "Hardware"],
                       group_permissions=_perms(W, R, W, R)),
            ColumnSpec(field="date", label="Date", type=FieldType.DATE,
                       group_permissions=_perms(W, R, R, R)),
            ColumnSpec(field="amount", label="Amount", type=FieldType.NUMBER, is_sensitive=True,
                       group_permissions=_perms(W, R, W, R)),
            ColumnSpec(field="region", label="Region", type=FieldType.SELECT,
                       options=["East", "North", "South", "Overseas"],
                       group_permissions=_perms(W, R, R, R)),
            ColumnSpec(field="approvalNote", label="Review note",
                       group_permissions=_perms(R, W, W, W)),
        ],
    ),
    Workspace(
        id="WS-HR",
        name="Salary adjustment",
        icon="Users",
        columns=[
            ColumnSpec(field="employeeName", label="Employee", group_permissions=_perms(R, W, R, R)),
            ColumnSpec(field="position", label="Grade", type=FieldType.SELECT,
                       options=["P5", "P6", "P7", "P8", "M1", "M2"],
                       group_permissions=_perms(R, W, R, R)),
            ColumnSpec(field="effectiveDate", label="Effective date", type=FieldType.DATE,
                       group_permissions=_perms(R, W, W, R)),
            ColumnSpec(field="currentSalary", label="Current salary", type=FieldType.NUMBER,
                       is_sensitive=True, group_permissions=_perms(R, R, R, R)),
            ColumnSpec(field="targetSalary", label="Target salary", type=FieldType.NUMBER,
                       is_sensitive=True, group_permissions=_perms(R, W, R, R)),
            ColumnSpec(field="reason", label="Reason", group_permissions=_perms(R, W, R, R)),
            ColumnSpec(field="approvalNote", label="HRBP note", group_permissions=_perms(R, R, W, W)),
        ],
        active_group_ids=frozenset({"G-MANAGER", "G-AUDIT", "G-VP"}),
    ),
]


def _demo_rows() -> list[TableRow]:
    return [
        TableRow(id="R-1001", workspace_id="WS-FINANCE", status=RowStatus.PENDING, owner_id="3",
                 cells={"title": "Q1 marketing travel", "category": "Travel",
                        "date": "2024-03-15", "amount": 15200, "region": "East",
                        "approvalNote": ""}),
        TableRow(id="R-1002", workspace_id="WS-FINANCE", status=RowStatus.DRAFT, owner_id="4",
                 cells={"title": "Client dinner", "category": "Meals",
                        "date": "2024-03-18", "amount": 860, "region": "East",
                        "approvalNote": ""}),
        TableRow(id="R-1003", workspace_id="WS-FINANCE", status=RowStatus.APPROVED, owner_id="7",
                 cells={"title": "Server renewal", "category": "Hardware",
                        "date": "2024-02-01", "amount": 42000, "region": "North",
                        "approvalNote": "Approved within budget"}),
        TableRow(id="R-1004", workspace_id="WS-FINANCE", status=RowStatus.REJECTED, owner_id="3",
                 cells={"title": "Team building", "category": "Benefits",
                        "date": "2024-01-20", "amount": 9000, "region": "South",
                        "approvalNote": "Over the quarterly limit"}),
        TableRow(id="R-2001", workspace_id="WS-HR", status=RowStatus.PENDING, owner_id="2",
                 cells={"employeeName": "Alex", "position": "P6", "effectiveDate": "2024-07-01",
                        "currentSalary": 18000, "targetSalary": 21000,
                        "reason": "Outstanding annual performance", "approvalNote": ""}),
    ]


def build_demo_service(settings: Settings | None = None) -> GridService:
    """Grid service preloaded with the demo directory, workspaces and rows."""
    return GridService(
        Directory(groups=DEMO_GROUPS, users=DEMO_USERS),
        WorkspaceRegistry(DEMO_WORKSPACES),
        RowStore(_demo_rows()),
        settings=settings,
    )


def run_seed() -> GridService:
    """Build the demo grid and log what each user can see."""
    settings = get_settings()
    log = configure_logging(settings)
    service = build_demo_service(settings)

    for user in service.directory.list_users():
        workspaces = service.visible_workspaces(user.id)
        visible = {ws.id: len(service.visible_rows(user.id, ws.id)) for ws in workspaces}
        log.info("demo_user", user=user.name, role=user.system_role.value, rows=visible)

    log.info(
        "seed_complete",
        users=len(service.directory.list_users()),
        workspaces=len(service.workspaces.list_all()),
        rows=len(service.store),
    )
    return service


if __name__ == "__main__":
    run_seed()
