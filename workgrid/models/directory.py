"""Directory models — role groups and users."""

from pydantic import Field

from workgrid.models.common import SystemRole, WorkGridBase


class RoleGroup(WorkGridBase):
    """Business-permission cohort; the key into column permission maps."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=255)
    display_color: str = Field(default="bg-slate-500")
    description: str | None = None

    model_config = {"frozen": True}


class User(WorkGridBase):
    """A directory user.

    ``manager_id`` links users into a reporting forest. The referenced
    manager may no longer exist; consumers treat that as "no manager".
    """

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=255)
    system_role: SystemRole = SystemRole.MEMBER
    group_id: str
    manager_id: str | None = None

    model_config = {"frozen": True}

    @property
    def is_admin(self) -> bool:
        """Global administrators bypass every row and column check."""
        return self.system_role == SystemRole.ADMIN
