"""
Opsboard: User accounts
"""
from datetime import datetime, timezone
from enum import Enum as PyEnum

from pydantic import Field

from opsboard.models.base import WireModel


class Role(str, PyEnum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    STAFF = "STAFF"


# Directory ordering: lower sorts first
ROLE_PRIORITY: dict[Role, int] = {
    Role.ADMIN: 0,
    Role.MANAGER: 1,
    Role.STAFF: 2,
}


class UserAccount(WireModel):
    """
    A person with system access. ADMIN accounts can never be disabled or
    removed; see opsboard.core.permissions.
    """

    id: str
    name: str | None = None
    email: str
    role: Role = Role.STAFF
    active: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))

    @property
    def display_name(self) -> str:
        return (self.name or "").strip() or self.email

    def __repr__(self) -> str:
        return f"<UserAccount email={self.email} role={self.role.value}>"
