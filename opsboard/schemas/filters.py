"""
Opsboard: Filter state for list screens
"""
from typing import Literal

from pydantic import BaseModel

from opsboard.models.item import ItemCategory
from opsboard.models.ticket import TicketStatus
from opsboard.models.user import Role

ALL = "All"


class ItemFilter(BaseModel):
    search: str = ""
    category: ItemCategory | Literal["All"] = ALL
    only_active: bool = False


class UserFilter(BaseModel):
    search: str = ""
    role: Role | Literal["All"] = ALL
    only_active: bool = False


class TicketFilter(BaseModel):
    search: str = ""
    status: TicketStatus | Literal["All"] = ALL
