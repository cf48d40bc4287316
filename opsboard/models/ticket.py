"""
Opsboard: Operational tickets

State machine: PENDING → IN_PROGRESS → READY → COMPLETED, with CANCELLED
reachable from any non-terminal state. Tickets are read-only here; the
transition map only classifies what the server reports.
"""
from datetime import datetime, timezone
from enum import Enum as PyEnum

from pydantic import Field, model_validator

from opsboard.models.base import WireModel


class TicketStatus(str, PyEnum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    READY = "READY"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


NEXT_STATUS: dict[TicketStatus, TicketStatus] = {
    TicketStatus.PENDING:     TicketStatus.IN_PROGRESS,
    TicketStatus.IN_PROGRESS: TicketStatus.READY,
    TicketStatus.READY:       TicketStatus.COMPLETED,
}
TERMINAL_STATUSES = frozenset({TicketStatus.COMPLETED, TicketStatus.CANCELLED})
ACTIVE_STATUSES = frozenset({TicketStatus.PENDING, TicketStatus.IN_PROGRESS, TicketStatus.READY})


def can_transition(current: TicketStatus, target: TicketStatus) -> bool:
    """
    Whether the server may move a ticket from `current` to `target`.

    Nothing in opsboard changes ticket status; this is for callers deciding
    which status actions to offer on a ticket.
    """
    if current in TERMINAL_STATUSES:
        return False
    if target == TicketStatus.CANCELLED:
        return True
    return NEXT_STATUS.get(current) == target


class Ticket(WireModel):
    id: str
    customer: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))
    promised_mins: float = Field(..., ge=0)
    duration_mins: float | None = None
    status: TicketStatus = TicketStatus.PENDING
    items: int = Field(0, ge=0)
    revenue: float = 0.0

    @model_validator(mode="after")
    def _hide_unfinished_duration(self):
        # Actual duration only exists once the ticket is completed
        if self.status != TicketStatus.COMPLETED:
            self.duration_mins = None
        return self

    @property
    def is_completed(self) -> bool:
        return self.status == TicketStatus.COMPLETED

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES
