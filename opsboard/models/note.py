"""
Opsboard: Shift notes (local only)
"""
from datetime import datetime, timezone
from enum import Enum as PyEnum

from pydantic import Field

from opsboard.models.base import WireModel


class NoteTag(str, PyEnum):
    STAFFING = "Staffing"
    QUALITY = "Quality"
    OPS = "Ops"
    SUPPLY = "Supply"


class ShiftNote(WireModel):
    id: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))
    text: str = Field(..., min_length=1)
    tag: NoteTag = NoteTag.OPS
