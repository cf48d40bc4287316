"""
Opsboard: Shift notes (kept in memory for the current shift)
"""
import uuid

from opsboard.core.exceptions import DomainValidationError
from opsboard.models.note import NoteTag, ShiftNote


class ShiftNoteBook:
    def __init__(self):
        self._notes: list[ShiftNote] = []

    @property
    def notes(self) -> list[ShiftNote]:
        return sorted(self._notes, key=lambda n: n.created_at, reverse=True)

    def by_tag(self, tag: NoteTag) -> list[ShiftNote]:
        return [n for n in self.notes if n.tag == tag]

    def add(self, text: str, tag: NoteTag = NoteTag.OPS) -> ShiftNote:
        text = (text or "").strip()
        if not text:
            raise DomainValidationError("Write something before saving the note.", field="text")
        note = ShiftNote(id=f"note_{uuid.uuid4().hex[:8]}", text=text, tag=NoteTag(tag))
        self._notes.append(note)
        return note

    def remove(self, note_id: str) -> None:
        before = len(self._notes)
        self._notes = [n for n in self._notes if n.id != note_id]
        if len(self._notes) == before:
            raise DomainValidationError("Note no longer exists.")
