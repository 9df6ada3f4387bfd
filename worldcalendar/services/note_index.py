"""
Date-indexed note storage.

Notes are keyed by a zero-padded ``YYYY-MM-DD`` date key (with the intercalary
block name appended for intercalary days). ``NoteStore`` is the contract the
recurring note service depends on; ``InMemoryNoteIndex`` is the bundled
implementation.
"""

from __future__ import annotations

import threading
from typing import Annotated, Literal, Protocol
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from ..recurrence.patterns import RecurringPattern
from ..structured_logging.enhanced_logging_config import get_logger
from ..time.time_utils import is_date_after, is_date_before
from ..time.types import CalendarDate

logger = get_logger(__name__)


def date_key(date: CalendarDate) -> str:
    """Return the index key for a date; time of day is ignored."""
    key = f"{date.year:04d}-{date.month:02d}-{date.day:02d}"
    if date.intercalary:
        key = f"{key}#{date.intercalary}"
    return key


class NoteBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    title: str = Field(..., min_length=1, max_length=200)
    content: str = ""
    calendar_id: str
    date: CalendarDate
    category: str | None = None
    tags: tuple[str, ...] = ()


class SingleNote(NoteBase):
    """A note pinned to one date."""

    kind: Literal["single"] = "single"


class RecurringParentNote(NoteBase):
    """The master record of a recurring note; ``date`` is the first occurrence."""

    kind: Literal["recurring_parent"] = "recurring_parent"
    pattern: RecurringPattern


class RecurringOccurrenceNote(NoteBase):
    """A materialized occurrence generated from a recurring parent."""

    kind: Literal["recurring_occurrence"] = "recurring_occurrence"
    parent_id: str
    occurrence_index: int = Field(..., ge=0)


CalendarNote = Annotated[
    SingleNote | RecurringParentNote | RecurringOccurrenceNote,
    Field(discriminator="kind"),
]

NOTE_ADAPTER: TypeAdapter[CalendarNote] = TypeAdapter(CalendarNote)


def note_from_dict(data: dict) -> CalendarNote:
    """Rebuild a note of the right kind from its serialized form."""
    return NOTE_ADAPTER.validate_python(data)


class NoteStore(Protocol):
    """Storage contract for date-indexed notes."""

    def store(self, note: CalendarNote) -> None:
        """Store ``note`` under the date key of ``note.date``, replacing any note with the same id."""
        ...

    def remove(self, note_id: str) -> bool:
        """Remove a note; return False when it was not stored."""
        ...

    def get(self, note_id: str) -> CalendarNote | None:
        """Return a stored note by id."""
        ...

    def find_by_date(self, date: CalendarDate) -> list[CalendarNote]:
        """Return the notes stored on ``date``."""
        ...

    def find_in_range(self, start: CalendarDate, end: CalendarDate) -> list[CalendarNote]:
        """Return the notes dated within ``[start, end]`` in date order."""
        ...

    def find_by_parent(self, parent_id: str) -> list[RecurringOccurrenceNote]:
        """Return the occurrence notes generated from ``parent_id`` in occurrence order."""
        ...


class InMemoryNoteIndex:
    """Thread-safe in-memory ``NoteStore``."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._notes: dict[str, CalendarNote] = {}
        self._date_index: dict[str, list[str]] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._notes)

    def __contains__(self, note_id: object) -> bool:
        with self._lock:
            return note_id in self._notes

    def store(self, note: CalendarNote) -> None:
        with self._lock:
            if note.id in self._notes:
                self._unindex(self._notes[note.id])
            self._notes[note.id] = note
            self._date_index.setdefault(date_key(note.date), []).append(note.id)
        logger.debug("Note stored", note_id=note.id, kind=note.kind, date_key=date_key(note.date))

    def remove(self, note_id: str) -> bool:
        with self._lock:
            note = self._notes.pop(note_id, None)
            if note is None:
                return False
            self._unindex(note)
        logger.debug("Note removed", note_id=note_id, kind=note.kind)
        return True

    def get(self, note_id: str) -> CalendarNote | None:
        with self._lock:
            return self._notes.get(note_id)

    def find_by_date(self, date: CalendarDate) -> list[CalendarNote]:
        with self._lock:
            return [self._notes[note_id] for note_id in self._date_index.get(date_key(date), [])]

    def find_in_range(self, start: CalendarDate, end: CalendarDate) -> list[CalendarNote]:
        start = start.date_only()
        end = end.date_only()
        with self._lock:
            notes = list(self._notes.values())
        matches = [
            note
            for note in notes
            if not is_date_before(note.date.date_only(), start) and not is_date_after(note.date.date_only(), end)
        ]
        return sorted(matches, key=lambda note: note.date.sort_key())

    def find_by_parent(self, parent_id: str) -> list[RecurringOccurrenceNote]:
        with self._lock:
            notes = list(self._notes.values())
        occurrences = [
            note for note in notes if isinstance(note, RecurringOccurrenceNote) and note.parent_id == parent_id
        ]
        return sorted(occurrences, key=lambda note: note.occurrence_index)

    def all_notes(self) -> list[CalendarNote]:
        with self._lock:
            return list(self._notes.values())

    def _unindex(self, note: CalendarNote) -> None:
        key = date_key(note.date)
        note_ids = self._date_index.get(key)
        if not note_ids:
            return
        if note.id in note_ids:
            note_ids.remove(note.id)
        if not note_ids:
            del self._date_index[key]
