"""
Services built on the calendar calculus.

Holds the date-indexed note store contract and the recurring note service
that materializes recurrence occurrences into it.
"""

from .note_index import (
    NOTE_ADAPTER,
    CalendarNote,
    InMemoryNoteIndex,
    NoteStore,
    RecurringOccurrenceNote,
    RecurringParentNote,
    SingleNote,
    date_key,
    note_from_dict,
)
from .recurring_note_service import RecurringNoteService

__all__ = [
    "NOTE_ADAPTER",
    "CalendarNote",
    "InMemoryNoteIndex",
    "NoteStore",
    "RecurringNoteService",
    "RecurringOccurrenceNote",
    "RecurringParentNote",
    "SingleNote",
    "date_key",
    "note_from_dict",
]
