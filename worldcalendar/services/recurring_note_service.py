from __future__ import annotations

from typing import TYPE_CHECKING

from ..config import get_config
from ..exceptions import ErrorContext, PatternValidationError
from ..recurrence.generator import RecurrenceGenerator
from ..recurrence.patterns import RecurrenceOccurrence, RecurringPattern
from ..structured_logging.enhanced_logging_config import get_logger
from ..time.time_utils import is_same_day
from ..time.types import CalendarDate
from .note_index import (
    CalendarNote,
    NoteStore,
    RecurringOccurrenceNote,
    RecurringParentNote,
    SingleNote,
)

if TYPE_CHECKING:  # pragma: no cover - only used for type hints
    from ..config.models import RecurrenceConfig
    from ..time.calculus import CalendarCalculus

logger = get_logger(__name__)


class RecurringNoteService:
    """Creates recurring notes and keeps their materialized occurrences in a note store."""

    def __init__(
        self,
        *,
        calculus: CalendarCalculus,
        store: NoteStore,
        config: RecurrenceConfig | None = None,
    ) -> None:
        self._calculus = calculus
        self._store = store
        self._config = config or get_config().recurrence
        self._generator = RecurrenceGenerator(max_iterations=self._config.max_iterations)
        logger.info(
            "Recurring note service initialized",
            calendar_id=calculus.calendar_id,
            materialize_years=self._config.materialize_years,
        )

    def create_note(self, title: str, date: CalendarDate, **fields) -> SingleNote:
        note = SingleNote(title=title, date=date, calendar_id=self._calculus.calendar_id, **fields)
        self._store.store(note)
        return note

    def create_recurring_note(
        self,
        title: str,
        start_date: CalendarDate,
        pattern: RecurringPattern,
        *,
        range_start: CalendarDate | None = None,
        range_end: CalendarDate | None = None,
        **fields,
    ) -> RecurringParentNote:
        """
        Store a recurring parent note and materialize its occurrences.

        The parent itself stands for the occurrence on its own date; exception dates are not
        materialized. Without an explicit window, occurrences are generated
        from ``start_date`` for the configured number of years.
        """
        _ = pattern.kind  # raises UnsupportedFrequencyError
        parent = RecurringParentNote(
            title=title,
            date=start_date,
            calendar_id=self._calculus.calendar_id,
            pattern=pattern,
            **fields,
        )
        self._store.store(parent)
        created = self._materialize(parent, range_start, range_end)
        logger.info(
            "Recurring note created",
            note_id=parent.id,
            frequency=str(pattern.frequency),
            occurrences=created,
        )
        return parent

    def get_occurrences(self, parent_id: str) -> list[RecurringOccurrenceNote]:
        """Return the stored occurrence notes of a recurring parent in date order."""
        return self._store.find_by_parent(parent_id)

    def delete_recurring_note(self, parent_id: str) -> int:
        """Delete a recurring parent and all of its occurrences; return the number of occurrences removed."""
        self._require_parent(parent_id, "delete_recurring_note")
        removed = self._remove_occurrences(parent_id)
        self._store.remove(parent_id)
        logger.info("Recurring note deleted", note_id=parent_id, occurrences_removed=removed)
        return removed

    def update_pattern(
        self,
        parent_id: str,
        pattern: RecurringPattern,
        *,
        range_start: CalendarDate | None = None,
        range_end: CalendarDate | None = None,
    ) -> RecurringParentNote:
        """Replace the pattern of a recurring note and regenerate its occurrences."""
        parent = self._require_parent(parent_id, "update_pattern")
        _ = pattern.kind  # raises UnsupportedFrequencyError
        updated = parent.model_copy(update={"pattern": pattern})
        removed = self._remove_occurrences(parent_id)
        self._store.store(updated)
        created = self._materialize(updated, range_start, range_end)
        logger.info(
            "Recurring pattern updated",
            note_id=parent_id,
            occurrences_removed=removed,
            occurrences_created=created,
        )
        return updated

    def notes_for_date(self, date: CalendarDate) -> list[CalendarNote]:
        return self._store.find_by_date(date)

    def preview(
        self,
        start_date: CalendarDate,
        pattern: RecurringPattern,
        range_start: CalendarDate,
        range_end: CalendarDate,
    ) -> list[RecurrenceOccurrence]:
        """Expand a pattern without storing anything."""
        return self._generator.generate_occurrences(start_date, pattern, range_start, range_end, self._calculus)

    def describe(self, note: CalendarNote) -> str:
        match note.kind:
            case "single":
                return f"{note.title} on {note.date}"
            case "recurring_parent":
                return f"{note.title} repeating {note.pattern.frequency} from {note.date}"
            case "recurring_occurrence":
                return f"{note.title} (occurrence {note.occurrence_index} of {note.parent_id})"

    def _materialize(
        self,
        parent: RecurringParentNote,
        range_start: CalendarDate | None,
        range_end: CalendarDate | None,
    ) -> int:
        start = range_start or parent.date
        end = range_end or self._calculus.add_years(start, self._config.materialize_years)
        occurrences = self._generator.generate_occurrences(parent.date, parent.pattern, start, end, self._calculus)

        created = 0
        for occurrence in occurrences:
            if occurrence.is_exception or is_same_day(occurrence.date, parent.date):
                continue
            note = RecurringOccurrenceNote(
                title=parent.title,
                content=parent.content,
                calendar_id=parent.calendar_id,
                date=occurrence.date,
                category=parent.category,
                tags=parent.tags,
                parent_id=parent.id,
                occurrence_index=occurrence.index,
            )
            self._store.store(note)
            created += 1
        return created

    def _remove_occurrences(self, parent_id: str) -> int:
        removed = 0
        for note in self._store.find_by_parent(parent_id):
            if self._store.remove(note.id):
                removed += 1
        return removed

    def _require_parent(self, parent_id: str, operation: str) -> RecurringParentNote:
        note = self._store.get(parent_id)
        if not isinstance(note, RecurringParentNote):
            raise PatternValidationError(
                f"Note '{parent_id}' is not a recurring note",
                ErrorContext(calendar_id=self._calculus.calendar_id, operation=operation),
                field="parent_id",
                value=parent_id,
            )
        return note
