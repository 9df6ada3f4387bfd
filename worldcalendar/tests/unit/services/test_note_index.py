"""
Tests for date-keyed note storage and the serialized note union.
"""

import pytest
from pydantic import ValidationError

from worldcalendar.recurrence.patterns import create_weekly_pattern
from worldcalendar.services.note_index import (
    InMemoryNoteIndex,
    RecurringOccurrenceNote,
    RecurringParentNote,
    SingleNote,
    date_key,
    note_from_dict,
)
from worldcalendar.time.types import CalendarDate, TimeOfDay


def _note(title: str, date: CalendarDate, **fields) -> SingleNote:
    return SingleNote(title=title, date=date, calendar_id="gregorian", **fields)


class TestDateKey:
    def test_zero_padded(self):
        assert date_key(CalendarDate(7, 3, 9)) == "0007-03-09"

    def test_ignores_time_and_weekday(self):
        assert date_key(CalendarDate(2024, 1, 1, 1, time=TimeOfDay(13, 5))) == "2024-01-01"

    def test_intercalary_block_is_part_of_the_key(self):
        assert date_key(CalendarDate(1492, 7, 1, intercalary="Shieldmeet")) == "1492-07-01#Shieldmeet"


class TestInMemoryNoteIndex:
    @pytest.fixture
    def index(self) -> InMemoryNoteIndex:
        return InMemoryNoteIndex()

    def test_store_and_find_by_date(self, index):
        note = _note("Market day", CalendarDate(2024, 5, 1, 3))

        index.store(note)

        assert note.id in index
        assert index.get(note.id) == note
        assert index.find_by_date(CalendarDate(2024, 5, 1)) == [note]
        assert index.find_by_date(CalendarDate(2024, 5, 2)) == []

    def test_store_replaces_note_with_same_id(self, index):
        note = _note("Market day", CalendarDate(2024, 5, 1))
        index.store(note)

        moved = note.model_copy(update={"date": CalendarDate(2024, 5, 3)})
        index.store(moved)

        assert len(index) == 1
        assert index.find_by_date(CalendarDate(2024, 5, 1)) == []
        assert index.find_by_date(CalendarDate(2024, 5, 3)) == [moved]

    def test_remove(self, index):
        note = _note("Market day", CalendarDate(2024, 5, 1))
        index.store(note)

        assert index.remove(note.id) is True
        assert index.remove(note.id) is False
        assert len(index) == 0
        assert index.find_by_date(note.date) == []

    def test_intercalary_notes_do_not_share_the_month_day_key(self, index):
        regular = _note("Midsummer eve", CalendarDate(1492, 7, 1))
        festival = _note("Shieldmeet", CalendarDate(1492, 7, 1, intercalary="Shieldmeet"))
        index.store(regular)
        index.store(festival)

        assert index.find_by_date(CalendarDate(1492, 7, 1)) == [regular]
        assert index.find_by_date(CalendarDate(1492, 7, 1, intercalary="Shieldmeet")) == [festival]

    def test_find_in_range_is_inclusive_and_ordered(self, index):
        late = _note("Late", CalendarDate(2024, 3, 31, time=TimeOfDay(23, 59)))
        early = _note("Early", CalendarDate(2024, 3, 1))
        middle = _note("Middle", CalendarDate(2024, 3, 15))
        outside = _note("Outside", CalendarDate(2024, 4, 1))
        for note in (late, early, middle, outside):
            index.store(note)

        found = index.find_in_range(CalendarDate(2024, 3, 1), CalendarDate(2024, 3, 31))

        assert [note.title for note in found] == ["Early", "Middle", "Late"]

    def test_find_by_parent_orders_by_occurrence_index(self, index):
        def occurrence(parent_id: str, day: int, occurrence_index: int) -> RecurringOccurrenceNote:
            return RecurringOccurrenceNote(
                title="Council",
                calendar_id="gregorian",
                date=CalendarDate(2024, 1, day),
                parent_id=parent_id,
                occurrence_index=occurrence_index,
            )

        for note in (occurrence("a", 15, 2), occurrence("b", 8, 1), occurrence("a", 8, 1)):
            index.store(note)
        index.store(_note("Council", CalendarDate(2024, 1, 1)))

        found = index.find_by_parent("a")

        assert [(note.date.day, note.occurrence_index) for note in found] == [(8, 1), (15, 2)]
        assert index.find_by_parent("missing") == []


class TestNoteUnion:
    def test_title_is_required(self):
        with pytest.raises(ValidationError):
            _note("", CalendarDate(2024, 1, 1))

    def test_notes_are_immutable(self):
        note = _note("Market day", CalendarDate(2024, 5, 1))

        with pytest.raises(ValidationError):
            note.title = "Changed"

    def test_note_from_dict_picks_the_kind(self):
        parent = RecurringParentNote(
            title="Council",
            calendar_id="gregorian",
            date=CalendarDate(2024, 1, 1, 1),
            pattern=create_weekly_pattern([1, 3]),
            tags=("politics",),
        )
        occurrence = RecurringOccurrenceNote(
            title="Council",
            calendar_id="gregorian",
            date=CalendarDate(2024, 1, 3, 3),
            parent_id=parent.id,
            occurrence_index=1,
        )

        restored_parent = note_from_dict(parent.model_dump())
        restored_occurrence = note_from_dict(occurrence.model_dump())

        assert isinstance(restored_parent, RecurringParentNote)
        assert restored_parent.pattern.weekdays == (1, 3)
        assert restored_parent.tags == ("politics",)
        assert isinstance(restored_occurrence, RecurringOccurrenceNote)
        assert restored_occurrence.parent_id == parent.id

    def test_unknown_kind_is_rejected(self):
        with pytest.raises(ValidationError):
            note_from_dict(
                {
                    "kind": "reminder",
                    "title": "Nope",
                    "calendar_id": "gregorian",
                    "date": {"year": 2024, "month": 1, "day": 1},
                }
            )
