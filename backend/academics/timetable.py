"""
Timetable Conflict Detector

Two entries collide when they share day_of_week AND room and their
[start, end) intervals overlap. Back-to-back slots do not collide, and
entries in different rooms or on different days are never compared.
"""
import logging
from dataclasses import dataclass, replace
from datetime import time
from typing import Iterable, Optional

from django.db import IntegrityError, transaction
from django.db.models import Case, IntegerField, Value, When

from .audit import log_activity
from .domain_catalog import Course
from .domain_timetable import ClassType, DayOfWeek, TimetableEntry, TimetableRoomLock
from .exceptions import InvalidTimetableEntry, RecordNotFound, ScheduleConflict

logger = logging.getLogger(__name__)

DAY_ORDER = Case(
    *[When(day_of_week=day, then=Value(index)) for index, day in enumerate(DayOfWeek.values)],
    output_field=IntegerField(),
)

EDITABLE_FIELDS = ('course_id', 'day_of_week', 'start_time', 'end_time', 'room', 'class_type',
                   'semester', 'academic_year', 'notes')


@dataclass(frozen=True)
class TimetableEntryDraft:
    course_id: int
    day_of_week: str
    start_time: time
    end_time: time
    room: str
    class_type: str = ClassType.LECTURE
    semester: Optional[str] = None
    academic_year: Optional[str] = None
    notes: Optional[str] = None


def intervals_overlap(a_start, a_end, b_start, b_end) -> bool:
    """Half-open overlap test: [a_start, a_end) against [b_start, b_end)."""
    return a_start < b_end and a_end > b_start


def _overlapping(day_of_week, room, start_time, end_time, exclude_id=None):
    clashes = TimetableEntry.objects.select_related('course').filter(
        day_of_week=day_of_week,
        room=room,
        start_time__lt=end_time,
        end_time__gt=start_time,
    )
    if exclude_id is not None:
        clashes = clashes.exclude(pk=exclude_id)
    return clashes.order_by('start_time', 'id')


def find_conflict(day_of_week, room, start_time, end_time, exclude_id=None) -> Optional[TimetableEntry]:
    return _overlapping(day_of_week, room, start_time, end_time, exclude_id).first()


def _conflict_error(entry: TimetableEntry) -> ScheduleConflict:
    return ScheduleConflict(
        f'Time conflict detected. {entry.course.code} is already scheduled in {entry.room} '
        f'on {entry.get_day_of_week_display()} from {entry.start_time:%H:%M} to {entry.end_time:%H:%M}.',
        conflicting_entry={
            'id': entry.id,
            'course': entry.course.code,
            'room': entry.room,
            'day_of_week': entry.day_of_week,
            'start_time': entry.start_time.strftime('%H:%M'),
            'end_time': entry.end_time.strftime('%H:%M'),
        },
    )


def _validate(draft: TimetableEntryDraft):
    if draft.day_of_week not in DayOfWeek.values:
        raise InvalidTimetableEntry(f'Invalid day of week: {draft.day_of_week}')
    if draft.start_time >= draft.end_time:
        raise InvalidTimetableEntry()
    if not (draft.room or '').strip():
        raise InvalidTimetableEntry('Room is required.')
    if not Course.objects.filter(pk=draft.course_id).exists():
        raise RecordNotFound('Course not found.', course_id=draft.course_id)


def _check(draft: TimetableEntryDraft, exclude_id=None):
    clash = find_conflict(draft.day_of_week, draft.room, draft.start_time, draft.end_time, exclude_id)
    if clash is not None:
        logger.warning('Timetable clash in %s on %s with entry %s', draft.room, draft.day_of_week, clash.pk)
        raise _conflict_error(clash)


def _lock_room(draft: TimetableEntryDraft):
    """Serialise writers for one (day, room); held until the transaction ends."""
    TimetableRoomLock.objects.get_or_create(day_of_week=draft.day_of_week, room=draft.room)
    TimetableRoomLock.objects.select_for_update().get(day_of_week=draft.day_of_week, room=draft.room)


def _verify_written(entry: TimetableEntry):
    # a clash visible after our own write means the earlier read missed it
    clash = _overlapping(entry.day_of_week, entry.room, entry.start_time, entry.end_time, entry.pk).first()
    if clash is not None:
        logger.warning('Timetable race in %s on %s with entry %s', entry.room, entry.day_of_week, clash.pk)
        raise _conflict_error(clash)


def _race_conflict(draft: TimetableEntryDraft, exclude_id=None) -> ScheduleConflict:
    clash = find_conflict(draft.day_of_week, draft.room, draft.start_time, draft.end_time, exclude_id)
    if clash is not None:
        return _conflict_error(clash)
    return ScheduleConflict()


def place(draft: TimetableEntryDraft, actor=None) -> TimetableEntry:
    """Create a timetable entry, refusing any overlap in the same room and day."""
    _validate(draft)
    try:
        with transaction.atomic():
            _lock_room(draft)
            _check(draft)
            entry = TimetableEntry.objects.create(**{f: getattr(draft, f) for f in EDITABLE_FIELDS})
            _verify_written(entry)
            log_activity(actor, 'CREATE_TIMETABLE_ENTRY', 'TimetableEntry', entry.pk, {
                'room': entry.room,
                'day_of_week': entry.day_of_week,
            })
    except IntegrityError:
        raise _race_conflict(draft)
    logger.info('Placed %s', entry)
    return entry


def update(entry: TimetableEntry, actor=None, **changes) -> TimetableEntry:
    """Apply changes to an entry, re-checking overlap against every other entry."""
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise InvalidTimetableEntry(f'Unknown fields: {", ".join(sorted(unknown))}')

    current = TimetableEntryDraft(**{f: getattr(entry, f) for f in EDITABLE_FIELDS})
    draft = replace(current, **changes)
    _validate(draft)
    try:
        with transaction.atomic():
            _lock_room(draft)
            _check(draft, exclude_id=entry.pk)
            for field in EDITABLE_FIELDS:
                setattr(entry, field, getattr(draft, field))
            entry.save()
            _verify_written(entry)
            log_activity(actor, 'UPDATE_TIMETABLE_ENTRY', 'TimetableEntry', entry.pk, {
                'changed': sorted(changes),
            })
    except IntegrityError:
        raise _race_conflict(draft, exclude_id=entry.pk)
    return entry


def weekly_schedule(courses: Iterable[Course], semester=None, academic_year=None):
    """Entries for the given courses, Monday first, then by start time."""
    entries = TimetableEntry.objects.select_related('course', 'course__lecturer').filter(course__in=courses)
    if semester:
        entries = entries.filter(semester=semester)
    if academic_year:
        entries = entries.filter(academic_year=academic_year)
    return entries.annotate(day_index=DAY_ORDER).order_by('day_index', 'start_time', 'room')
