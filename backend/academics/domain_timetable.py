"""Domain Timetable Models
DayOfWeek, ClassType, TimetableEntry, TimetableRoomLock
"""
from django.db import models
from django.db.models import Q

from .domain_catalog import Course

__all__ = [
    'DayOfWeek', 'ClassType', 'TimetableEntry', 'TimetableRoomLock'
]


class DayOfWeek(models.TextChoices):
    MONDAY = 'MONDAY', 'Monday'
    TUESDAY = 'TUESDAY', 'Tuesday'
    WEDNESDAY = 'WEDNESDAY', 'Wednesday'
    THURSDAY = 'THURSDAY', 'Thursday'
    FRIDAY = 'FRIDAY', 'Friday'
    SATURDAY = 'SATURDAY', 'Saturday'
    SUNDAY = 'SUNDAY', 'Sunday'


class ClassType(models.TextChoices):
    LECTURE = 'LECTURE', 'Lecture'
    TUTORIAL = 'TUTORIAL', 'Tutorial'
    LAB = 'LAB', 'Lab'
    SEMINAR = 'SEMINAR', 'Seminar'
    EXAM = 'EXAM', 'Exam'


class TimetableEntry(models.Model):
    id = models.BigAutoField(primary_key=True)
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='timetable_entries')
    day_of_week = models.CharField(max_length=10, choices=DayOfWeek.choices)
    start_time = models.TimeField()
    end_time = models.TimeField()
    room = models.CharField(max_length=100)
    class_type = models.CharField(max_length=10, choices=ClassType.choices, default=ClassType.LECTURE)
    semester = models.CharField(max_length=50, null=True, blank=True)
    academic_year = models.CharField(max_length=20, null=True, blank=True)
    notes = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'timetable_entry'
        ordering = ['day_of_week', 'start_time']
        # overlap itself is enforced by the conflict detector; these catch
        # identical-slot races that slip past the read
        constraints = [
            models.UniqueConstraint(fields=['day_of_week', 'room', 'start_time'], name='uniq_timetable_room_start'),
            models.UniqueConstraint(fields=['day_of_week', 'room', 'end_time'], name='uniq_timetable_room_end'),
            models.CheckConstraint(condition=Q(start_time__lt=models.F('end_time')), name='timetable_start_before_end'),
        ]
        indexes = [
            models.Index(fields=['day_of_week', 'room'], name='timetable_day_room_idx'),
        ]

    def __str__(self):
        return f"{self.course.code} {self.day_of_week} {self.start_time:%H:%M}-{self.end_time:%H:%M} @ {self.room}"


class TimetableRoomLock(models.Model):
    """One row per (day, room); placements in that slot lock it before checking overlap."""
    day_of_week = models.CharField(max_length=10, choices=DayOfWeek.choices)
    room = models.CharField(max_length=100)

    class Meta:
        db_table = 'timetable_room_lock'
        constraints = [
            models.UniqueConstraint(fields=['day_of_week', 'room'], name='uniq_timetable_room_lock'),
        ]

    def __str__(self):
        return f"{self.day_of_week} @ {self.room}"
