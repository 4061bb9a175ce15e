"""Serializers for timetable entries and notifications"""
from rest_framework import serializers

from .domain_notifications import Notification
from .domain_timetable import TimetableEntry


class TimetableEntrySerializer(serializers.ModelSerializer):
    """
    Timetable entry
    - Writes go through timetable.place / timetable.update, never save()
    """
    course_code = serializers.CharField(source='course.code', read_only=True)
    course_title = serializers.CharField(source='course.title', read_only=True)

    class Meta:
        model = TimetableEntry
        fields = [
            'id', 'course', 'course_code', 'course_title', 'day_of_week', 'start_time',
            'end_time', 'room', 'class_type', 'semester', 'academic_year', 'notes',
        ]
        # overlap and ordering are checked by the conflict detector
        validators = []


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ['id', 'title', 'content', 'type', 'category', 'is_read', 'created_at']
        read_only_fields = ['id', 'title', 'content', 'type', 'category', 'created_at']
