from django.contrib import admin

from .domain_catalog import Course, Programme, StudentProfile
from .domain_enrollment import AcademicRecord, Enrollment, RegistrationPeriod
from .domain_fees import FeeLineItem, Payment
from .domain_logs import ActivityLog, ErrorLog
from .domain_notifications import Notification
from .domain_timetable import TimetableEntry


@admin.register(Programme)
class ProgrammeAdmin(admin.ModelAdmin):
    list_display = ('code', 'name', 'department', 'min_admission_grade')
    search_fields = ('code', 'name')


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ('code', 'title', 'credits', 'department', 'level', 'lecturer', 'is_active')
    search_fields = ('code', 'title', 'lecturer__username')
    list_filter = ('is_active', 'department', 'level')


@admin.register(StudentProfile)
class StudentProfileAdmin(admin.ModelAdmin):
    list_display = ('student_number', 'user', 'programme', 'department', 'level')
    search_fields = ('student_number', 'user__username', 'user__first_name', 'user__last_name', 'programme')
    list_filter = ('level', 'department')


@admin.register(FeeLineItem)
class FeeLineItemAdmin(admin.ModelAdmin):
    list_display = ('id', 'student', 'component', 'amount', 'due_date', 'is_paid', 'academic_year', 'semester')
    search_fields = ('student__username', 'description')
    list_filter = ('component', 'is_paid', 'academic_year', 'semester')


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ('id', 'student', 'fee', 'amount', 'status', 'method', 'reference', 'created_at')
    search_fields = ('student__username', 'reference')
    list_filter = ('status', 'method')
    # status only moves through the fee ledger
    readonly_fields = ('fee', 'student', 'amount', 'status', 'created_at', 'updated_at')

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'student', 'course', 'academic_year', 'semester', 'status', 'enrollment_date')
    search_fields = ('student__username', 'course__code')
    list_filter = ('status', 'academic_year', 'semester')


@admin.register(AcademicRecord)
class AcademicRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'student', 'course', 'academic_year', 'semester', 'grade', 'points', 'status')
    search_fields = ('student__username', 'course__code')
    list_filter = ('status', 'academic_year', 'semester')


@admin.register(RegistrationPeriod)
class RegistrationPeriodAdmin(admin.ModelAdmin):
    list_display = ('name', 'academic_year', 'semester', 'level', 'department', 'start_date', 'end_date', 'is_active')
    list_filter = ('is_active', 'academic_year', 'semester')


@admin.register(TimetableEntry)
class TimetableEntryAdmin(admin.ModelAdmin):
    list_display = ('course', 'day_of_week', 'start_time', 'end_time', 'room', 'class_type')
    search_fields = ('course__code', 'room')
    list_filter = ('day_of_week', 'class_type')


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'title', 'type', 'category', 'is_read', 'created_at')
    search_fields = ('user__username', 'title')
    list_filter = ('type', 'is_read')


# register logs
@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'action', 'entity', 'entity_id', 'path', 'method', 'status_code', 'created_at')
    readonly_fields = ('created_at',)
    search_fields = ('user__username', 'action', 'entity', 'path')


@admin.register(ErrorLog)
class ErrorLogAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'path', 'method', 'message', 'created_at')
    readonly_fields = ('created_at',)
    search_fields = ('user__username', 'path', 'message')
