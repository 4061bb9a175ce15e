"""Domain Enrollment Models
Enrollment, AcademicRecord, RegistrationPeriod
"""
from django.contrib.auth.models import User
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

from .domain_catalog import Course

__all__ = [
    'EnrollmentStatus', 'Enrollment', 'RecordStatus', 'AcademicRecord', 'RegistrationPeriod'
]


class EnrollmentStatus(models.TextChoices):
    ACTIVE = 'ACTIVE', 'Active'
    COMPLETED = 'COMPLETED', 'Completed'
    DROPPED = 'DROPPED', 'Dropped'
    FAILED = 'FAILED', 'Failed'


class Enrollment(models.Model):
    id = models.BigAutoField(primary_key=True)
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name='enrollments')
    course = models.ForeignKey(Course, on_delete=models.PROTECT, related_name='enrollments')
    academic_year = models.CharField(max_length=20)
    semester = models.CharField(max_length=50)
    status = models.CharField(max_length=20, choices=EnrollmentStatus.choices, default=EnrollmentStatus.ACTIVE)
    enrollment_date = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'enrollment'
        ordering = ['-enrollment_date', 'id']
        constraints = [
            models.UniqueConstraint(
                fields=['student', 'course', 'academic_year', 'semester'],
                name='uniq_enrollment_student_course_term',
            ),
            models.UniqueConstraint(
                fields=['student', 'course'],
                condition=Q(status='ACTIVE'),
                name='uniq_active_enrollment_student_course',
            ),
        ]
        indexes = [
            models.Index(fields=['student', 'academic_year', 'semester', 'status'], name='enrollment_student_term_idx'),
        ]

    def __str__(self):
        return f"{self.student.username} - {self.course.code} ({self.academic_year} {self.semester}) {self.status}"


class RecordStatus(models.TextChoices):
    IN_PROGRESS = 'IN_PROGRESS', 'In progress'
    COMPLETED = 'COMPLETED', 'Completed'


class AcademicRecord(models.Model):
    id = models.BigAutoField(primary_key=True)
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name='academic_records')
    course = models.ForeignKey(Course, on_delete=models.PROTECT, related_name='academic_records')
    semester = models.CharField(max_length=50)
    academic_year = models.CharField(max_length=20)
    grade = models.CharField(max_length=5, null=True, blank=True)
    points = models.DecimalField(
        max_digits=4,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(5)],
    )
    comments = models.TextField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=RecordStatus.choices, default=RecordStatus.IN_PROGRESS)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'academic_record'
        ordering = ['academic_year', 'semester', 'id']
        constraints = [
            models.UniqueConstraint(
                fields=['student', 'course', 'semester', 'academic_year'],
                name='uniq_academic_record_student_course_term',
            ),
        ]

    def __str__(self):
        return f"{self.student.username} - {self.course.code} {self.grade or '-'} ({self.academic_year} {self.semester})"


class RegistrationPeriod(models.Model):
    id = models.BigAutoField(primary_key=True)
    name = models.CharField(max_length=255)
    description = models.TextField(null=True, blank=True)
    academic_year = models.CharField(max_length=20)
    semester = models.CharField(max_length=50)
    # null level/department applies the period to every student
    level = models.CharField(max_length=20, null=True, blank=True)
    department = models.CharField(max_length=255, null=True, blank=True)
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'registration_period'
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(
                condition=Q(start_date__lt=models.F('end_date')),
                name='registration_period_start_before_end',
            ),
        ]
        indexes = [
            models.Index(fields=['academic_year', 'semester', 'is_active'], name='reg_period_term_active_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.academic_year} {self.semester})"
