"""Domain Catalog Models
Programme, Course, StudentProfile
"""
from django.contrib.auth.models import User
from django.core.validators import MinValueValidator
from django.db import models

__all__ = [
    'Programme', 'Course', 'StudentProfile'
]


class Programme(models.Model):
    id = models.AutoField(primary_key=True)
    code = models.CharField(max_length=20, unique=True, db_index=True)
    name = models.CharField(max_length=255, unique=True, help_text="Canonical name, e.g. BACHELOR OF SCIENCE (COMPUTER SCIENCE)")
    department = models.CharField(max_length=255, null=True, blank=True)
    min_admission_grade = models.CharField(max_length=10, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'programme'
        ordering = ['name']

    def __str__(self):
        return f"{self.code} - {self.name}"


class Course(models.Model):
    id = models.AutoField(primary_key=True)
    code = models.CharField(max_length=20, unique=True, db_index=True)
    title = models.CharField(max_length=255)
    description = models.TextField(null=True, blank=True)
    credits = models.PositiveSmallIntegerField(validators=[MinValueValidator(1)])
    department = models.CharField(max_length=255, null=True, blank=True)
    level = models.CharField(max_length=20, null=True, blank=True)
    semester = models.CharField(max_length=50, null=True, blank=True)
    academic_year = models.CharField(max_length=20, null=True, blank=True)
    lecturer = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='courses_taught')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'course'
        ordering = ['code']
        indexes = [
            models.Index(fields=['is_active'], name='course_is_active_idx'),
            models.Index(fields=['lecturer'], name='course_lecturer_idx'),
        ]

    def __str__(self):
        return f"{self.code} {self.title} ({self.credits} cr)"


class StudentProfile(models.Model):
    id = models.BigAutoField(primary_key=True)
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='student_profile')
    student_number = models.CharField(max_length=50, unique=True, db_index=True)
    programme = models.CharField(max_length=255, help_text="Programme name as entered on the application")
    department = models.CharField(max_length=255, null=True, blank=True)
    level = models.CharField(max_length=20, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'student_profile'

    def __str__(self):
        return f"{self.student_number} - {self.user.get_full_name() or self.user.username}"
