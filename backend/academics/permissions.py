"""Role checks. Roles are auth Groups: Admin, Lecturer, Student."""
from rest_framework import permissions

ADMIN = 'Admin'
LECTURER = 'Lecturer'
STUDENT = 'Student'
ROLES = (ADMIN, LECTURER, STUDENT)


def in_group(user, name) -> bool:
    return bool(user and user.is_authenticated and user.groups.filter(name__iexact=name).exists())


def is_admin(user) -> bool:
    if not user or not user.is_authenticated:
        return False
    if user.is_superuser:
        return True
    return in_group(user, ADMIN)


def is_lecturer(user) -> bool:
    return in_group(user, LECTURER)


def is_student(user) -> bool:
    return in_group(user, STUDENT)


class IsAdmin(permissions.BasePermission):
    """Admin group or superuser"""

    def has_permission(self, request, view):
        return is_admin(request.user)


class IsAdminOrReadOnly(permissions.BasePermission):
    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return is_admin(user)


class IsLecturerOrAdmin(permissions.BasePermission):
    def has_permission(self, request, view):
        return is_admin(request.user) or is_lecturer(request.user)


class IsStudent(permissions.BasePermission):
    def has_permission(self, request, view):
        return is_student(request.user)


class IsCourseLecturerOrAdmin(permissions.BasePermission):
    """Lecturers may only act on courses they teach. Admin sees all."""

    def has_permission(self, request, view):
        return is_admin(request.user) or is_lecturer(request.user)

    def has_object_permission(self, request, view, obj):
        user = request.user
        if is_admin(user):
            return True
        course = getattr(obj, 'course', obj)
        return course.lecturer_id == user.pk
