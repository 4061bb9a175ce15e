"""
Enrollment Transaction Orchestrator

Single entry point for course registration, withdrawal and grading.
Every operation runs in one transaction: enrollment, academic record,
notification and audit rows commit together or not at all. Notification
e-mail only leaves after commit.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from django.db import IntegrityError, transaction
from django.db.models import Sum
from django.utils import timezone

from . import notifications
from .audit import log_activity
from .domain_catalog import Course
from .domain_enrollment import AcademicRecord, Enrollment, EnrollmentStatus, RecordStatus
from .eligibility import RegistrationStatus, can_register, has_active_enrollment
from .exceptions import (
    AlreadyRegistered,
    CreditBoundsViolation,
    FeesOutstanding,
    InvalidCourse,
    RecordNotFound,
    RegistrationClosed,
)
from .fee_ledger import lock_student
from .grades import normalise_grade, upsert_record
from .terms import Term

logger = logging.getLogger(__name__)

MIN_CREDITS = 12
MAX_CREDITS = 18


@dataclass
class RegistrationResult:
    term: Term
    enrollments: List[Enrollment] = field(default_factory=list)
    total_credits: int = 0

    def as_dict(self):
        return {
            'academic_year': self.term.academic_year,
            'semester': self.term.semester,
            'total_credits': self.total_credits,
            'courses': [
                {
                    'enrollment_id': e.id,
                    'course_id': e.course_id,
                    'code': e.course.code,
                    'title': e.course.title,
                    'credits': e.course.credits,
                }
                for e in self.enrollments
            ],
        }


def _clean_course_ids(course_ids) -> List[int]:
    if not course_ids:
        raise InvalidCourse('Please select at least one course.')
    try:
        ids = [int(course_id) for course_id in course_ids]
    except (TypeError, ValueError):
        raise InvalidCourse('Course ids must be integers.')
    if len(set(ids)) != len(ids):
        raise InvalidCourse('The same course was selected more than once.')
    return ids


class EnrollmentOrchestrator:
    """Registration, withdrawal and grading for students."""

    def __init__(self, min_credits: int = MIN_CREDITS, max_credits: int = MAX_CREDITS):
        self.min_credits = min_credits
        self.max_credits = max_credits

    def _enforce_gate(self, student, term: Term, now=None):
        eligibility = can_register(student, term, now)
        if eligibility.reason == RegistrationStatus.COMPLETED:
            raise AlreadyRegistered()
        if eligibility.reason == RegistrationStatus.CLOSED:
            raise RegistrationClosed()
        if eligibility.reason == RegistrationStatus.FEES_OUTSTANDING:
            raise FeesOutstanding(
                eligibility.message,
                outstanding_amount=str(eligibility.outstanding_amount),
            )
        return eligibility

    def _load_courses(self, course_ids) -> List[Course]:
        ids = _clean_course_ids(course_ids)
        courses = {c.pk: c for c in Course.objects.filter(pk__in=ids, is_active=True)}
        missing = [course_id for course_id in ids if course_id not in courses]
        if missing:
            raise InvalidCourse(invalid_course_ids=missing)
        return [courses[course_id] for course_id in ids]

    def register(self, student, course_ids: Iterable, term: Term, now=None, actor=None) -> RegistrationResult:
        """
        Register a student for a set of courses in one term.

        Args:
            student: The student (auth user)
            course_ids: Ids of the courses to take; must be distinct
            term: Term being registered for
            now: Point in time for the registration window check
            actor: User performing the action (default: the student)

        Returns:
            RegistrationResult with the ACTIVE enrollments and credit total

        Raises:
            AlreadyRegistered, RegistrationClosed, FeesOutstanding,
            InvalidCourse, CreditBoundsViolation
        """
        self._enforce_gate(student, term, now)
        courses = self._load_courses(course_ids)

        total_credits = sum(course.credits for course in courses)
        if total_credits < self.min_credits or total_credits > self.max_credits:
            logger.warning('Student %s selected %s credits', student.pk, total_credits)
            raise CreditBoundsViolation(
                f'Total credits must be between {self.min_credits} and {self.max_credits}. '
                f'Selected: {total_credits}',
                total_credits=total_credits,
            )

        result = RegistrationResult(term=term, total_credits=total_credits)
        try:
            with transaction.atomic():
                lock_student(student)
                if has_active_enrollment(student, term):
                    raise AlreadyRegistered()

                for course in courses:
                    result.enrollments.append(self._enroll(student, course, term))
                    AcademicRecord.objects.get_or_create(
                        student=student,
                        course=course,
                        **term.as_filter(),
                        defaults={'status': RecordStatus.IN_PROGRESS},
                    )

                notifications.registration_completed(student, term, len(courses), total_credits)
                log_activity(actor or student, 'REGISTER_COURSES', 'Enrollment', student.pk, {
                    'term': str(term),
                    'course_ids': [c.pk for c in courses],
                    'total_credits': total_credits,
                })
        except IntegrityError:
            # a concurrent registration committed first
            logger.warning('Concurrent registration for student %s in %s', student.pk, term)
            raise AlreadyRegistered()

        logger.info('Student %s registered %s courses (%s credits) for %s',
                    student.pk, len(courses), total_credits, term)
        return result

    def _enroll(self, student, course, term: Term) -> Enrollment:
        dropped = Enrollment.objects.filter(
            student=student,
            course=course,
            status=EnrollmentStatus.DROPPED,
            **term.as_filter(),
        ).first()
        if dropped is not None:
            dropped.status = EnrollmentStatus.ACTIVE
            dropped.enrollment_date = timezone.now()
            dropped.save(update_fields=['status', 'enrollment_date', 'updated_at'])
            return dropped
        return Enrollment.objects.create(
            student=student,
            course=course,
            status=EnrollmentStatus.ACTIVE,
            **term.as_filter(),
        )

    def registration_overview(self, student, term: Term, now=None) -> dict:
        eligibility = can_register(student, term, now)
        enrolled_ids = set(
            Enrollment.objects.filter(student=student, status=EnrollmentStatus.ACTIVE, **term.as_filter())
            .values_list('course_id', flat=True)
        )
        current_credits = Course.objects.filter(pk__in=enrolled_ids).aggregate(c=Sum('credits'))['c'] or 0
        courses = Course.objects.filter(is_active=True).select_related('lecturer').order_by('code')
        return {
            'academic_year': term.academic_year,
            'semester': term.semester,
            **eligibility.as_dict(),
            'min_credits': self.min_credits,
            'max_credits': self.max_credits,
            'current_credits': current_credits,
            'courses': [
                {
                    'id': course.id,
                    'code': course.code,
                    'title': course.title,
                    'credits': course.credits,
                    'department': course.department,
                    'level': course.level,
                    'lecturer': course.lecturer.get_full_name() if course.lecturer else None,
                    'is_enrolled': course.id in enrolled_ids,
                }
                for course in courses
            ],
        }

    @transaction.atomic
    def withdraw(self, student, course, term: Term, actor=None) -> Enrollment:
        enrollment = Enrollment.objects.select_for_update().filter(
            student=student,
            course=course,
            status=EnrollmentStatus.ACTIVE,
            **term.as_filter(),
        ).first()
        if enrollment is None:
            raise RecordNotFound('No active enrollment for this course.')
        enrollment.status = EnrollmentStatus.DROPPED
        enrollment.save(update_fields=['status', 'updated_at'])
        log_activity(actor or student, 'WITHDRAW_COURSE', 'Enrollment', enrollment.pk, {
            'course': course.code,
            'term': str(term),
        })
        return enrollment

    def _grade(self, student, course, term: Term, grade, points, comments, score, actor):
        grade, points = normalise_grade(grade, points, score)
        record, changed = upsert_record(student, course, term, grade, points, comments)

        completed = Enrollment.objects.filter(
            student=student,
            course=course,
            status=EnrollmentStatus.ACTIVE,
            **term.as_filter(),
        ).update(status=EnrollmentStatus.COMPLETED, updated_at=timezone.now())

        if changed:
            notifications.grade_posted(student, course, record)
            log_activity(actor, 'RECORD_GRADE', 'AcademicRecord', record.pk, {
                'student': student.pk,
                'course': course.code,
                'grade': grade,
                'points': str(points) if points is not None else None,
                'enrollment_completed': bool(completed),
            })
        return record

    @transaction.atomic
    def record_grade(self, student, course, term: Term, grade=None, points=None, comments='',
                     score=None, actor=None) -> AcademicRecord:
        """Upsert one grade. Re-submitting the same grade changes nothing."""
        return self._grade(student, course, term, grade, points, comments, score, actor)

    @transaction.atomic
    def record_grades(self, course, entries, term: Term, actor=None) -> List[AcademicRecord]:
        """
        Grade a batch of students for one course.

        Each entry is a mapping with student_id and grade/points/score/comments.
        Every student must hold an enrollment in the course for the term; one
        bad entry rolls back the whole batch.
        """
        enrollments = {
            e.student_id: e
            for e in Enrollment.objects.select_related('student').filter(
                course=course,
                status__in=[EnrollmentStatus.ACTIVE, EnrollmentStatus.COMPLETED],
                **term.as_filter(),
            )
        }
        records = []
        for entry in entries:
            enrollment = enrollments.get(_as_int(entry.get('student_id')))
            if enrollment is None:
                raise RecordNotFound(
                    f'Student is not enrolled in {course.code} for {term}.',
                    student_id=entry.get('student_id'),
                )
            records.append(self._grade(
                enrollment.student,
                course,
                term,
                entry.get('grade'),
                entry.get('points'),
                entry.get('comments'),
                entry.get('score'),
                actor,
            ))
        logger.info('Recorded %s grades for %s (%s)', len(records), course.code, term)
        return records


def _as_int(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


# Singleton instance for easy import
orchestrator = EnrollmentOrchestrator()
