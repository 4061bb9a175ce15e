"""
Grade / Academic Record Aggregator

Keeps one AcademicRecord per (student, course, semester, academic_year)
and derives credit-weighted GPA figures from the graded records.

A record contributes to GPA only when it has a non-empty grade AND
non-null points. An F with 0.00 points therefore still counts.
"""
import logging
from collections import OrderedDict
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional, Tuple

from django.db import IntegrityError, transaction

from .domain_enrollment import AcademicRecord, RecordStatus
from .exceptions import InvalidGrade
from .terms import Term

logger = logging.getLogger(__name__)

# (minimum percentage, letter, points), highest first
SCORE_SCALE: Tuple[Tuple[int, str, Decimal], ...] = (
    (80, 'A', Decimal('4.00')),
    (75, 'B+', Decimal('3.75')),
    (70, 'B', Decimal('3.50')),
    (65, 'C+', Decimal('3.00')),
    (60, 'C', Decimal('2.50')),
    (55, 'D+', Decimal('2.00')),
    (50, 'D', Decimal('1.50')),
    (45, 'E', Decimal('1.00')),
    (0, 'F', Decimal('0.00')),
)

LETTER_POINTS = {letter: points for _, letter, points in SCORE_SCALE}


def _scale_row(score):
    try:
        score = Decimal(str(score))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidGrade(f'Invalid score: {score!r}')
    if score < 0 or score > 100:
        raise InvalidGrade('Score must be between 0 and 100.')
    for minimum, letter, points in SCORE_SCALE:
        if score >= minimum:
            return letter, points
    return SCORE_SCALE[-1][1:]


def letter_grade(score) -> str:
    return _scale_row(score)[0]


def grade_points(score) -> Decimal:
    return _scale_row(score)[1]


def normalise_grade(grade=None, points=None, score=None) -> Tuple[str, Optional[Decimal]]:
    """
    Resolve what a lecturer submitted into (grade, points).

    A raw percentage wins over a letter; a known letter without points takes
    the points from the scale.
    """
    if score not in (None, ''):
        return _scale_row(score)

    grade = (grade or '').strip().upper()
    if not grade:
        raise InvalidGrade('A grade or score is required.')
    if points in (None, ''):
        points = LETTER_POINTS.get(grade)
    else:
        try:
            points = Decimal(str(points)).quantize(Decimal('0.01'))
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidGrade(f'Invalid points: {points!r}')
        if points < 0 or points > 5:
            raise InvalidGrade('Points must be between 0 and 5.')
    return grade, points


@dataclass(frozen=True)
class GPAResult:
    gpa: float
    total_credits: int

    def as_dict(self):
        return {'gpa': round(self.gpa, 2), 'total_credits': self.total_credits}


def graded(records: Iterable[AcademicRecord]) -> List[AcademicRecord]:
    return [r for r in records if r.grade and r.points is not None]


def weighted_gpa(records: Iterable[AcademicRecord]) -> GPAResult:
    total_points = Decimal('0')
    total_credits = 0
    for record in graded(records):
        total_points += record.points * record.course.credits
        total_credits += record.course.credits
    if total_credits == 0:
        return GPAResult(0.0, 0)
    return GPAResult(float(total_points / total_credits), total_credits)


def _student_records(student):
    return (
        AcademicRecord.objects
        .filter(student=student)
        .select_related('course')
        .order_by('academic_year', 'semester', 'course__code')
    )


def compute_gpa(student) -> GPAResult:
    return weighted_gpa(_student_records(student))


def term_breakdown(student) -> List[dict]:
    """Per-term GPA with the course rows that make it up, oldest term first."""
    terms = OrderedDict()
    for record in _student_records(student):
        terms.setdefault((record.academic_year, record.semester), []).append(record)

    breakdown = []
    for (academic_year, semester), records in terms.items():
        result = weighted_gpa(records)
        breakdown.append({
            'academic_year': academic_year,
            'semester': semester,
            'gpa': round(result.gpa, 2),
            'total_credits': result.total_credits,
            'courses': [
                {
                    'course_id': r.course_id,
                    'code': r.course.code,
                    'title': r.course.title,
                    'credits': r.course.credits,
                    'grade': r.grade,
                    'points': r.points,
                    'status': r.status,
                }
                for r in records
            ],
        })
    return breakdown


def upsert_record(student, course, term: Term, grade, points, comments=None) -> Tuple[AcademicRecord, bool]:
    """
    Insert or update the record for (student, course, term).

    Runs inside the caller's transaction. Returns (record, changed); an
    identical re-submission writes nothing and reports changed=False.
    """
    comments = comments or None
    key = dict(student=student, course=course, **term.as_filter())

    record = AcademicRecord.objects.select_for_update().filter(**key).first()
    if record is None:
        try:
            with transaction.atomic():
                record = AcademicRecord.objects.create(
                    grade=grade,
                    points=points,
                    comments=comments,
                    status=RecordStatus.COMPLETED,
                    **key,
                )
            return record, True
        except IntegrityError:
            # concurrent insert won; fall through to update
            logger.info('Academic record for %s/%s created concurrently; updating', student.pk, course.pk)
            record = AcademicRecord.objects.select_for_update().get(**key)

    changed = (
        record.grade != grade
        or record.points != points
        or (record.comments or None) != comments
        or record.status != RecordStatus.COMPLETED
    )
    if changed:
        record.grade = grade
        record.points = points
        record.comments = comments
        record.status = RecordStatus.COMPLETED
        record.save(update_fields=['grade', 'points', 'comments', 'status', 'updated_at'])
    return record, changed
