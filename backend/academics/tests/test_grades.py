from decimal import Decimal

import pytest
from django.test import TestCase

from academics.domain_enrollment import AcademicRecord, RecordStatus
from academics.exceptions import InvalidGrade
from academics.grades import compute_gpa, grade_points, letter_grade, normalise_grade, term_breakdown

from .factories import NEXT_TERM, TERM, make_course, make_student


@pytest.mark.parametrize('score, letter, points', [
    (100, 'A', '4.00'),
    (80, 'A', '4.00'),
    (79.99, 'B+', '3.75'),
    (75, 'B+', '3.75'),
    (70, 'B', '3.50'),
    (65, 'C+', '3.00'),
    (60, 'C', '2.50'),
    (55, 'D+', '2.00'),
    (50, 'D', '1.50'),
    (45, 'E', '1.00'),
    (44.5, 'F', '0.00'),
    (0, 'F', '0.00'),
])
def test_score_scale(score, letter, points):
    assert letter_grade(score) == letter
    assert grade_points(score) == Decimal(points)


@pytest.mark.parametrize('score', [-1, 100.5, 'abc', None])
def test_score_out_of_range(score):
    with pytest.raises(InvalidGrade):
        letter_grade(score)


def test_normalise_prefers_score():
    assert normalise_grade('A', '4.0', score=52) == ('D', Decimal('1.50'))


def test_normalise_letter_takes_points_from_scale():
    assert normalise_grade(' b+ ') == ('B+', Decimal('3.75'))


def test_normalise_keeps_explicit_points():
    assert normalise_grade('A', 4) == ('A', Decimal('4.00'))


def test_normalise_unknown_letter_without_points_is_ungraded():
    assert normalise_grade('I') == ('I', None)


@pytest.mark.parametrize('grade, points', [('', None), (None, None), ('A', '9'), ('A', '-1'), ('A', 'x')])
def test_normalise_rejects(grade, points):
    with pytest.raises(InvalidGrade):
        normalise_grade(grade, points)


class GPATests(TestCase):
    def setUp(self):
        self.student = make_student()

    def record(self, code, credits, grade, points, term=TERM):
        return AcademicRecord.objects.create(
            student=self.student,
            course=make_course(code, credits=credits),
            grade=grade,
            points=None if points is None else Decimal(points),
            status=RecordStatus.COMPLETED if grade else RecordStatus.IN_PROGRESS,
            **term.as_filter(),
        )

    def test_no_records(self):
        result = compute_gpa(self.student)
        self.assertEqual(result.gpa, 0.0)
        self.assertEqual(result.total_credits, 0)

    def test_credit_weighted(self):
        self.record('CS101', 4, 'A', '4.00')
        self.record('CS102', 3, 'C+', '3.00')
        result = compute_gpa(self.student)
        self.assertEqual(result.total_credits, 7)
        self.assertAlmostEqual(result.gpa, 25 / 7)
        self.assertEqual(result.as_dict(), {'gpa': 3.57, 'total_credits': 7})

    def test_failed_course_counts_ungraded_does_not(self):
        self.record('CS101', 3, 'A', '4.00')
        self.record('CS102', 3, 'F', '0.00')
        self.record('CS103', 3, None, None)
        self.record('CS104', 3, 'I', None)
        result = compute_gpa(self.student)
        self.assertEqual(result.total_credits, 6)
        self.assertAlmostEqual(result.gpa, 2.0)

    def test_term_breakdown_is_oldest_first(self):
        self.record('CS201', 3, 'B', '3.50', term=NEXT_TERM)
        self.record('CS101', 3, 'A', '4.00')
        self.record('CS102', 3, 'B', '3.50')

        terms = term_breakdown(self.student)

        self.assertEqual([t['semester'] for t in terms], [TERM.semester, NEXT_TERM.semester])
        self.assertEqual(terms[0]['gpa'], 3.75)
        self.assertEqual(terms[0]['total_credits'], 6)
        self.assertEqual([c['code'] for c in terms[0]['courses']], ['CS101', 'CS102'])
        self.assertEqual(terms[1]['gpa'], 3.5)
