from decimal import Decimal
from unittest import mock

from django.test import TestCase

from academics.domain_enrollment import AcademicRecord, Enrollment, EnrollmentStatus, RecordStatus
from academics.domain_notifications import Notification
from academics.eligibility import Eligibility, RegistrationStatus
from academics.exceptions import (
    AlreadyRegistered,
    CreditBoundsViolation,
    FeesOutstanding,
    InvalidCourse,
    InvalidGrade,
    RecordNotFound,
    RegistrationClosed,
)
from academics.registration import orchestrator
from academics.terms import Term

from .factories import TERM, bill, cleared_student, make_course, make_student, open_window


class RegisterTests(TestCase):
    def setUp(self):
        open_window()
        self.student = cleared_student()
        self.threes = [make_course(f'CS10{i}', credits=3) for i in range(6)]
        self.two = make_course('GS101', credits=2)
        self.four = make_course('MA101', credits=4)

    def ids(self, courses):
        return [c.pk for c in courses]

    def test_eleven_credits_fails(self):
        with self.assertRaises(CreditBoundsViolation) as ctx:
            orchestrator.register(self.student, self.ids(self.threes[:3] + [self.two]), TERM)
        self.assertEqual(ctx.exception.extra['total_credits'], 11)
        self.assertFalse(Enrollment.objects.exists())

    def test_nineteen_credits_fails(self):
        with self.assertRaises(CreditBoundsViolation):
            orchestrator.register(self.student, self.ids(self.threes[:5] + [self.four]), TERM)

    def test_twelve_credits_succeeds(self):
        result = orchestrator.register(self.student, self.ids(self.threes[:4]), TERM)
        self.assertEqual(result.total_credits, 12)

    def test_eighteen_credits_succeeds_with_all_side_effects(self):
        result = orchestrator.register(self.student, self.ids(self.threes), TERM)

        self.assertEqual(result.total_credits, 18)
        self.assertEqual(
            Enrollment.objects.filter(student=self.student, status=EnrollmentStatus.ACTIVE, **TERM.as_filter()).count(),
            6,
        )
        records = AcademicRecord.objects.filter(student=self.student, **TERM.as_filter())
        self.assertEqual(records.count(), 6)
        self.assertTrue(all(r.grade is None and r.status == RecordStatus.IN_PROGRESS for r in records))

        notes = Notification.objects.filter(user=self.student, category='registration')
        self.assertEqual(notes.count(), 1)
        self.assertIn('6 courses (18 credits)', notes.get().content)

    def test_second_registration_is_refused(self):
        orchestrator.register(self.student, self.ids(self.threes[:4]), TERM)
        with self.assertRaises(AlreadyRegistered):
            orchestrator.register(self.student, self.ids(self.threes[2:]), TERM)
        self.assertEqual(Enrollment.objects.count(), 4)

    def test_concurrent_registration_loses_on_the_constraint(self):
        orchestrator.register(self.student, self.ids(self.threes[:4]), TERM)

        # the second request passed both checks before the first one committed
        open_gate = Eligibility(True, RegistrationStatus.OPEN)
        with mock.patch('academics.registration.can_register', return_value=open_gate), \
                mock.patch('academics.registration.has_active_enrollment', return_value=False):
            with self.assertRaises(AlreadyRegistered):
                orchestrator.register(self.student, self.ids(self.threes[:4]), TERM)

        self.assertEqual(Enrollment.objects.count(), 4)
        self.assertEqual(AcademicRecord.objects.count(), 4)
        self.assertEqual(Notification.objects.filter(category='registration').count(), 1)

    def test_unknown_inactive_and_duplicate_courses(self):
        inactive = make_course('OLD101', credits=3, is_active=False)
        for course_ids in (
            self.ids(self.threes[:3]) + [99999],
            self.ids(self.threes[:3]) + [inactive.pk],
            self.ids(self.threes[:4]) + [self.threes[0].pk],
            [],
        ):
            with self.assertRaises(InvalidCourse):
                orchestrator.register(self.student, course_ids, TERM)
        self.assertFalse(Enrollment.objects.exists())

    def test_closed_period(self):
        with self.assertRaises(RegistrationClosed):
            orchestrator.register(self.student, self.ids(self.threes[:4]), Term('2025/2026', '1st Semester'))

    def test_fees_outstanding(self):
        debtor = make_student('yaw')
        bill(debtor, amount='18000.00')
        with self.assertRaises(FeesOutstanding) as ctx:
            orchestrator.register(debtor, self.ids(self.threes[:4]), TERM)
        self.assertEqual(ctx.exception.extra['outstanding_amount'], '18000.00')
        self.assertFalse(Notification.objects.filter(user=debtor, category='registration').exists())

    def test_withdraw_then_register_again_reuses_rows(self):
        courses = self.threes[:4]
        orchestrator.register(self.student, self.ids(courses), TERM)
        for course in courses:
            orchestrator.withdraw(self.student, course, TERM)
        self.assertEqual(Enrollment.objects.filter(status=EnrollmentStatus.DROPPED).count(), 4)

        orchestrator.register(self.student, self.ids(courses), TERM)
        self.assertEqual(Enrollment.objects.count(), 4)
        self.assertEqual(Enrollment.objects.filter(status=EnrollmentStatus.ACTIVE).count(), 4)
        self.assertEqual(AcademicRecord.objects.count(), 4)

    def test_withdraw_requires_active_enrollment(self):
        with self.assertRaises(RecordNotFound):
            orchestrator.withdraw(self.student, self.threes[0], TERM)

    def test_overview_flags_enrolled_courses(self):
        orchestrator.register(self.student, self.ids(self.threes[:4]), TERM)
        overview = orchestrator.registration_overview(self.student, TERM)

        self.assertFalse(overview['allowed'])
        self.assertEqual(overview['reason'], 'COMPLETED')
        self.assertEqual(overview['current_credits'], 12)
        enrolled = {c['code'] for c in overview['courses'] if c['is_enrolled']}
        self.assertEqual(enrolled, {c.code for c in self.threes[:4]})


class RecordGradeTests(TestCase):
    def setUp(self):
        open_window()
        self.student = cleared_student()
        self.courses = [make_course(f'CS20{i}', credits=3) for i in range(4)]
        orchestrator.register(self.student, [c.pk for c in self.courses], TERM)
        self.course = self.courses[0]

    def grade_notes(self):
        return Notification.objects.filter(user=self.student, category='grade').count()

    def test_identical_resubmission_changes_nothing(self):
        orchestrator.record_grade(self.student, self.course, TERM, grade='A', points='4.0')
        orchestrator.record_grade(self.student, self.course, TERM, grade='A', points='4.0')

        records = AcademicRecord.objects.filter(student=self.student, course=self.course, **TERM.as_filter())
        self.assertEqual(records.count(), 1)
        record = records.get()
        self.assertEqual(record.grade, 'A')
        self.assertEqual(record.points, Decimal('4.00'))
        self.assertEqual(record.status, RecordStatus.COMPLETED)
        self.assertEqual(self.grade_notes(), 1)

        enrollment = Enrollment.objects.get(student=self.student, course=self.course)
        self.assertEqual(enrollment.status, EnrollmentStatus.COMPLETED)

    def test_changed_grade_notifies_again(self):
        orchestrator.record_grade(self.student, self.course, TERM, grade='B')
        orchestrator.record_grade(self.student, self.course, TERM, grade='B+')
        record = AcademicRecord.objects.get(student=self.student, course=self.course)
        self.assertEqual(record.grade, 'B+')
        self.assertEqual(record.points, Decimal('3.75'))
        self.assertEqual(self.grade_notes(), 2)

    def test_raw_score_maps_to_letter_and_points(self):
        record = orchestrator.record_grade(self.student, self.course, TERM, score=72)
        self.assertEqual(record.grade, 'B')
        self.assertEqual(record.points, Decimal('3.50'))

    def test_grade_without_prior_enrollment_creates_record(self):
        other = make_course('CS999', credits=3)
        record = orchestrator.record_grade(self.student, other, TERM, grade='C', points='2.5')
        self.assertEqual(record.points, Decimal('2.50'))
        self.assertFalse(Enrollment.objects.filter(course=other).exists())

    def test_invalid_input(self):
        with self.assertRaises(InvalidGrade):
            orchestrator.record_grade(self.student, self.course, TERM)
        with self.assertRaises(InvalidGrade):
            orchestrator.record_grade(self.student, self.course, TERM, score=101)
        self.assertEqual(self.grade_notes(), 0)

    def test_batch_grades_every_enrolled_student(self):
        classmate = cleared_student('esi')
        orchestrator.register(classmate, [c.pk for c in self.courses], TERM)

        records = orchestrator.record_grades(self.course, [
            {'student_id': self.student.pk, 'grade': 'A'},
            {'student_id': classmate.pk, 'score': 58},
        ], TERM)

        self.assertEqual([r.grade for r in records], ['A', 'D+'])
        self.assertEqual(
            Enrollment.objects.filter(course=self.course, status=EnrollmentStatus.COMPLETED).count(),
            2,
        )

    def test_batch_is_all_or_nothing(self):
        stranger = make_student('kwame')
        with self.assertRaises(RecordNotFound):
            orchestrator.record_grades(self.course, [
                {'student_id': self.student.pk, 'grade': 'A'},
                {'student_id': stranger.pk, 'grade': 'B'},
            ], TERM)

        record = AcademicRecord.objects.get(student=self.student, course=self.course)
        self.assertIsNone(record.grade)
        self.assertEqual(Enrollment.objects.get(student=self.student, course=self.course).status,
                         EnrollmentStatus.ACTIVE)
        self.assertEqual(self.grade_notes(), 0)
