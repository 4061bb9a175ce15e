"""A student's term from billing to transcript, through the public API."""
from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from academics.domain_enrollment import AcademicRecord, Enrollment, EnrollmentStatus
from academics.domain_fees import FeeComponent
from academics.domain_logs import ActivityLog
from academics.domain_notifications import Notification
from academics.fee_structures import IT

from .factories import TERM, make_course, make_student, make_user

TERM_PARAMS = {'academic_year': TERM.academic_year, 'semester': TERM.semester}


class StudentTermTests(APITestCase):
    def setUp(self):
        self.admin = make_user('registrar', 'Admin')
        self.lecturer = make_user('mensah', 'Lecturer')
        self.student = make_student('kofi', programme=IT)
        self.courses = [
            make_course('IT101', credits=3, lecturer=self.lecturer),
            make_course('IT102', credits=3, lecturer=self.lecturer),
            make_course('IT103', credits=4, lecturer=self.lecturer),
            make_course('IT104', credits=4, lecturer=self.lecturer),
        ]

    def as_admin(self):
        self.client.force_authenticate(self.admin)

    def as_student(self):
        self.client.force_authenticate(self.student)

    def test_billing_to_transcript(self):
        self.as_admin()
        opened = self.client.post(reverse('registration-periods-list'), {
            'name': 'Semester 1 registration',
            'start_date': '2000-01-01T00:00:00Z',
            'end_date': '2100-01-01T00:00:00Z',
            **TERM_PARAMS,
        })
        self.assertEqual(opened.status_code, status.HTTP_201_CREATED)

        billed = self.client.post(reverse('fees-schedule'), {'student': self.student.pk, **TERM_PARAMS})
        self.assertEqual(billed.status_code, status.HTTP_201_CREATED)
        self.assertEqual(billed.data['total'], Decimal('26100'))
        self.assertEqual(billed.data['billed_total'], Decimal('29100'))

        # nothing paid yet
        self.as_student()
        blocked = self.client.get(reverse('registration'), TERM_PARAMS).data
        self.assertEqual(blocked['reason'], 'FEES_OUTSTANDING')

        tuition = self.student.fee_items.get(component=FeeComponent.TUITION)
        paid = self.client.post(reverse('payments-list'), {'fee': tuition.pk, 'amount': '9000.00'})
        self.assertEqual(paid.status_code, status.HTTP_201_CREATED)

        self.as_admin()
        self.client.post(reverse('payments-confirm', args=[paid.data['id']]))

        self.as_student()
        overview = self.client.get(reverse('registration'), TERM_PARAMS).data
        self.assertTrue(overview['allowed'])

        registered = self.client.post(reverse('registration'), {
            'course_ids': [c.pk for c in self.courses], **TERM_PARAMS,
        }, format='json')
        self.assertEqual(registered.status_code, status.HTTP_201_CREATED)
        self.assertEqual(registered.data['total_credits'], 14)
        self.assertEqual(
            Enrollment.objects.filter(student=self.student, status=EnrollmentStatus.ACTIVE).count(), 4,
        )

        self.client.force_authenticate(self.lecturer)
        for course, score in zip(self.courses, ('85', '72', '61', '40')):
            graded = self.client.post(reverse('course-grades', args=[course.pk]), {
                'grades': [{'student_id': self.student.pk, 'score': score}], **TERM_PARAMS,
            }, format='json')
            self.assertEqual(graded.status_code, status.HTTP_200_OK)

        self.as_student()
        transcript = self.client.get(reverse('transcript')).data
        # (4.00*3 + 3.50*3 + 2.50*4 + 0.00*4) / 14
        self.assertEqual(transcript['total_credits'], 14)
        self.assertEqual(transcript['gpa'], 2.32)
        self.assertEqual([c['grade'] for c in transcript['terms'][0]['courses']], ['A', 'B', 'C', 'F'])

        self.assertEqual(AcademicRecord.objects.filter(student=self.student).count(), 4)
        self.assertEqual(
            Enrollment.objects.filter(student=self.student, status=EnrollmentStatus.COMPLETED).count(), 4,
        )
        categories = set(Notification.objects.filter(user=self.student).values_list('category', flat=True))
        self.assertEqual(categories, {'fee', 'payment', 'registration', 'grade'})
        self.assertTrue(ActivityLog.objects.filter(action='REGISTER_COURSES').exists())
