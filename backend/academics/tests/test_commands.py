from io import StringIO

from django.contrib.auth.models import Group, User
from django.core.management import CommandError, call_command
from django.test import TestCase

from academics.domain_enrollment import RegistrationPeriod
from academics.domain_fees import FeeLineItem

from .factories import TERM, bill, make_student, pay


def run(*args, **options):
    out = StringIO()
    call_command(*args, stdout=out, **options)
    return out.getvalue()


class SeedRolesTests(TestCase):
    def test_groups_and_users(self):
        run('seed_roles', admin_username='root', admin_password='s3cret-pass')
        self.assertEqual(set(Group.objects.values_list('name', flat=True)), {'Admin', 'Lecturer', 'Student'})
        root = User.objects.get(username='root')
        self.assertTrue(root.is_superuser)
        self.assertTrue(root.groups.filter(name='Admin').exists())

        self.assertIn('Groups already present.', run('seed_roles', no_users=True))


class OpenRegistrationPeriodTests(TestCase):
    def test_opens_then_refuses_overlap(self):
        args = ('open_registration_period', '2024-09-01', '2024-09-14')
        run(*args, academic_year=TERM.academic_year, semester=TERM.semester)
        period = RegistrationPeriod.objects.get()
        self.assertEqual(period.name, f'Course Registration - {TERM}')

        with self.assertRaises(CommandError):
            run(*args, academic_year=TERM.academic_year, semester=TERM.semester)

    def test_bad_date(self):
        with self.assertRaises(CommandError):
            run('open_registration_period', '01/09/2024', '2024-09-14')


class CreateScheduleFeesTests(TestCase):
    def test_bulk_bills_students_without_fees(self):
        make_student('kofi')
        make_student('ama', programme='History')
        already = make_student('esi')
        bill(already)

        output = run('create_schedule_fees', academic_year=TERM.academic_year, semester=TERM.semester)

        self.assertIn('Billed 1 students, skipped 1', output)
        self.assertEqual(FeeLineItem.objects.filter(student__username='kofi').count(), 6)
        self.assertEqual(FeeLineItem.objects.filter(student=already).count(), 1)

    def test_single_student(self):
        make_student('kofi')
        run('create_schedule_fees', student='kofi')
        with self.assertRaises(CommandError):
            run('create_schedule_fees', student='kofi')
        with self.assertRaises(CommandError):
            run('create_schedule_fees', student='nobody')


class SyncFeeStatusTests(TestCase):
    def test_reports_changed_items(self):
        student = make_student()
        pay(bill(student), '1000.00')
        self.assertIn('Updated 1 fee items', run('sync_fee_status'))
        self.assertIn('Updated 0 fee items', run('sync_fee_status', student=student.username))
