from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from academics.domain_catalog import StudentProfile
from academics.domain_fees import FeeLineItem
from academics.exceptions import AcademicError
from academics.fee_ledger import fee_ledger
from academics.terms import Term, configured_term


class Command(BaseCommand):
    help = 'Bill one student (or every profiled student without fees) for their programme fee schedule'

    def add_arguments(self, parser):
        parser.add_argument('--student', help='Username of a single student to bill')
        parser.add_argument('--programme', help='Override the programme recorded on the profile')
        parser.add_argument('--academic-year', default=None)
        parser.add_argument('--semester', default=None)

    def handle(self, *args, **options):
        default = configured_term()
        term = Term(options['academic_year'] or default.academic_year, options['semester'] or default.semester)

        if options['student']:
            User = get_user_model()
            student = User.objects.filter(username=options['student']).first()
            if student is None:
                raise CommandError(f"No user named '{options['student']}'")
            profile = StudentProfile.objects.filter(user=student).first()
            programme = options['programme'] or (profile.programme if profile else None)
            if not programme:
                raise CommandError('Student has no profile; pass --programme')
            try:
                items = fee_ledger.create_schedule_fees(student, programme, term)
            except AcademicError as exc:
                raise CommandError(exc.message)
            self.stdout.write(self.style.SUCCESS(f'Created {len(items)} fee items for {student.username}'))
            return

        billed = skipped = 0
        already_billed = FeeLineItem.objects.values('student_id')
        for profile in StudentProfile.objects.select_related('user').exclude(user_id__in=already_billed):
            try:
                fee_ledger.create_schedule_fees(profile.user, options['programme'] or profile.programme, term)
                billed += 1
            except AcademicError as exc:
                skipped += 1
                self.stdout.write(self.style.WARNING(f'{profile.student_number}: {exc.message}'))

        self.stdout.write(self.style.SUCCESS(f'Billed {billed} students, skipped {skipped}'))
