from datetime import datetime, time

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from academics.exceptions import AcademicError
from academics.periods import open_period
from academics.terms import Term, configured_term


def _parse_date(value, end_of_day=False):
    try:
        parsed = datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise CommandError(f'Invalid date {value!r}; expected YYYY-MM-DD')
    moment = datetime.combine(parsed, time.max if end_of_day else time.min)
    return timezone.make_aware(moment)


class Command(BaseCommand):
    help = 'Open a course registration period for a term (refuses overlapping periods)'

    def add_arguments(self, parser):
        parser.add_argument('start', help='First day, YYYY-MM-DD')
        parser.add_argument('end', help='Last day (inclusive), YYYY-MM-DD')
        parser.add_argument('--name', default=None)
        parser.add_argument('--academic-year', default=None, help='Defaults to ACADEMICS CURRENT_ACADEMIC_YEAR')
        parser.add_argument('--semester', default=None, help='Defaults to ACADEMICS CURRENT_SEMESTER')
        parser.add_argument('--level', default=None)
        parser.add_argument('--department', default=None)
        parser.add_argument('--description', default='')

    def handle(self, *args, **options):
        default = configured_term()
        term = Term(options['academic_year'] or default.academic_year, options['semester'] or default.semester)
        start = _parse_date(options['start'])
        end = _parse_date(options['end'], end_of_day=True)
        name = options['name'] or f'Course Registration - {term}'

        try:
            period = open_period(
                name,
                term,
                start,
                end,
                level=options['level'],
                department=options['department'],
                description=options['description'],
            )
        except AcademicError as exc:
            raise CommandError(exc.message)

        self.stdout.write(self.style.SUCCESS(
            f'Opened "{period.name}" (#{period.pk}) {period.start_date:%Y-%m-%d} to {period.end_date:%Y-%m-%d}'
        ))
