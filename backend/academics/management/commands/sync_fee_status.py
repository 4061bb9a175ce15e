from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from academics.fee_ledger import fee_ledger


class Command(BaseCommand):
    help = 'Recompute fee is_paid flags from completed payments'

    def add_arguments(self, parser):
        parser.add_argument('--student', help='Limit to one student (username)')

    def handle(self, *args, **options):
        student = None
        if options['student']:
            student = get_user_model().objects.filter(username=options['student']).first()
            if student is None:
                raise CommandError(f"No user named '{options['student']}'")

        self.stdout.write('Recomputing fee status...')
        changed = fee_ledger.sync_paid_flags(student)
        self.stdout.write(self.style.SUCCESS(f'Done! Updated {changed} fee items'))
