from datetime import datetime, timedelta, timezone as dt_timezone

from django.test import TestCase

from academics.domain_enrollment import RegistrationPeriod
from academics.domain_logs import ActivityLog
from academics.exceptions import InvalidPeriod, PeriodOverlap
from academics.periods import close_period, current_period, open_period

from .factories import NEXT_TERM, TERM

START = datetime(2024, 9, 1, tzinfo=dt_timezone.utc)
END = START + timedelta(days=14)


class OpenPeriodTests(TestCase):
    def test_opens_and_audits(self):
        period = open_period('Semester 1 registration', TERM, START, END)
        self.assertTrue(period.is_active)
        self.assertIsNone(period.level)
        self.assertTrue(ActivityLog.objects.filter(action='OPEN_REGISTRATION_PERIOD', entity_id=str(period.pk)).exists())

    def test_start_must_precede_end(self):
        with self.assertRaises(InvalidPeriod):
            open_period('Backwards', TERM, END, START)
        with self.assertRaises(InvalidPeriod):
            open_period('Empty', TERM, START, START)
        self.assertFalse(RegistrationPeriod.objects.exists())

    def test_overlap_for_same_audience_is_refused(self):
        first = open_period('Main', TERM, START, END)
        with self.assertRaises(PeriodOverlap) as ctx:
            open_period('Late', TERM, END - timedelta(days=1), END + timedelta(days=7))
        self.assertEqual(ctx.exception.extra['conflicting_period'], first.pk)

    def test_adjacent_other_term_or_other_audience_is_allowed(self):
        open_period('Main', TERM, START, END)
        open_period('Late', TERM, END, END + timedelta(days=7))
        open_period('Next', NEXT_TERM, START, END)
        open_period('Level 100', TERM, START, END, level='100')
        self.assertEqual(RegistrationPeriod.objects.count(), 4)

    def test_closed_period_no_longer_blocks(self):
        first = open_period('Main', TERM, START, END)
        close_period(first)
        first.refresh_from_db()
        self.assertFalse(first.is_active)
        open_period('Retry', TERM, START, END)


class CurrentPeriodTests(TestCase):
    def test_matches_window_and_audience(self):
        period = open_period('Level 100', TERM, START, END, level='100')
        inside = START + timedelta(days=2)

        self.assertEqual(current_period(TERM, level='100', now=inside), period)
        self.assertIsNone(current_period(TERM, level='200', now=inside))
        self.assertIsNone(current_period(TERM, level='100', now=END + timedelta(days=1)))
        self.assertIsNone(current_period(NEXT_TERM, level='100', now=inside))
