"""Registration period administration."""
import logging

from django.db import transaction
from django.utils import timezone

from .audit import log_activity
from .domain_enrollment import RegistrationPeriod
from .eligibility import active_period
from .exceptions import InvalidPeriod, PeriodOverlap
from .terms import Term

logger = logging.getLogger(__name__)


def overlapping_periods(term: Term, start, end, level=None, department=None, exclude_id=None):
    """Active periods for the term whose window overlaps [start, end] for the same audience."""
    periods = RegistrationPeriod.objects.filter(
        is_active=True,
        start_date__lt=end,
        end_date__gt=start,
        level=level or None,
        department=department or None,
        **term.as_filter(),
    )
    if exclude_id is not None:
        periods = periods.exclude(pk=exclude_id)
    return periods


@transaction.atomic
def open_period(name, term: Term, start, end, level=None, department=None, description='', actor=None):
    if start >= end:
        raise InvalidPeriod()

    clash = overlapping_periods(term, start, end, level, department).first()
    if clash is not None:
        raise PeriodOverlap(
            f'Registration period overlaps with "{clash.name}".',
            conflicting_period=clash.pk,
        )

    period = RegistrationPeriod.objects.create(
        name=name,
        description=description or None,
        level=level or None,
        department=department or None,
        start_date=start,
        end_date=end,
        is_active=True,
        **term.as_filter(),
    )
    log_activity(actor, 'OPEN_REGISTRATION_PERIOD', 'RegistrationPeriod', period.pk, {
        'term': str(term),
        'start': start.isoformat(),
        'end': end.isoformat(),
    })
    logger.info('Opened registration period %s for %s', period.pk, term)
    return period


def current_period(term: Term, level=None, department=None, now=None):
    return active_period(term, level, department, now or timezone.now())


@transaction.atomic
def close_period(period: RegistrationPeriod, actor=None):
    if period.is_active:
        period.is_active = False
        period.save(update_fields=['is_active'])
        log_activity(actor, 'CLOSE_REGISTRATION_PERIOD', 'RegistrationPeriod', period.pk)
    return period
