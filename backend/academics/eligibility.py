"""
Registration Eligibility Gate

Decides whether a student may register courses for a term. Rules are
evaluated in order and the first one that matches decides:

1. Already holds an ACTIVE enrollment for the term -> COMPLETED
2. No active registration period covers now for the student's
   level/department -> CLOSED
3. Tuition billed and less than half of it paid -> FEES_OUTSTANDING
4. No tuition billed: admission fees must exist and be paid in full
   -> otherwise FEES_OUTSTANDING
5. Otherwise OPEN
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from django.db.models import Q
from django.utils import timezone

from .domain_catalog import StudentProfile
from .domain_enrollment import Enrollment, EnrollmentStatus, RegistrationPeriod
from .domain_fees import FeeComponent
from .fee_ledger import ZERO, fee_ledger
from .terms import Term

logger = logging.getLogger(__name__)

TUITION_THRESHOLD = Decimal('0.5')


class RegistrationStatus(str, Enum):
    OPEN = 'OPEN'
    CLOSED = 'CLOSED'
    COMPLETED = 'COMPLETED'
    FEES_OUTSTANDING = 'FEES_OUTSTANDING'


MESSAGES = {
    RegistrationStatus.OPEN: 'Course registration is open.',
    RegistrationStatus.CLOSED: 'Course registration is currently closed.',
    RegistrationStatus.COMPLETED: 'You have already registered for this semester.',
    RegistrationStatus.FEES_OUTSTANDING: 'Please pay the required fees before registering courses.',
}


@dataclass(frozen=True)
class Eligibility:
    allowed: bool
    reason: RegistrationStatus
    outstanding_amount: Decimal = ZERO
    period: Optional[RegistrationPeriod] = None

    @property
    def message(self) -> str:
        return MESSAGES[self.reason]

    def as_dict(self):
        return {
            'allowed': self.allowed,
            'reason': self.reason.value,
            'message': self.message,
            'outstanding_amount': self.outstanding_amount,
            'period': self.period.name if self.period else None,
            'period_end': self.period.end_date if self.period else None,
        }


def student_placement(student):
    """(level, department) from the student's profile, or (None, None)."""
    profile = StudentProfile.objects.filter(user=student).first()
    if profile is None:
        return None, None
    return profile.level or None, profile.department or None


def _matches(field, value):
    blank = Q(**{f'{field}__isnull': True}) | Q(**{field: ''})
    if value:
        return blank | Q(**{field: value})
    return blank


def active_period(term: Term, level=None, department=None, now=None) -> Optional[RegistrationPeriod]:
    now = now or timezone.now()
    return (
        RegistrationPeriod.objects
        .filter(is_active=True, start_date__lte=now, end_date__gte=now, **term.as_filter())
        .filter(_matches('level', level))
        .filter(_matches('department', department))
        .order_by('end_date', 'id')
        .first()
    )


def has_active_enrollment(student, term: Term) -> bool:
    return Enrollment.objects.filter(
        student=student,
        status=EnrollmentStatus.ACTIVE,
        **term.as_filter(),
    ).exists()


def can_register(student, term: Term, now=None) -> Eligibility:
    """
    Evaluate the registration gate for one student and term.

    Args:
        student: The student (auth user)
        term: Term being registered for
        now: Point in time to test the period window against (default: now)

    Returns:
        Eligibility with the deciding reason and any outstanding amount
    """
    if has_active_enrollment(student, term):
        return Eligibility(False, RegistrationStatus.COMPLETED)

    level, department = student_placement(student)
    period = active_period(term, level, department, now)
    if period is None:
        return Eligibility(False, RegistrationStatus.CLOSED)

    if fee_ledger.has_items(student, FeeComponent.TUITION):
        total, paid = fee_ledger.totals(student, FeeComponent.TUITION)
        if total > 0 and paid / total < TUITION_THRESHOLD:
            logger.info('Student %s blocked: %s of %s tuition paid', student.pk, paid, total)
            return Eligibility(False, RegistrationStatus.FEES_OUTSTANDING, total - paid, period)
    else:
        # no tuition billed yet: admission must be billed and fully paid
        total, paid = fee_ledger.totals(student, FeeComponent.ADMISSION)
        if total <= 0 or paid < total:
            logger.info('Student %s blocked: %s of %s admission paid', student.pk, paid, total)
            return Eligibility(False, RegistrationStatus.FEES_OUTSTANDING, max(total - paid, ZERO), period)

    return Eligibility(True, RegistrationStatus.OPEN, ZERO, period)
