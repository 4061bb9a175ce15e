"""
Student Fee Ledger

Per-student fee line items and the payments made against them.

Rules:
- Schedule fees are created once per student (retries of admission approval
  must never bill twice)
- Only COMPLETED payments count towards paid totals
- Payment rows are never deleted; a PENDING payment is either confirmed or
  failed exactly once
"""
import logging
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Tuple

from django.contrib.auth.models import User
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from . import notifications
from .audit import log_activity
from .domain_fees import FeeComponent, FeeLineItem, Payment, PaymentMethod, PaymentStatus
from .exceptions import FeesAlreadyExist, InvalidPayment, NoFeeStructure
from .fee_structures import get_resolver
from .terms import Term

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')

# days after the schedule start date; admission earliest, examination latest
DUE_DATE_OFFSETS = {
    FeeComponent.ADMISSION: 0,
    FeeComponent.TUITION: 30,
    FeeComponent.ACCOMMODATION: 44,
    FeeComponent.LIBRARY: 49,
    FeeComponent.LABORATORY: 54,
    FeeComponent.EXAMINATION: 61,
}


def lock_student(student) -> User:
    """Row-lock the student's user record for the rest of the transaction."""
    return User.objects.select_for_update().get(pk=student.pk)


def _to_amount(value) -> Decimal:
    try:
        return Decimal(str(value)).quantize(Decimal('0.01'))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidPayment(f'Invalid amount: {value!r}')


class FeeLedger:
    """Fee creation, payment capture and paid/outstanding computation."""

    def __init__(self, resolver=None):
        self._resolver = resolver

    @property
    def resolver(self):
        return self._resolver or get_resolver()

    @transaction.atomic
    def create_schedule_fees(
        self,
        student: User,
        programme_name: str,
        term: Term,
        start_date=None,
        actor: Optional[User] = None,
    ) -> List[FeeLineItem]:
        """
        Bill a student for every component of their programme's fee schedule.

        Args:
            student: The student being billed
            programme_name: Programme as entered on the application
            term: Term the schedule belongs to
            start_date: Base date for due dates (default: today)
            actor: User performing the action, for the audit trail

        Returns:
            The created FeeLineItem rows in billing order

        Raises:
            NoFeeStructure: the programme resolves to no template
            FeesAlreadyExist: the student already has fee rows
        """
        template = self.resolver.resolve(programme_name)
        if template is None:
            logger.warning('No fee structure defined for programme: %s', programme_name)
            raise NoFeeStructure(
                f'No fee structure found for programme: {programme_name}',
                available_programmes=self.resolver.available_programmes(),
            )

        lock_student(student)
        if FeeLineItem.objects.filter(student=student).exists():
            raise FeesAlreadyExist()

        start_date = start_date or timezone.localdate()
        items = []
        for component, amount in template.components():
            label = FeeComponent(component).label
            if component == FeeComponent.ADMISSION:
                description = f'{label} - {programme_name}'
            else:
                description = f'{label} - {programme_name} - {term}'
            items.append(FeeLineItem(
                student=student,
                component=component,
                amount=amount,
                description=description,
                due_date=start_date + timedelta(days=DUE_DATE_OFFSETS[component]),
                is_paid=False,
                academic_year=term.academic_year,
                semester=term.semester,
            ))
        for item in items:
            item.save()

        notifications.fees_created(student, template.programme, template.total)
        log_activity(actor, 'CREATE_FEES', 'FeeLineItem', student.pk, {
            'programme': programme_name,
            'resolved_programme': template.programme,
            'total': str(template.total),
            'billed_total': str(template.billed_total),
            'items': len(items),
        })
        logger.info('Created %s fee items (%s) for student %s', len(items), template.total, student.pk)
        return items

    def totals(self, student: User, component: Optional[str] = None) -> Tuple[Decimal, Decimal]:
        """Return (billed, paid) for the student's items, optionally one component."""
        items = FeeLineItem.objects.filter(student=student)
        if component:
            items = items.filter(component=component)
        total = items.aggregate(total=Sum('amount'))['total'] or ZERO
        paid = Payment.objects.filter(
            fee__in=items,
            status=PaymentStatus.COMPLETED,
        ).aggregate(paid=Sum('amount'))['paid'] or ZERO
        return total, paid

    def has_items(self, student: User, component: Optional[str] = None) -> bool:
        items = FeeLineItem.objects.filter(student=student)
        if component:
            items = items.filter(component=component)
        return items.exists()

    def paid_ratio(self, student: User, component: Optional[str] = None) -> float:
        """Completed payments over billed amount, in [0, 1]; 0 when nothing is billed."""
        total, paid = self.totals(student, component)
        if total <= 0:
            return 0.0
        return float(min(paid / total, Decimal('1')))

    def fee_status(self, student: User) -> Dict:
        """Per-item paid/outstanding breakdown for the student's fees page."""
        items = FeeLineItem.objects.filter(student=student).order_by('due_date', 'id')
        paid_by_item = dict(
            Payment.objects.filter(fee__in=items, status=PaymentStatus.COMPLETED)
            .values_list('fee_id')
            .annotate(paid=Sum('amount'))
        )

        analysis = {
            'total_fees': ZERO,
            'paid_amount': ZERO,
            'outstanding_amount': ZERO,
            'fees': [],
            'missing_payments': [],
        }
        for item in items:
            paid = paid_by_item.get(item.id) or ZERO
            outstanding = item.amount - paid
            analysis['total_fees'] += item.amount
            analysis['paid_amount'] += paid
            analysis['outstanding_amount'] += outstanding
            analysis['fees'].append({
                'id': item.id,
                'component': item.component,
                'description': item.description,
                'amount': item.amount,
                'paid_amount': paid,
                'outstanding_amount': outstanding,
                'due_date': item.due_date,
                'status': 'PAID' if outstanding <= 0 else 'OUTSTANDING',
            })
            if item.component in (FeeComponent.TUITION, FeeComponent.ADMISSION) and outstanding > 0:
                analysis['missing_payments'].append({
                    'fee_id': item.id,
                    'amount': outstanding,
                    'due_date': item.due_date,
                })
        return analysis

    @transaction.atomic
    def record_payment(
        self,
        fee: FeeLineItem,
        amount,
        method: str = PaymentMethod.CASH,
        reference: str = '',
        notes: str = '',
        actor: Optional[User] = None,
    ) -> Payment:
        """
        Capture a payment against one line item.

        A payment that settles the remaining balance completes immediately and
        marks the item paid; a part payment stays PENDING until confirmed.
        Amounts already PENDING on the item count against the balance.
        """
        fee = FeeLineItem.objects.select_for_update().get(pk=fee.pk)
        amount = _to_amount(amount)
        if amount <= 0:
            raise InvalidPayment('Amount must be greater than 0.')
        if fee.is_paid:
            raise InvalidPayment('Fee is already paid.')

        outstanding = fee.amount - _paid(fee, PaymentStatus.COMPLETED)
        # pending payments already claim part of the balance
        available = outstanding - _paid(fee, PaymentStatus.PENDING)
        if amount > available:
            raise InvalidPayment(
                'Payment amount cannot exceed the outstanding balance.',
                outstanding_amount=str(available),
            )

        payment = Payment.objects.create(
            fee=fee,
            student=fee.student,
            amount=amount,
            method=method,
            reference=reference or None,
            notes=notes or None,
            status=PaymentStatus.PENDING,
        )
        if amount >= outstanding:
            self._complete(payment)

        log_activity(actor, 'RECORD_PAYMENT', 'Payment', payment.pk, {
            'fee_id': fee.pk,
            'amount': str(amount),
            'status': payment.status,
        })
        return payment

    @transaction.atomic
    def confirm_payment(self, payment: Payment, actor: Optional[User] = None) -> Payment:
        # lock the line item first, same order as record_payment
        fee = FeeLineItem.objects.select_for_update().get(pk=payment.fee_id)
        payment = Payment.objects.select_for_update().get(pk=payment.pk)
        if payment.status != PaymentStatus.PENDING:
            raise InvalidPayment(f'Payment is already {payment.status.lower()}.')
        outstanding = fee.amount - _paid(fee, PaymentStatus.COMPLETED)
        if payment.amount > outstanding:
            raise InvalidPayment(
                'Payment amount exceeds the outstanding balance; fail it instead.',
                outstanding_amount=str(outstanding),
            )
        payment.fee = fee
        self._complete(payment)
        log_activity(actor, 'CONFIRM_PAYMENT', 'Payment', payment.pk, {'amount': str(payment.amount)})
        return payment

    @transaction.atomic
    def fail_payment(self, payment: Payment, actor: Optional[User] = None) -> Payment:
        payment = Payment.objects.select_for_update().get(pk=payment.pk)
        if payment.status != PaymentStatus.PENDING:
            raise InvalidPayment(f'Payment is already {payment.status.lower()}.')
        payment.status = PaymentStatus.FAILED
        payment.save(update_fields=['status', 'updated_at'])
        log_activity(actor, 'FAIL_PAYMENT', 'Payment', payment.pk, {'amount': str(payment.amount)})
        return payment

    def _complete(self, payment: Payment):
        payment.status = PaymentStatus.COMPLETED
        payment.save(update_fields=['status', 'updated_at'])
        self.refresh_paid_flag(payment.fee)
        notifications.payment_received(payment)

    def refresh_paid_flag(self, fee: FeeLineItem) -> bool:
        """Set is_paid from completed payments. Returns True when the flag changed."""
        is_paid = _paid(fee, PaymentStatus.COMPLETED) >= fee.amount
        if fee.is_paid != is_paid:
            fee.is_paid = is_paid
            fee.save(update_fields=['is_paid'])
            return True
        return False

    @transaction.atomic
    def sync_paid_flags(self, student: Optional[User] = None) -> int:
        items = FeeLineItem.objects.select_for_update()
        if student is not None:
            items = items.filter(student=student)
        return sum(1 for item in items if self.refresh_paid_flag(item))


def _paid(fee: FeeLineItem, status: str) -> Decimal:
    return fee.payments.filter(status=status).aggregate(s=Sum('amount'))['s'] or ZERO


# Singleton instance for easy import
fee_ledger = FeeLedger()
