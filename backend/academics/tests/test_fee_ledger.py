from datetime import date, timedelta
from decimal import Decimal

from django.test import TestCase

from academics.domain_fees import FeeComponent, FeeLineItem, Payment, PaymentStatus
from academics.domain_logs import ActivityLog
from academics.domain_notifications import Notification
from academics.exceptions import FeesAlreadyExist, InvalidPayment, NoFeeStructure
from academics.fee_ledger import fee_ledger
from academics.fee_structures import BA, IT

from .factories import TERM, bill, make_student, pay


class CreateScheduleFeesTests(TestCase):
    def setUp(self):
        self.student = make_student()

    def test_it_programme_bills_every_component(self):
        start = date(2024, 9, 2)
        items = fee_ledger.create_schedule_fees(self.student, IT, TERM, start_date=start)

        self.assertEqual(len(items), 6)
        self.assertEqual(sum(i.amount for i in items), Decimal('29100'))
        due = {i.component: i.due_date for i in FeeLineItem.objects.filter(student=self.student)}
        self.assertEqual(due[FeeComponent.ADMISSION], start)
        self.assertEqual(due[FeeComponent.TUITION], start + timedelta(days=30))
        self.assertEqual(due[FeeComponent.ACCOMMODATION], start + timedelta(days=44))
        self.assertEqual(due[FeeComponent.LIBRARY], start + timedelta(days=49))
        self.assertEqual(due[FeeComponent.LABORATORY], start + timedelta(days=54))
        self.assertEqual(due[FeeComponent.EXAMINATION], start + timedelta(days=61))

    def test_items_carry_term_and_description(self):
        fee_ledger.create_schedule_fees(self.student, IT, TERM)
        tuition = FeeLineItem.objects.get(student=self.student, component=FeeComponent.TUITION)
        self.assertEqual(tuition.academic_year, TERM.academic_year)
        self.assertEqual(tuition.semester, TERM.semester)
        self.assertEqual(tuition.description, f'Tuition Fee - {IT} - {TERM}')
        self.assertFalse(tuition.is_paid)

    def test_arts_programme_has_no_laboratory_item(self):
        items = fee_ledger.create_schedule_fees(self.student, 'Business Administration', TERM)
        self.assertEqual(len(items), 5)
        self.assertEqual(sum(i.amount for i in items), Decimal('24600'))
        self.assertFalse(FeeLineItem.objects.filter(component=FeeComponent.LABORATORY).exists())

    def test_second_call_is_refused_and_rows_unchanged(self):
        fee_ledger.create_schedule_fees(self.student, IT, TERM)
        before = list(FeeLineItem.objects.filter(student=self.student).values_list('id', 'amount'))

        with self.assertRaises(FeesAlreadyExist):
            fee_ledger.create_schedule_fees(self.student, BA, TERM)

        after = list(FeeLineItem.objects.filter(student=self.student).values_list('id', 'amount'))
        self.assertEqual(before, after)

    def test_unknown_programme_creates_nothing(self):
        with self.assertRaises(NoFeeStructure) as ctx:
            fee_ledger.create_schedule_fees(self.student, 'History', TERM)
        self.assertIn(IT, ctx.exception.extra['available_programmes'])
        self.assertFalse(FeeLineItem.objects.exists())

    def test_notifies_and_audits(self):
        fee_ledger.create_schedule_fees(self.student, IT, TERM)
        self.assertEqual(Notification.objects.filter(user=self.student, category='fee').count(), 1)
        self.assertTrue(ActivityLog.objects.filter(action='CREATE_FEES', entity_id=str(self.student.pk)).exists())


class PaidRatioTests(TestCase):
    def setUp(self):
        self.student = make_student()
        self.tuition = bill(self.student, amount='18000.00')

    def test_zero_without_payments(self):
        self.assertEqual(fee_ledger.paid_ratio(self.student, FeeComponent.TUITION), 0.0)

    def test_zero_without_items(self):
        self.assertEqual(fee_ledger.paid_ratio(self.student, FeeComponent.LIBRARY), 0.0)

    def test_pending_and_failed_are_ignored(self):
        pay(self.tuition, '9000', PaymentStatus.PENDING)
        pay(self.tuition, '9000', PaymentStatus.FAILED)
        self.assertEqual(fee_ledger.paid_ratio(self.student, FeeComponent.TUITION), 0.0)

    def test_half_and_full(self):
        pay(self.tuition, '9000')
        self.assertEqual(fee_ledger.paid_ratio(self.student, FeeComponent.TUITION), 0.5)
        pay(self.tuition, '9000')
        self.assertEqual(fee_ledger.paid_ratio(self.student, FeeComponent.TUITION), 1.0)

    def test_ratio_is_clamped(self):
        pay(self.tuition, '20000')
        self.assertEqual(fee_ledger.paid_ratio(self.student), 1.0)

    def test_all_components_when_none_given(self):
        bill(self.student, FeeComponent.ADMISSION, '2000.00')
        pay(self.tuition, '10000')
        self.assertEqual(fee_ledger.paid_ratio(self.student), 0.5)


class PaymentTests(TestCase):
    def setUp(self):
        self.student = make_student()
        self.fee = bill(self.student, amount='1000.00')

    def test_full_payment_completes_immediately(self):
        payment = fee_ledger.record_payment(self.fee, '1000.00', reference='RCPT-1')
        self.assertEqual(payment.status, PaymentStatus.COMPLETED)
        self.fee.refresh_from_db()
        self.assertTrue(self.fee.is_paid)
        self.assertEqual(Notification.objects.filter(user=self.student, category='payment').count(), 1)

    def test_part_payment_waits_for_confirmation(self):
        payment = fee_ledger.record_payment(self.fee, '400.00')
        self.assertEqual(payment.status, PaymentStatus.PENDING)
        self.assertEqual(fee_ledger.paid_ratio(self.student), 0.0)

        fee_ledger.confirm_payment(payment)
        payment.refresh_from_db()
        self.fee.refresh_from_db()
        self.assertEqual(payment.status, PaymentStatus.COMPLETED)
        self.assertFalse(self.fee.is_paid)
        self.assertEqual(fee_ledger.paid_ratio(self.student), 0.4)

    def test_settling_the_balance_marks_item_paid(self):
        fee_ledger.confirm_payment(fee_ledger.record_payment(self.fee, '400.00'))
        fee_ledger.record_payment(self.fee, '600.00')
        self.fee.refresh_from_db()
        self.assertTrue(self.fee.is_paid)

    def test_rejects_non_positive_amounts(self):
        for amount in ('0', '-5', 'abc'):
            with self.assertRaises(InvalidPayment):
                fee_ledger.record_payment(self.fee, amount)
        self.assertFalse(Payment.objects.exists())

    def test_rejects_overpayment(self):
        fee_ledger.confirm_payment(fee_ledger.record_payment(self.fee, '700.00'))
        with self.assertRaises(InvalidPayment) as ctx:
            fee_ledger.record_payment(self.fee, '300.01')
        self.assertEqual(ctx.exception.extra['outstanding_amount'], '300.00')

    def test_pending_payments_count_against_the_balance(self):
        tuition = bill(self.student, amount='18000.00')
        first = fee_ledger.record_payment(tuition, '10000')
        with self.assertRaises(InvalidPayment) as ctx:
            fee_ledger.record_payment(tuition, '10000')
        self.assertEqual(ctx.exception.extra['outstanding_amount'], '8000.00')

        # the rest of the balance is still payable, and stays pending beside the first
        rest = fee_ledger.record_payment(tuition, '8000')
        self.assertEqual(rest.status, PaymentStatus.PENDING)
        fee_ledger.confirm_payment(first)
        fee_ledger.confirm_payment(rest)
        tuition.refresh_from_db()
        self.assertTrue(tuition.is_paid)
        self.assertEqual(fee_ledger.totals(self.student, FeeComponent.TUITION)[1], Decimal('18000.00'))

    def test_confirmation_rechecks_the_balance(self):
        # rows written before pending amounts were reserved
        first = pay(self.fee, '700.00', PaymentStatus.PENDING)
        second = pay(self.fee, '700.00', PaymentStatus.PENDING)
        fee_ledger.confirm_payment(first)
        with self.assertRaises(InvalidPayment) as ctx:
            fee_ledger.confirm_payment(second)
        self.assertEqual(ctx.exception.extra['outstanding_amount'], '300.00')

        second.refresh_from_db()
        self.assertEqual(second.status, PaymentStatus.PENDING)
        fee_ledger.fail_payment(second)
        status = fee_ledger.fee_status(self.student)
        self.assertEqual(status['paid_amount'], Decimal('700.00'))
        self.assertEqual(status['outstanding_amount'], Decimal('300.00'))

    def test_rejects_payment_on_paid_item(self):
        fee_ledger.record_payment(self.fee, '1000.00')
        with self.assertRaises(InvalidPayment):
            fee_ledger.record_payment(self.fee, '1.00')

    def test_transition_happens_once(self):
        payment = fee_ledger.record_payment(self.fee, '100.00')
        fee_ledger.fail_payment(payment)
        with self.assertRaises(InvalidPayment):
            fee_ledger.confirm_payment(payment)
        with self.assertRaises(InvalidPayment):
            fee_ledger.fail_payment(payment)
        payment.refresh_from_db()
        self.assertEqual(payment.status, PaymentStatus.FAILED)

    def test_sync_paid_flags(self):
        pay(self.fee, '1000.00')
        other = bill(self.student, FeeComponent.LIBRARY, '50.00')
        FeeLineItem.objects.filter(pk=other.pk).update(is_paid=True)

        self.assertEqual(fee_ledger.sync_paid_flags(self.student), 2)
        self.fee.refresh_from_db()
        other.refresh_from_db()
        self.assertTrue(self.fee.is_paid)
        self.assertFalse(other.is_paid)
        self.assertEqual(fee_ledger.sync_paid_flags(), 0)


class FeeStatusTests(TestCase):
    def test_breakdown(self):
        student = make_student()
        admission = bill(student, FeeComponent.ADMISSION, '5000.00')
        tuition = bill(student, FeeComponent.TUITION, '18000.00')
        pay(admission, '5000.00')
        pay(tuition, '9000.00')
        pay(tuition, '1000.00', PaymentStatus.PENDING)

        status = fee_ledger.fee_status(student)

        self.assertEqual(status['total_fees'], Decimal('23000.00'))
        self.assertEqual(status['paid_amount'], Decimal('14000.00'))
        self.assertEqual(status['outstanding_amount'], Decimal('9000.00'))
        by_component = {row['component']: row for row in status['fees']}
        self.assertEqual(by_component[FeeComponent.ADMISSION]['status'], 'PAID')
        self.assertEqual(by_component[FeeComponent.TUITION]['status'], 'OUTSTANDING')
        self.assertEqual(status['missing_payments'], [
            {'fee_id': tuition.pk, 'amount': Decimal('9000.00'), 'due_date': None},
        ])
