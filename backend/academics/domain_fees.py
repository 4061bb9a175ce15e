"""Domain Fee Models
FeeComponent, FeeLineItem, PaymentStatus, PaymentMethod, Payment
"""
from decimal import Decimal

from django.contrib.auth.models import User
from django.core.validators import MinValueValidator
from django.db import models

__all__ = [
    'FeeComponent', 'FeeLineItem', 'PaymentStatus', 'PaymentMethod', 'Payment'
]


class FeeComponent(models.TextChoices):
    ADMISSION = 'ADMISSION', 'Admission Fee'
    TUITION = 'TUITION', 'Tuition Fee'
    ACCOMMODATION = 'ACCOMMODATION', 'Accommodation Fee'
    LIBRARY = 'LIBRARY', 'Library Fee'
    LABORATORY = 'LABORATORY', 'Laboratory Fee'
    EXAMINATION = 'EXAMINATION', 'Examination Fee'
    OTHER = 'OTHER', 'Other'


class FeeLineItem(models.Model):
    id = models.BigAutoField(primary_key=True)
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name='fee_items')
    component = models.CharField(max_length=20, choices=FeeComponent.choices, default=FeeComponent.OTHER)
    amount = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0.00'))])
    description = models.CharField(max_length=255)
    due_date = models.DateField(null=True, blank=True)
    is_paid = models.BooleanField(default=False)
    academic_year = models.CharField(max_length=20, null=True, blank=True)
    semester = models.CharField(max_length=50, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'fee_line_item'
        ordering = ['due_date', 'id']
        indexes = [
            models.Index(fields=['student', 'component'], name='fee_item_student_comp_idx'),
        ]

    def __str__(self):
        return f"{self.student.username} | {self.description} | {self.amount}"


class PaymentStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    COMPLETED = 'COMPLETED', 'Completed'
    FAILED = 'FAILED', 'Failed'


class PaymentMethod(models.TextChoices):
    CASH = 'CASH', 'Cash'
    BANK_TRANSFER = 'BANK_TRANSFER', 'Bank Transfer'
    MOBILE_MONEY = 'MOBILE_MONEY', 'Mobile Money'
    CARD = 'CARD', 'Card'


class Payment(models.Model):
    """A payment against one fee line item.

    Rows are never deleted; the only permitted change is the single
    PENDING -> COMPLETED/FAILED transition made by the fee ledger.
    """
    id = models.BigAutoField(primary_key=True)
    fee = models.ForeignKey(FeeLineItem, on_delete=models.PROTECT, related_name='payments')
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name='payments')
    amount = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))])
    status = models.CharField(max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
    method = models.CharField(max_length=20, choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    reference = models.CharField(max_length=100, null=True, blank=True)
    notes = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'payment'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['student', 'status'], name='payment_student_status_idx'),
            models.Index(fields=['fee', 'status'], name='payment_fee_status_idx'),
        ]

    def __str__(self):
        return f"{self.student.username} | {self.amount} | {self.status}"
