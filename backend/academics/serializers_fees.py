"""Serializers for Student Fees and Payments"""
from django.contrib.auth.models import User
from rest_framework import serializers

from .domain_fees import FeeLineItem, Payment, PaymentMethod


class FeeLineItemSerializer(serializers.ModelSerializer):
    student_username = serializers.CharField(source='student.username', read_only=True)
    component_display = serializers.CharField(source='get_component_display', read_only=True)

    class Meta:
        model = FeeLineItem
        fields = [
            'id',
            'student',
            'student_username',
            'component',
            'component_display',
            'amount',
            'description',
            'due_date',
            'is_paid',
            'academic_year',
            'semester',
            'created_at',
        ]
        read_only_fields = fields


class PaymentSerializer(serializers.ModelSerializer):
    fee_description = serializers.CharField(source='fee.description', read_only=True)
    student_username = serializers.CharField(source='student.username', read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id',
            'fee',
            'fee_description',
            'student',
            'student_username',
            'amount',
            'status',
            'method',
            'reference',
            'notes',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class PaymentCreateSerializer(serializers.Serializer):
    """Input for capturing a payment; the ledger applies the business rules."""
    fee = serializers.PrimaryKeyRelatedField(queryset=FeeLineItem.objects.select_related('student'))
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    reference = serializers.CharField(required=False, allow_blank=True, max_length=100)
    notes = serializers.CharField(required=False, allow_blank=True)


class ScheduleFeesSerializer(serializers.Serializer):
    """
    Input for billing a student.
    - programme defaults to the student's profile programme
    """
    student = serializers.PrimaryKeyRelatedField(queryset=User.objects.all())
    programme = serializers.CharField(required=False, allow_blank=True)
    academic_year = serializers.CharField(required=False, allow_blank=True)
    semester = serializers.CharField(required=False, allow_blank=True)
    start_date = serializers.DateField(required=False)

    def validate(self, attrs):
        programme = (attrs.get('programme') or '').strip()
        if not programme:
            profile = getattr(attrs['student'], 'student_profile', None)
            programme = profile.programme if profile else ''
        if not programme:
            raise serializers.ValidationError({'programme': 'Programme is required when the student has no profile.'})
        attrs['programme'] = programme
        return attrs
