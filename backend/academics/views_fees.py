"""Views for Student Fees and Payments"""
import logging

from django.contrib.auth.models import User
from django.shortcuts import get_object_or_404
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .domain_fees import Payment
from .exceptions import RecordNotFound
from .fee_ledger import fee_ledger
from .fee_structures import get_resolver
from .permissions import IsAdmin, is_admin
from .serializers_fees import (
    FeeLineItemSerializer,
    PaymentCreateSerializer,
    PaymentSerializer,
    ScheduleFeesSerializer,
)
from .terms import term_from_params

logger = logging.getLogger(__name__)


def target_student(request):
    """The requesting user, or ?student=<id> when an admin asks on someone's behalf."""
    student_id = request.query_params.get('student')
    if student_id and is_admin(request.user):
        return get_object_or_404(User, pk=student_id)
    return request.user


class ScheduleFeesView(APIView):
    """
    POST /api/fees/schedule/
    Bill a student for every component of their programme's fee schedule.
    """
    permission_classes = [IsAdmin]

    def post(self, request):
        serializer = ScheduleFeesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        term = term_from_params(data)
        items = fee_ledger.create_schedule_fees(
            data['student'],
            data['programme'],
            term,
            start_date=data.get('start_date'),
            actor=request.user,
        )
        return Response({
            'message': f'Created {len(items)} fee items',
            'total': get_resolver().resolve(data['programme']).total,
            'billed_total': sum(item.amount for item in items),
            'fees': FeeLineItemSerializer(items, many=True).data,
        }, status=status.HTTP_201_CREATED)


class FeeStatusView(APIView):
    """GET /api/fees/status/ - paid/outstanding breakdown for the student."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(fee_ledger.fee_status(target_student(request)))


class ProgrammeFeesView(APIView):
    """
    GET /api/programme-fees/              - every canonical fee schedule
    GET /api/programme-fees/?programme=X  - the schedule X resolves to
    """
    permission_classes = [IsAuthenticated]

    @staticmethod
    def _schedule(template):
        return {
            'programme': template.programme,
            'components': {component: amount for component, amount in template.components()},
            'total': template.total,
            'billed_total': template.billed_total,
        }

    def get(self, request):
        resolver = get_resolver()
        programme = (request.query_params.get('programme') or '').strip()
        if programme:
            template = resolver.resolve(programme)
            if template is None:
                raise RecordNotFound(
                    f'No fee structure found for programme: {programme}',
                    available_programmes=resolver.available_programmes(),
                )
            return Response(self._schedule(template))

        return Response({
            'programmes': [self._schedule(resolver.templates[name]) for name in resolver.available_programmes()],
        })


class PaymentViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    ViewSet for Payments

    Endpoints:
    - GET /api/payments/ - Students see their own payments, admins see all
    - POST /api/payments/ - Record a payment against a fee item
    - POST /api/payments/{id}/confirm/ - Confirm a pending payment (admin)
    - POST /api/payments/{id}/fail/ - Mark a pending payment failed (admin)
    """
    serializer_class = PaymentSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        qs = Payment.objects.select_related('fee', 'student').order_by('-created_at', '-id')
        if not is_admin(self.request.user):
            return qs.filter(student=self.request.user)
        student_id = self.request.query_params.get('student')
        if student_id:
            qs = qs.filter(student_id=student_id)
        status_filter = (self.request.query_params.get('status') or '').strip().upper()
        if status_filter:
            qs = qs.filter(status=status_filter)
        return qs

    def create(self, request, *args, **kwargs):
        serializer = PaymentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        fee = data['fee']
        if fee.student_id != request.user.pk and not is_admin(request.user):
            raise RecordNotFound('Fee not found.')

        payment = fee_ledger.record_payment(
            fee,
            data['amount'],
            method=data['method'],
            reference=data.get('reference', ''),
            notes=data.get('notes', ''),
            actor=request.user,
        )
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], permission_classes=[IsAdmin])
    def confirm(self, request, pk=None):
        payment = fee_ledger.confirm_payment(self.get_object(), actor=request.user)
        return Response(PaymentSerializer(payment).data)

    @action(detail=True, methods=['post'], permission_classes=[IsAdmin])
    def fail(self, request, pk=None):
        payment = fee_ledger.fail_payment(self.get_object(), actor=request.user)
        return Response(PaymentSerializer(payment).data)
