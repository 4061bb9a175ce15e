"""Views for course registration and registration periods"""
import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import SAFE_METHODS, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from . import periods
from .domain_enrollment import Enrollment, RegistrationPeriod
from .eligibility import student_placement
from .exceptions import PeriodOverlap
from .permissions import IsAdmin, IsAdminOrReadOnly, IsStudent, is_admin
from .registration import orchestrator
from .serializers_registration import (
    EnrollmentSerializer,
    RegistrationPeriodSerializer,
    RegistrationRequestSerializer,
    WithdrawRequestSerializer,
)
from .terms import Term, term_from_params
from .views_fees import target_student

logger = logging.getLogger(__name__)


class CourseRegistrationView(APIView):
    """
    GET  /api/registration/ - eligibility, available courses and current load
    POST /api/registration/ - register the selected courses for the term
    """

    def get_permissions(self):
        if self.request.method in SAFE_METHODS:
            return [IsAuthenticated()]
        # only students register themselves
        return [IsStudent()]

    def get(self, request):
        term = term_from_params(request.query_params)
        return Response(orchestrator.registration_overview(target_student(request), term))

    def post(self, request):
        serializer = RegistrationRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        term = term_from_params(data)
        result = orchestrator.register(request.user, data['course_ids'], term, actor=request.user)
        return Response({
            'message': f'Successfully registered for {len(result.enrollments)} courses',
            **result.as_dict(),
        }, status=status.HTTP_201_CREATED)


class WithdrawView(APIView):
    """POST /api/registration/withdraw/ - drop one ACTIVE course for the term"""
    permission_classes = [IsStudent]

    def post(self, request):
        serializer = WithdrawRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        enrollment = orchestrator.withdraw(request.user, data['course'], term_from_params(data), actor=request.user)
        return Response(EnrollmentSerializer(enrollment).data)


class MyEnrollmentsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        qs = Enrollment.objects.select_related('course').filter(student=target_student(request))
        academic_year = request.query_params.get('academic_year')
        semester = request.query_params.get('semester')
        if academic_year:
            qs = qs.filter(academic_year=academic_year)
        if semester:
            qs = qs.filter(semester=semester)
        return Response(EnrollmentSerializer(qs.order_by('course__code'), many=True).data)


class RegistrationPeriodViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Registration Periods

    Endpoints:
    - GET /api/registration-periods/ - list (any authenticated user)
    - POST /api/registration-periods/ - open a period (admin)
    - PUT/PATCH /api/registration-periods/{id}/ - edit a period (admin)
    - DELETE /api/registration-periods/{id}/ - close a period (admin); rows are kept
    - GET /api/registration-periods/current/ - the period open for the caller now
    """
    serializer_class = RegistrationPeriodSerializer
    permission_classes = [IsAdminOrReadOnly]

    def get_queryset(self):
        qs = RegistrationPeriod.objects.all()
        if not is_admin(self.request.user):
            qs = qs.filter(is_active=True)
        academic_year = self.request.query_params.get('academic_year')
        semester = self.request.query_params.get('semester')
        if academic_year:
            qs = qs.filter(academic_year=academic_year)
        if semester:
            qs = qs.filter(semester=semester)
        return qs.order_by('-start_date', '-id')

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        period = periods.open_period(
            data['name'],
            Term(data['academic_year'], data['semester']),
            data['start_date'],
            data['end_date'],
            level=data.get('level'),
            department=data.get('department'),
            description=data.get('description') or '',
            actor=request.user,
        )
        return Response(self.get_serializer(period).data, status=status.HTTP_201_CREATED)

    def perform_update(self, serializer):
        instance = serializer.instance
        data = serializer.validated_data

        def value(field):
            return data.get(field, getattr(instance, field))

        if instance.is_active:
            clash = periods.overlapping_periods(
                Term(value('academic_year'), value('semester')),
                value('start_date'),
                value('end_date'),
                value('level'),
                value('department'),
                exclude_id=instance.pk,
            ).first()
            if clash is not None:
                raise PeriodOverlap(f'Registration period overlaps with "{clash.name}".', conflicting_period=clash.pk)
        serializer.save()

    def destroy(self, request, *args, **kwargs):
        period = periods.close_period(self.get_object(), actor=request.user)
        return Response(self.get_serializer(period).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=['post'], permission_classes=[IsAdmin])
    def close(self, request, pk=None):
        period = periods.close_period(self.get_object(), actor=request.user)
        return Response(self.get_serializer(period).data)

    @action(detail=False, methods=['get'])
    def current(self, request):
        term = term_from_params(request.query_params)
        level, department = student_placement(request.user)
        period = periods.current_period(term, level, department)
        if period is None:
            return Response({'period': None, 'message': 'Course registration is currently closed.'})
        return Response({'period': self.get_serializer(period).data})
