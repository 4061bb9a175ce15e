"""Views for the class timetable"""
from rest_framework import status, viewsets
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import SAFE_METHODS, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from . import timetable
from .domain_catalog import Course
from .domain_enrollment import EnrollmentStatus
from .domain_timetable import TimetableEntry
from .permissions import IsLecturerOrAdmin, is_admin, is_lecturer
from .serializers_core import TimetableEntrySerializer


class TimetableEntryViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Timetable Entries

    Endpoints:
    - GET /api/timetable/?course=&day_of_week=&room= - list entries
    - POST /api/timetable/ - place an entry (admin, or the course's lecturer)
    - PUT/PATCH /api/timetable/{id}/ - move or edit an entry
    - DELETE /api/timetable/{id}/ - remove an entry
    """
    serializer_class = TimetableEntrySerializer

    def get_permissions(self):
        if self.request.method in SAFE_METHODS:
            return [IsAuthenticated()]
        return [IsLecturerOrAdmin()]

    def get_queryset(self):
        qs = TimetableEntry.objects.select_related('course')
        params = self.request.query_params
        if params.get('course'):
            qs = qs.filter(course_id=params['course'])
        if params.get('day_of_week'):
            qs = qs.filter(day_of_week=params['day_of_week'].upper())
        if params.get('room'):
            qs = qs.filter(room__iexact=params['room'].strip())
        return qs.annotate(day_index=timetable.DAY_ORDER).order_by('day_index', 'start_time', 'room')

    def _check_course_owner(self, course_id):
        user = self.request.user
        if is_admin(user):
            return
        if not Course.objects.filter(pk=course_id, lecturer=user).exists():
            raise PermissionDenied('You can only schedule courses you teach.')

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        course = data.pop('course')
        self._check_course_owner(course.pk)
        entry = timetable.place(timetable.TimetableEntryDraft(course_id=course.pk, **data), actor=request.user)
        return Response(self.get_serializer(entry).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        self._check_course_owner(instance.course_id)

        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        changes = dict(serializer.validated_data)
        if 'course' in changes:
            changes['course_id'] = changes.pop('course').pk
            self._check_course_owner(changes['course_id'])

        entry = timetable.update(instance, actor=request.user, **changes)
        return Response(self.get_serializer(entry).data)

    def perform_destroy(self, instance):
        self._check_course_owner(instance.course_id)
        instance.delete()


class MyTimetableView(APIView):
    """
    GET /api/timetable/mine/
    Students: classes of their ACTIVE enrollments. Lecturers: classes they teach.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        user = request.user
        if is_lecturer(user):
            courses = Course.objects.filter(lecturer=user)
        else:
            courses = Course.objects.filter(
                enrollments__student=user,
                enrollments__status=EnrollmentStatus.ACTIVE,
            ).distinct()

        entries = timetable.weekly_schedule(
            courses,
            semester=request.query_params.get('semester'),
            academic_year=request.query_params.get('academic_year'),
        )
        return Response(TimetableEntrySerializer(entries, many=True).data)
