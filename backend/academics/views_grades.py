"""Views for grading, transcripts and the notification inbox"""
from django.shortcuts import get_object_or_404
from rest_framework import mixins, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .domain_catalog import Course
from .domain_enrollment import AcademicRecord, Enrollment, EnrollmentStatus
from .domain_notifications import Notification
from .grades import compute_gpa, term_breakdown
from .permissions import IsCourseLecturerOrAdmin
from .registration import orchestrator
from .serializers_core import NotificationSerializer
from .serializers_registration import AcademicRecordSerializer, GradeBatchSerializer
from .terms import term_from_params
from .views_fees import target_student


class CourseGradesView(APIView):
    """
    GET  /api/courses/{id}/grades/ - enrolled students and their records for the term
    POST /api/courses/{id}/grades/ - grade a batch of enrolled students
    Only the course's lecturer (or an admin) may use it.
    """
    permission_classes = [IsCourseLecturerOrAdmin]

    def _course(self, request, course_id):
        course = get_object_or_404(Course, pk=course_id)
        self.check_object_permissions(request, course)
        return course

    def get(self, request, course_id):
        course = self._course(request, course_id)
        term = term_from_params(request.query_params)

        enrollments = Enrollment.objects.select_related('student').filter(
            course=course,
            status__in=[EnrollmentStatus.ACTIVE, EnrollmentStatus.COMPLETED],
            **term.as_filter(),
        ).order_by('student__username')
        records = {
            r.student_id: r
            for r in AcademicRecord.objects.select_related('student', 'course').filter(course=course, **term.as_filter())
        }
        students = []
        for enrollment in enrollments:
            record = records.get(enrollment.student_id)
            students.append({
                'student_id': enrollment.student_id,
                'username': enrollment.student.username,
                'name': enrollment.student.get_full_name() or enrollment.student.username,
                'enrollment_status': enrollment.status,
                'record': AcademicRecordSerializer(record).data if record else None,
            })
        return Response({
            'course': {'id': course.id, 'code': course.code, 'title': course.title, 'credits': course.credits},
            'academic_year': term.academic_year,
            'semester': term.semester,
            'students': students,
        })

    def post(self, request, course_id):
        course = self._course(request, course_id)
        serializer = GradeBatchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        records = orchestrator.record_grades(course, data['grades'], term_from_params(data), actor=request.user)
        return Response({
            'message': f'Recorded {len(records)} grades',
            'records': AcademicRecordSerializer(records, many=True).data,
        })


class TranscriptView(APIView):
    """GET /api/transcript/ - cumulative GPA plus the per-term breakdown"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        student = target_student(request)
        return Response({
            'student': {
                'id': student.pk,
                'username': student.username,
                'name': student.get_full_name() or student.username,
            },
            **compute_gpa(student).as_dict(),
            'terms': term_breakdown(student),
        })


class NotificationViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    GET  /api/notifications/?unread=1
    POST /api/notifications/{id}/read/
    POST /api/notifications/read-all/
    """
    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        qs = Notification.objects.filter(user=self.request.user).order_by('-created_at', '-id')
        if self.request.query_params.get('unread') in ('1', 'true', 'yes'):
            qs = qs.filter(is_read=False)
        return qs

    @action(detail=True, methods=['post'])
    def read(self, request, pk=None):
        notification = self.get_object()
        if not notification.is_read:
            notification.is_read = True
            notification.save(update_fields=['is_read'])
        return Response(self.get_serializer(notification).data)

    @action(detail=False, methods=['post'], url_path='read-all')
    def read_all(self, request):
        updated = self.get_queryset().filter(is_read=False).update(is_read=True)
        return Response({'updated': updated})
