"""Serializers for registration, periods and grading"""
from rest_framework import serializers

from .domain_catalog import Course
from .domain_enrollment import AcademicRecord, Enrollment, RegistrationPeriod


class RegistrationRequestSerializer(serializers.Serializer):
    course_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=True)
    academic_year = serializers.CharField(required=False, allow_blank=True)
    semester = serializers.CharField(required=False, allow_blank=True)


class WithdrawRequestSerializer(serializers.Serializer):
    course = serializers.PrimaryKeyRelatedField(queryset=Course.objects.all())
    academic_year = serializers.CharField(required=False, allow_blank=True)
    semester = serializers.CharField(required=False, allow_blank=True)


class EnrollmentSerializer(serializers.ModelSerializer):
    course_code = serializers.CharField(source='course.code', read_only=True)
    course_title = serializers.CharField(source='course.title', read_only=True)
    credits = serializers.IntegerField(source='course.credits', read_only=True)

    class Meta:
        model = Enrollment
        fields = [
            'id', 'student', 'course', 'course_code', 'course_title', 'credits',
            'academic_year', 'semester', 'status', 'enrollment_date',
        ]
        read_only_fields = fields


class RegistrationPeriodSerializer(serializers.ModelSerializer):
    class Meta:
        model = RegistrationPeriod
        fields = [
            'id', 'name', 'description', 'academic_year', 'semester', 'level',
            'department', 'start_date', 'end_date', 'is_active', 'created_at',
        ]
        read_only_fields = ['id', 'is_active', 'created_at']

    def validate(self, attrs):
        start = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start and end and start >= end:
            raise serializers.ValidationError({'end_date': 'End date must be after start date.'})
        return attrs


class GradeEntrySerializer(serializers.Serializer):
    """One student's grade: a letter (optionally with points) or a raw percentage score."""
    student_id = serializers.IntegerField()
    grade = serializers.CharField(required=False, allow_blank=True, max_length=5)
    points = serializers.DecimalField(max_digits=4, decimal_places=2, required=False, allow_null=True,
                                      min_value=0, max_value=5)
    score = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, allow_null=True,
                                     min_value=0, max_value=100)
    comments = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if not (attrs.get('grade') or '').strip() and attrs.get('score') is None:
            raise serializers.ValidationError('Provide a grade or a score.')
        return attrs


class GradeBatchSerializer(serializers.Serializer):
    grades = GradeEntrySerializer(many=True)
    academic_year = serializers.CharField(required=False, allow_blank=True)
    semester = serializers.CharField(required=False, allow_blank=True)


class AcademicRecordSerializer(serializers.ModelSerializer):
    student_username = serializers.CharField(source='student.username', read_only=True)
    student_name = serializers.SerializerMethodField()
    course_code = serializers.CharField(source='course.code', read_only=True)

    class Meta:
        model = AcademicRecord
        fields = [
            'id', 'student', 'student_username', 'student_name', 'course', 'course_code',
            'academic_year', 'semester', 'grade', 'points', 'comments', 'status', 'updated_at',
        ]
        read_only_fields = fields

    def get_student_name(self, obj):
        return obj.student.get_full_name() or obj.student.username
