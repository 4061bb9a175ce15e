"""
File: backend/academics/urls.py
API routing configuration.
"""
from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView, TokenVerifyView

# --- FEES / PAYMENTS ---
from .views_fees import FeeStatusView, PaymentViewSet, ProgrammeFeesView, ScheduleFeesView

# --- GRADES / TRANSCRIPT / INBOX ---
from .views_grades import CourseGradesView, NotificationViewSet, TranscriptView

# --- REGISTRATION ---
from .views_registration import (
    CourseRegistrationView,
    MyEnrollmentsView,
    RegistrationPeriodViewSet,
    WithdrawView,
)

# --- REPORTS ---
from .views_reports import FeeCollectionStatsView

# --- TIMETABLE ---
from .views_timetable import MyTimetableView, TimetableEntryViewSet

# ---------------------------------------------
# ROUTER REGISTRATIONS
# ---------------------------------------------

router = DefaultRouter()
router.register(r'payments', PaymentViewSet, basename='payments')
router.register(r'registration-periods', RegistrationPeriodViewSet, basename='registration-periods')
router.register(r'timetable', TimetableEntryViewSet, basename='timetable')
router.register(r'notifications', NotificationViewSet, basename='notifications')

urlpatterns = [
    # AUTH
    path('userlogin/', TokenObtainPairView.as_view(), name='userlogin'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('token/verify/', TokenVerifyView.as_view(), name='token_verify'),

    # FEES
    path('fees/schedule/', ScheduleFeesView.as_view(), name='fees-schedule'),
    path('fees/status/', FeeStatusView.as_view(), name='fees-status'),
    path('programme-fees/', ProgrammeFeesView.as_view(), name='programme-fees'),

    # REGISTRATION
    path('registration/', CourseRegistrationView.as_view(), name='registration'),
    path('registration/withdraw/', WithdrawView.as_view(), name='registration-withdraw'),
    path('enrollments/mine/', MyEnrollmentsView.as_view(), name='my-enrollments'),

    # TIMETABLE (before the router so "mine" is not taken as an entry id)
    path('timetable/mine/', MyTimetableView.as_view(), name='my-timetable'),

    # GRADES
    path('courses/<int:course_id>/grades/', CourseGradesView.as_view(), name='course-grades'),
    path('transcript/', TranscriptView.as_view(), name='transcript'),

    # REPORTS
    path('reports/fee-collection/', FeeCollectionStatsView.as_view(), name='fee-collection-stats'),

    path('', include(router.urls)),
]
