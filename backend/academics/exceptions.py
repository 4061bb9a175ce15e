"""Business-rule errors raised by the academic operations engine.

Every error carries a stable ``code`` (returned to API clients as
``error``) and the HTTP status the DRF layer should answer with.
``api_exception_handler`` is installed as DRF's EXCEPTION_HANDLER so
engine errors never surface as 500s.
"""
import logging

from django.db import DatabaseError, IntegrityError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class AcademicError(Exception):
    code = 'ACADEMIC_ERROR'
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'The request violates an academic rule.'

    def __init__(self, message=None, **extra):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def as_dict(self):
        payload = {'error': self.code, 'detail': self.message}
        payload.update(self.extra)
        return payload


class NoFeeStructure(AcademicError):
    code = 'NO_FEE_STRUCTURE'
    default_message = 'No fee structure defined for this programme.'


class FeesAlreadyExist(AcademicError):
    code = 'FEES_ALREADY_EXIST'
    default_message = 'Fees already exist for this student.'


class RegistrationClosed(AcademicError):
    code = 'REGISTRATION_CLOSED'
    default_message = 'Course registration is closed for this term.'


class FeesOutstanding(AcademicError):
    code = 'FEES_OUTSTANDING'
    default_message = 'Required fees have not been paid.'


class InvalidCourse(AcademicError):
    code = 'INVALID_COURSE'
    default_message = 'One or more courses are invalid or inactive.'


class CreditBoundsViolation(AcademicError):
    code = 'CREDIT_BOUNDS_VIOLATION'
    default_message = 'Total credits must be between 12 and 18.'


class AlreadyRegistered(AcademicError):
    code = 'ALREADY_REGISTERED'
    status_code = status.HTTP_409_CONFLICT
    default_message = 'You have already registered for this semester.'


class ScheduleConflict(AcademicError):
    code = 'SCHEDULE_CONFLICT'
    default_message = 'Time conflict detected. Another class is scheduled in the same room at this time.'


class RecordNotFound(AcademicError):
    code = 'RECORD_NOT_FOUND'
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Record not found.'


class InvalidPayment(AcademicError):
    code = 'INVALID_PAYMENT'
    default_message = 'Payment cannot be accepted.'


class PeriodOverlap(AcademicError):
    code = 'PERIOD_OVERLAP'
    default_message = 'Registration period overlaps with an existing period.'


class InvalidPeriod(AcademicError):
    code = 'INVALID_PERIOD'
    default_message = 'Start date must be before end date.'


class InvalidTimetableEntry(AcademicError):
    code = 'INVALID_TIMETABLE_ENTRY'
    default_message = 'Start time must be before end time.'


class InvalidGrade(AcademicError):
    code = 'INVALID_GRADE'
    default_message = 'Grade or points are not valid.'


class DataConflict(AcademicError):
    code = 'DATA_CONFLICT'
    status_code = status.HTTP_409_CONFLICT
    default_message = 'The change conflicts with data saved concurrently.'


class StorageError(AcademicError):
    """The backing store failed. Infrastructure, not a business rule;
    the engine never retries, callers decide."""
    code = 'STORAGE_ERROR'
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = 'The data store is unavailable.'


def api_exception_handler(exc, context):
    """DRF exception handler that renders engine errors as JSON."""
    view_name = context.get('view').__class__.__name__
    # constraint violations the engine did not translate
    if isinstance(exc, IntegrityError):
        logger.warning('Integrity error in %s: %s', view_name, exc)
        exc = DataConflict()
    elif isinstance(exc, DatabaseError):
        logger.exception('Storage failure in %s', view_name)
        exc = StorageError(str(exc) or None)

    if isinstance(exc, AcademicError):
        return Response(exc.as_dict(), status=exc.status_code)

    return exception_handler(exc, context)
