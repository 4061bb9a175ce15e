import json
import logging
import traceback

from django.db import DatabaseError
from django.http.request import RawPostDataException
from django.utils.deprecation import MiddlewareMixin

from .audit import client_ip
from .domain_logs import ActivityLog, ErrorLog

logger = logging.getLogger(__name__)

MUTATING_METHODS = ('POST', 'PUT', 'PATCH', 'DELETE')
SECRET_KEYS = {'password', 'refresh', 'access', 'token'}


def _request_user(request):
    user = getattr(request, 'user', None)
    return user if user is not None and user.is_authenticated else None


def _json_payload(request):
    """Parsed JSON body with secrets masked, or None when unavailable."""
    try:
        body = request.body
    except RawPostDataException:
        # body already consumed as a stream by the parser
        return None
    if not body or 'json' not in (request.content_type or ''):
        return None
    try:
        payload = json.loads(body.decode('utf-8'))
    except (UnicodeDecodeError, ValueError):
        return None
    if isinstance(payload, dict):
        payload = {k: ('***' if k in SECRET_KEYS else v) for k, v in payload.items()}
    return payload


class RequestActivityMiddleware(MiddlewareMixin):
    """Logs basic user activity for POST/PUT/PATCH/DELETE API requests."""

    def process_response(self, request, response):
        if request.method not in MUTATING_METHODS or not request.path.startswith('/api/'):
            return response
        resolver_match = getattr(request, 'resolver_match', None)
        try:
            ActivityLog.objects.create(
                user=_request_user(request),
                action='API',
                entity=getattr(resolver_match, 'url_name', None),
                details=_json_payload(request),
                path=request.path,
                method=request.method,
                status_code=getattr(response, 'status_code', None),
                ip_address=client_ip(request),
            )
        except DatabaseError:
            logger.exception('Could not record activity for %s %s', request.method, request.path)
        return response


class ExceptionLoggingMiddleware(MiddlewareMixin):
    def process_exception(self, request, exception):
        try:
            ErrorLog.objects.create(
                user=_request_user(request),
                path=request.path,
                method=request.method,
                message=str(exception),
                stack=traceback.format_exc(),
                payload=_json_payload(request),
            )
        except DatabaseError:
            logger.exception('Could not record error for %s %s', request.method, request.path)
        # returning None allows normal exception handling to continue
        return None
