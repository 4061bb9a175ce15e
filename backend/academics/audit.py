"""Audit helpers: one ActivityLog row per committed engine action."""
import logging

from .domain_logs import ActivityLog

logger = logging.getLogger(__name__)


def log_activity(user, action, entity, entity_id=None, details=None, request=None):
    """Write an audit row. Runs inside the caller's transaction."""
    entry = ActivityLog(
        user=user if getattr(user, 'is_authenticated', False) else None,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        details=details,
    )
    if request is not None:
        entry.path = request.path
        entry.method = request.method
        entry.ip_address = client_ip(request)
    entry.save()
    logger.info('%s %s %s by %s', action, entity, entry.entity_id or '-', getattr(user, 'username', None) or 'system')
    return entry


def client_ip(request):
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR') or None
