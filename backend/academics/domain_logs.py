"""Domain Audit Models
ActivityLog, ErrorLog
"""
from django.contrib.auth.models import User
from django.db import models
from django.utils import timezone

__all__ = ['ActivityLog', 'ErrorLog']


class ActivityLog(models.Model):
    """Audit trail of who changed what.

    Engine operations write one row per committed action (entity + id +
    details); the request middleware adds one row per mutating API call
    (path, method, status code).
    """
    id = models.BigAutoField(primary_key=True)
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='activity_logs')
    action = models.CharField(max_length=50)
    entity = models.CharField(max_length=100, blank=True, null=True)
    entity_id = models.CharField(max_length=64, blank=True, null=True)
    details = models.JSONField(blank=True, null=True)
    path = models.CharField(max_length=1000, blank=True, null=True)
    method = models.CharField(max_length=10, blank=True, null=True)
    status_code = models.IntegerField(blank=True, null=True)
    ip_address = models.GenericIPAddressField(blank=True, null=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'activity_log'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['entity', 'entity_id'], name='activity_log_entity_idx'),
        ]

    def __str__(self):
        who = self.user.username if self.user else 'Anonymous'
        return f"{who} {self.action} {self.entity or self.path or ''} @ {self.created_at}"


class ErrorLog(models.Model):
    """Unhandled request exceptions, kept for ops."""
    id = models.BigAutoField(primary_key=True)
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    path = models.CharField(max_length=1000, blank=True, null=True)
    method = models.CharField(max_length=10, blank=True, null=True)
    message = models.TextField(blank=True, null=True)
    stack = models.TextField(blank=True, null=True)
    payload = models.JSONField(blank=True, null=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'error_log'
        ordering = ['-created_at']

    def __str__(self):
        who = self.user.username if self.user else 'Anonymous'
        return f"Error by {who} on {self.path or 'unknown'} @ {self.created_at}"
