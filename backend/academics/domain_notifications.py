"""Domain Notification Models
NotificationType, Notification
"""
from django.contrib.auth.models import User
from django.db import models

__all__ = ['NotificationType', 'Notification']


class NotificationType(models.TextChoices):
    INFO = 'INFO', 'Info'
    SUCCESS = 'SUCCESS', 'Success'
    WARNING = 'WARNING', 'Warning'
    ERROR = 'ERROR', 'Error'


class Notification(models.Model):
    id = models.BigAutoField(primary_key=True)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='notifications')
    title = models.CharField(max_length=255)
    content = models.TextField()
    type = models.CharField(max_length=10, choices=NotificationType.choices, default=NotificationType.INFO)
    category = models.CharField(max_length=50, null=True, blank=True, help_text="registration, grade, payment, fee")
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notification'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', 'is_read'], name='notification_user_read_idx'),
        ]

    def __str__(self):
        return f"{self.user.username}: {self.title}"
