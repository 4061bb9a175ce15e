"""Notification events for students.

The Notification row is written inside the caller's transaction so it
commits (or rolls back) together with the change it announces. E-mail
delivery is scheduled with transaction.on_commit and never affects the
outcome of the operation.
"""
import logging

from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction

from .domain_notifications import Notification, NotificationType

logger = logging.getLogger(__name__)


def _deliver_email(user, title, content):
    if not user.email:
        return
    try:
        send_mail(title, content, settings.DEFAULT_FROM_EMAIL, [user.email])
    except OSError as exc:
        logger.warning('Notification e-mail to %s failed: %s', user.email, exc)


def notify(user, title, content, type=NotificationType.INFO, category=None) -> Notification:
    notification = Notification.objects.create(
        user=user,
        title=title,
        content=content,
        type=type,
        category=category,
    )
    if settings.ACADEMICS.get('NOTIFY_BY_EMAIL'):
        transaction.on_commit(lambda: _deliver_email(user, title, content))
    return notification


def registration_completed(student, term, course_count, total_credits):
    return notify(
        student,
        'Course Registration Successful',
        f'You have successfully registered for {course_count} courses '
        f'({total_credits} credits) for the {term}.',
        type=NotificationType.SUCCESS,
        category='registration',
    )


def grade_posted(student, course, record):
    return notify(
        student,
        f'Grade Posted: {course.code}',
        f'Your grade for {course.code} {course.title} ({record.semester} {record.academic_year}) '
        f'has been posted. Grade: {record.grade}',
        type=NotificationType.SUCCESS,
        category='grade',
    )


def payment_received(payment):
    return notify(
        payment.student,
        f'Payment Received: {payment.amount}',
        f'Your payment of {payment.amount} towards "{payment.fee.description}" '
        f'has been received and processed successfully.',
        type=NotificationType.SUCCESS,
        category='payment',
    )


def fees_created(student, programme, total):
    return notify(
        student,
        'Fees Issued',
        f'Fees totalling {total} have been issued for {programme}.',
        type=NotificationType.INFO,
        category='fee',
    )
