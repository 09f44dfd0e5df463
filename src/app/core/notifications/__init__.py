"""Notification utilities - email and detached delivery.

Re-exports all notification-related classes for convenience.
"""

from src.app.core.notifications.email import EmailDeliveryError, EmailService
from src.app.core.notifications.queue import NotificationQueue, get_notification_queue

__all__ = [
    "EmailDeliveryError",
    "EmailService",
    "NotificationQueue",
    "get_notification_queue",
]
