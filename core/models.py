"""
Database models for the HBMS backend.

Staff users carry an ordered list of roles and an optional currently
selected role.  Notifications are per-recipient rows whose unread count
is always computed by query, never stored.
"""
from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone

from core import roles as role_defs


def _default_roles() -> list[str]:
    return [role_defs.RECEPTION]


class User(AbstractUser):
    """Staff member with one or more roles.

    ``roles`` is ordered: when no role has been selected the first entry
    is the effective role.  ``current_role`` is set by the role switcher
    and must be one of ``roles``.
    """
    roles = models.JSONField(default=_default_roles, blank=True)
    current_role = models.CharField(
        max_length=20, choices=role_defs.ROLE_CHOICES, null=True, blank=True
    )
    department = models.CharField(max_length=255, blank=True)

    @property
    def effective_role(self) -> str | None:
        if self.current_role:
            return self.current_role
        return self.roles[0] if self.roles else None

    def has_role(self, role: str) -> bool:
        return role in (self.roles or [])

    def __str__(self) -> str:
        return f"{self.username} ({', '.join(self.roles or [])})"


def _notification_id() -> str:
    return uuid.uuid4().hex


class Notification(models.Model):
    """A user-facing notification shown in the header bell."""
    TYPE_INFO = 'info'
    TYPE_SUCCESS = 'success'
    TYPE_WARNING = 'warning'
    TYPE_ERROR = 'error'
    TYPE_CHOICES = (
        (TYPE_INFO, 'info'),
        (TYPE_SUCCESS, 'success'),
        (TYPE_WARNING, 'warning'),
        (TYPE_ERROR, 'error'),
    )

    id = models.CharField(max_length=32, primary_key=True, default=_notification_id, editable=False)
    recipient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='notifications')
    title = models.CharField(max_length=200, blank=True)
    message = models.TextField()
    type = models.CharField(max_length=16, choices=TYPE_CHOICES, default=TYPE_INFO)
    read = models.BooleanField(default=False, db_index=True)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    payload = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['recipient', 'read'], name='core_notif_recipient_read'),
            models.Index(fields=['recipient', 'created_at'], name='core_notif_recipient_created'),
        ]

    def __str__(self) -> str:
        return f"{self.recipient_id} | {self.type} | {self.title or self.message[:30]}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.CharField(max_length=64, blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='core_audit_action_created'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='core_audit_object_created'),
        ]

    def __str__(self):
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
