"""
Django admin registrations for the core models.

Lets superusers inspect staff accounts, notifications and the audit
trail via the ``/admin/`` URL during development.
"""

from django.contrib import admin

from .models import User, Notification, AuditEvent


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'roles', 'current_role', 'department', 'is_staff', 'is_superuser')
    list_filter = ('current_role', 'is_staff')
    search_fields = ('username', 'first_name', 'last_name', 'department')


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('id', 'recipient', 'type', 'title', 'read', 'created_at')
    list_filter = ('type', 'read')
    search_fields = ('title', 'message', 'recipient__username')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'user', 'object_type', 'object_id', 'created_at')
    list_filter = ('action',)
    search_fields = ('user__username', 'object_id')
