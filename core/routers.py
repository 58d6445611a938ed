"""
URL mappings for the HBMS backend API.

Trailing slashes are deliberately omitted to match the dashboard
client (``APPEND_SLASH`` is off).
"""
from django.urls import path, include

from .auth_views import login_view, me_view, switch_role_view, jwt_refresh_view, jwt_logout_view
from .views import health
from .views.dashboard import dashboard_redirect, dashboard_route
from .views.notifications import (
    notification_list,
    notification_unread_count,
    notification_read,
    notification_read_all,
    notification_delete,
    notification_create,
)


urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz),
    # Authentication & session
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh_view'),
    path('api/auth/logout', jwt_logout_view, name='jwt_logout_view'),
    path('api/auth/me', me_view, name='me_view'),
    path('api/auth/switch-role', switch_role_view, name='switch_role_view'),
    # Dashboard entry point
    path('dashboard', dashboard_redirect, name='dashboard_redirect'),
    path('api/dashboard/route', dashboard_route, name='dashboard_route'),
    # Notifications
    path('api/notifications', notification_list, name='notification_list'),
    path('api/notifications/unread-count', notification_unread_count, name='notification_unread_count'),
    path('api/notifications/read', notification_read, name='notification_read'),
    path('api/notifications/read-all', notification_read_all, name='notification_read_all'),
    path('api/notifications/delete', notification_delete, name='notification_delete'),
    path('api/notifications/create', notification_create, name='notification_create'),
]
