"""
WSGI config for the HBMS project.

It exposes the WSGI callable as a module-level variable named ``application``.
The WebSocket notification channel is only available through ``hbms.asgi``.
"""
import os

from django.core.wsgi import get_wsgi_application  # type: ignore

# Set the default settings module for the 'django' program.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'hbms.settings')

# Obtain the WSGI application for use by the server
application = get_wsgi_application()
