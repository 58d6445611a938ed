"""Core application for the HBMS backend.

This package contains the staff role catalogue, the dashboard router,
the notification center and the API/WebSocket surfaces exposing them.
"""
