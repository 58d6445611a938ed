"""
Token authentication for the HBMS API.

Kept in its own module so DRF can import the authentication class from
settings without pulling in any view code.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """Legacy token authentication using the ``Token`` keyword.

    JWT access tokens are accepted alongside through simplejwt's
    ``JWTAuthentication`` (see ``REST_FRAMEWORK`` in settings).
    """

    keyword = 'Token'
