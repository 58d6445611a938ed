"""
Custom permission classes for role based access control.

Checks use the user's *effective* role, so a multi-role user only gets
the rights of the role they are currently acting as.
"""
from rest_framework.permissions import BasePermission

from core.roles import has_permission


def _effective_role(request):
    user = getattr(request, "user", None)
    if not (user and user.is_authenticated):
        return None
    return getattr(user, "effective_role", None)


class HasFeature(BasePermission):
    """Gate a view on a feature of the role permission matrix.

    Subclass and set ``feature``, or use :func:`feature_permission`.
    """
    feature = ''

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return has_permission(_effective_role(request), self.feature)


def feature_permission(name: str) -> type:
    return type(f"HasFeature_{name}", (HasFeature,), {"feature": name})
