"""
Post-login dashboard routing.

A signed-in staff member who opens the shared ``/dashboard`` entry point
is sent to the dashboard of their effective role.  Resolution is a pure
function of ``(roles, current_role, is_loading)``; the only side effect is
a single navigation request with the *replace* flag set, so the generic
entry point never stays in the browser history.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from core.roles import DEFAULT_DASHBOARD_ROUTE, dashboard_route_for, is_known_role

logger = logging.getLogger(__name__)

Navigator = Callable[..., None]


@dataclass(frozen=True)
class SessionUser:
    id: Optional[int]
    roles: tuple[str, ...] = ()


@dataclass(frozen=True)
class Session:
    """Snapshot of what the session provider currently knows."""
    user: Optional[SessionUser] = None
    current_role: Optional[str] = None
    is_loading: bool = False

    @classmethod
    def from_user(cls, user, *, is_loading: bool = False) -> 'Session':
        """Build a session from an authenticated Django user (or ``None``)."""
        if user is None or not getattr(user, 'is_authenticated', False):
            return cls(user=None, is_loading=is_loading)
        return cls(
            user=SessionUser(id=user.id, roles=tuple(user.roles or ())),
            current_role=user.current_role or None,
            is_loading=is_loading,
        )

    @property
    def key(self) -> tuple:
        roles = self.user.roles if self.user else None
        return roles, self.current_role, self.is_loading


@dataclass(frozen=True)
class RouteDecision:
    pending: bool
    route: Optional[str] = None
    role: Optional[str] = None
    replace: bool = True
    fallback: bool = False

    def as_dict(self) -> dict:
        return {
            'pending': self.pending,
            'route': self.route,
            'role': self.role,
            'replace': self.replace,
            'fallback': self.fallback,
        }


PENDING = RouteDecision(pending=True)


def effective_role(roles: Optional[Sequence[str]], current_role: Optional[str] = None) -> Optional[str]:
    """``current_role`` if set, otherwise the first entry of ``roles``."""
    if current_role:
        return current_role
    if roles:
        return roles[0]
    return None


def resolve_route(roles: Optional[Sequence[str]], current_role: Optional[str] = None) -> RouteDecision:
    """Map roles to a dashboard route.  Never fails: unknown roles get the default route."""
    role = effective_role(roles, current_role)
    if not is_known_role(role):
        logger.warning('Unrecognized role %r, routing to %s', role, DEFAULT_DASHBOARD_ROUTE)
        return RouteDecision(pending=False, route=DEFAULT_DASHBOARD_ROUTE, role=role, fallback=True)
    return RouteDecision(pending=False, route=dashboard_route_for(role), role=role)


class RoleRouter:
    """Resolves a session to a dashboard and asks ``navigate`` to go there.

    ``navigate`` is called as ``navigate(path, replace=True)``.  ``resolve``
    navigates on every completed resolution; ``sync`` is for reactive
    callers and only navigates when the driving inputs changed since the
    last resolution it performed.  The remembered key is the input tuple
    itself, so the chosen route depends on nothing else.
    """

    def __init__(self, navigate: Optional[Navigator] = None):
        self.navigate = navigate
        self._last_key: Optional[tuple] = None

    def decide(self, session: Session) -> RouteDecision:
        if session.is_loading or session.user is None:
            return PENDING
        return resolve_route(session.user.roles, session.current_role)

    def resolve(self, session: Session) -> RouteDecision:
        decision = self.decide(session)
        if not decision.pending:
            self._last_key = session.key
            if self.navigate is not None:
                self.navigate(decision.route, replace=decision.replace)
        return decision

    def sync(self, session: Session) -> RouteDecision:
        decision = self.decide(session)
        if decision.pending:
            # a fresh load cycle counts as an input change
            self._last_key = None
            return decision
        if session.key == self._last_key:
            return decision
        return self.resolve(session)
