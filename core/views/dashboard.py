"""
Dashboard entry point.

``/dashboard`` sends a signed-in user to the dashboard of their
effective role.  The browser follows a plain redirect, which replaces the
generic entry in its history.  ``/api/dashboard/route`` exposes the same
decision as JSON for single-page clients that navigate themselves.
"""
from __future__ import annotations

from django.http import HttpResponseRedirect
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..services.routing import RoleRouter, Session


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_redirect(request):
    targets: list[str] = []
    decision = RoleRouter(lambda path, replace=True: targets.append(path)).resolve(
        Session.from_user(request.user)
    )
    if decision.pending or not targets:
        return Response({'ok': True, **decision.as_dict()}, status=202)
    return HttpResponseRedirect(targets[0])


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_route(request):
    """Return the route the current user should land on."""
    decision = RoleRouter().decide(Session.from_user(request.user))
    return Response({'ok': True, **decision.as_dict()})
