"""
Authentication and session views.

Login issues both a legacy DRF token and a JWT pair.  The session payload
returned by login, ``me`` and ``switch-role`` carries everything the
dashboard shell needs to route the user: roles, the selected role, the
effective role and the resolved dashboard path.
"""
from __future__ import annotations

from django.contrib.auth import authenticate
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from core.roles import get_role_info, permissions_for
from core.serializers.auth import LoginSerializer, SwitchRoleSerializer
from core.services.audit import try_log_action
from core.services.routing import RoleRouter, Session

from .models import User


def session_payload(user: User) -> dict:
    decision = RoleRouter().decide(Session.from_user(user))
    role = user.effective_role
    return {
        'user': {
            'id': user.id,
            'username': user.username,
            'name': user.get_full_name() or user.username,
            'department': user.department,
        },
        'roles': list(user.roles or []),
        'currentRole': user.current_role,
        'effectiveRole': role,
        'roleInfo': get_role_info(role) if role else None,
        'dashboardRoute': decision.route,
        'permissions': permissions_for(role),
    }


# ---------------------------------------------------------------------
# Username/password login (no role bypass)
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([ScopedRateThrottle])
def login_view(request):
    """
    Secure login with username/password only.  Any role sent by the
    client is ignored; roles come from the user record.
    """
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    username = s.validated_data['username']
    password = s.validated_data['password']

    user = authenticate(request, username=username, password=password)
    if not user:
        try_log_action(user=None, action='login', object_type='user',
                       detail={'result': 'fail', 'username': username, 'ip': request.META.get('REMOTE_ADDR')})
        return Response({'ok': False, 'detail': 'Invalid username or password'}, status=400)

    try_log_action(user=user, action='login', object_type='user', object_id=user.id,
                   detail={'result': 'ok', 'ip': request.META.get('REMOTE_ADDR')})

    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)

    return Response({
        'ok': True,
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
        **session_payload(user),
    }, status=200)

# DRF ScopedRateThrottle uses throttle_scope on the view function
login_view.cls.throttle_scope = 'login'


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    return Response({'ok': True, **session_payload(request.user)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def switch_role_view(request):
    """Select which of the user's roles is active."""
    s = SwitchRoleSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    role = s.validated_data['role']
    user: User = request.user  # type: ignore[assignment]
    if not user.has_role(role):
        return Response({'ok': False, 'detail': f'User does not hold role {role}'}, status=400)
    previous = user.current_role
    if previous != role:
        user.current_role = role
        user.save(update_fields=['current_role'])
        try_log_action(user=user, action='switch_role', object_type='user', object_id=user.id,
                       detail={'from': previous, 'to': role})
    return Response({'ok': True, **session_payload(user)})


@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from a refresh token."""
    s = TokenRefreshSerializer(data=request.data)
    try:
        s.is_valid(raise_exception=True)
    except TokenError as e:
        return Response({'ok': False, 'detail': str(e)}, status=401)
    data = dict(s.validated_data)
    data['jwt_access'] = data.pop('access')
    if 'refresh' in data:
        data['jwt_refresh'] = data.pop('refresh')
    return Response({'ok': True, **data})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def jwt_logout_view(request):
    """Blacklist current user's refresh tokens (all or a given one)."""
    refresh = request.data.get('refresh')
    count = 0
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
            count = 1
        except TokenError as e:
            return Response({'ok': False, 'detail': str(e)}, status=400)
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    try_log_action(user=request.user, action='logout', object_type='user', object_id=request.user.id,
                   detail={'blacklisted': count})
    return Response({'ok': True, 'blacklisted': count})
