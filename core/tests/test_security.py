import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from core.models import User, AuditEvent
from core.permissions import feature_permission

pytestmark = pytest.mark.django_db


def test_no_role_bypass_in_login():
    client = APIClient()
    u = User.objects.create_user(username='u1', password='P@ssw0rd1', roles=['reception'])
    # Try to bypass by sending role
    r = client.post(reverse('login_view'), {'username': 'u1', 'password': 'P@ssw0rd1', 'role': 'admin'}, format='json')
    assert r.status_code == 200
    assert r.data['roles'] == ['reception']
    assert r.data['dashboardRoute'] == '/dashboard/reception'
    u.refresh_from_db()
    assert u.roles == ['reception']
    assert u.current_role is None


def test_login_wrong_password_is_rejected_and_audited():
    client = APIClient()
    User.objects.create_user(username='u2', password='P@ssw0rd1', roles=['nurse'])
    r = client.post(reverse('login_view'), {'username': 'u2', 'password': 'nope'}, format='json')
    assert r.status_code == 400
    assert r.data['ok'] is False
    assert AuditEvent.objects.filter(action='login', detail__result='fail').exists()


def test_login_requires_fields():
    client = APIClient()
    r = client.post(reverse('login_view'), {'username': ''}, format='json')
    assert r.status_code == 400
    assert r.data['ok'] is False


def test_login_returns_jwt_and_legacy_token():
    client = APIClient()
    User.objects.create_user(username='u_jwt', password='P@ssw0rd1', roles=['doctor'])
    r = client.post(reverse('login_view'), {'username': 'u_jwt', 'password': 'P@ssw0rd1'}, format='json')
    assert r.status_code == 200
    assert r.data['jwt_access']
    assert r.data['jwt_refresh']
    assert r.data['token']
    assert r.data['dashboardRoute'] == '/dashboard/doctor'

    # the legacy token authenticates follow-up requests
    client.credentials(HTTP_AUTHORIZATION=f"Token {r.data['token']}")
    me = client.get(reverse('me_view'))
    assert me.status_code == 200
    assert me.data['user']['username'] == 'u_jwt'


def test_jwt_refresh_and_logout():
    client = APIClient()
    User.objects.create_user(username='u_ref', password='P@ssw0rd1', roles=['nurse'])
    r = client.post(reverse('login_view'), {'username': 'u_ref', 'password': 'P@ssw0rd1'}, format='json')
    refresh = r.data['jwt_refresh']

    rr = client.post(reverse('jwt_refresh_view'), {'refresh': refresh}, format='json')
    assert rr.status_code == 200
    assert rr.data['jwt_access']

    client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['jwt_access']}")
    out = client.post(reverse('jwt_logout_view'), {'refresh': refresh}, format='json')
    assert out.status_code == 200
    assert out.data['blacklisted'] == 1

    client.credentials()
    again = client.post(reverse('jwt_refresh_view'), {'refresh': refresh}, format='json')
    assert again.status_code == 401


def test_feature_permission_uses_effective_role():
    class Req:
        pass

    user = User.objects.create_user(username='u_feat', password='P@ssw0rd1', roles=['doctor', 'nurse'])
    req = Req()
    req.user = user
    can_assign = feature_permission('assignBed')()
    assert can_assign.has_permission(req, None) is False
    user.current_role = 'nurse'
    assert can_assign.has_permission(req, None) is True
