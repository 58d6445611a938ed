import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from core.models import User, Notification

pytestmark = pytest.mark.django_db


def test_ensure_test_users_is_idempotent():
    call_command('ensure_test_users', '--password', 'S3cret!pw')
    User.objects.filter(username='multi1').update(current_role='nurse', roles=['nurse'])
    call_command('ensure_test_users', '--password', 'S3cret!pw')

    multi = User.objects.get(username='multi1')
    assert multi.roles == ['doctor', 'nurse']
    assert multi.current_role is None
    assert multi.check_password('S3cret!pw')
    assert User.objects.filter(username__in=['admin1', 'doctor1', 'nurse1', 'reception1']).count() == 4


def test_seed_notifications_for_selected_user():
    User.objects.create_user(username='n1', password='P@ssw0rd1', roles=['nurse'])
    User.objects.create_user(username='n2', password='P@ssw0rd1', roles=['nurse'])
    call_command('seed_notifications', '--user', 'n1', '--count', '3')
    assert Notification.objects.filter(recipient__username='n1', read=False).count() == 3
    assert not Notification.objects.filter(recipient__username='n2').exists()


def test_seed_notifications_without_users_fails():
    with pytest.raises(CommandError):
        call_command('seed_notifications', '--user', 'ghost')
