# core/management/commands/ensure_test_users.py
from django.core.management.base import BaseCommand
from django.contrib.auth.hashers import make_password

from core.models import User

TEST_SET = [
    ("admin1", ["admin"]),
    ("doctor1", ["doctor"]),
    ("nurse1", ["nurse"]),
    ("reception1", ["reception"]),
    ("multi1", ["doctor", "nurse"]),
]


class Command(BaseCommand):
    help = "Ensure staff test users exist with the given password (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="123456")

    def handle(self, *args, **opts):
        password = make_password(opts["password"])
        for username, roles in TEST_SET:
            u, created = User.objects.get_or_create(
                username=username,
                defaults={"roles": roles, "password": password, "is_active": True},
            )
            if not created:
                # reset password, activation and roles
                u.password = password
                u.roles = roles
                u.current_role = None
                u.is_active = True
                u.save(update_fields=["password", "roles", "current_role", "is_active"])
            self.stdout.write(self.style.SUCCESS(f"ok: {username} ({', '.join(roles)})"))
        self.stdout.write(self.style.SUCCESS("All test users ensured."))
