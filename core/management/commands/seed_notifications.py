from django.core.management.base import BaseCommand, CommandError

from core.models import Notification, User
from core.services.notifications import create_notification

SAMPLE = [
    ("Bed assigned", "Bed 3B-12 was assigned to patient J. Smith.", Notification.TYPE_SUCCESS),
    ("Ward near capacity", "Ward 4 occupancy is above 90%.", Notification.TYPE_WARNING),
    ("Discharge pending", "Discharge for bed 2A-04 awaits sign-off.", Notification.TYPE_INFO),
    ("Transfer failed", "Transfer of patient R. Lee to ICU was rejected.", Notification.TYPE_ERROR),
]


class Command(BaseCommand):
    help = "Create sample notifications for staff users and broadcast them."

    def add_arguments(self, parser):
        parser.add_argument("--user", action="append", dest="users", help="username (repeatable); default all active users")
        parser.add_argument("--count", type=int, default=len(SAMPLE))

    def handle(self, *args, **opts):
        qs = User.objects.filter(is_active=True)
        if opts["users"]:
            qs = qs.filter(username__in=opts["users"])
        users = list(qs)
        if not users:
            raise CommandError("No matching users")

        created = 0
        for user in users:
            for i in range(max(0, opts["count"])):
                title, message, ntype = SAMPLE[i % len(SAMPLE)]
                create_notification(user, message, title=title, type=ntype)
                created += 1
        self.stdout.write(self.style.SUCCESS(f"Created {created} notifications for {len(users)} users"))
