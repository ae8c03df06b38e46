"""
notifications/management/commands/retry_invitation_notifications.py

Re-sends review invitations whose last notification attempt failed.

Safe to run repeatedly: only pending invitations whose most recent
attempt failed are picked up, and every attempt is appended to the
notification record trail.
"""

from django.core.management.base import BaseCommand
from django.utils import timezone

from invitations.services import InvitationExpirySweeper
from notifications.services import NotificationDispatcher, NotificationRetryService
from papers.gateway import DjangoGateway


class Command(BaseCommand):
    help = "Retry failed review invitation notifications"

    def handle(self, *args, **options):
        now = timezone.now()

        self.stdout.write(
            self.style.NOTICE(
                f"[{now:%Y-%m-%d %H:%M:%S}] Retrying failed invitation notifications"
            )
        )

        gateway = DjangoGateway()
        service = NotificationRetryService(
            gateway=gateway,
            dispatcher=NotificationDispatcher(gateway=gateway),
            sweeper=InvitationExpirySweeper(gateway=gateway),
        )
        result = service.retry_failed()

        self.stdout.write(
            self.style.SUCCESS(
                f"[{now:%Y-%m-%d %H:%M:%S}] Completed: "
                f"{result['retried']} retried, "
                f"{result['sent']} sent, "
                f"{result['failed']} failed, "
                f"{result['expired']} expired"
            )
        )
