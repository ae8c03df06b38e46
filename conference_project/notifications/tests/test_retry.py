from datetime import timedelta

import pytest
from django.core.management import call_command
from django.utils import timezone

from invitations.models import InvitationStatus
from invitations.services import InvitationExpirySweeper
from notifications import scheduler
from notifications.models import NotificationRecord
from notifications.services import NotificationDispatcher, NotificationRetryService

pytestmark = pytest.mark.django_db


@pytest.fixture
def retry_service(gateway, clock):
    return NotificationRetryService(
        gateway=gateway,
        dispatcher=NotificationDispatcher(gateway=gateway, clock=clock),
        sweeper=InvitationExpirySweeper(gateway=gateway, clock=clock),
    )


def record(invitation, status, at):
    return NotificationRecord.objects.create(
        invitation=invitation,
        delivery_status=status,
        created_at=at,
    )


def test_retries_latest_failed_pending_invitations(
    retry_service, make_reviewer, make_invitation, mailoutbox, now,
):
    failed = make_invitation(make_reviewer("R1"))
    recovered = make_invitation(make_reviewer("R2"))
    answered = make_invitation(
        make_reviewer("R3"),
        status=InvitationStatus.ACCEPTED,
        responded_at=now,
    )

    earlier = now - timedelta(hours=2)
    later = now - timedelta(hours=1)
    record(failed, NotificationRecord.DeliveryStatus.FAILED, earlier)
    record(recovered, NotificationRecord.DeliveryStatus.FAILED, earlier)
    record(recovered, NotificationRecord.DeliveryStatus.SENT, later)
    record(answered, NotificationRecord.DeliveryStatus.FAILED, earlier)

    result = retry_service.retry_failed()

    assert result == {"retried": 1, "sent": 1, "failed": 0, "expired": 0}
    assert [message.to for message in mailoutbox] == [["r1@example.org"]]
    assert NotificationRecord.objects.filter(invitation=failed).count() == 2


def test_retry_that_fails_again_is_counted(retry_service, make_reviewer, make_invitation, mailoutbox, now):
    invitation = make_invitation(make_reviewer("R1", email=""))
    record(invitation, NotificationRecord.DeliveryStatus.FAILED, now - timedelta(hours=1))

    result = retry_service.retry_failed()

    assert result == {"retried": 1, "sent": 0, "failed": 1, "expired": 0}
    assert mailoutbox == []


def test_overdue_invitation_is_declined_instead_of_resent(
    retry_service, make_reviewer, make_invitation, mailoutbox, now,
):
    overdue = make_invitation(
        make_reviewer("R1"),
        created_at=now - timedelta(days=20),
        response_due_at=now - timedelta(days=6),
    )
    record(overdue, NotificationRecord.DeliveryStatus.FAILED, now - timedelta(days=19))

    result = retry_service.retry_failed()

    assert result == {"retried": 0, "sent": 0, "failed": 0, "expired": 1}
    assert mailoutbox == []
    overdue.refresh_from_db()
    assert overdue.status == InvitationStatus.DECLINED
    assert NotificationRecord.objects.filter(invitation=overdue).count() == 1


def test_latest_attempt_is_picked_by_time_not_insertion(
    retry_service, make_reviewer, make_invitation, now,
):
    invitation = make_invitation(make_reviewer("R1"))
    at = now - timedelta(hours=1)
    record(invitation, NotificationRecord.DeliveryStatus.SENT, at)
    record(invitation, NotificationRecord.DeliveryStatus.FAILED, at - timedelta(minutes=5))

    assert retry_service.retry_failed()["retried"] == 0


def test_nothing_to_retry(retry_service):
    assert retry_service.retry_failed() == {"retried": 0, "sent": 0, "failed": 0, "expired": 0}


def test_management_command(make_reviewer, make_invitation, mailoutbox, capsys):
    invitation = make_invitation(
        make_reviewer("R1"),
        created_at=timezone.now() - timedelta(hours=1),
    )
    NotificationRecord.objects.create(
        invitation=invitation,
        delivery_status=NotificationRecord.DeliveryStatus.FAILED,
    )

    call_command("retry_invitation_notifications")

    assert len(mailoutbox) == 1
    assert "1 retried, 1 sent, 0 failed" in capsys.readouterr().out


def test_scheduler_disabled(settings):
    settings.ENABLE_SCHEDULER = False

    assert scheduler.start_scheduler() is None


def test_scheduled_job_runs_command(monkeypatch):
    calls = []
    monkeypatch.setattr(scheduler, "call_command", lambda name: calls.append(name))

    scheduler.run_notification_retries()

    assert calls == ["retry_invitation_notifications"]
