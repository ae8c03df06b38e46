from datetime import datetime, timezone as dt_timezone

from django.utils import timezone
from django.utils.dateparse import parse_datetime

from invitations.models import InvitationStatus


def _as_datetime(value):
    """
    Coerce a stored due date into an aware datetime.
    Returns None for empty or unparseable values.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = parse_datetime(value.strip())
        except ValueError:
            return None
    else:
        return None

    if parsed is None:
        return None

    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, dt_timezone.utc)
    return parsed


def is_overdue(invitation, now):
    due = _as_datetime(invitation.response_due_at)
    return due is not None and due < now


class InvitationExpirySweeper:
    """
    Lazily flips overdue pending invitations to DECLINED.

    Runs at the start of every read so that an expired invitation is
    never observed as pending. Deterministic for a given clock value:
    a second pass with the same ``now`` changes nothing.
    """

    def __init__(self, *, gateway, clock=timezone.now):
        self.gateway = gateway
        self.clock = clock

    def refresh_statuses(self, invitations):
        now = self.clock()
        changed = 0

        for invitation in invitations or ():
            if invitation is None or invitation.status != InvitationStatus.PENDING:
                continue

            if not is_overdue(invitation, now):
                continue

            updated = self.gateway.update_review_invitation_status(
                invitation.id,
                status=InvitationStatus.DECLINED,
                responded_at=now,
                expected_status=InvitationStatus.PENDING,
            )

            if updated is None:
                # Reviewer responded in between; show what was committed.
                current = self.gateway.get_review_invitation_by_id(invitation.id)
                if current is not None:
                    invitation.status = current.status
                    invitation.responded_at = current.responded_at
                continue

            invitation.status = InvitationStatus.DECLINED
            invitation.responded_at = now
            changed += 1

        return {"changed": changed}
