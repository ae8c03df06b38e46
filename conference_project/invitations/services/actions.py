from dataclasses import dataclass
from typing import Any

from django.utils import timezone

from invitations.models import InvitationStatus
from invitations.services.expiry import is_overdue

ALREADY_PROCESSED_MESSAGE = "Invitation was already processed."

ACTION_STATUSES = {
    "accept": InvitationStatus.ACCEPTED,
    "reject": InvitationStatus.REJECTED,
}


@dataclass(frozen=True)
class ActionResult:
    OK = "ok"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"

    type: str
    invitation: Any = None
    message: str = ""


class ReviewInvitationActionService:
    """
    Write path: a reviewer accepts or rejects a pending invitation.

    Ownership is checked before status, so a non-owner is refused
    even when the invitation is still pending. Anything already
    resolved, or past its due date, answers CONFLICT without being
    touched.
    """

    def __init__(self, *, gateway, guard, clock=timezone.now):
        self.gateway = gateway
        self.guard = guard
        self.clock = clock

    def respond(self, reviewer_id, invitation_id, action):
        target = ACTION_STATUSES.get(str(action or "").strip().lower())
        if target is None:
            raise ValueError(f"Unsupported invitation action: {action!r}")

        invitation = self.gateway.get_review_invitation_by_id(invitation_id)
        if invitation is None:
            return ActionResult(ActionResult.NOT_FOUND)

        if not self.guard.can_access_invitation(reviewer_id, invitation):
            return ActionResult(ActionResult.FORBIDDEN)

        if not invitation.can_transition_to(target):
            return ActionResult(ActionResult.CONFLICT, message=ALREADY_PROCESSED_MESSAGE)

        now = self.clock()

        # Past due counts as processed even before a read has declined it.
        if is_overdue(invitation, now):
            return ActionResult(ActionResult.CONFLICT, message=ALREADY_PROCESSED_MESSAGE)

        updated = self.gateway.update_review_invitation_status(
            invitation.id,
            status=target,
            responded_at=now,
            expected_status=InvitationStatus.PENDING,
        )
        if updated is None:
            return ActionResult(ActionResult.CONFLICT, message=ALREADY_PROCESSED_MESSAGE)

        return ActionResult(ActionResult.OK, invitation=updated)
