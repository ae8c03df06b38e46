import json
import logging

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.mail import send_mail
from django.core.validators import validate_email
from django.template import TemplateDoesNotExist, engines
from django.template.loader import get_template
from django.utils import timezone

from notifications.models import NotificationRecord

logger = logging.getLogger(__name__)

INVITATION_TEMPLATE_NAME = "notifications/review_invitation.txt"

DEFAULT_INVITATION_TEMPLATE = (
    "{% autoescape off %}"
    "You have a new review invitation for \"{{ paper_title }}\". "
    "Please log in to accept or reject it by {{ response_due_at }}."
    "{% endautoescape %}"
)

DELIVERY_FAILED_CODE = "delivery_failed"
PARTIAL_FAILURE_CODE = "invitation_partial_failure"
PARTIAL_FAILURE_MESSAGE = (
    "Assignments were saved, but one or more reviewer invitations "
    "failed and were logged for retry."
)


class DeliveryError(Exception):
    """A notification that could not be handed to the mail backend."""


def _format_due(value):
    if value is None:
        return "N/A"
    return f"{timezone.localtime(value):%B %d, %Y %H:%M %Z}"


# ============================================================
# REVIEW INVITATION NOTIFICATIONS (EMAIL + AUDIT RECORD)
# ============================================================

class NotificationDispatcher:
    """
    Best-effort e-mail delivery for review invitations.

    - One attempt per invitation, one NotificationRecord per attempt
    - Failures are classified, recorded and logged, never raised
    - The body template is loaded once; a missing template falls
      back to an inline default
    """

    def __init__(
        self,
        *,
        gateway,
        clock=timezone.now,
        from_email=None,
        template_name=INVITATION_TEMPLATE_NAME,
    ):
        self.gateway = gateway
        self.clock = clock
        self.from_email = from_email or settings.DEFAULT_FROM_EMAIL
        self.template_name = template_name
        self._template = None

    @property
    def template(self):
        if self._template is None:
            try:
                self._template = get_template(self.template_name)
            except TemplateDoesNotExist:
                logger.warning(
                    "Invitation template %s not found, using inline default.",
                    self.template_name,
                )
                self._template = engines["django"].from_string(
                    DEFAULT_INVITATION_TEMPLATE
                )
        return self._template

    # -----------------------------
    # BATCH (ONE PER REVIEWER)
    # -----------------------------
    def send_reviewer_invitations(self, *, paper, reviewers, invitations):
        invitations_by_reviewer = {
            invitation.reviewer_id: invitation for invitation in invitations
        }
        failures = []

        for reviewer in reviewers:
            invitation = invitations_by_reviewer.get(reviewer.id)
            if invitation is None:
                failures.append({
                    "reviewerId": reviewer.id,
                    "reason": "invitation_not_created",
                })
                continue

            result = self.send_invitation_notification(
                invitation=invitation,
                reviewer=reviewer,
                paper=paper,
            )
            if result["type"] == "failed":
                failures.append({
                    "reviewerId": reviewer.id,
                    "reason": result["reason"],
                })

        if failures:
            return {
                "type": "partial_failure",
                "warningCode": PARTIAL_FAILURE_CODE,
                "warningMessage": PARTIAL_FAILURE_MESSAGE,
                "failures": failures,
            }

        return {"type": "sent", "failures": []}

    # -----------------------------
    # SINGLE INVITATION
    # -----------------------------
    def send_invitation_notification(self, *, invitation, reviewer, paper):
        payload = {
            "paper_title": paper.title if paper is not None and paper.title else "Untitled paper",
            "response_due_at": _format_due(invitation.response_due_at),
        }

        try:
            recipient = self._recipient(reviewer)
            delivered = send_mail(
                subject=f"Review invitation for {payload['paper_title']}",
                message=self.template.render(payload),
                from_email=self.from_email,
                recipient_list=[recipient],
                fail_silently=False,
            )
            if not delivered:
                raise DeliveryError("delivery_rejected")

        except Exception as exc:
            reason = str(exc) or exc.__class__.__name__
            # Only classified codes leave the dispatcher; details stay server side.
            code = reason if isinstance(exc, DeliveryError) else DELIVERY_FAILED_CODE
            self._record(
                invitation,
                NotificationRecord.DeliveryStatus.FAILED,
                payload,
                failure_reason=reason,
            )
            logger.warning(json.dumps({
                "event": "review_invitation_notification_failed",
                "invitation_id": invitation.id,
                "reviewer_id": getattr(reviewer, "id", invitation.reviewer_id),
                "reason": reason,
                "code": code,
                "at": self.clock().isoformat(),
            }))
            return {"type": "failed", "reason": code}

        self._record(
            invitation,
            NotificationRecord.DeliveryStatus.SENT,
            payload,
            sent_at=self.clock(),
        )
        return {"type": "sent"}

    def _recipient(self, reviewer):
        email = str(getattr(reviewer, "email", "") or "").strip()
        if not email:
            raise DeliveryError("missing_recipient_email")
        try:
            validate_email(email)
        except ValidationError as exc:
            raise DeliveryError("invalid_recipient_email") from exc
        return email

    def _record(self, invitation, delivery_status, payload, **fields):
        try:
            self.gateway.create_notification_record(
                invitation=invitation,
                delivery_status=delivery_status,
                payload=payload,
                **fields,
            )
        except Exception:
            logger.exception(
                "Could not store notification record for invitation %s (%s).",
                invitation.id,
                delivery_status,
            )
