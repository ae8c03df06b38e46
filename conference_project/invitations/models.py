import uuid

from django.db import models
from django.utils import timezone

from papers.models import Assignment, Paper, Reviewer


class InvitationStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    ACCEPTED = "accepted", "Accepted"
    REJECTED = "rejected", "Rejected"
    DECLINED = "declined", "Declined"


# Monotonic: nothing ever returns to PENDING.
# DECLINED is reserved for expiry; ACCEPTED / REJECTED for the reviewer.
ALLOWED_TRANSITIONS = {
    InvitationStatus.PENDING: {
        InvitationStatus.ACCEPTED,
        InvitationStatus.REJECTED,
        InvitationStatus.DECLINED,
    },
}


def generate_invitation_id():
    return f"inv_{uuid.uuid4().hex[:16]}"


class ReviewInvitation(models.Model):
    """
    Per-reviewer record tracking the response to one Assignment.
    Never deleted; only its status moves forward.
    """

    id = models.CharField(
        max_length=40,
        primary_key=True,
        default=generate_invitation_id,
        editable=False,
    )

    reviewer = models.ForeignKey(
        Reviewer,
        on_delete=models.CASCADE,
        related_name="invitations",
    )

    paper = models.ForeignKey(
        Paper,
        on_delete=models.CASCADE,
        related_name="invitations",
    )

    assignment = models.OneToOneField(
        Assignment,
        on_delete=models.CASCADE,
        related_name="invitation",
    )

    status = models.CharField(
        max_length=20,
        choices=InvitationStatus.choices,
        default=InvitationStatus.PENDING,
        db_index=True,
    )

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    response_due_at = models.DateTimeField(null=True, blank=True)
    responded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["reviewer", "status"]),
        ]

    def __str__(self):
        return f"{self.id} | {self.reviewer_id} | {self.paper_id} | {self.status}"

    @property
    def is_pending(self):
        return self.status == InvitationStatus.PENDING

    def can_transition_to(self, status):
        target = InvitationStatus(status)
        return target in ALLOWED_TRANSITIONS.get(self.status, set())
