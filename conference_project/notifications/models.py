import uuid

from django.db import models
from django.utils import timezone

from invitations.models import ReviewInvitation


def generate_record_id():
    return f"ntf_{uuid.uuid4().hex[:16]}"


class NotificationRecord(models.Model):
    """
    Append-only audit trail of invitation notification attempts.
    Records never block or reverse the invitation they describe; a
    failed row here only means the reviewer was not told (yet).
    """

    # =====================================================
    # CHANNEL
    # =====================================================
    class Channel(models.TextChoices):
        EMAIL = "email", "Email"

    # =====================================================
    # DELIVERY STATUS
    # =====================================================
    class DeliveryStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        SENT = "sent", "Sent"
        FAILED = "failed", "Failed"

    id = models.CharField(
        max_length=40,
        primary_key=True,
        default=generate_record_id,
        editable=False,
    )

    # =====================================================
    # CORE RELATIONSHIP
    # =====================================================
    invitation = models.ForeignKey(
        ReviewInvitation,
        on_delete=models.CASCADE,
        related_name="notification_records",
        help_text="Invitation this attempt notified the reviewer about"
    )

    # =====================================================
    # CLASSIFICATION
    # =====================================================
    channel = models.CharField(
        max_length=20,
        choices=Channel.choices,
        default=Channel.EMAIL,
    )

    delivery_status = models.CharField(
        max_length=20,
        choices=DeliveryStatus.choices,
        default=DeliveryStatus.PENDING,
        db_index=True
    )

    # =====================================================
    # CONTENT / OUTCOME
    # =====================================================
    payload = models.JSONField(
        default=dict,
        blank=True,
        help_text="Template values the notification was rendered with"
    )

    failure_reason = models.TextField(blank=True)

    sent_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(
        default=timezone.now,
        db_index=True
    )

    # =====================================================
    # DJANGO META
    # =====================================================
    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["invitation", "delivery_status"]),
            models.Index(fields=["delivery_status", "created_at"]),
        ]

    def __str__(self):
        return (
            f"{self.invitation_id} | "
            f"{self.channel.upper()} | "
            f"{self.delivery_status}"
        )

    @property
    def failed(self):
        return self.delivery_status == self.DeliveryStatus.FAILED
