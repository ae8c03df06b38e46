"""
Django ORM implementation of the persistence gateway.

The assignment engine never touches the ORM directly; it goes
through this narrow set of operations so that storage (and the
races storage must detect) stays in one place.
"""

from django.db import IntegrityError, transaction
from django.db.models import F, OuterRef, Subquery
from django.utils import timezone

from invitations.models import InvitationStatus, ReviewInvitation
from notifications.models import NotificationRecord
from papers import conf
from papers.exceptions import (
    AlreadyAssignedError,
    IneligibleReviewerError,
    InvalidPaperError,
    ReviewerWorkloadExceededError,
)
from papers.models import Assignment, Paper, Reviewer


def _normalize_id(value):
    return str(value or "").strip()


class DjangoGateway:

    # ============================================================
    # PAPERS / REVIEWERS / ASSIGNMENTS
    # ============================================================

    def get_paper_by_id(self, paper_id):
        return Paper.objects.filter(pk=_normalize_id(paper_id)).first()

    def get_reviewer_by_id(self, reviewer_id):
        return Reviewer.objects.filter(pk=_normalize_id(reviewer_id)).first()

    def get_assignments_by_paper_id(self, paper_id):
        return list(
            Assignment.objects
            .filter(paper_id=_normalize_id(paper_id))
            .select_related("reviewer")
        )

    def list_assignments_by_reviewer(self, reviewer_id):
        return list(
            Assignment.objects
            .filter(reviewer_id=_normalize_id(reviewer_id))
            .select_related("paper")
        )

    def list_eligible_reviewers(self, paper_id):
        return list(
            Reviewer.objects
            .filter(is_eligible=True)
            .exclude(conflicted_papers__id=_normalize_id(paper_id))
        )

    def is_eligible_for_paper(self, reviewer, paper_id):
        if reviewer is None or not reviewer.is_eligible:
            return False
        return not reviewer.conflicted_papers.filter(
            pk=_normalize_id(paper_id)
        ).exists()

    @transaction.atomic
    def create_assignments(self, *, paper_id, reviewer_ids):
        """
        Commit a complete reviewer set for a paper, or nothing.

        Paper and reviewer rows are locked so that eligibility,
        workload and the one-set-per-paper rule are re-checked
        against committed state, then workload counters and the
        paper status are updated in the same transaction.
        """
        paper_id = _normalize_id(paper_id)
        reviewer_ids = [_normalize_id(rid) for rid in reviewer_ids]

        paper = Paper.objects.select_for_update().filter(pk=paper_id).first()
        if paper is None:
            raise InvalidPaperError(paper_id=paper_id)

        if paper.status == Paper.Status.ASSIGNED or paper.assignments.exists():
            raise AlreadyAssignedError(paper_id=paper_id)

        reviewers = {
            reviewer.id: reviewer
            for reviewer in Reviewer.objects.select_for_update().filter(
                pk__in=reviewer_ids
            )
        }
        conflicted = set(
            paper.conflicted_reviewers
            .filter(pk__in=reviewer_ids)
            .values_list("id", flat=True)
        )
        max_workload = conf.reviewer_max_workload()

        for reviewer_id in reviewer_ids:
            reviewer = reviewers.get(reviewer_id)
            if (
                reviewer is None
                or not reviewer.is_eligible
                or reviewer_id in conflicted
            ):
                raise IneligibleReviewerError(reviewer_id=reviewer_id)

            if reviewer.current_assignment_count >= max_workload:
                raise ReviewerWorkloadExceededError(reviewer_id=reviewer_id)

        assigned_at = timezone.now()
        try:
            with transaction.atomic():
                assignments = [
                    Assignment.objects.create(
                        paper=paper,
                        reviewer=reviewers[reviewer_id],
                        assigned_at=assigned_at,
                    )
                    for reviewer_id in reviewer_ids
                ]
        except IntegrityError as exc:
            raise AlreadyAssignedError(paper_id=paper_id) from exc

        Reviewer.objects.filter(pk__in=reviewer_ids).update(
            current_assignment_count=F("current_assignment_count") + 1
        )

        paper.status = Paper.Status.ASSIGNED
        paper.save(update_fields=["status"])

        return assignments

    # ============================================================
    # REVIEW INVITATIONS
    # ============================================================

    def create_review_invitation(self, *, assignment, created_at, response_due_at):
        return ReviewInvitation.objects.create(
            reviewer_id=assignment.reviewer_id,
            paper_id=assignment.paper_id,
            assignment=assignment,
            status=InvitationStatus.PENDING,
            created_at=created_at,
            response_due_at=response_due_at,
        )

    def get_review_invitation_by_id(self, invitation_id):
        return ReviewInvitation.objects.filter(
            pk=_normalize_id(invitation_id)
        ).first()

    def list_review_invitations_by_reviewer(self, reviewer_id):
        return list(
            ReviewInvitation.objects
            .filter(reviewer_id=_normalize_id(reviewer_id))
            .order_by("created_at", "id")
        )

    def update_review_invitation_status(
        self,
        invitation_id,
        *,
        status,
        responded_at,
        expected_status=None,
    ):
        """
        Conditional status write.

        When ``expected_status`` is given the row is only updated if it
        still carries that status; ``None`` is returned otherwise so a
        concurrent transition is never overwritten.
        """
        status = InvitationStatus(status)
        qs = ReviewInvitation.objects.filter(pk=_normalize_id(invitation_id))

        if expected_status is not None:
            qs = qs.filter(status=InvitationStatus(expected_status))

        if not qs.update(status=status, responded_at=responded_at):
            return None

        return self.get_review_invitation_by_id(invitation_id)

    # ============================================================
    # NOTIFICATION RECORDS
    # ============================================================

    def create_notification_record(
        self,
        *,
        invitation,
        delivery_status,
        channel=NotificationRecord.Channel.EMAIL,
        sent_at=None,
        failure_reason="",
        payload=None,
    ):
        return NotificationRecord.objects.create(
            invitation=invitation,
            channel=channel,
            delivery_status=delivery_status,
            sent_at=sent_at,
            failure_reason=failure_reason or "",
            payload=payload or {},
        )

    def list_notification_records(self, invitation_id=None):
        qs = NotificationRecord.objects.all()
        if invitation_id is not None:
            qs = qs.filter(invitation_id=_normalize_id(invitation_id))
        return list(qs.order_by("created_at", "id"))

    def list_invitations_with_failed_notification(self):
        """
        Pending invitations whose most recent notification attempt failed.
        The latest attempt is picked per invitation in the database.
        """
        latest_delivery = (
            NotificationRecord.objects
            .filter(invitation=OuterRef("pk"))
            .order_by("-created_at", "-id")
            .values("delivery_status")[:1]
        )

        return list(
            ReviewInvitation.objects
            .filter(status=InvitationStatus.PENDING)
            .annotate(latest_delivery=Subquery(latest_delivery))
            .filter(latest_delivery=NotificationRecord.DeliveryStatus.FAILED)
            .order_by("created_at", "id")
        )
