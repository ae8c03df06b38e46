from django.db import models
from django.utils import timezone


class Paper(models.Model):
    """
    A submitted paper as seen by the assignment engine.
    Owned by the submission subsystem; the engine only reads it
    and flips it to ASSIGNED when a reviewer set is committed.
    """

    class Status(models.TextChoices):
        SUBMITTED = "submitted", "Submitted"
        ASSIGNED = "assigned", "Assigned"
        UNDER_REVIEW = "under_review", "Under review"
        DECIDED = "decided", "Decided"

    id = models.CharField(max_length=64, primary_key=True)
    title = models.CharField(max_length=300)
    abstract = models.TextField(blank=True)
    content = models.TextField(blank=True)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.SUBMITTED,
        db_index=True,
    )

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.id} | {self.title}"


class Reviewer(models.Model):
    id = models.CharField(max_length=64, primary_key=True)
    name = models.CharField(max_length=150)
    email = models.EmailField(blank=True)

    is_eligible = models.BooleanField(
        default=True,
        help_text="Global eligibility flag set by the program committee",
    )

    # Workload counter; only ever incremented inside the gateway's
    # atomic assignment commit.
    current_assignment_count = models.PositiveIntegerField(default=0)

    conflicted_papers = models.ManyToManyField(
        Paper,
        blank=True,
        related_name="conflicted_reviewers",
        help_text="Papers this reviewer may not review (conflict of interest)",
    )

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.name} ({self.id})"


class Assignment(models.Model):
    """
    Binds one paper to one reviewer.
    Created only in complete sets by the persistence gateway.
    """

    paper = models.ForeignKey(
        Paper,
        on_delete=models.CASCADE,
        related_name="assignments",
    )

    reviewer = models.ForeignKey(
        Reviewer,
        on_delete=models.CASCADE,
        related_name="assignments",
    )

    assigned_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["assigned_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["paper", "reviewer"],
                name="unique_paper_reviewer_assignment",
            ),
        ]

    def __str__(self):
        return f"{self.paper_id} → {self.reviewer_id}"
