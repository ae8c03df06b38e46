import json
import logging
from dataclasses import dataclass, field
from datetime import timedelta

from django.core.exceptions import ValidationError
from django.utils import timezone

from papers import conf
from papers.exceptions import GatewayError
from papers.models import Paper

logger = logging.getLogger(__name__)


# ============================================================
# ERROR CATALOGUE
# ============================================================

VALIDATION_MESSAGES = {
    "invalid_paper": "Paper not found.",
    "already_assigned": "Reviewers are already assigned for this paper.",
    "insufficient_eligible_reviewers": (
        "At least %(requiredCount)s eligible reviewers are required before assignment."
    ),
    "invalid_reviewer_count": "Exactly %(requiredCount)s reviewers are required.",
    "duplicate_reviewers": (
        "Reviewer selection must contain %(requiredCount)s unique reviewers."
    ),
    "ineligible_reviewer": "One or more selected reviewers are not eligible.",
    "reviewer_workload_exceeded": (
        "One or more selected reviewers exceed the maximum workload of "
        "%(maxWorkload)s papers."
    ),
}

VALIDATION_STATUS = {
    "invalid_paper": 404,
    "insufficient_eligible_reviewers": 409,
}

SAVE_FAILED_CODE = "assignment_save_failed"
SAVE_FAILED_MESSAGE = "Could not save reviewer assignments at this time."


def assignment_error(code, **params):
    params.setdefault("requiredCount", conf.reviewers_per_paper())
    params.setdefault("maxWorkload", conf.reviewer_max_workload())
    return ValidationError(VALIDATION_MESSAGES[code], code=code, params=params)


@dataclass
class AssignmentOutcome:
    SUCCESS = "success"
    VALIDATION_ERROR = "validation_error"
    SYSTEM_ERROR = "system_error"

    type: str
    status: int
    paper_id: str = ""
    error_code: str = ""
    message: str = ""
    details: dict = field(default_factory=dict)
    assignments: list = field(default_factory=list)
    invitations: list = field(default_factory=list)
    warning_code: str = ""
    warning_message: str = ""
    invitation_failures: list = field(default_factory=list)

    @property
    def assignment_count(self):
        return len(self.assignments)

    def to_dict(self):
        if self.type != self.SUCCESS:
            return {"errorCode": self.error_code, "message": self.message, **self.details}

        data = {
            "paper_id": self.paper_id,
            "assignment_count": self.assignment_count,
            "assignments": [
                {
                    "id": assignment.id,
                    "reviewerId": assignment.reviewer_id,
                    "assignedAt": assignment.assigned_at,
                }
                for assignment in self.assignments
            ],
        }
        if self.warning_code:
            data["warningCode"] = self.warning_code
            data["warningMessage"] = self.warning_message
            data["invitationFailures"] = self.invitation_failures
        return data


# ============================================================
# ASSIGNMENT ORCHESTRATOR
# ============================================================

class AssignmentOrchestrator:
    """
    Assign a complete reviewer set to a paper.

    - Validation runs first; nothing is written until it passes
    - The set is committed through the gateway's atomic operation,
      which re-checks the same rules against locked rows
    - Invitations and notifications are best-effort afterwards:
      their failures become a warning, never an error
    """

    def __init__(self, *, gateway, dispatcher, clock=timezone.now):
        self.gateway = gateway
        self.dispatcher = dispatcher
        self.clock = clock

    # -----------------------------
    # VALIDATION
    # -----------------------------
    def validate_selection(self, paper_id, reviewer_ids):
        """
        Return ``(paper, reviewers)`` for a valid selection.
        Raises ``ValidationError`` for the first rule that fails.
        """
        paper_id = str(paper_id or "").strip()
        reviewer_ids = [str(rid or "").strip() for rid in reviewer_ids or ()]
        reviewer_ids = [rid for rid in reviewer_ids if rid]
        required = conf.reviewers_per_paper()

        paper = self.gateway.get_paper_by_id(paper_id)
        if paper is None:
            raise assignment_error("invalid_paper")

        if (
            paper.status == Paper.Status.ASSIGNED
            or self.gateway.get_assignments_by_paper_id(paper_id)
        ):
            raise assignment_error("already_assigned")

        if len(self.gateway.list_eligible_reviewers(paper_id)) < required:
            raise assignment_error("insufficient_eligible_reviewers")

        if len(reviewer_ids) != required:
            raise assignment_error(
                "invalid_reviewer_count",
                providedCount=len(reviewer_ids),
            )

        unique_ids = list(dict.fromkeys(reviewer_ids))
        if len(unique_ids) != len(reviewer_ids):
            raise assignment_error("duplicate_reviewers")

        reviewers = []
        for reviewer_id in unique_ids:
            reviewer = self.gateway.get_reviewer_by_id(reviewer_id)
            if not self.gateway.is_eligible_for_paper(reviewer, paper_id):
                raise assignment_error("ineligible_reviewer", reviewerId=reviewer_id)

            if reviewer.current_assignment_count >= conf.reviewer_max_workload():
                raise assignment_error("reviewer_workload_exceeded", reviewerId=reviewer_id)

            reviewers.append(reviewer)

        return paper, reviewers

    # -----------------------------
    # WORKFLOW
    # -----------------------------
    def assign_reviewers(self, paper_id, reviewer_ids):
        try:
            paper, reviewers = self.validate_selection(paper_id, reviewer_ids)
        except ValidationError as exc:
            return self._validation_failure(exc)

        selected_ids = [reviewer.id for reviewer in reviewers]

        try:
            assignments = self.gateway.create_assignments(
                paper_id=paper.id,
                reviewer_ids=selected_ids,
            )
        except GatewayError as exc:
            # Lost a race between validation and commit.
            if exc.code in VALIDATION_MESSAGES:
                return self._validation_failure(
                    assignment_error(exc.code, **_camel_details(exc.details))
                )
            return self._save_failure(paper, selected_ids, exc)
        except Exception as exc:
            return self._save_failure(paper, selected_ids, exc)

        invitations, notification = self._fan_out(paper, reviewers, assignments)

        outcome = AssignmentOutcome(
            type=AssignmentOutcome.SUCCESS,
            status=200,
            paper_id=paper.id,
            assignments=assignments,
            invitations=invitations,
        )

        if notification["type"] == "partial_failure":
            outcome.warning_code = notification["warningCode"]
            outcome.warning_message = notification["warningMessage"]
            outcome.invitation_failures = notification["failures"]

        return outcome

    # -----------------------------
    # POST-COMMIT FAN-OUT
    # -----------------------------
    def _fan_out(self, paper, reviewers, assignments):
        invitations = []

        try:
            invitations = self._create_invitations(assignments)
            notification = self.dispatcher.send_reviewer_invitations(
                paper=paper,
                reviewers=reviewers,
                invitations=invitations,
            )
        except Exception:
            logger.exception(
                "Invitation fan-out failed for paper %s after assignment commit",
                paper.id,
            )
            notification = {
                "type": "partial_failure",
                "warningCode": "invitation_partial_failure",
                "warningMessage": (
                    "Assignments were saved, but reviewer invitations could not "
                    "be completed and were logged for retry."
                ),
                "failures": [
                    {"reviewerId": reviewer.id, "reason": "invitation_fan_out_failed"}
                    for reviewer in reviewers
                ],
            }

        return invitations, notification

    def _create_invitations(self, assignments):
        response_window = timedelta(days=conf.invitation_response_days())
        invitations = []

        for assignment in assignments:
            created_at = assignment.assigned_at or self.clock()
            try:
                invitations.append(
                    self.gateway.create_review_invitation(
                        assignment=assignment,
                        created_at=created_at,
                        response_due_at=created_at + response_window,
                    )
                )
            except Exception as exc:
                logger.warning(json.dumps({
                    "event": "review_invitation_create_failed",
                    "paper_id": assignment.paper_id,
                    "reviewer_id": assignment.reviewer_id,
                    "reason": str(exc) or exc.__class__.__name__,
                    "at": self.clock().isoformat(),
                }))

        return invitations

    # -----------------------------
    # FAILURE RESULTS
    # -----------------------------
    def _validation_failure(self, exc):
        params = dict(exc.params or {})
        details = {
            key: params[key]
            for key in ("requiredCount", "providedCount", "reviewerId")
            if key in params
        }
        if exc.code != "invalid_reviewer_count":
            details.pop("requiredCount", None)

        return AssignmentOutcome(
            type=AssignmentOutcome.VALIDATION_ERROR,
            status=VALIDATION_STATUS.get(exc.code, 400),
            error_code=exc.code,
            message=exc.messages[0],
            details=details,
        )

    def _save_failure(self, paper, reviewer_ids, exc):
        logger.exception(json.dumps({
            "event": "reviewer_assignment_save_failure",
            "paper_id": paper.id,
            "reviewer_ids": reviewer_ids,
            "error_code": getattr(exc, "code", None) or exc.__class__.__name__,
            "at": self.clock().isoformat(),
        }))
        return AssignmentOutcome(
            type=AssignmentOutcome.SYSTEM_ERROR,
            status=500,
            paper_id=paper.id,
            error_code=SAVE_FAILED_CODE,
            message=SAVE_FAILED_MESSAGE,
        )


def _camel_details(details):
    return {"reviewerId": details["reviewer_id"]} if "reviewer_id" in details else {}
