import json
import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from papers.gateway import DjangoGateway
from papers.services import (
    build_assigned_paper_service,
    build_assignment_orchestrator,
)

logger = logging.getLogger(__name__)

ASSIGNMENT_UNAVAILABLE_MESSAGE = "Reviewer assignment is unavailable right now. Please retry."


def _error(status, code, message):
    return JsonResponse({"errorCode": code, "message": message}, status=status)


def parse_reviewer_ids(value):
    """
    Reviewer selection as submitted: a list of ids or a single
    comma-separated string. Blank entries are dropped; duplicates
    are kept so the orchestrator can report them.
    """
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item).strip() for item in value if str(item or "").strip()]


def _reviewer_selection(request):
    if request.content_type == "application/json":
        body = json.loads(request.body or b"{}")
        if not isinstance(body, dict):
            raise ValueError("Request body must be a JSON object.")
        return parse_reviewer_ids(body.get("reviewer_ids", []))

    submitted = request.POST.getlist("reviewer_ids")
    if len(submitted) == 1:
        return parse_reviewer_ids(submitted[0])
    return parse_reviewer_ids(submitted)


# ============================================================
# ELIGIBLE REVIEWERS (EDITOR)
# ============================================================
@require_GET
def eligible_reviewers(request, paper_id):
    gateway = DjangoGateway()
    paper = gateway.get_paper_by_id(paper_id)
    if paper is None:
        return _error(404, "invalid_paper", "Paper not found.")

    return JsonResponse({
        "paper_id": paper.id,
        "eligible_reviewers": [
            {
                "id": reviewer.id,
                "name": reviewer.name,
                "currentAssignmentCount": reviewer.current_assignment_count,
            }
            for reviewer in gateway.list_eligible_reviewers(paper.id)
        ],
    })


# ============================================================
# ASSIGNMENTS (EDITOR)
# ============================================================
@csrf_exempt
@require_http_methods(["GET", "POST"])
def paper_assignments(request, paper_id):
    gateway = DjangoGateway()

    if request.method == "GET":
        paper = gateway.get_paper_by_id(paper_id)
        if paper is None:
            return _error(404, "invalid_paper", "Paper not found.")

        return JsonResponse({
            "paper_id": paper.id,
            "assignments": [
                {
                    "id": assignment.id,
                    "reviewerId": assignment.reviewer_id,
                    "assignedAt": assignment.assigned_at,
                }
                for assignment in gateway.get_assignments_by_paper_id(paper.id)
            ],
        })

    try:
        reviewer_ids = _reviewer_selection(request)
    except ValueError:
        return _error(400, "invalid_request", "Request body must be a JSON object.")

    try:
        outcome = build_assignment_orchestrator(gateway).assign_reviewers(
            paper_id,
            reviewer_ids,
        )
    except Exception:
        logger.exception(
            "assignment_unavailable: paper %s, reviewers %s",
            paper_id, reviewer_ids,
        )
        return _error(500, "assignment_unavailable", ASSIGNMENT_UNAVAILABLE_MESSAGE)

    return JsonResponse(outcome.to_dict(), status=outcome.status)


# ============================================================
# ASSIGNED PAPERS (REVIEWER)
# ============================================================
@require_GET
def assigned_papers(request):
    service = build_assigned_paper_service(DjangoGateway())
    return JsonResponse({
        "items": service.list_assigned_papers(request.actor.id),
    })


@require_GET
def assigned_paper_detail(request, paper_id):
    service = build_assigned_paper_service(DjangoGateway())
    result = service.get_assigned_paper(request.actor.id, paper_id)

    if result["type"] == "forbidden":
        return _error(403, "access_denied", "Access denied.")

    if result["type"] == "not_found":
        return _error(404, "invalid_paper", "Paper not found.")

    return JsonResponse(result["paper"])
