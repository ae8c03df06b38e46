import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from invitations.models import InvitationStatus
from invitations.services import (
    FORBIDDEN,
    ActionResult,
    build_review_invitation_action_service,
    build_review_invitation_service,
)
from papers.gateway import DjangoGateway

logger = logging.getLogger(__name__)

LIST_UNAVAILABLE_MESSAGE = "Invitations are unavailable right now. Please retry."
DETAIL_UNAVAILABLE_MESSAGE = "This invitation is unavailable right now. Please retry."
ACTION_UNAVAILABLE_MESSAGE = "We could not process your request right now. Please retry."


def _error(status, code, message):
    return JsonResponse({"errorCode": code, "message": message}, status=status)


# ============================================================
# LIST (REVIEWER)
# ============================================================
@require_GET
def invitation_list(request):
    """
    ?status=pending|accepted|rejected|declined|all (default pending)
    &page=1&page_size=20
    """
    status = request.GET.get("status", "").strip().lower() or InvitationStatus.PENDING
    if status == "all":
        status = None
    elif status not in InvitationStatus.values:
        return _error(400, "invalid_status", "Unknown invitation status.")

    service = build_review_invitation_service(DjangoGateway())

    try:
        result = service.list_for_reviewer(
            request.actor.id,
            status=status,
            page=request.GET.get("page"),
            page_size=request.GET.get("page_size"),
        )
    except Exception:
        logger.exception(
            "invitation_list_unavailable: listing failed for reviewer %s",
            request.actor.id,
        )
        return _error(500, "invitation_list_unavailable", LIST_UNAVAILABLE_MESSAGE)

    return JsonResponse(result)


# ============================================================
# DETAIL (REVIEWER)
# ============================================================
@require_GET
def invitation_detail(request, invitation_id):
    service = build_review_invitation_service(DjangoGateway())

    try:
        detail = service.get_by_id(request.actor.id, invitation_id)
    except Exception:
        logger.exception(
            "invitation_detail_unavailable: invitation %s for reviewer %s",
            invitation_id, request.actor.id,
        )
        return _error(500, "invitation_detail_unavailable", DETAIL_UNAVAILABLE_MESSAGE)

    if detail is None:
        return _error(404, "invitation_not_found", "Invitation not found.")

    if detail == FORBIDDEN:
        return _error(403, "forbidden", "Not authorized to view this invitation.")

    return JsonResponse(detail)


# ============================================================
# ACCEPT / REJECT (REVIEWER)
# ============================================================
@csrf_exempt
@require_POST
def invitation_action(request, invitation_id, action):
    action = action.strip().lower()
    if action not in {"accept", "reject"}:
        return _error(400, "invalid_action", "Action must be accept or reject.")

    service = build_review_invitation_action_service(DjangoGateway())

    try:
        result = service.respond(request.actor.id, invitation_id, action)
    except Exception:
        logger.exception(
            "Invitation %s could not be updated (%s) for reviewer %s",
            invitation_id, action, request.actor.id,
        )
        return _error(500, "invitation_action_unavailable", ACTION_UNAVAILABLE_MESSAGE)

    if result.type == ActionResult.NOT_FOUND:
        return _error(404, "invitation_not_found", "Invitation not found.")

    if result.type == ActionResult.FORBIDDEN:
        return _error(403, "forbidden", "Not authorized to update this invitation.")

    if result.type == ActionResult.CONFLICT:
        return _error(409, "invitation_already_processed", result.message)

    return JsonResponse({
        "id": result.invitation.id,
        "status": result.invitation.status,
        "respondedAt": result.invitation.responded_at,
    })
