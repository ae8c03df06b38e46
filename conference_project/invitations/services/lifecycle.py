from django.core.paginator import Paginator

from invitations.models import InvitationStatus
from papers import conf

FORBIDDEN = "forbidden"
UNKNOWN_PAPER_TITLE = "Unknown paper"


def positive_int(value, default):
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number >= 1 else default


class ReviewInvitationService:
    """
    Read path for review invitations.
    Both operations sweep expired invitations before answering.
    """

    def __init__(self, *, gateway, sweeper, guard):
        self.gateway = gateway
        self.sweeper = sweeper
        self.guard = guard

    def list_for_reviewer(
        self,
        reviewer_id,
        status=InvitationStatus.PENDING,
        page=1,
        page_size=None,
    ):
        """
        Newest-first page of the reviewer's invitations.

        An empty ``status`` disables filtering; an unknown one raises
        ``ValueError``.
        """
        status_filter = InvitationStatus(status) if status else None
        page = positive_int(page, 1)
        page_size = positive_int(page_size, conf.invitation_page_size())

        invitations = self.gateway.list_review_invitations_by_reviewer(reviewer_id)
        self.sweeper.refresh_statuses(invitations)

        if status_filter is not None:
            invitations = [
                invitation for invitation in invitations
                if invitation.status == status_filter
            ]

        # Stable sort: equal timestamps keep storage order.
        invitations.sort(key=lambda invitation: invitation.created_at, reverse=True)

        paginator = Paginator(invitations, page_size)
        page_obj = paginator.get_page(page)

        return {
            "items": [self._summarize(invitation) for invitation in page_obj],
            "page": page_obj.number,
            "pageSize": page_size,
            "totalItems": paginator.count,
            "totalPages": paginator.num_pages,
        }

    def get_by_id(self, reviewer_id, invitation_id):
        """
        Detail for one invitation, ``None`` when it does not exist,
        or ``FORBIDDEN`` when it belongs to another reviewer.
        """
        invitation = self.gateway.get_review_invitation_by_id(invitation_id)
        if invitation is None:
            return None

        self.sweeper.refresh_statuses([invitation])

        if not self.guard.can_access_invitation(reviewer_id, invitation):
            return FORBIDDEN

        paper = self.gateway.get_paper_by_id(invitation.paper_id)
        detail = self._summarize(invitation, paper=paper)

        # Full paper context is only shown once the reviewer accepted.
        if invitation.status == InvitationStatus.ACCEPTED and paper is not None:
            detail["paperAbstract"] = paper.abstract or ""

        return detail

    def _summarize(self, invitation, paper=None):
        if paper is None:
            paper = self.gateway.get_paper_by_id(invitation.paper_id)

        return {
            "id": invitation.id,
            "paperId": invitation.paper_id,
            "paperTitle": paper.title if paper is not None else UNKNOWN_PAPER_TITLE,
            "status": invitation.status,
            "createdAt": invitation.created_at,
            "responseDueAt": invitation.response_due_at,
            "respondedAt": invitation.responded_at,
        }
