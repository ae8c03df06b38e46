import logging

logger = logging.getLogger(__name__)


class NotificationRetryService:
    """
    Re-send invitations whose latest notification attempt failed
    while the invitation is still awaiting a response.

    Candidates go through the expiry sweeper first: an invitation
    past its due date is declined, not re-sent.
    Each retry appends a new NotificationRecord.
    """

    def __init__(self, *, gateway, dispatcher, sweeper):
        self.gateway = gateway
        self.dispatcher = dispatcher
        self.sweeper = sweeper

    def retry_failed(self):
        candidates = self.gateway.list_invitations_with_failed_notification()
        expired = self.sweeper.refresh_statuses(candidates)["changed"]

        invitations = [invitation for invitation in candidates if invitation.is_pending]
        sent = 0

        for invitation in invitations:
            result = self.dispatcher.send_invitation_notification(
                invitation=invitation,
                reviewer=self.gateway.get_reviewer_by_id(invitation.reviewer_id),
                paper=self.gateway.get_paper_by_id(invitation.paper_id),
            )
            if result["type"] == "sent":
                sent += 1

        logger.info(
            "Retried %s invitation notifications: %s sent, %s failed, %s expired",
            len(invitations), sent, len(invitations) - sent, expired,
        )
        return {
            "retried": len(invitations),
            "sent": sent,
            "failed": len(invitations) - sent,
            "expired": expired,
        }
