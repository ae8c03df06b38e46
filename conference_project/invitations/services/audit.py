import json
import logging

from django.utils import timezone

logger = logging.getLogger("security.audit")


class SecurityAuditLog:
    """
    Sink for cross-reviewer access attempts.

    Entries are single-line JSON on the ``security.audit`` logger,
    whose queue handler only enqueues them; the writing happens on a
    listener thread, off the request being denied.
    """

    def __init__(self, clock=timezone.now):
        self.clock = clock

    def log_unauthorized_access(self, *, user_id, invitation_id):
        self._emit(
            "unauthorized_review_invitation_access",
            user_id=user_id,
            invitation_id=invitation_id,
        )

    def log_unauthorized_paper_access(self, *, user_id, paper_id):
        self._emit(
            "unauthorized_assigned_paper_access",
            user_id=user_id,
            paper_id=paper_id,
        )

    def _emit(self, event, **fields):
        entry = {"event": event}
        entry.update(
            {key: str(value or "").strip() for key, value in fields.items()}
        )
        entry["at"] = self.clock().isoformat()
        logger.warning(json.dumps(entry))
