def _normalize_id(value):
    return str(value or "").strip()


class AuthorizationGuard:
    """
    Ownership checks for invitations and assigned papers.
    Every denial on an existing target goes to the audit log.
    """

    def __init__(self, *, gateway, audit_log):
        self.gateway = gateway
        self.audit_log = audit_log

    def can_access_invitation(self, user_id, invitation):
        if invitation is None:
            return False

        user_id = _normalize_id(user_id)
        allowed = bool(user_id) and _normalize_id(invitation.reviewer_id) == user_id

        if not allowed:
            self.audit_log.log_unauthorized_access(
                user_id=user_id,
                invitation_id=invitation.id,
            )
        return allowed

    def can_access_assigned_paper(self, reviewer_id, paper_id):
        reviewer_id = _normalize_id(reviewer_id)
        assignments = self.gateway.get_assignments_by_paper_id(paper_id)

        allowed = bool(reviewer_id) and any(
            assignment.reviewer_id == reviewer_id
            for assignment in assignments
        )

        if not allowed:
            self.audit_log.log_unauthorized_paper_access(
                user_id=reviewer_id,
                paper_id=_normalize_id(paper_id),
            )
        return allowed
