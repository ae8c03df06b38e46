class AssignedPaperService:
    """
    Reviewer-facing view of the papers assigned to them.
    Opening a paper goes through the same ownership guard
    as invitations, so foreign access is refused and audited.
    """

    def __init__(self, *, gateway, guard):
        self.gateway = gateway
        self.guard = guard

    def list_assigned_papers(self, reviewer_id):
        return [
            {
                "paperId": assignment.paper_id,
                "title": assignment.paper.title,
                "assignedAt": assignment.assigned_at,
            }
            for assignment in self.gateway.list_assignments_by_reviewer(reviewer_id)
        ]

    def get_assigned_paper(self, reviewer_id, paper_id):
        if not self.guard.can_access_assigned_paper(reviewer_id, paper_id):
            return {"type": "forbidden"}

        paper = self.gateway.get_paper_by_id(paper_id)
        if paper is None:
            return {"type": "not_found"}

        return {
            "type": "ok",
            "paper": {
                "paperId": paper.id,
                "title": paper.title,
                "abstract": paper.abstract,
                "content": paper.content,
            },
        }
