import logging
from datetime import datetime, timedelta, timezone as dt_timezone

import pytest

from invitations.models import InvitationStatus, ReviewInvitation
from papers.gateway import DjangoGateway
from papers.models import Assignment, Paper, Reviewer

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=dt_timezone.utc)


class RecordingAuditLog:
    def __init__(self):
        self.entries = []

    def log_unauthorized_access(self, *, user_id, invitation_id):
        self.entries.append({
            "event": "unauthorized_review_invitation_access",
            "user_id": user_id,
            "invitation_id": invitation_id,
        })

    def log_unauthorized_paper_access(self, *, user_id, paper_id):
        self.entries.append({
            "event": "unauthorized_assigned_paper_access",
            "user_id": user_id,
            "paper_id": paper_id,
        })


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def clock(now):
    return lambda: now


@pytest.fixture
def gateway():
    return DjangoGateway()


@pytest.fixture
def audit_log():
    return RecordingAuditLog()


@pytest.fixture
def audit_caplog(caplog):
    """caplog that also sees the non-propagating security.audit logger."""
    audit_logger = logging.getLogger("security.audit")
    audit_logger.addHandler(caplog.handler)
    yield caplog
    audit_logger.removeHandler(caplog.handler)


@pytest.fixture
def make_paper(db):
    def _make(paper_id="P1", title="Graph Neural Nets at Scale", **fields):
        fields.setdefault("abstract", f"Abstract of {title}.")
        return Paper.objects.create(id=paper_id, title=title, **fields)
    return _make


@pytest.fixture
def make_reviewer(db):
    def _make(reviewer_id, workload=1, eligible=True, email=None, **fields):
        return Reviewer.objects.create(
            id=reviewer_id,
            name=fields.pop("name", f"Reviewer {reviewer_id}"),
            email=f"{reviewer_id.lower()}@example.org" if email is None else email,
            is_eligible=eligible,
            current_assignment_count=workload,
            **fields,
        )
    return _make


@pytest.fixture
def paper(make_paper):
    return make_paper()


@pytest.fixture
def reviewers(make_reviewer):
    return [make_reviewer(f"R{i}") for i in (1, 2, 3)]


@pytest.fixture
def make_invitation(make_paper, now):
    """
    Invitation backed by its own paper + assignment, so any number
    can be created for the same reviewer.
    """
    counter = {"n": 0}

    def _make(
        reviewer,
        *,
        paper=None,
        created_at=None,
        response_due_at=None,
        status=InvitationStatus.PENDING,
        responded_at=None,
    ):
        counter["n"] += 1
        if paper is None:
            paper = make_paper(f"PX{counter['n']}", title=f"Paper {counter['n']}")
        created_at = created_at or now - timedelta(days=1)
        assignment = Assignment.objects.create(
            paper=paper,
            reviewer=reviewer,
            assigned_at=created_at,
        )
        return ReviewInvitation.objects.create(
            reviewer=reviewer,
            paper=paper,
            assignment=assignment,
            status=status,
            created_at=created_at,
            response_due_at=(
                response_due_at
                if response_due_at is not None
                else created_at + timedelta(days=14)
            ),
            responded_at=responded_at,
        )
    return _make
