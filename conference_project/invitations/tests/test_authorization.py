import json
import logging
from logging.handlers import QueueHandler

import pytest

from invitations.services import AuthorizationGuard, SecurityAuditLog

pytestmark = pytest.mark.django_db


@pytest.fixture
def guard(gateway, audit_log):
    return AuthorizationGuard(gateway=gateway, audit_log=audit_log)


def test_owner_is_allowed_without_audit(guard, make_reviewer, make_invitation, audit_log):
    invitation = make_invitation(make_reviewer("R1"))

    assert guard.can_access_invitation("R1", invitation) is True
    assert guard.can_access_invitation(" R1 ", invitation) is True
    assert audit_log.entries == []


def test_each_denial_writes_one_entry(guard, make_reviewer, make_invitation, audit_log):
    invitation = make_invitation(make_reviewer("R1"))

    assert guard.can_access_invitation("R2", invitation) is False
    assert guard.can_access_invitation("R3", invitation) is False

    assert [entry["user_id"] for entry in audit_log.entries] == ["R2", "R3"]
    assert {entry["invitation_id"] for entry in audit_log.entries} == {invitation.id}


def test_blank_user_is_denied(guard, make_reviewer, make_invitation, audit_log):
    invitation = make_invitation(make_reviewer("R1"))

    assert guard.can_access_invitation("", invitation) is False
    assert guard.can_access_invitation(None, invitation) is False
    assert len(audit_log.entries) == 2


def test_missing_invitation_is_denied_silently(guard, audit_log):
    assert guard.can_access_invitation("R1", None) is False
    assert audit_log.entries == []


def test_assigned_paper_access(guard, make_reviewer, make_invitation, audit_log):
    reviewer = make_reviewer("R1")
    make_reviewer("R2")
    invitation = make_invitation(reviewer)

    assert guard.can_access_assigned_paper("R1", invitation.paper_id) is True
    assert guard.can_access_assigned_paper("R2", invitation.paper_id) is False
    assert guard.can_access_assigned_paper("R1", "P-unknown") is False

    assert audit_log.entries == [
        {
            "event": "unauthorized_assigned_paper_access",
            "user_id": "R2",
            "paper_id": invitation.paper_id,
        },
        {
            "event": "unauthorized_assigned_paper_access",
            "user_id": "R1",
            "paper_id": "P-unknown",
        },
    ]


def test_security_audit_log_writes_json(audit_caplog, clock, now):
    audit = SecurityAuditLog(clock=clock)

    with audit_caplog.at_level(logging.WARNING, logger="security.audit"):
        audit.log_unauthorized_access(user_id=" R2 ", invitation_id="inv_1")

    records = [r for r in audit_caplog.records if r.name == "security.audit"]
    assert len(records) == 1
    assert json.loads(records[0].getMessage()) == {
        "event": "unauthorized_review_invitation_access",
        "user_id": "R2",
        "invitation_id": "inv_1",
        "at": now.isoformat(),
    }


def test_audit_entries_are_handed_to_a_queue():
    audit_logger = logging.getLogger("security.audit")

    assert any(isinstance(h, QueueHandler) for h in audit_logger.handlers)
    assert audit_logger.propagate is False
