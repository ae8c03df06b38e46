import logging
from datetime import timedelta

import pytest
from django.db import OperationalError
from django.utils import timezone

from invitations.models import InvitationStatus

pytestmark = pytest.mark.django_db


def reviewer_headers(reviewer_id):
    return {"HTTP_X_USER_ID": reviewer_id, "HTTP_X_USER_ROLE": "reviewer"}


@pytest.fixture
def reviewer(make_reviewer):
    return make_reviewer("R1")


@pytest.fixture
def fresh_invitation(make_invitation):
    """Invitation still open against the wall clock the views use."""
    def _make(reviewer, **fields):
        fields.setdefault("created_at", timezone.now() - timedelta(hours=1))
        return make_invitation(reviewer, **fields)
    return _make


def test_list_requires_identity(client):
    assert client.get("/api/reviewer/invitations/").status_code == 401


def test_list_defaults_to_pending(client, reviewer, fresh_invitation):
    pending = fresh_invitation(reviewer)
    fresh_invitation(
        reviewer,
        status=InvitationStatus.ACCEPTED,
        responded_at=timezone.now(),
    )

    response = client.get("/api/reviewer/invitations/", **reviewer_headers("R1"))

    assert response.status_code == 200
    body = response.json()
    assert [item["id"] for item in body["items"]] == [pending.id]
    assert body["items"][0]["status"] == "pending"
    assert body["totalPages"] == 1


def test_list_all_and_paging(client, reviewer, fresh_invitation):
    for _ in range(3):
        fresh_invitation(reviewer)

    response = client.get(
        "/api/reviewer/invitations/?status=all&page=2&page_size=2",
        **reviewer_headers("R1"),
    )

    body = response.json()
    assert body["page"] == 2
    assert body["totalItems"] == 3
    assert len(body["items"]) == 1


def test_list_rejects_unknown_status(client, reviewer):
    response = client.get(
        "/api/reviewer/invitations/?status=maybe",
        **reviewer_headers("R1"),
    )

    assert response.status_code == 400
    assert response.json()["errorCode"] == "invalid_status"


def test_list_failure_hides_details(client, reviewer, monkeypatch, caplog):
    class BrokenService:
        def list_for_reviewer(self, *args, **kwargs):
            raise RuntimeError("database is locked")

    monkeypatch.setattr(
        "invitations.views.build_review_invitation_service",
        lambda gateway: BrokenService(),
    )

    with caplog.at_level(logging.ERROR, logger="invitations.views"):
        response = client.get("/api/reviewer/invitations/", **reviewer_headers("R1"))

    assert response.status_code == 500
    body = response.json()
    assert body["errorCode"] == "invitation_list_unavailable"
    assert "locked" not in body["message"]
    assert any("invitation_list_unavailable" in r.getMessage() for r in caplog.records)


def test_detail(client, reviewer, fresh_invitation):
    invitation = fresh_invitation(reviewer)

    response = client.get(
        f"/api/reviewer/invitations/{invitation.id}/",
        **reviewer_headers("R1"),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["paperTitle"] == invitation.paper.title
    assert "paperAbstract" not in body


def test_detail_not_found(client, reviewer):
    response = client.get(
        "/api/reviewer/invitations/inv_missing/",
        **reviewer_headers("R1"),
    )

    assert response.status_code == 404
    assert response.json()["errorCode"] == "invitation_not_found"


def test_detail_of_other_reviewer_is_forbidden(client, reviewer, make_reviewer, fresh_invitation, audit_caplog):
    invitation = fresh_invitation(reviewer)
    make_reviewer("R2")

    with audit_caplog.at_level(logging.WARNING, logger="security.audit"):
        response = client.get(
            f"/api/reviewer/invitations/{invitation.id}/",
            **reviewer_headers("R2"),
        )

    assert response.status_code == 403
    audit = [r for r in audit_caplog.records if r.name == "security.audit"]
    assert len(audit) == 1
    assert invitation.id in audit[0].getMessage()


def test_accept_then_reject_conflicts(client, reviewer, fresh_invitation):
    invitation = fresh_invitation(reviewer)
    url = f"/api/reviewer/invitations/{invitation.id}/"

    accepted = client.post(url + "accept/", **reviewer_headers("R1"))
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "accepted"
    assert accepted.json()["respondedAt"]

    detail = client.get(url, **reviewer_headers("R1")).json()
    assert detail["paperAbstract"] == invitation.paper.abstract

    rejected = client.post(url + "reject/", **reviewer_headers("R1"))
    assert rejected.status_code == 409
    assert rejected.json() == {
        "errorCode": "invitation_already_processed",
        "message": "Invitation was already processed.",
    }


def test_action_by_other_reviewer_is_forbidden(client, reviewer, make_reviewer, fresh_invitation):
    invitation = fresh_invitation(reviewer)
    make_reviewer("R2")

    response = client.post(
        f"/api/reviewer/invitations/{invitation.id}/reject/",
        **reviewer_headers("R2"),
    )

    assert response.status_code == 403
    invitation.refresh_from_db()
    assert invitation.status == InvitationStatus.PENDING


def test_unknown_action(client, reviewer, fresh_invitation):
    invitation = fresh_invitation(reviewer)

    response = client.post(
        f"/api/reviewer/invitations/{invitation.id}/maybe/",
        **reviewer_headers("R1"),
    )

    assert response.status_code == 400
    assert response.json()["errorCode"] == "invalid_action"


def test_action_on_missing_invitation(client, reviewer):
    response = client.post(
        "/api/reviewer/invitations/inv_missing/accept/",
        **reviewer_headers("R1"),
    )

    assert response.status_code == 404


def test_action_requires_post(client, reviewer, fresh_invitation):
    invitation = fresh_invitation(reviewer)

    response = client.get(
        f"/api/reviewer/invitations/{invitation.id}/accept/",
        **reviewer_headers("R1"),
    )

    assert response.status_code == 405


def test_detail_failure_hides_details(client, reviewer, monkeypatch):
    def _unavailable(self, invitation_id):
        raise OperationalError("database is locked")

    monkeypatch.setattr(
        "papers.gateway.DjangoGateway.get_review_invitation_by_id",
        _unavailable,
    )

    response = client.get("/api/reviewer/invitations/inv_1/", **reviewer_headers("R1"))

    assert response.status_code == 500
    body = response.json()
    assert body["errorCode"] == "invitation_detail_unavailable"
    assert "locked" not in body["message"]


def test_overdue_invitation_action_conflicts(client, reviewer, make_invitation):
    overdue = make_invitation(
        reviewer,
        created_at=timezone.now() - timedelta(days=15),
        response_due_at=timezone.now() - timedelta(minutes=1),
    )

    response = client.post(
        f"/api/reviewer/invitations/{overdue.id}/accept/",
        **reviewer_headers("R1"),
    )

    assert response.status_code == 409
    assert response.json()["errorCode"] == "invitation_already_processed"
