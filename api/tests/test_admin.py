import pytest

from conftest import auth_headers, make_match, make_profile
from matchline import repo
from matchline.auth.admin_deps import has_admin_role, require_admin_role
from matchline.services import conversations as lifecycle

OPENER = "Your bookshelf photo says a lot, what are you reading?"


@pytest.fixture
def reviewer(db):
    uid = make_profile(db)
    repo.create_admin_user(uid, "Reviewer@Example.com", role="reviewer")
    return uid


@pytest.fixture
def moderator(db):
    uid = make_profile(db)
    repo.create_admin_user(uid, "mod@example.com", role="moderator")
    return uid


def test_role_ordering(db, reviewer, moderator):
    assert has_admin_role(reviewer, "reviewer")
    assert not has_admin_role(reviewer, "moderator")
    assert has_admin_role(moderator, "reviewer")
    assert has_admin_role(moderator, "moderator")
    assert not has_admin_role(make_profile(db))
    assert repo.get_admin_user(reviewer)["email"] == "reviewer@example.com"


def test_unknown_role_rejected():
    with pytest.raises(ValueError):
        require_admin_role("owner")


def test_non_admin_gets_403(client, db):
    me = make_profile(db)
    r = client.get("/admin/verification/pending", headers=auth_headers(me))
    assert r.status_code == 403
    assert r.json()["detail"] == "Admin access required"


def test_verification_review_flow(client, db, reviewer):
    applicant = make_profile(db, status="rejected")

    r = client.post("/verification/submit", headers=auth_headers(applicant))
    assert r.status_code == 200
    assert r.json()["profile"]["verification_status"] == "pending"
    assert client.post("/verification/submit", headers=auth_headers(applicant)).status_code == 400

    pending = client.get("/admin/verification/pending", headers=auth_headers(reviewer)).json()
    assert pending["pendingReviews"] == 1
    assert pending["profiles"][0]["id"] == applicant

    r = client.post(f"/admin/verification/{applicant}/approve", headers=auth_headers(reviewer))
    assert r.status_code == 200
    assert r.json()["profile"]["verification_status"] == "approved"
    assert r.json()["profile"]["badges"] == ["verified"]

    status = client.get("/verification/status", headers=auth_headers(applicant)).json()
    assert status == {"verificationStatus": "approved", "badges": ["verified"], "rejectionReason": None}


def test_reject_records_reason(client, db, reviewer):
    applicant = make_profile(db, status="pending")
    r = client.post(
        f"/admin/verification/{applicant}/reject",
        json={"reason": "  photo unclear "},
        headers=auth_headers(reviewer),
    )
    assert r.status_code == 200
    assert r.json()["profile"]["verification_rejection_reason"] == "photo unclear"

    # Rejected users cannot receive matches.
    assert client.get("/matches", headers=auth_headers(applicant)).status_code == 403


def test_approve_unknown_user_is_404(client, reviewer):
    assert client.post("/admin/verification/nobody/approve", headers=auth_headers(reviewer)).status_code == 404


def test_reports_require_moderator(client, reviewer):
    assert client.get("/admin/reports", headers=auth_headers(reviewer)).status_code == 403


def test_moderator_resolves_report(client, db, moderator):
    reporter = make_profile(db)
    target = make_profile(db)
    report = repo.create_report(reporter, "spam", reported_user_id=target)

    listed = client.get("/admin/reports?status=pending", headers=auth_headers(moderator)).json()
    assert [r["id"] for r in listed["reports"]] == [report["id"]]

    r = client.post(
        f"/admin/reports/{report['id']}/resolve",
        json={"status": "dismissed", "notes": "no evidence"},
        headers=auth_headers(moderator),
    )
    assert r.status_code == 200
    row = r.json()["report"]
    assert row["status"] == "dismissed"
    assert row["resolved_by"] == moderator
    assert row["resolution_notes"] == "no evidence"

    assert client.get("/admin/reports?status=pending", headers=auth_headers(moderator)).json()["count"] == 0
    assert client.post("/admin/reports/missing/resolve", json={}, headers=auth_headers(moderator)).status_code == 404


def test_user_management_requires_moderator(client, reviewer):
    for method, path in (
        ("get", "/admin/users"),
        ("get", f"/admin/users/{reviewer}"),
        ("post", f"/admin/users/{reviewer}/suspend"),
        ("delete", f"/admin/users/{reviewer}"),
    ):
        assert getattr(client, method)(path, headers=auth_headers(reviewer)).status_code == 403


def test_list_users_paginates(client, db, moderator):
    for i in range(4):
        make_profile(db, display_name=f"user{i}")

    page = client.get("/admin/users?limit=2&offset=1", headers=auth_headers(moderator)).json()
    assert page["total"] == 5
    assert page["limit"] == 2
    assert page["offset"] == 1
    assert len(page["users"]) == 2


def test_user_details_include_moderation_context(client, db, moderator):
    target = make_profile(db)
    reporter = make_profile(db)
    repo.create_report(reporter, "spam", reported_user_id=target)
    repo.upsert_subscription(target, "premium")

    r = client.get(f"/admin/users/{target}", headers=auth_headers(moderator))
    assert r.status_code == 200
    profile = r.json()["profile"]
    assert profile["subscription"]["tier"] == "premium"
    assert [rep["reporter_id"] for rep in profile["reports"]] == [reporter]
    assert client.get("/admin/users/nobody", headers=auth_headers(moderator)).status_code == 404


def test_suspend_ends_open_conversations(client, db, moderator):
    target = make_profile(db)
    other = make_profile(db)
    with_other = client.post(
        "/conversations",
        json={"matchId": make_match(db, target, other), "message": OPENER},
        headers=auth_headers(target),
    ).json()["conversation"]

    r = client.post(f"/admin/users/{target}/suspend", json={"reason": "abuse"}, headers=auth_headers(moderator))
    assert r.status_code == 200
    assert r.json()["endedConversations"] == [with_other["id"]]

    row = lifecycle.get_conversation(db, with_other["id"])
    assert row["status"] == "ended"
    assert row["ended_by"] == moderator
    assert row["ended_reason"] == "abuse"

    r = client.post("/messages", json={"conversationId": with_other["id"], "content": "hi"}, headers=auth_headers(other))
    assert r.status_code == 409
    assert client.post("/admin/users/nobody/suspend", headers=auth_headers(moderator)).status_code == 404


def test_admin_delete_user(client, db, moderator):
    target = make_profile(db)
    r = client.delete(f"/admin/users/{target}", headers=auth_headers(moderator))
    assert r.status_code == 200
    assert repo.get_profile(target) is None
    assert client.delete(f"/admin/users/{target}", headers=auth_headers(moderator)).status_code == 404
