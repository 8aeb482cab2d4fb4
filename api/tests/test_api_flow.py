from conftest import TODAY, auth_headers, make_match, make_profile

OPENER = "I saw you like climbing, where do you usually go?"


def _open_conversation(client, db):
    a = make_profile(db, display_name="Ana")
    b = make_profile(db, display_name="Ben")
    match_id = make_match(db, a, b)
    r = client.post("/conversations", json={"matchId": match_id, "message": OPENER}, headers=auth_headers(a))
    assert r.status_code == 200, r.text
    return a, b, r.json()["conversation"]


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_daily_matches_allocate_once_per_day(client, db):
    me = make_profile(db)
    for i in range(7):
        make_profile(db, display_name=f"cand{i}")

    r = client.get("/matches", headers=auth_headers(me))
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["batch_date"] == TODAY.isoformat()
    assert body["count"] == 5
    assert body["remaining"] == 0
    assert all(m["profile"]["display_name"].startswith("cand") for m in body["matches"])

    again = client.get("/matches", headers=auth_headers(me)).json()
    assert again["count"] == 0
    assert again["remaining"] == 0


def test_unverified_user_gets_403(client, db):
    me = make_profile(db, status="pending")
    r = client.get("/matches", headers=auth_headers(me))
    assert r.status_code == 403
    assert r.json()["error"] == "ProfileNotVerified"


def test_user_without_profile_gets_404(client):
    r = client.get("/matches", headers=auth_headers("no-profile-yet"))
    assert r.status_code == 404


def test_match_details_and_interaction(client, db):
    me = make_profile(db)
    other = make_profile(db, display_name="Other")
    match_id = make_match(db, me, other)

    r = client.get(f"/matches/{match_id}", headers=auth_headers(me))
    assert r.status_code == 200
    assert r.json()["profile"]["display_name"] == "Other"

    r = client.post(f"/matches/{match_id}/interact", json={"action": "like"}, headers=auth_headers(me))
    assert r.status_code == 200
    assert r.json()["match"]["interaction_type"] == "like"

    r = client.post(f"/matches/{match_id}/interact", json={"action": "like"}, headers=auth_headers(other))
    assert r.status_code == 403
    assert r.json()["error"] == "Unauthorized"

    outsider = make_profile(db)
    assert client.get(f"/matches/{match_id}", headers=auth_headers(outsider)).status_code == 403


def test_short_opener_rejected(client, db):
    a = make_profile(db)
    b = make_profile(db)
    match_id = make_match(db, a, b)
    r = client.post("/conversations", json={"matchId": match_id, "message": "hey"}, headers=auth_headers(a))
    assert r.status_code == 400
    assert r.json()["error"] == "OpenerTooShort"
    assert client.get("/conversations", headers=auth_headers(a)).json()["conversations"] == []


def test_full_conversation_flow(client, db):
    a, b, convo = _open_conversation(client, db)
    cid = convo["id"]
    assert convo["status"] == "active"

    # Follow-up messages have no minimum length.
    r = client.post("/messages", json={"conversationId": cid, "content": "hello"}, headers=auth_headers(a))
    assert r.status_code == 200, r.text

    assert client.get("/messages/unread-count", headers=auth_headers(b)).json() == {"unreadCount": 1}
    listed = client.get("/conversations", headers=auth_headers(b)).json()["conversations"]
    assert [c["id"] for c in listed] == [cid]
    assert listed[0]["unread_count"] == 1
    assert listed[0]["other_profile"]["display_name"] == "Ana"

    r = client.get(f"/messages/{cid}", headers=auth_headers(b))
    assert r.json()["total"] == 1
    r = client.post(f"/messages/{cid}/mark-read", headers=auth_headers(b))
    assert r.json() == {"success": True, "updated": 1}
    assert client.get("/messages/unread-count", headers=auth_headers(b)).json() == {"unreadCount": 0}

    r = client.post(f"/conversations/{cid}/snooze", json={"hours": 24}, headers=auth_headers(b))
    assert r.status_code == 200
    assert r.json()["conversation"]["status"] == "snoozed"
    assert r.json()["conversation"]["snooze_duration"] == "24h"

    r = client.post(f"/conversations/{cid}/resume", headers=auth_headers(a))
    assert r.json()["conversation"]["status"] == "active"

    r = client.post(f"/conversations/{cid}/end", json={"reason": "moved away"}, headers=auth_headers(a))
    assert r.status_code == 200
    assert r.json()["conversation"]["status"] == "ended"

    for user in (a, b):
        r = client.post("/messages", json={"conversationId": cid, "content": "still there?"}, headers=auth_headers(user))
        assert r.status_code == 409
        assert r.json()["error"] == "ConversationEnded"
    assert client.get("/conversations", headers=auth_headers(a)).json()["conversations"] == []


def test_snooze_rejects_out_of_range_hours(client, db):
    a, _, convo = _open_conversation(client, db)
    for hours in (0, 10**10):
        r = client.post(f"/conversations/{convo['id']}/snooze", json={"hours": hours}, headers=auth_headers(a))
        assert r.status_code == 400
        assert r.json()["error"] == "InvalidInput"


def test_end_without_body(client, db):
    _, b, convo = _open_conversation(client, db)
    r = client.post(f"/conversations/{convo['id']}/end", headers=auth_headers(b))
    assert r.status_code == 200
    assert r.json()["conversation"]["ended_by"] == b


def test_outsider_cannot_read_or_write(client, db):
    _, _, convo = _open_conversation(client, db)
    outsider = make_profile(db)
    cid = convo["id"]
    assert client.get(f"/conversations/{cid}", headers=auth_headers(outsider)).status_code == 403
    assert client.get(f"/messages/{cid}", headers=auth_headers(outsider)).status_code == 403
    r = client.post("/messages", json={"conversationId": cid, "content": "hi"}, headers=auth_headers(outsider))
    assert r.status_code == 403


def test_unknown_conversation_is_404(client, db):
    me = make_profile(db)
    r = client.get("/conversations/does-not-exist", headers=auth_headers(me))
    assert r.status_code == 404
    assert r.json()["error"] == "NotFound"
