import uuid

import pytest

pytestmark = pytest.mark.anyio


async def _friend_ids(client, user) -> set[str]:
    r = await client.get("/friends", headers=user["headers"])
    assert r.status_code == 200, r.text
    return {f["id"] for f in r.json()}


async def test_friend_request_accept_flow(client, onboarded_user):
    a = await onboarded_user(client)
    b = await onboarded_user(client)

    r = await client.post("/friends/requests", json={"recipient_ids": [b["id"]]}, headers=a["headers"])
    assert r.status_code == 201, r.text
    result = r.json()["results"][0]
    assert result["ok"] is True
    link_id = result["link_id"]

    # B sees it as incoming, A as outgoing
    r = await client.get("/friends/requests/incoming", headers=b["headers"])
    incoming = r.json()
    assert [i["id"] for i in incoming] == [link_id]
    assert incoming[0]["user"]["id"] == a["id"]

    r = await client.get("/friends/requests/outgoing", headers=a["headers"])
    assert [i["id"] for i in r.json()] == [link_id]

    r = await client.post(f"/friends/requests/{link_id}/accept", headers=b["headers"])
    assert r.status_code == 200, r.text

    assert b["id"] in await _friend_ids(client, a)
    assert a["id"] in await _friend_ids(client, b)

    r = await client.get("/friends/requests/incoming", headers=b["headers"])
    assert r.json() == []


async def test_decline_removes_link_and_allows_new_request(client, onboarded_user):
    a = await onboarded_user(client)
    b = await onboarded_user(client)

    r = await client.post("/friends/requests", json={"recipient_ids": [b["id"]]}, headers=a["headers"])
    link_id = r.json()["results"][0]["link_id"]

    r = await client.post(f"/friends/requests/{link_id}/decline", headers=b["headers"])
    assert r.status_code == 200, r.text

    assert a["id"] not in await _friend_ids(client, b)
    r = await client.get("/friends/requests/incoming", headers=b["headers"])
    assert r.json() == []

    r = await client.post(f"/friends/requests/{link_id}/accept", headers=b["headers"])
    assert r.status_code == 404

    r = await client.post("/friends/requests", json={"recipient_ids": [b["id"]]}, headers=a["headers"])
    assert r.json()["results"][0]["ok"] is True


async def test_only_recipient_can_accept(client, onboarded_user):
    a = await onboarded_user(client)
    b = await onboarded_user(client)
    c = await onboarded_user(client)

    r = await client.post("/friends/requests", json={"recipient_ids": [b["id"]]}, headers=a["headers"])
    link_id = r.json()["results"][0]["link_id"]

    r = await client.post(f"/friends/requests/{link_id}/accept", headers=a["headers"])
    assert r.status_code == 403

    r = await client.post(f"/friends/requests/{link_id}/decline", headers=c["headers"])
    assert r.status_code == 403

    r = await client.post(f"/friends/requests/{link_id}/accept", headers=b["headers"])
    assert r.status_code == 200

    r = await client.post(f"/friends/requests/{link_id}/accept", headers=b["headers"])
    assert r.status_code == 409


async def test_duplicate_and_reverse_requests_conflict(client, onboarded_user):
    a = await onboarded_user(client)
    b = await onboarded_user(client)

    r = await client.post("/friends/requests", json={"recipient_ids": [b["id"]]}, headers=a["headers"])
    assert r.json()["results"][0]["ok"] is True

    r = await client.post("/friends/requests", json={"recipient_ids": [b["id"]]}, headers=a["headers"])
    assert r.json()["results"][0] == {
        "recipient_id": b["id"],
        "ok": False,
        "link_id": None,
        "error": "request_already_sent",
    }

    r = await client.post("/friends/requests", json={"recipient_ids": [a["id"]]}, headers=b["headers"])
    assert r.json()["results"][0]["error"] == "request_already_received"


async def test_batch_request_reports_per_recipient_errors(client, onboarded_user, befriend):
    a = await onboarded_user(client)
    b = await onboarded_user(client)
    c = await onboarded_user(client)
    await befriend(client, a, b)
    missing = str(uuid.uuid4())

    r = await client.post(
        "/friends/requests",
        json={"recipient_ids": [b["id"], c["id"], a["id"], missing]},
        headers=a["headers"],
    )
    assert r.status_code == 201, r.text
    by_recipient = {x["recipient_id"]: x for x in r.json()["results"]}

    assert by_recipient[b["id"]]["error"] == "already_friends"
    assert by_recipient[c["id"]]["ok"] is True
    assert by_recipient[a["id"]]["error"] == "cannot_friend_self"
    assert by_recipient[missing]["error"] == "user_not_found"

    r = await client.get("/friends/requests/incoming", headers=c["headers"])
    assert [i["user"]["id"] for i in r.json()] == [a["id"]]


async def test_unfriend_either_party(client, onboarded_user, befriend):
    a = await onboarded_user(client)
    b = await onboarded_user(client)
    await befriend(client, a, b)

    r = await client.post("/friends/unfriend", json={"user_id": a["id"]}, headers=b["headers"])
    assert r.status_code == 200
    assert r.json() == {"ok": True, "removed": True}

    assert b["id"] not in await _friend_ids(client, a)

    r = await client.post("/friends/unfriend", json={"user_id": a["id"]}, headers=b["headers"])
    assert r.status_code == 404


async def test_friend_routes_require_profile(client, auth_headers):
    r = await client.get("/friends")
    assert r.status_code == 401

    r = await client.get("/friends", headers=auth_headers(uuid.uuid4()))
    assert r.status_code == 401
