import pytest
from fastapi.testclient import TestClient

from conftest import ALICE, BOB, DEPLOYER, MALLORY
from govchain_node.govchain_api import create_app


@pytest.fixture
def client(executor):
    return TestClient(create_app(executor))


def as_(principal):
    return {"X-Principal": principal}


def test_health_and_summary(client):
    assert client.get("/health").json()["ok"]
    summary = client.get("/health/summary").json()
    assert summary["owner"] == DEPLOYER
    assert summary["counts"] == {"admins": 1, "roles": 1, "proposals": 0, "messages": 0}
    assert summary["persistent"] is True


@pytest.mark.parametrize("path", ["/access/owner", "/access/admins", "/voting/config", "/counter", "/board/stats", "/chain/height"])
def test_basic_gets(client, path):
    assert client.get(path).status_code == 200


def test_mutation_requires_principal_header(client):
    assert client.post("/counter/increment").status_code == 422
    assert client.post("/counter/increment", headers=as_("")).status_code == 401


def test_access_control_routes(client):
    r = client.post("/access/users", json={"target": ALICE}, headers=as_(DEPLOYER))
    assert r.status_code == 200
    assert r.json()["ok"] is True

    roles = client.get(f"/access/principals/{ALICE}").json()
    assert roles["has_role"] is True
    assert roles["role"] == 2
    assert roles["is_admin"] is False

    r = client.post("/access/admins", json={"target": BOB}, headers=as_(ALICE))
    assert r.status_code == 403
    assert r.json()["detail"] == {"error": 100, "reason": "ERR_UNAUTHORIZED"}

    assert client.post("/access/admins", json={"target": BOB}, headers=as_(DEPLOYER)).status_code == 200
    assert client.get("/access/admins").json()["admins"] == sorted([DEPLOYER, BOB])

    r = client.delete(f"/access/admins/{DEPLOYER}", headers=as_(DEPLOYER))
    assert r.status_code == 400
    assert r.json()["detail"]["error"] == 103

    assert client.delete(f"/access/users/{ALICE}", headers=as_(DEPLOYER)).status_code == 200
    assert client.get(f"/access/principals/{ALICE}").json()["is_authorized"] is False


def test_renounce_and_transfer(client):
    client.post("/access/users", json={"target": ALICE}, headers=as_(DEPLOYER))
    assert client.post("/access/renounce", headers=as_(ALICE)).status_code == 200
    assert client.post("/access/renounce", headers=as_(ALICE)).status_code == 403

    assert client.post("/access/ownership", json={"new_owner": BOB}, headers=as_(DEPLOYER)).status_code == 200
    assert client.get("/access/owner").json()["owner"] == BOB
    assert client.get(f"/access/principals/{BOB}").json()["is_owner"] is True


def test_proposal_lifecycle_over_http(client):
    r = client.post(
        "/voting/proposals",
        json={"title": "Upgrade", "description": "raise limits", "duration": 144},
        headers=as_(DEPLOYER),
    )
    assert r.status_code == 200
    assert r.json()["id"] == 1

    assert client.post("/voting/proposals/1/votes", json={"choice": 1}, headers=as_(DEPLOYER)).status_code == 200
    r = client.post("/voting/proposals/1/votes", json={"choice": 1}, headers=as_(DEPLOYER))
    assert r.status_code == 400
    assert r.json()["detail"]["error"] == 203

    assert client.get(f"/voting/proposals/1/votes/{DEPLOYER}").json()["choice"] == 1
    assert client.get("/voting/proposals/1/active").json()["active"] is True

    r = client.post("/voting/proposals/1/finalize", headers=as_(MALLORY))
    assert r.status_code == 400
    assert r.json()["detail"]["error"] == 205

    assert client.post("/chain/mine", json={"count": 145}).json()["height"] == 145
    r = client.post("/voting/proposals/1/finalize", headers=as_(MALLORY))
    assert r.status_code == 200
    assert r.json()["status"] == "passed"

    results = client.get("/voting/proposals/1/results").json()
    assert results == {"yes_votes": 1, "no_votes": 0, "total_votes": 1, "status": "passed"}
    assert client.get("/voting/proposals/count").json()["count"] == 1
    assert [p["id"] for p in client.get("/voting/proposals").json()] == [1]


def test_voting_errors_map_to_status(client):
    assert client.get("/voting/proposals/9").status_code == 404
    assert client.get("/voting/proposals/9/results").status_code == 404

    r = client.post("/voting/proposals/9/votes", json={"choice": 1}, headers=as_(DEPLOYER))
    assert r.status_code == 404
    assert r.json()["detail"] == {"error": 201, "reason": "ERR_PROPOSAL_NOT_FOUND"}

    r = client.post(
        "/voting/proposals",
        json={"title": "t", "description": "", "duration": 10},
        headers=as_(DEPLOYER),
    )
    assert r.status_code == 400
    assert r.json()["detail"]["error"] == 206

    r = client.post(
        "/voting/proposals",
        json={"title": "t", "description": "", "duration": 144},
        headers=as_(MALLORY),
    )
    assert r.status_code == 403


def test_voting_config_update(client):
    r = client.put("/voting/config", json={"min_duration": 10, "max_duration": 5}, headers=as_(DEPLOYER))
    assert r.status_code == 400
    assert r.json()["detail"]["error"] == 206

    assert client.put("/voting/config", json={"min_duration": 5, "max_duration": 50}, headers=as_(DEPLOYER)).status_code == 200
    assert client.get("/voting/config").json() == {"min_duration": 5, "max_duration": 50}


def test_cancel_over_http(client):
    client.post("/voting/proposals", json={"title": "t", "duration": 144}, headers=as_(DEPLOYER))
    assert client.post("/voting/proposals/1/cancel", headers=as_(MALLORY)).status_code == 403
    assert client.post("/voting/proposals/1/cancel", headers=as_(DEPLOYER)).status_code == 200
    assert client.get("/voting/proposals/1").json()["status"] == "failed"


def test_counter_routes(client):
    assert client.post("/counter/increment", headers=as_(DEPLOYER)).json()["value"] == 1
    assert client.post("/counter/increment-by", json={"amount": 4}, headers=as_(DEPLOYER)).json()["value"] == 5
    assert client.post("/counter/batch-increment", json={"count": 5}, headers=as_(DEPLOYER)).json()["value"] == 10
    assert client.post("/counter/decrement", headers=as_(DEPLOYER)).json()["value"] == 9
    assert client.post("/counter/decrement-by", json={"amount": 9}, headers=as_(DEPLOYER)).json()["value"] == 0

    r = client.post("/counter/decrement", headers=as_(DEPLOYER))
    assert r.status_code == 400
    assert r.json()["detail"]["error"] == 302

    assert client.post("/counter/increment", headers=as_(MALLORY)).status_code == 403

    assert client.put("/counter", json={"value": 77}, headers=as_(DEPLOYER)).json()["value"] == 77
    assert client.post("/counter/reset", headers=as_(DEPLOYER)).json()["value"] == 0
    assert client.get("/counter").json() == {"value": 0}


def test_counter_pause_and_permissions(client):
    assert client.put("/counter/paused", json={"paused": True}, headers=as_(DEPLOYER)).status_code == 200
    r = client.post("/counter/increment", headers=as_(DEPLOYER))
    assert r.status_code == 400
    assert r.json()["detail"]["error"] == 304
    client.put("/counter/paused", json={"paused": False}, headers=as_(DEPLOYER))

    r = client.put("/counter/permissions", json={"increment": False, "decrement": False}, headers=as_(DEPLOYER))
    assert r.status_code == 200
    assert client.post("/counter/increment", headers=as_(MALLORY)).json()["value"] == 1

    assert client.post("/counter/emergency-pause", headers=as_(DEPLOYER)).status_code == 200
    cfg = client.get("/counter/config").json()
    assert cfg["paused"] is True
    assert cfg["increment_requires_permission"] is False


def test_mine_validates_count(client):
    assert client.post("/chain/mine", json={"count": 0}).status_code == 422
    assert client.post("/chain/mine", json={}).json()["height"] == 1


def test_message_board_routes(client):
    client.post("/access/users", json={"target": ALICE}, headers=as_(DEPLOYER))

    r = client.post("/board/messages", json={"content": "Original message"}, headers=as_(DEPLOYER))
    assert r.status_code == 200
    assert r.json()["id"] == 1
    r = client.post("/board/messages", json={"content": "A reply", "reply_to": 1}, headers=as_(ALICE))
    assert r.json()["id"] == 2

    assert client.get("/board/messages/2").json()["reply_to"] == 1
    assert [m["id"] for m in client.get("/board/messages").json()] == [1, 2]

    assert client.put("/board/messages/2", json={"content": "edited"}, headers=as_(ALICE)).status_code == 200
    assert client.get("/board/messages/2/content").json() == {"id": 2, "content": "edited"}
    assert client.put("/board/messages/2", json={"content": "x"}, headers=as_(DEPLOYER)).status_code == 403

    assert client.post("/board/messages/1/pin", headers=as_(DEPLOYER)).status_code == 200
    assert client.get("/board/pinned").json() == {"pinned": [1]}
    assert client.delete("/board/messages/1/pin", headers=as_(DEPLOYER)).status_code == 200

    assert client.delete("/board/messages/2", headers=as_(ALICE)).status_code == 200
    assert client.get("/board/messages/2/content").json()["content"] is None
    stats = client.get("/board/stats").json()
    assert stats["total_messages"] == 2
    assert stats["active_messages"] == 1


def test_message_board_errors_map_to_status(client):
    assert client.get("/board/messages/9").status_code == 404

    r = client.post("/board/messages", json={"content": "hi", "reply_to": 9}, headers=as_(DEPLOYER))
    assert r.status_code == 404
    assert r.json()["detail"] == {"error": 401, "reason": "ERR_MESSAGE_NOT_FOUND"}

    r = client.post("/board/messages", json={"content": ""}, headers=as_(DEPLOYER))
    assert r.status_code == 400
    assert r.json()["detail"]["error"] == 402

    assert client.post("/board/messages", json={"content": "hi"}, headers=as_(MALLORY)).status_code == 403


def test_message_board_config_routes(client):
    body = {"paused": False, "moderation_enabled": True, "public_posting": True}
    assert client.put("/board/config", json=body, headers=as_(MALLORY)).status_code == 403
    assert client.put("/board/config", json=body, headers=as_(DEPLOYER)).status_code == 200
    assert client.get("/board/config").json() == body
    assert client.post("/board/messages", json={"content": "hi"}, headers=as_(MALLORY)).status_code == 200

    assert client.post("/board/emergency-pause", headers=as_(DEPLOYER)).status_code == 200
    r = client.post("/board/messages", json={"content": "hi"}, headers=as_(MALLORY))
    assert r.status_code == 400
    assert r.json()["detail"]["error"] == 406
