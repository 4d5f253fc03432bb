"""Partner linking and the shared space behind it."""
from __future__ import annotations

import uuid

import pytest
from fastapi.testclient import TestClient

from pairplay.app import create_app
from pairplay.config import Settings
from pairplay.constants import INITIAL_PET, INITIAL_SUNFLOWER

SETTINGS = Settings(db_url="sqlite://:memory:", invite_timeout_seconds=0, jwt_secret="test-secret")


@pytest.fixture
def client():
    with TestClient(create_app(SETTINGS)) as test_client:
        yield test_client


def _register(client: TestClient, username: str, gender=None) -> dict:
    response = client.post("/api/register", json={"username": username, "password": "secret", "gender": gender})
    assert response.status_code == 201, response.text
    body = response.json()
    body["headers"] = {"Authorization": f"Bearer {body['token']}"}
    return body


def _link(client: TestClient, sender: dict, receiver: dict) -> None:
    sent = client.post("/api/invite", json={"targetId": receiver["userId"]}, headers=sender["headers"])
    assert sent.status_code == 200, sent.text
    accepted = client.post("/api/invite/respond", json={"accept": True}, headers=receiver["headers"])
    assert accepted.status_code == 200, accepted.text


# -------------------- Spaces -------------------- #

def test_new_account_starts_with_personal_space(client):
    alice = _register(client, "alice", gender="Female")

    body = client.get("/api/data", headers=alice["headers"]).json()

    assert body["data"] == {
        "notes": [],
        "images": [],
        "dates": [],
        "pet": INITIAL_PET,
        "sunflower": INITIAL_SUNFLOWER,
    }
    assert body["username"] == "alice"
    assert body["gender"] == "Female"
    assert body["partnerName"] is None
    assert body["myId"] == alice["userId"]


def test_save_space_sections(client):
    alice = _register(client, "alice")
    notes = [{"text": "buy flowers", "ts": 1}]
    pet = dict(INITIAL_PET, level=4)

    assert client.post("/api/data", json={"type": "notes", "payload": notes}, headers=alice["headers"]).status_code == 200
    assert client.post("/api/data", json={"type": "pet", "payload": pet}, headers=alice["headers"]).status_code == 200

    data = client.get("/api/data", headers=alice["headers"]).json()["data"]
    assert data["notes"] == notes
    assert data["pet"]["level"] == 4


@pytest.mark.parametrize(
    "body",
    [
        {"type": "diary", "payload": []},
        {"type": "notes", "payload": {"not": "a list"}},
        {"type": "pet", "payload": ["not", "a", "dict"]},
    ],
)
def test_save_space_rejects_bad_sections(client, body):
    alice = _register(client, "alice")

    assert client.post("/api/data", json=body, headers=alice["headers"]).status_code == 400


def test_space_requires_token(client):
    assert client.get("/api/data").status_code == 401


# -------------------- Invites -------------------- #

def test_invite_shows_up_in_notifications(client):
    alice = _register(client, "alice")
    bob = _register(client, "bob")

    assert client.get("/api/notifications", headers=bob["headers"]).json() == {"pendingInvite": None}
    client.post("/api/invite", json={"targetId": bob["userId"]}, headers=alice["headers"])

    pending = client.get("/api/notifications", headers=bob["headers"]).json()["pendingInvite"]
    assert pending["fromId"] == alice["userId"]
    assert pending["fromName"] == "alice"
    assert pending["timestamp"] > 0


def test_invite_rejections(client):
    alice = _register(client, "alice")
    bob = _register(client, "bob")
    carol = _register(client, "carol")

    def invite(sender, target_id):
        return client.post("/api/invite", json={"targetId": target_id}, headers=sender["headers"])

    assert invite(alice, str(uuid.uuid4())).status_code == 404
    assert invite(alice, "not-an-id").status_code == 404
    assert invite(alice, alice["userId"]).status_code == 400

    assert invite(alice, bob["userId"]).status_code == 200
    busy = invite(carol, bob["userId"])
    assert busy.status_code == 400
    assert busy.json()["detail"] == "User already has a pending invitation"


def test_accept_links_partners_into_senders_space(client):
    alice = _register(client, "alice", gender="Female")
    bob = _register(client, "bob", gender="Male")
    client.post("/api/data", json={"type": "dates", "payload": [{"title": "picnic"}]}, headers=alice["headers"])

    _link(client, alice, bob)

    for me, partner in ((alice, bob), (bob, alice)):
        profile = client.get("/api/profile", headers=me["headers"]).json()
        assert profile["partnerId"] == partner["userId"]
    bob_view = client.get("/api/data", headers=bob["headers"]).json()
    assert bob_view["data"]["dates"] == [{"title": "picnic"}]
    assert bob_view["partnerName"] == "alice"
    assert bob_view["partnerGender"] == "Female"
    assert client.get("/api/notifications", headers=bob["headers"]).json()["pendingInvite"] is None

    # Either partner writes to the same space.
    client.post("/api/data", json={"type": "notes", "payload": ["from bob"]}, headers=bob["headers"])
    assert client.get("/api/data", headers=alice["headers"]).json()["data"]["notes"] == ["from bob"]


def test_linked_users_cannot_be_invited_or_invite(client):
    alice = _register(client, "alice")
    bob = _register(client, "bob")
    carol = _register(client, "carol")
    _link(client, alice, bob)

    taken = client.post("/api/invite", json={"targetId": alice["userId"]}, headers=carol["headers"])
    assert taken.json()["detail"] == "User already has a partner"
    own = client.post("/api/invite", json={"targetId": carol["userId"]}, headers=bob["headers"])
    assert own.json()["detail"] == "You already have a partner"


def test_decline_clears_invite_without_linking(client):
    alice = _register(client, "alice")
    bob = _register(client, "bob")
    client.post("/api/invite", json={"targetId": bob["userId"]}, headers=alice["headers"])

    declined = client.post("/api/invite/respond", json={"accept": False}, headers=bob["headers"])

    assert declined.json()["message"] == "Invitation declined"
    assert client.get("/api/profile", headers=bob["headers"]).json()["partnerId"] is None
    again = client.post("/api/invite/respond", json={"accept": True}, headers=bob["headers"])
    assert again.status_code == 400


def test_accept_fails_when_sender_already_paired(client):
    alice = _register(client, "alice")
    bob = _register(client, "bob")
    carol = _register(client, "carol")
    client.post("/api/invite", json={"targetId": bob["userId"]}, headers=alice["headers"])
    _link(client, carol, alice)

    response = client.post("/api/invite/respond", json={"accept": True}, headers=bob["headers"])

    assert response.status_code == 400
    assert client.get("/api/profile", headers=bob["headers"]).json()["partnerId"] is None
    assert client.get("/api/notifications", headers=bob["headers"]).json()["pendingInvite"] is None


# -------------------- Disconnect -------------------- #

def test_disconnect_returns_both_to_personal_spaces(client):
    alice = _register(client, "alice")
    bob = _register(client, "bob")
    client.post("/api/data", json={"type": "notes", "payload": ["bob alone"]}, headers=bob["headers"])
    _link(client, alice, bob)
    client.post("/api/data", json={"type": "notes", "payload": ["together"]}, headers=bob["headers"])

    response = client.post("/api/disconnect", headers=bob["headers"])

    assert response.status_code == 200
    assert client.get("/api/data", headers=bob["headers"]).json()["data"]["notes"] == ["bob alone"]
    alice_view = client.get("/api/data", headers=alice["headers"]).json()
    assert alice_view["data"]["notes"] == ["together"]
    assert alice_view["partnerName"] is None
    assert client.get("/api/profile", headers=alice["headers"]).json()["partnerId"] is None


def test_disconnect_without_partner(client):
    alice = _register(client, "alice")

    assert client.post("/api/disconnect", headers=alice["headers"]).status_code == 400
