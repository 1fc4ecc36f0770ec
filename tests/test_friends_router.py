from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from app.api.auth.utils import create_access_token
from app.database.database import get_db
from app.database.transaction import get_transactional_store
from app.main import app


@pytest.fixture
def client(transactions, session_factory, users):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_transactional_store] = lambda: transactions
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


def auth(user_id):
    return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}


def test_friend_request_round_trip(client):
    response = client.post("/api/v1/friends/requests/u2", headers=auth("u1"))
    assert response.status_code == 201
    assert response.json() == {"user_id": "u1", "other_user_id": "u2", "status": "pending_sent"}

    response = client.get("/api/v1/friends/pending", params={"from_user_id": "u1", "to_user_id": "u2"},
                          headers=auth("u1"))
    assert response.json()["pending"] is True

    assert client.get("/api/v1/friends/requests/incoming", headers=auth("u2")).json()["user_ids"] == ["u1"]
    assert client.get("/api/v1/friends/requests/outgoing", headers=auth("u1")).json()["user_ids"] == ["u2"]

    response = client.put("/api/v1/friends/requests/u1/accept", headers=auth("u2"))
    assert response.status_code == 200
    assert response.json()["status"] == "friends"

    assert client.get("/api/v1/friends/", headers=auth("u1")).json() == {"user_id": "u1", "user_ids": ["u2"]}
    assert client.get("/api/v1/friends/", headers=auth("u2")).json() == {"user_id": "u2", "user_ids": ["u1"]}
    assert client.get("/api/v1/friends/check/u2", headers=auth("u1")).json()["is_friend"] is True
    assert client.get("/api/v1/friends/status/u1", headers=auth("u2")).json()["status"] == "friends"
    assert client.get("/api/v1/friends/users/u1", headers=auth("u3")).json()["user_ids"] == ["u2"]

    response = client.delete("/api/v1/friends/u2", headers=auth("u1"))
    assert response.status_code == 200
    assert response.json()["status"] == "none"
    assert client.get("/api/v1/friends/", headers=auth("u1")).json()["user_ids"] == []


def test_reject_and_cancel(client):
    client.post("/api/v1/friends/requests/u2", headers=auth("u1"))
    assert client.put("/api/v1/friends/requests/u1/reject", headers=auth("u2")).json()["status"] == "none"

    client.post("/api/v1/friends/requests/u3", headers=auth("u1"))
    assert client.delete("/api/v1/friends/requests/u3", headers=auth("u1")).json()["status"] == "none"
    assert client.get("/api/v1/friends/requests/incoming", headers=auth("u3")).json()["user_ids"] == []


def test_duplicate_request_is_409(client):
    client.post("/api/v1/friends/requests/u2", headers=auth("u1"))

    response = client.post("/api/v1/friends/requests/u2", headers=auth("u1"))

    assert response.status_code == 409
    assert response.json()["error"] == "conflict"
    assert response.json()["reason"] == "already_sent"


def test_crossed_request_is_409(client):
    client.post("/api/v1/friends/requests/u2", headers=auth("u1"))

    response = client.post("/api/v1/friends/requests/u1", headers=auth("u2"))

    assert response.status_code == 409
    assert response.json()["reason"] == "reverse_request_exists"


def test_self_request_is_400(client):
    response = client.post("/api/v1/friends/requests/u1", headers=auth("u1"))

    assert response.status_code == 400
    assert response.json()["reason"] == "self_request"


def test_unknown_recipient_is_400(client):
    response = client.post("/api/v1/friends/requests/ghost", headers=auth("u1"))

    assert response.status_code == 400
    assert response.json()["reason"] == "recipient_not_found"


def test_missing_request_is_404(client):
    response = client.put("/api/v1/friends/requests/u1/accept", headers=auth("u2"))

    assert response.status_code == 404
    assert response.json()["reason"] == "no_pending_request"


def test_remove_non_friend_is_409(client):
    response = client.delete("/api/v1/friends/u2", headers=auth("u1"))

    assert response.status_code == 409
    assert response.json()["reason"] == "not_friends"


def test_anonymous_caller_is_401(client):
    response = client.get("/api/v1/friends/")

    assert response.status_code == 401
    assert response.json()["reason"] == "not_authenticated"
    assert response.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.parametrize("token", [
    "not-a-jwt",
    create_access_token({"sub": "u1"}, expires_delta=timedelta(minutes=-5)),
])
def test_invalid_token_is_401(client, token):
    response = client.get("/api/v1/friends/", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_outsider_pending_check_is_403(client):
    client.post("/api/v1/friends/requests/u2", headers=auth("u1"))

    response = client.get("/api/v1/friends/pending", params={"from_user_id": "u1", "to_user_id": "u2"},
                          headers=auth("u3"))

    assert response.status_code == 403
    assert response.json()["reason"] == "not_party"


def test_notification_endpoints(client):
    client.post("/api/v1/friends/requests/u2", headers=auth("u1"))

    items = client.get("/api/v1/notifications/", headers=auth("u2")).json()
    assert [item["type"] for item in items] == ["friend_request"]
    assert client.get("/api/v1/notifications/unread-count", headers=auth("u2")).json() == {"count": 1}
    assert client.get("/api/v1/notifications/pending-requests-count", headers=auth("u2")).json() == {"count": 1}

    assert client.put(f"/api/v1/notifications/{items[0]['id']}/read", headers=auth("u3")).status_code == 404
    assert client.put(f"/api/v1/notifications/{items[0]['id']}/read", headers=auth("u2")).status_code == 200
    assert client.get("/api/v1/notifications/unread-count", headers=auth("u2")).json() == {"count": 0}

    assert client.put("/api/v1/notifications/read-all", headers=auth("u2")).json() == {"success": True}


def test_health(client):
    response = client.get("/api/health")

    assert response.json() == {"status": "healthy", "database": "connected"}


@pytest.mark.parametrize("limit", [-1, 0, 101])
def test_notification_limit_is_bounded(client, limit):
    response = client.get("/api/v1/notifications/", params={"limit": limit}, headers=auth("u2"))

    assert response.status_code == 422


def test_unknown_sender_is_400(client):
    response = client.post("/api/v1/friends/requests/u2", headers=auth("ghost"))

    assert response.status_code == 400
    assert response.json()["reason"] == "sender_not_found"
