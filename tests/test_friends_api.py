from uuid import uuid4

from conftest import auth_headers


def test_requires_token(client):
    response = client.get("/api/friends")
    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "No token provided"}


def test_invalid_token(client):
    response = client.get("/api/friends", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"


def test_request_accept_flow(client, make_user):
    alice, bob = make_user("Alice"), make_user("Bob")

    sent = client.post("/api/friends/request", json={"recipientId": str(bob.id)},
                       headers=auth_headers(alice))
    assert sent.status_code == 200
    body = sent.json()
    assert body["success"] is True
    assert body["message"] == "Friend request sent"
    request_id = body["friendRequest"]["id"]
    assert body["friendRequest"]["status"] == "pending"

    incoming = client.get("/api/friends/requests", headers=auth_headers(bob)).json()
    assert incoming["count"] == 1
    assert incoming["requests"][0]["requester"]["name"] == "Alice"

    accepted = client.put(f"/api/friends/requests/{request_id}/accept", headers=auth_headers(bob))
    assert accepted.status_code == 200
    assert accepted.json()["friend"]["status"] == "accepted"

    friends = client.get("/api/friends", headers=auth_headers(alice)).json()
    assert friends["count"] == 1
    assert friends["friends"][0]["name"] == "Bob"
    assert friends["friends"][0]["friendshipId"] == request_id


def test_reciprocal_request_response(client, make_user):
    alice, bob = make_user(), make_user()
    client.post("/api/friends/request", json={"recipientId": str(bob.id)}, headers=auth_headers(alice))

    response = client.post("/api/friends/request", json={"recipientId": str(alice.id)},
                           headers=auth_headers(bob))

    body = response.json()
    assert response.status_code == 200
    assert body["message"] == "Friend request accepted"
    assert body["friend"]["status"] == "accepted"


def test_error_statuses(client, make_user):
    alice, bob = make_user(), make_user()

    missing = client.post("/api/friends/request", json={}, headers=auth_headers(alice))
    assert missing.status_code == 400

    self_request = client.post("/api/friends/request", json={"recipientId": str(alice.id)},
                               headers=auth_headers(alice))
    assert self_request.status_code == 400

    unknown = client.post("/api/friends/request", json={"recipientId": str(uuid4())},
                          headers=auth_headers(alice))
    assert unknown.status_code == 404
    assert unknown.json()["message"] == "Recipient not found"

    request_id = client.post("/api/friends/request", json={"recipientId": str(bob.id)},
                             headers=auth_headers(alice)).json()["friendRequest"]["id"]
    forbidden = client.put(f"/api/friends/requests/{request_id}/accept", headers=auth_headers(alice))
    assert forbidden.status_code == 403

    not_accepted = client.delete(f"/api/friends/{request_id}", headers=auth_headers(alice))
    assert not_accepted.status_code == 400


def test_malformed_id_is_validation_error(client, make_user):
    response = client.put("/api/friends/requests/not-a-uuid/accept", headers=auth_headers(make_user()))
    body = response.json()
    assert response.status_code == 400
    assert body["message"] == "Validation error"
    assert body["errors"]


def test_scan_and_delete(client, make_user):
    alice, bob = make_user(), make_user()
    client.post("/api/friends/scan", json={"userId": str(bob.id)}, headers=auth_headers(alice))
    scanned = client.post("/api/friends/scan", json={"userId": str(alice.id)}, headers=auth_headers(bob))
    friendship_id = scanned.json()["friend"]["id"]

    deleted = client.delete(f"/api/friends/{friendship_id}", headers=auth_headers(alice))

    assert deleted.status_code == 200
    assert client.get("/api/friends", headers=auth_headers(bob)).json()["count"] == 0


def test_qr_code(client, make_user):
    alice = make_user()
    body = client.get("/api/friends/qr-code", headers=auth_headers(alice)).json()
    assert body["userId"] == str(alice.id)
    assert body["qrLink"].endswith(f"/add-friend?userId={alice.id}")
