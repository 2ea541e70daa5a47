from conftest import auth_headers
from app.models.user import FCMToken


def test_register_login_me(client):
    registered = client.post("/api/auth/register", json={
        "email": "An@Example.com", "password": "secret123", "name": "An",
    })
    assert registered.status_code == 201
    body = registered.json()
    assert body["success"] is True
    assert body["user"]["email"] == "an@example.com"
    assert "passwordHash" not in body["user"]

    login = client.post("/api/auth/login", json={"email": "an@example.com", "password": "secret123"})
    assert login.status_code == 200
    token = login.json()["token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["user"]["name"] == "An"


def test_register_rejects_missing_fields_and_duplicates(client, make_user):
    make_user(email="taken@example.com")

    missing = client.post("/api/auth/register", json={"email": "x@example.com"})
    assert missing.status_code == 400
    assert missing.json()["message"] == "Please provide email, password, and name"

    duplicate = client.post("/api/auth/register", json={
        "email": "taken@example.com", "password": "pw", "name": "Dup",
    })
    assert duplicate.status_code == 400
    assert duplicate.json()["message"] == "Email already exists"


def test_login_with_wrong_password(client, make_user):
    make_user(email="bao@example.com", password="right")
    response = client.post("/api/auth/login", json={"email": "bao@example.com", "password": "wrong"})
    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Invalid credentials"}


def test_fcm_token_registration_and_logout(client, db, make_user):
    user = make_user()
    headers = auth_headers(user)

    for token in ("device-a", "device-b"):
        response = client.post("/api/users/me/fcm-token", json={"fcmToken": token}, headers=headers)
        assert response.status_code == 200

    client.post("/api/auth/logout", json={"fcmToken": "device-a"}, headers=headers)
    assert [t.fcm_token for t in db.query(FCMToken).all()] == ["device-b"]

    client.post("/api/auth/logout", headers=headers)
    assert db.query(FCMToken).count() == 0


def test_fcm_token_moves_between_accounts(client, db, make_user):
    first, second = make_user(), make_user()
    client.post("/api/users/me/fcm-token", json={"fcmToken": "shared"}, headers=auth_headers(first))
    client.post("/api/users/me/fcm-token", json={"fcmToken": "shared"}, headers=auth_headers(second))

    tokens = db.query(FCMToken).all()
    assert len(tokens) == 1
    assert tokens[0].user_id == second.id


def test_users_endpoints(client, make_user):
    alice, bob = make_user("Alice"), make_user("Bob")

    listing = client.get("/api/users", headers=auth_headers(alice)).json()
    assert listing["count"] == 2

    assert client.get(f"/api/users/{bob.id}", headers=auth_headers(alice)).json()["user"]["name"] == "Bob"

    updated = client.put(f"/api/users/{alice.id}", json={"phone": "0905000000"}, headers=auth_headers(alice))
    assert updated.json()["user"]["phone"] == "0905000000"
    assert updated.json()["user"]["name"] == "Alice"

    forbidden = client.put(f"/api/users/{bob.id}", json={"name": "Hacked"}, headers=auth_headers(alice))
    assert forbidden.status_code == 403


def test_health(client):
    body = client.get("/health").json()
    assert body["success"] is True
    assert body["status"] == "healthy"


def test_forgot_password(client, make_user):
    make_user(email="chi@example.com")

    missing = client.post("/api/auth/forgot-password", json={})
    assert missing.status_code == 400
    assert missing.json()["message"] == "Please provide email"

    unknown = client.post("/api/auth/forgot-password", json={"email": "nobody@example.com"})
    assert unknown.status_code == 404
    assert unknown.json() == {"success": False, "message": "Email not found"}

    known = client.post("/api/auth/forgot-password", json={"email": "Chi@Example.com"})
    assert known.status_code == 200
    assert known.json() == {"success": True, "message": "Password reset link sent to email"}
