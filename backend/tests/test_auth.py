# Overview: Pytest coverage for login, registration, bearer tokens and the demo token.

"""
Authentication Tests

Verifies:
- Registration always yields role USER and returns a working token
- Login failures are 401 with a generic message
- require_auth rejects missing, malformed, expired and orphaned tokens
- The demo token only works when explicitly enabled
"""

from datetime import datetime, timedelta, timezone

from jose import jwt

from stockroom.extensions import db


class TestRegistrationScenario:
    def test_register_me_then_forbidden_user_creation(self, client, db_session):
        resp = client.post("/api/auth/register", json={
            "username": "alice",
            "email": "alice@x.com",
            "password": "secret1",
        })
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["token"]
        assert body["user"]["role"] == "USER"
        assert "passwordHash" not in body["user"]

        headers = {"Authorization": f"Bearer {body['token']}"}
        me = client.get("/api/auth/me", headers=headers)
        assert me.status_code == 200
        assert me.get_json()["user"]["username"] == "alice"
        assert me.get_json()["user"]["role"] == "USER"

        resp = client.post(
            "/api/users",
            json={"username": "bob", "email": "bob@x.com", "password": "secret1"},
            headers=headers,
        )
        assert resp.status_code == 403
        assert resp.get_json()["message"] == "Insufficient permissions. Required: ADMIN"

    def test_register_ignores_requested_role(self, client, db_session):
        resp = client.post("/api/auth/register", json={
            "username": "mallory",
            "email": "mallory@x.com",
            "password": "secret1",
            "role": "ADMIN",
        })
        assert resp.status_code == 201
        assert resp.get_json()["user"]["role"] == "USER"

    def test_register_lowercases_email(self, client, db_session):
        resp = client.post("/api/auth/register", json={
            "username": "carol",
            "email": "Carol@Example.COM",
            "password": "secret1",
        })
        assert resp.status_code == 201
        assert resp.get_json()["user"]["email"] == "carol@example.com"


class TestRegistrationValidation:
    def test_missing_fields(self, client, db_session):
        resp = client.post("/api/auth/register", json={"username": "dave"})
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["message"] == "Missing required fields: email, password"
        assert body["fields"] == ["email", "password"]

    def test_short_password(self, client, db_session):
        resp = client.post("/api/auth/register", json={
            "username": "dave", "email": "dave@x.com", "password": "12345",
        })
        assert resp.status_code == 400
        assert "at least 6 characters" in resp.get_json()["message"]

    def test_invalid_email(self, client, db_session):
        resp = client.post("/api/auth/register", json={
            "username": "dave", "email": "not-an-email", "password": "secret1",
        })
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Invalid email format"

    def test_username_too_long(self, client, db_session):
        resp = client.post("/api/auth/register", json={
            "username": "u" * 65, "email": "long@x.com", "password": "secret1",
        })
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "username exceeds max length 64"

        login = client.post("/api/auth/login", json={"username": "u" * 65, "password": "secret1"})
        assert login.status_code == 401

    def test_duplicate_username(self, client, regular_user):
        resp = client.post("/api/auth/register", json={
            "username": "user1", "email": "other@x.com", "password": "secret1",
        })
        assert resp.status_code == 409
        assert resp.get_json()["message"] == "Username already exists"

    def test_duplicate_email_is_case_insensitive(self, client, regular_user):
        resp = client.post("/api/auth/register", json={
            "username": "someone", "email": "USER1@example.com", "password": "secret1",
        })
        assert resp.status_code == 409
        assert resp.get_json()["message"] == "Email already exists"

    def test_malformed_json_is_treated_as_empty(self, client, db_session):
        resp = client.post("/api/auth/register", data="{not json", content_type="application/json")
        assert resp.status_code == 400
        assert resp.get_json()["message"].startswith("Missing required fields")


class TestLogin:
    def test_login_success(self, client, regular_user):
        resp = client.post("/api/auth/login", json={"username": "user1", "password": "secret1"})
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["message"] == "Login successful"
        assert body["user"]["id"] == regular_user.id

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
        assert me.status_code == 200

    def test_wrong_password(self, client, regular_user):
        resp = client.post("/api/auth/login", json={"username": "user1", "password": "wrong-pass"})
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Invalid username or password"

    def test_unknown_user(self, client, db_session):
        resp = client.post("/api/auth/login", json={"username": "ghost", "password": "secret1"})
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Invalid username or password"

    def test_deactivated_account(self, client, make_user):
        make_user("sleepy", is_active=False)
        resp = client.post("/api/auth/login", json={"username": "sleepy", "password": "secret1"})
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Account is deactivated"

    def test_missing_fields(self, client, db_session):
        resp = client.post("/api/auth/login", json={"username": "user1"})
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Missing required field: password"


class TestRequireAuth:
    def test_missing_token(self, client, db_session):
        resp = client.get("/api/auth/me")
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Missing authentication token"

    def test_non_bearer_header(self, client, db_session):
        resp = client.get("/api/auth/me", headers={"Authorization": "Basic abc"})
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Missing authentication token"

    def test_garbage_token(self, client, db_session):
        resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Invalid or expired token"

    def test_expired_token(self, app, client, regular_user):
        claims = {
            "sub": str(regular_user.id),
            "username": regular_user.username,
            "role": regular_user.role,
            "exp": datetime.now(timezone.utc) - timedelta(minutes=5),
        }
        token = jwt.encode(claims, app.config["SECRET_KEY"], algorithm="HS256")
        resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Invalid or expired token"

    def test_token_signed_with_other_key(self, client, regular_user):
        claims = {
            "sub": str(regular_user.id),
            "username": regular_user.username,
            "role": "ADMIN",
            "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        }
        token = jwt.encode(claims, "some-other-key", algorithm="HS256")
        resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    def test_deleted_user_token(self, client, make_user, headers_for):
        user = make_user("temp")
        headers = headers_for(user)
        db.session.delete(user)
        db.session.commit()

        resp = client.get("/api/auth/me", headers=headers)
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "User not found or inactive"

    def test_deactivated_user_token(self, client, regular_user, user_headers):
        regular_user.is_active = False
        db.session.commit()

        resp = client.get("/api/auth/me", headers=user_headers)
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "User not found or inactive"


class TestDemoToken:
    def test_disabled_by_default(self, client, db_session):
        resp = client.get("/api/auth/me", headers={"Authorization": "Bearer test_token"})
        assert resp.status_code == 401

    def test_enabled_resolves_synthetic_user(self, app, client, db_session, monkeypatch):
        monkeypatch.setitem(app.config, "AUTH_TEST_TOKEN_ENABLED", True)

        resp = client.get("/api/auth/me", headers={"Authorization": "Bearer test_token"})
        assert resp.status_code == 200
        user = resp.get_json()["user"]
        assert user["id"] == 999
        assert user["username"] == "test_user"
        assert user["role"] == "USER"

    def test_synthetic_user_is_not_privileged(self, app, client, db_session, monkeypatch):
        monkeypatch.setitem(app.config, "AUTH_TEST_TOKEN_ENABLED", True)

        resp = client.post(
            "/api/categories", json={"name": "X"}, headers={"Authorization": "Bearer test_token"}
        )
        assert resp.status_code == 403
