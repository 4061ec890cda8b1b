"""
Authentication API tests.

Verifies:
- Registration creates a plain "user" and never returns the password hash
- Login issues an access/refresh pair; bad credentials are rejected uniformly
- Repeated failures lock the email out (429)
- Refresh, profile and change-password flows
"""

import pytest

from storefront.models import SecurityEvent

DEFAULT_PASSWORD = "Password123!"


def _register(client, **overrides):
    payload = {"name": "New Person", "email": "new@example.com", "password": DEFAULT_PASSWORD}
    payload.update(overrides)
    return client.post("/api/auth/register", json=payload)


def _login(client, email, password=DEFAULT_PASSWORD):
    return client.post("/api/auth/login", json={"email": email, "password": password})


class TestRegistration:

    def test_register_success(self, client):
        resp = _register(client, email="New@Example.com", phone="555-0100")
        assert resp.status_code == 201

        body = resp.get_json()
        assert body["success"] is True
        assert body["status"] == 201
        assert body["timestamp"].endswith("Z")

        user = body["data"]["user"]
        assert user["email"] == "new@example.com"
        assert user["role"] == "user"
        assert user["is_active"] is True
        assert "password_hash" not in user
        assert "password" not in user

    def test_duplicate_email(self, client, customer):
        resp = _register(client, email=customer.email)
        assert resp.status_code == 409
        assert resp.get_json()["message"] == "User with this email already exists"

    def test_role_cannot_be_chosen(self, client):
        resp = _register(client, role="admin")
        assert resp.status_code == 400
        fields = [e["field"] for e in resp.get_json()["errors"]]
        assert "role" in fields

    @pytest.mark.parametrize("password,message", [
        ("Short1!", "Password must be at least 8 characters long"),
        ("password123!", "Password must contain at least one uppercase letter"),
        ("PASSWORD123!", "Password must contain at least one lowercase letter"),
        ("Password!!", "Password must contain at least one digit"),
        ("Password123", "Password must contain at least one special character"),
    ])
    def test_weak_password(self, client, password, message):
        resp = _register(client, password=password)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == message

    def test_missing_fields_reported(self, client):
        resp = client.post("/api/auth/register", json={"password": DEFAULT_PASSWORD})
        assert resp.status_code == 400
        fields = {e["field"] for e in resp.get_json()["errors"]}
        assert {"name", "email"} <= fields


class TestLogin:

    def test_login_success(self, client, customer):
        resp = _login(client, customer.email)
        assert resp.status_code == 200

        data = resp.get_json()["data"]
        assert data["user"]["id"] == customer.id
        tokens = data["tokens"]
        assert tokens["tokenType"] == "Bearer"
        assert tokens["expiresIn"] == 15 * 60
        assert tokens["accessToken"] != tokens["refreshToken"]

        profile = client.get(
            "/api/auth/profile",
            headers={"Authorization": f"Bearer {tokens['accessToken']}"},
        )
        assert profile.status_code == 200
        assert profile.get_json()["data"]["user"]["email"] == customer.email

    def test_wrong_password_and_unknown_email_look_the_same(self, client, customer):
        wrong = _login(client, customer.email, "Wrong123!x")
        unknown = _login(client, "nobody@example.com")

        assert wrong.status_code == unknown.status_code == 401
        assert wrong.get_json()["message"] == unknown.get_json()["message"] == "Invalid email or password"

    def test_missing_credentials(self, client):
        resp = client.post("/api/auth/login", json={"email": "a@b.co"})
        assert resp.status_code == 400

    @pytest.mark.parametrize("email, password", [
        (None, 12345678),
        (["customer@example.com"], DEFAULT_PASSWORD),
        ({"email": "customer@example.com"}, DEFAULT_PASSWORD),
        (None, ["Password123!"]),
    ])
    def test_non_string_credentials(self, client, db_session, customer, email, password):
        payload = {"email": customer.email if email is None else email, "password": password}
        resp = client.post("/api/auth/login", json=payload)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Email and password are required"
        assert db_session.query(SecurityEvent).count() == 0

    def test_deactivated_account(self, client, make_user):
        user = make_user(email="gone@example.com", is_active=False)
        resp = _login(client, user.email)
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Account is deactivated"

    def test_lockout_after_repeated_failures(self, app, client, db_session, customer):
        limit = app.config["LOGIN_MAX_FAILED_ATTEMPTS"]

        for _ in range(limit - 1):
            assert _login(client, customer.email, "Wrong123!x").status_code == 401

        locked = _login(client, customer.email, "Wrong123!x")
        assert locked.status_code == 429
        assert int(locked.headers["Retry-After"]) > 0

        # Correct password is refused while locked
        assert _login(client, customer.email).status_code == 429

        failures = db_session.query(SecurityEvent).filter_by(
            event_type="LOGIN_FAILED", action=customer.email
        ).count()
        assert failures == limit

    def test_lockout_is_per_email(self, app, client, customer, other_customer):
        for _ in range(app.config["LOGIN_MAX_FAILED_ATTEMPTS"]):
            _login(client, customer.email, "Wrong123!x")

        assert _login(client, other_customer.email).status_code == 200


class TestRefresh:

    def test_refresh_issues_new_pair(self, client, customer):
        tokens = _login(client, customer.email).get_json()["data"]["tokens"]

        resp = client.post("/api/auth/refresh-token", json={"refreshToken": tokens["refreshToken"]})
        assert resp.status_code == 200
        refreshed = resp.get_json()["data"]["tokens"]
        assert refreshed["accessToken"] != tokens["accessToken"]

    def test_access_token_cannot_refresh(self, client, customer):
        tokens = _login(client, customer.email).get_json()["data"]["tokens"]

        resp = client.post("/api/auth/refresh-token", json={"refreshToken": tokens["accessToken"]})
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Invalid refresh token"

    def test_missing_refresh_token(self, client):
        resp = client.post("/api/auth/refresh-token", json={})
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Refresh token is required"

    def test_non_string_refresh_token(self, client):
        resp = client.post("/api/auth/refresh-token", json={"refreshToken": 12345})
        assert resp.status_code == 401

    def test_deactivated_user_cannot_refresh(self, client, container, customer):
        token = container.tokens.issue_refresh_token(customer)
        container.users.deactivate(customer.id)

        resp = client.post("/api/auth/refresh-token", json={"refreshToken": token})
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Account is deactivated"


class TestProfile:

    def test_update_profile(self, client, customer_headers):
        resp = client.put(
            "/api/auth/profile",
            json={"name": "Renamed", "department": "Sales"},
            headers=customer_headers,
        )
        assert resp.status_code == 200
        user = resp.get_json()["data"]["user"]
        assert user["name"] == "Renamed"
        assert user["department"] == "Sales"

    @pytest.mark.parametrize("field,value", [("role", "admin"), ("email", "x@example.com"), ("is_active", False)])
    def test_privileged_fields_rejected(self, client, customer_headers, field, value):
        resp = client.put("/api/auth/profile", json={field: value}, headers=customer_headers)
        assert resp.status_code == 400

    def test_logout(self, client, customer_headers):
        resp = client.post("/api/auth/logout", headers=customer_headers)
        assert resp.status_code == 200
        assert resp.get_json()["message"] == "Logout successful"


class TestChangePassword:

    def test_change_password(self, client, customer, customer_headers):
        resp = client.put(
            "/api/auth/change-password",
            json={"currentPassword": DEFAULT_PASSWORD, "newPassword": "Different456!"},
            headers=customer_headers,
        )
        assert resp.status_code == 200

        assert _login(client, customer.email).status_code == 401
        assert _login(client, customer.email, "Different456!").status_code == 200

    def test_wrong_current_password(self, client, customer_headers):
        resp = client.put(
            "/api/auth/change-password",
            json={"currentPassword": "Nope1234!", "newPassword": "Different456!"},
            headers=customer_headers,
        )
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Current password is incorrect"

    def test_same_password_rejected(self, client, customer_headers):
        resp = client.put(
            "/api/auth/change-password",
            json={"currentPassword": DEFAULT_PASSWORD, "newPassword": DEFAULT_PASSWORD},
            headers=customer_headers,
        )
        assert resp.status_code == 400

    def test_weak_new_password(self, client, customer_headers):
        resp = client.put(
            "/api/auth/change-password",
            json={"currentPassword": DEFAULT_PASSWORD, "newPassword": "weak"},
            headers=customer_headers,
        )
        assert resp.status_code == 400

    @pytest.mark.parametrize("payload", [
        {"currentPassword": 12345678, "newPassword": "Different456!"},
        {"currentPassword": DEFAULT_PASSWORD, "newPassword": ["Different456!"]},
    ])
    def test_non_string_passwords(self, client, customer, customer_headers, payload):
        resp = client.put("/api/auth/change-password", json=payload, headers=customer_headers)
        assert resp.status_code == 400
        assert _login(client, customer.email).status_code == 200
