"""Tests for authentication: passwords, tokens, login/logout, cookies and CSRF."""

from datetime import timedelta

from tailorshop.core.security import (
    COOKIE_ACCESS_NAME,
    COOKIE_CSRF_NAME,
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from tailorshop.models.user import User

API = "/api/v1/auth"


# ============== Password hashing ==============

class TestPasswordHashing:
    def test_hash_and_verify(self):
        h = get_password_hash("secret123")
        assert verify_password("secret123", h)

    def test_wrong_password_rejected(self):
        h = get_password_hash("secret123")
        assert not verify_password("wrong", h)

    def test_hash_is_unique(self):
        assert get_password_hash("same") != get_password_hash("same")  # different salts

    def test_invalid_hash_returns_false(self):
        assert not verify_password("test", "not-a-hash")


# ============== JWT tokens ==============

class TestJWTTokens:
    def test_create_and_decode(self):
        token = create_access_token({"sub": "1", "email": "a@b.com", "role": "admin"})
        payload = decode_access_token(token)
        assert payload["sub"] == "1"
        assert payload["role"] == "admin"
        assert "jti" in payload

    def test_expired_token_rejected(self):
        token = create_access_token({"sub": "1"}, expires_delta=timedelta(seconds=-1))
        assert decode_access_token(token) is None

    def test_garbage_token_rejected(self):
        assert decode_access_token("not.a.token") is None


# ============== Login / logout ==============

class TestLogin:
    def test_login_returns_token_and_sets_cookies(self, client, admin_user):
        response = client.post(f"{API}/login", json={"email": admin_user.email, "password": "testpass123"})

        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert decode_access_token(body["access_token"])["email"] == admin_user.email
        assert response.cookies.get(COOKIE_ACCESS_NAME) == body["access_token"]
        assert response.cookies.get(COOKIE_CSRF_NAME)

    def test_wrong_password(self, client, admin_user):
        response = client.post(f"{API}/login", json={"email": admin_user.email, "password": "nope"})
        assert response.status_code == 401

    def test_unknown_email(self, client):
        response = client.post(f"{API}/login", json={"email": "ghost@example.com", "password": "testpass123"})
        assert response.status_code == 401

    def test_inactive_user(self, client, db_session, tailor_user):
        tailor_user.is_active = False
        db_session.commit()

        response = client.post(f"{API}/login", json={"email": tailor_user.email, "password": "testpass123"})

        assert response.status_code == 401

    def test_me(self, client, manager_user, manager_headers):
        response = client.get(f"{API}/me", headers=manager_headers)
        assert response.status_code == 200
        assert response.json()["email"] == manager_user.email
        assert response.json()["role"] == "manager"

    def test_logout_revokes_token(self, client, manager_headers):
        assert client.post(f"{API}/logout", headers=manager_headers).status_code == 200
        assert client.get(f"{API}/me", headers=manager_headers).status_code == 401


class TestRegister:
    def test_admin_registers_staff(self, client, db_session, admin_headers):
        response = client.post(
            f"{API}/register",
            json={"email": "cutter@example.com", "password": "longpassword", "name": "Cutter", "role": "tailor"},
            headers=admin_headers,
        )

        assert response.status_code == 201
        assert response.json()["role"] == "tailor"
        user = db_session.query(User).filter(User.email == "cutter@example.com").one()
        assert verify_password("longpassword", user.password_hash)

    def test_duplicate_email(self, client, admin_user, admin_headers):
        response = client.post(
            f"{API}/register",
            json={"email": admin_user.email, "password": "longpassword", "name": "Again"},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_manager_cannot_register(self, client, manager_headers):
        response = client.post(
            f"{API}/register",
            json={"email": "x@example.com", "password": "longpassword", "name": "X"},
            headers=manager_headers,
        )
        assert response.status_code == 403


# ============== Cookie auth and CSRF ==============

class TestCookieAuth:
    def _login(self, client, user):
        response = client.post(f"{API}/login", json={"email": user.email, "password": "testpass123"})
        assert response.status_code == 200

    def test_cookie_authenticates_reads(self, client, tailor_user):
        self._login(client, tailor_user)
        assert client.get(f"{API}/me").json()["email"] == tailor_user.email

    def test_cookie_write_requires_csrf_header(self, client, tailor_user):
        self._login(client, tailor_user)
        payload = {
            "first_name": "Kamal",
            "last_name": "Silva",
            "nic": "881234567V",
            "phone": "+94712223344",
            "email": "kamal@example.com",
            "address": "Kandy",
        }

        rejected = client.post("/api/v1/customers/", json=payload)
        accepted = client.post(
            "/api/v1/customers/",
            json=payload,
            headers={"X-CSRF-Token": client.cookies.get(COOKIE_CSRF_NAME)},
        )

        assert rejected.status_code == 403
        assert rejected.json()["detail"] == "CSRF validation failed"
        assert accepted.status_code == 201
