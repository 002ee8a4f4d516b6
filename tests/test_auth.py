"""
Tests for registration, login and the authentication guard
"""

from datetime import timedelta

from lessonbook.core.security import create_access_token
from lessonbook.models.user import User


class TestRegister:

    def test_register_returns_token_and_public_user(self, client):
        response = client.post(
            "/api/auth/register",
            json={"name": "Anna", "email": "Anna@Example.com", "password": "secret123"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["token"]
        assert data["user"]["email"] == "anna@example.com"
        assert data["user"]["role"] == "student"
        assert "password" not in data["user"]

    def test_password_is_hashed_and_salted(self, client, register, db_session):
        register(name="A", email="a@example.com", password="same-password")
        register(name="B", email="b@example.com", password="same-password")

        with db_session() as db:
            hashes = [u.password for u in db.query(User).order_by(User.email).all()]

        assert "same-password" not in hashes
        assert hashes[0] != hashes[1]

    def test_duplicate_email_rejected(self, client, register):
        register(email="dup@example.com")
        response = client.post(
            "/api/auth/register",
            json={"name": "Again", "email": "DUP@example.com", "password": "secret123"},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "User already exists"

    def test_missing_field_rejected(self, client):
        response = client.post("/api/auth/register", json={"name": "No Email", "password": "secret123"})
        assert response.status_code == 400

    def test_short_password_rejected(self, client):
        response = client.post(
            "/api/auth/register",
            json={"name": "Short", "email": "short@example.com", "password": "123"},
        )
        assert response.status_code == 400
        assert "Password" in response.json()["message"]


class TestLogin:

    def test_login_success(self, client, student):
        response = client.post(
            "/api/auth/login",
            json={"email": "student@example.com", "password": "secret123"},
        )
        assert response.status_code == 200
        assert response.json()["user"]["id"] == student["user"]["id"]
        assert response.json()["token"]

    def test_wrong_password_and_unknown_email_look_the_same(self, client, student):
        wrong_password = client.post(
            "/api/auth/login",
            json={"email": "student@example.com", "password": "nope-nope"},
        )
        unknown_email = client.post(
            "/api/auth/login",
            json={"email": "ghost@example.com", "password": "secret123"},
        )

        assert wrong_password.status_code == 401
        assert unknown_email.status_code == 401
        assert wrong_password.json() == unknown_email.json()


class TestGetMe:

    def test_me_returns_own_projection(self, client, student):
        response = client.get("/api/auth/me", headers=student["headers"])
        assert response.status_code == 200
        user = response.json()["user"]
        assert user["email"] == "student@example.com"
        assert "password" not in user

    def test_me_without_token(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized, no token"

    def test_me_with_garbage_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_me_with_expired_token(self, client, student):
        token = create_access_token(student["user"]["id"], expires_delta=timedelta(seconds=-5))
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_me_for_deleted_user(self, client, student, db_session):
        with db_session() as db:
            db.query(User).filter(User.id == student["user"]["id"]).delete()
            db.commit()

        response = client.get("/api/auth/me", headers=student["headers"])
        assert response.status_code == 401
