"""
Tests for authentication endpoints.
"""
from fastapi.testclient import TestClient


class TestAuth:
    """Test authentication functionality."""

    def test_register_user(self, client: TestClient, test_user_data):
        """Test user registration."""
        response = client.post("/api/auth/register", json=test_user_data)
        assert response.status_code == 201
        data = response.json()
        assert data["token"]
        assert data["user"]["name"] == test_user_data["name"]
        assert data["user"]["email"] == test_user_data["email"]
        assert "password" not in data["user"]

    def test_register_normalizes_email(self, client: TestClient):
        response = client.post("/api/auth/register", json={
            "name": "Mixed Case",
            "email": "  Mixed@Example.COM ",
            "password": "Secret123",
        })
        assert response.status_code == 201
        assert response.json()["user"]["email"] == "mixed@example.com"

    def test_register_duplicate_email(self, client: TestClient, test_user_data):
        """A second account on the same email is a conflict."""
        client.post("/api/auth/register", json=test_user_data)
        response = client.post("/api/auth/register", json={**test_user_data, "name": "Someone Else"})
        assert response.status_code == 409
        assert response.json()["code"] == "conflict"

    def test_register_duplicate_email_ignores_case(self, client: TestClient, test_user_data):
        client.post("/api/auth/register", json=test_user_data)
        response = client.post("/api/auth/register", json={
            **test_user_data,
            "email": test_user_data["email"].upper(),
        })
        assert response.status_code == 409

    def test_register_invalid_email(self, client: TestClient):
        response = client.post("/api/auth/register", json={
            "name": "No Email",
            "email": "not-an-email",
            "password": "Secret123",
        })
        assert response.status_code == 400
        assert response.json()["code"] == "invalid_input"

    def test_register_short_password(self, client: TestClient):
        response = client.post("/api/auth/register", json={
            "name": "Short",
            "email": "short@example.com",
            "password": "abc",
        })
        assert response.status_code == 400

    def test_login_success(self, client: TestClient, test_user_data):
        """Test successful login."""
        registered = client.post("/api/auth/register", json=test_user_data).json()
        response = client.post("/api/auth/login", json={
            "email": test_user_data["email"],
            "password": test_user_data["password"],
        })
        assert response.status_code == 200
        assert response.json()["token"]
        assert response.json()["user"]["id"] == registered["user"]["id"]

    def test_login_wrong_password(self, client: TestClient, test_user_data):
        """Test login with wrong password."""
        client.post("/api/auth/register", json=test_user_data)
        response = client.post("/api/auth/login", json={
            "email": test_user_data["email"],
            "password": "WrongPassword123",
        })
        assert response.status_code == 401
        assert response.json()["code"] == "unauthorized"

    def test_login_unknown_email(self, client: TestClient):
        """Test login with non-existent user."""
        response = client.post("/api/auth/login", json={
            "email": "nobody@example.com",
            "password": "Password123",
        })
        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    def test_me_requires_token(self, client: TestClient):
        """Missing bearer token maps to the unauthorized error kind."""
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["code"] == "unauthorized"

    def test_me_rejects_garbage_token(self, client: TestClient):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_me_returns_current_user(self, client: TestClient, auth_headers, test_user_data):
        response = client.get("/api/auth/me", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["email"] == test_user_data["email"]
