"""
Tests for admin routes
"""
import jwt
from datetime import datetime, timedelta

from utils.auth import JWT_SECRET_KEY, JWT_ALGORITHM


class TestAdminRegister:
    """Test admin registration endpoint"""

    def test_register_event_admin(self, client):
        response = client.post("/admin/register", json={
            "name": "Grace",
            "email": "grace@example.com",
            "password": "Str0ngPass",
            "institution": "Campus"
        })
        assert response.status_code == 201
        assert "adminId" in response.json()

    def test_registered_admin_is_event_admin(self, client):
        client.post("/admin/register", json={
            "name": "Grace",
            "email": "grace@example.com",
            "password": "Str0ngPass"
        })
        login = client.post("/admin/login", json={"email": "grace@example.com", "password": "Str0ngPass"})
        assert login.json()["role"] == "event_admin"

    def test_duplicate_email(self, client, admin):
        response = client.post("/admin/register", json={
            "name": "Copy",
            "email": admin.email,
            "password": "Str0ngPass"
        })
        assert response.status_code == 409

    def test_weak_password(self, client):
        response = client.post("/admin/register", json={
            "name": "Weak",
            "email": "weak@example.com",
            "password": "password"
        })
        assert response.status_code == 422

    def test_invalid_email(self, client):
        response = client.post("/admin/register", json={
            "name": "Nobody",
            "email": "not-an-email",
            "password": "Str0ngPass"
        })
        assert response.status_code == 422


class TestAdminLogin:
    """Test admin login endpoint"""

    def test_successful_login(self, client, admin):
        response = client.post("/admin/login", json={
            "email": admin.email,
            "password": "Passw0rd!"
        })
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["role"] == "event_admin"

        payload = jwt.decode(data["token"], JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
        assert payload["admin_id"] == admin.id
        assert payload["type"] == "admin"

    def test_invalid_password(self, client, admin):
        response = client.post("/admin/login", json={
            "email": admin.email,
            "password": "wrong"
        })
        assert response.status_code == 401
        assert "Invalid credentials" in response.json()["detail"]

    def test_unknown_email(self, client):
        response = client.post("/admin/login", json={
            "email": "ghost@example.com",
            "password": "Passw0rd!"
        })
        assert response.status_code == 401

    def test_missing_credentials(self, client):
        response = client.post("/admin/login", json={})
        assert response.status_code == 422  # Validation error


class TestAuthentication:
    """Test the admin token dependency"""

    def test_missing_token(self, client):
        response = client.get("/events")
        assert response.status_code == 401

    def test_garbage_token(self, client):
        response = client.get("/events", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_expired_token(self, client, admin):
        token = jwt.encode({
            "admin_id": admin.id,
            "role": "event_admin",
            "type": "admin",
            "exp": datetime.utcnow() - timedelta(minutes=1)
        }, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)

        response = client.get("/events", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert "expired" in response.json()["detail"]

    def test_token_with_stale_role(self, client, admin):
        token = jwt.encode({
            "admin_id": admin.id,
            "role": "super_admin",
            "type": "admin",
            "exp": datetime.utcnow() + timedelta(hours=1)
        }, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)

        response = client.get("/events", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


class TestAdminListing:

    def test_super_admin_lists_admins(self, client, admin, super_admin_headers):
        response = client.get("/admin", headers=super_admin_headers)
        assert response.status_code == 200
        emails = {a["email"] for a in response.json()["admins"]}
        assert admin.email in emails
        assert all("password_hash" not in a for a in response.json()["admins"])

    def test_event_admin_cannot_list_admins(self, client, admin_headers):
        response = client.get("/admin", headers=admin_headers)
        assert response.status_code == 403

    def test_profile(self, client, admin, admin_headers):
        response = client.get("/admin/profile", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["email"] == admin.email
