"""
Tests for authentication endpoints: registration, login and profile.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_register_user(client: AsyncClient):
    """Successful registration returns user data with the default fan role."""
    response = await client.post("/api/v1/auth/register", json={
        "email": "new@example.com",
        "name": "New Fan",
        "password": "securepassword123",
    })
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "new@example.com"
    assert data["name"] == "New Fan"
    assert data["role"] == "fan"
    assert "hashed_password" not in data  # Never expose password hash


@pytest.mark.asyncio
async def test_register_organizer(client: AsyncClient):
    response = await client.post("/api/v1/auth/register", json={
        "email": "boss@example.com",
        "name": "Venue Boss",
        "password": "securepassword123",
        "role": "organizer",
    })
    assert response.status_code == 201
    assert response.json()["role"] == "organizer"


@pytest.mark.asyncio
async def test_register_unknown_role(client: AsyncClient):
    response = await client.post("/api/v1/auth/register", json={
        "email": "admin@example.com",
        "name": "Admin",
        "password": "securepassword123",
        "role": "admin",
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, fan):
    """Duplicate email returns 409."""
    response = await client.post("/api/v1/auth/register", json={
        "email": "fan@example.com",
        "name": "Someone Else",
        "password": "securepassword123",
    })
    assert response.status_code == 409
    assert response.json()["error"] == "EMAIL_TAKEN"


@pytest.mark.asyncio
async def test_register_weak_password(client: AsyncClient):
    """Password under 8 chars returns 422."""
    response = await client.post("/api/v1/auth/register", json={
        "email": "weak@example.com",
        "name": "Weak",
        "password": "short",
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, fan):
    """Valid credentials return JWT token."""
    response = await client.post("/api/v1/auth/login", json={
        "email": "fan@example.com",
        "password": "testpassword123",
    })
    assert response.status_code == 200
    data = response.json()
    assert "access_token" in data
    assert data["token_type"] == "bearer"


@pytest.mark.asyncio
async def test_login_token_authenticates(client: AsyncClient, fan):
    login = await client.post("/api/v1/auth/login", json={
        "email": "fan@example.com",
        "password": "testpassword123",
    })
    token = login.json()["access_token"]

    response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["id"] == fan.id


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, fan):
    """Wrong password returns 401."""
    response = await client.post("/api/v1/auth/login", json={
        "email": "fan@example.com",
        "password": "wrongpassword",
    })
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_nonexistent_email(client: AsyncClient):
    """Non-existent email returns 401."""
    response = await client.post("/api/v1/auth/login", json={
        "email": "nobody@example.com",
        "password": "anypassword123",
    })
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_lists_joined_events(client: AsyncClient, fan_headers, free_event):
    """Profile reflects the joined-events set after a free join."""
    join = await client.post(
        "/api/v1/events/join", json={"event_id": free_event.id}, headers=fan_headers
    )
    assert join.status_code == 201

    response = await client.get("/api/v1/auth/me", headers=fan_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["joined_events"] == [free_event.id]
    assert data["applied_events"] == []


@pytest.mark.asyncio
async def test_me_requires_token(client: AsyncClient):
    response = await client.get("/api/v1/auth/me")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_rejects_garbage_token(client: AsyncClient):
    response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
