"""Integration tests for register, login and the current user."""

import pytest
from fastapi import status

from tests.factories import TEST_PASSWORD, create_client_record, link_user_to_client


@pytest.mark.asyncio
async def test_register_creates_user_role(client):
    """
    Test: Registering returns 201 with role User and a derived display name.
    """
    payload = {
        "first_name": "Jane",
        "last_name": "Roofer",
        "email": "Jane@Example.com",
        "phone": "0400 000 000",
        "password": "hunter22",
    }

    response = await client.post("/api/v1/auth/register", json=payload)

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["email"] == "jane@example.com"
    assert data["name"] == "Jane Roofer"
    assert data["role"] == "User"
    assert data["avatar"].startswith("https://ui-avatars.com/api/?name=Jane+Roofer")
    assert "password_hash" not in data


@pytest.mark.asyncio
async def test_register_duplicate_email(client, plain_user):
    payload = {
        "first_name": "Uma",
        "last_name": "Again",
        "email": plain_user.email,
        "phone": "0400 000 001",
        "password": "hunter22",
    }

    response = await client.post("/api/v1/auth/register", json=payload)

    assert response.status_code == status.HTTP_409_CONFLICT


@pytest.mark.asyncio
async def test_register_validates_payload(client):
    response = await client.post("/api/v1/auth/register", json={"email": "not-an-email"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


@pytest.mark.asyncio
async def test_login_returns_token_and_user(client, plain_user):
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": plain_user.email, "password": TEST_PASSWORD},
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["user"]["id"] == str(plain_user.id)
    assert data["token"]

    me = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
    assert me.status_code == status.HTTP_200_OK
    assert me.json()["email"] == plain_user.email


@pytest.mark.asyncio
async def test_login_wrong_password(client, plain_user):
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": plain_user.email, "password": "wrong-password"},
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_blocked_user_cannot_log_in(client, db_session, plain_user, user_headers):
    plain_user.is_blocked = True
    await db_session.commit()

    response = await client.post(
        "/api/v1/auth/login",
        json={"email": plain_user.email, "password": TEST_PASSWORD},
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN

    me = await client.get("/api/v1/auth/me", headers=user_headers)
    assert me.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
async def test_me_requires_token(client):
    response = await client.get("/api/v1/auth/me")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

    response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_me_includes_client_links(client, db_session, plain_user, user_headers):
    acme = await create_client_record(db_session)
    await link_user_to_client(db_session, user=plain_user, client=acme, is_admin=True)

    response = await client.get("/api/v1/auth/me", headers=user_headers)

    data = response.json()
    assert data["linked_clients"] == [str(acme.id)]
    assert data["company_admin"] is True


@pytest.mark.asyncio
async def test_health_and_root(client):
    health = await client.get("/api/v1/health")
    assert health.status_code == status.HTTP_200_OK
    assert health.json()["status"] == "ok"

    root = await client.get("/")
    assert root.json() == {"message": "Roof Take-offs Backend API", "version": "0.1.0"}
