"""Integration tests for user administration and profiles."""

from uuid import uuid4

import pytest
from fastapi import status


@pytest.mark.asyncio
async def test_get_users_requires_admin(client, user_headers):
    response = await client.get("/api/v1/users/get-users", headers=user_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
async def test_get_users_filters_by_role(client, admin_headers, estimator_user, plain_user):
    response = await client.get("/api/v1/users/get-users", headers=admin_headers)
    assert response.status_code == status.HTTP_200_OK
    assert len(response.json()) == 3

    response = await client.get(
        "/api/v1/users/get-users",
        params={"role": "Estimator"},
        headers=admin_headers,
    )
    assert [user["email"] for user in response.json()] == [estimator_user.email]


@pytest.mark.asyncio
async def test_get_user_self_or_admin(client, user_headers, admin_headers, plain_user, other_user):
    own = await client.get(f"/api/v1/users/get-user/{plain_user.id}", headers=user_headers)
    assert own.status_code == status.HTTP_200_OK

    foreign = await client.get(f"/api/v1/users/get-user/{other_user.id}", headers=user_headers)
    assert foreign.status_code == status.HTTP_403_FORBIDDEN

    by_admin = await client.get(f"/api/v1/users/get-user/{other_user.id}", headers=admin_headers)
    assert by_admin.status_code == status.HTTP_200_OK

    missing = await client.get(f"/api/v1/users/get-user/{uuid4()}", headers=admin_headers)
    assert missing.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_update_profile(client, user_headers):
    response = await client.patch(
        "/api/v1/users/profile",
        json={"first_name": "Una", "last_name": "Updated", "table_preferences": {"columns": ["name"]}},
        headers=user_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["name"] == "Una Updated"
    assert data["table_preferences"] == {"columns": ["name"]}

    profile = await client.get("/api/v1/users/profile", headers=user_headers)
    assert profile.json()["first_name"] == "Una"


@pytest.mark.asyncio
async def test_role_changes(client, admin_headers, plain_user):
    """
    Test: Admins promote, demote and set roles of other users.
    """
    promoted = await client.patch(f"/api/v1/users/make-admin/{plain_user.id}", headers=admin_headers)
    assert promoted.json()["role"] == "Admin"

    demoted = await client.patch(f"/api/v1/users/remove-admin/{plain_user.id}", headers=admin_headers)
    assert demoted.json()["role"] == "User"

    estimator = await client.patch(
        f"/api/v1/users/set-role/{plain_user.id}",
        json={"role": "Estimator"},
        headers=admin_headers,
    )
    assert estimator.json()["role"] == "Estimator"

    invalid = await client.patch(
        f"/api/v1/users/set-role/{plain_user.id}",
        json={"role": "Owner"},
        headers=admin_headers,
    )
    assert invalid.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


@pytest.mark.asyncio
async def test_admin_cannot_act_on_self(client, admin_headers, admin_user):
    for method, path in (
        ("PATCH", f"/api/v1/users/remove-admin/{admin_user.id}"),
        ("PATCH", f"/api/v1/users/block-user/{admin_user.id}"),
        ("PATCH", f"/api/v1/users/delete-user/{admin_user.id}"),
    ):
        response = await client.request(method, path, headers=admin_headers)
        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
async def test_block_unblock_and_delete(client, admin_headers, plain_user, user_headers):
    blocked = await client.patch(f"/api/v1/users/block-user/{plain_user.id}", headers=admin_headers)
    assert blocked.json()["is_blocked"] is True
    assert (await client.get("/api/v1/users/profile", headers=user_headers)).status_code == status.HTTP_403_FORBIDDEN

    unblocked = await client.patch(f"/api/v1/users/unblock-user/{plain_user.id}", headers=admin_headers)
    assert unblocked.json()["is_blocked"] is False

    deleted = await client.patch(f"/api/v1/users/delete-user/{plain_user.id}", headers=admin_headers)
    assert deleted.status_code == status.HTTP_200_OK
    assert deleted.json() == {"success": True, "message": "User deleted"}

    listing = await client.get("/api/v1/users/get-users", headers=admin_headers)
    assert str(plain_user.id) not in [user["id"] for user in listing.json()]
