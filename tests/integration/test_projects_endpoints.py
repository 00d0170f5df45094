"""Integration tests for project endpoints."""

from datetime import datetime
from uuid import uuid4

import pytest
from fastapi import status

from tests.factories import create_client_record, create_project, make_auth_headers


def _this_month_prefix() -> str:
    return datetime.utcnow().strftime("%y-%m")


@pytest.mark.asyncio
async def test_add_project_allocates_number(client, user_headers, plain_user):
    """
    Test: POST /projects/addProject returns 201 with a YY-MM### number and the creator linked.
    """
    payload = {
        "name": "Factory Re-roof",
        "status": "Estimate Requested",
        "dueDate": "2024-09-30",
        "location": {"full_address": "248 Postle Street, Brisbane, QLD 4000, Australia"},
        "sub_total": 1000,
        "gst": 100,
        "total": 1100,
    }

    response = await client.post("/api/v1/projects/addProject", json=payload, headers=user_headers)

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["project_number"] == f"{_this_month_prefix()}001"
    assert data["status"] == "Estimate Requested"
    assert data["due_date"] == "2024-09-30"
    assert data["location"]["street_number"] == "248"
    assert data["linked_users"] == [str(plain_user.id)]
    assert data["row_version"] == 1

    second = await client.post("/api/v1/projects/addProject", json={"name": "Second"}, headers=user_headers)
    assert second.json()["project_number"] == f"{_this_month_prefix()}002"


@pytest.mark.asyncio
async def test_add_project_rejects_unknown_links(client, admin_headers):
    """
    Test: Linking a user or client that does not exist returns 404 and creates nothing.
    """
    missing = str(uuid4())

    unknown_client = await client.post(
        "/api/v1/projects/addProject",
        json={"name": "Ghost Client", "linked_clients": [missing]},
        headers=admin_headers,
    )
    unknown_user = await client.post(
        "/api/v1/projects/addProject",
        json={"name": "Ghost User", "linked_users": [missing]},
        headers=admin_headers,
    )

    assert unknown_client.status_code == status.HTTP_404_NOT_FOUND
    assert unknown_client.json()["detail"] == f"Client {missing} not found"
    assert unknown_user.status_code == status.HTTP_404_NOT_FOUND
    assert unknown_user.json()["detail"] == f"User {missing} not found"

    listing = await client.get("/api/v1/projects/get-projects", headers=admin_headers)
    assert listing.json() == []


@pytest.mark.asyncio
async def test_add_project_rejects_unknown_status(client, user_headers):
    response = await client.post(
        "/api/v1/projects/addProject",
        json={"name": "Bad", "status": "Sleeping"},
        headers=user_headers,
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


@pytest.mark.asyncio
async def test_project_listing_by_role(client, db_session, admin_headers, user_headers, plain_user):
    await create_project(db_session, project_number="24-01001", user_ids=[plain_user.id])
    await create_project(db_session, project_number="24-01003")
    await create_project(db_session, project_number="23-12050", user_ids=[plain_user.id])

    all_projects = await client.get("/api/v1/projects/get-projects", headers=admin_headers)
    assert [p["project_number"] for p in all_projects.json()] == ["24-01003", "24-01001", "23-12050"]

    forbidden = await client.get("/api/v1/projects/get-projects", headers=user_headers)
    assert forbidden.status_code == status.HTTP_403_FORBIDDEN

    mine = await client.get("/api/v1/projects/get-user-projects", headers=user_headers)
    assert [p["project_number"] for p in mine.json()] == ["24-01001", "23-12050"]


@pytest.mark.asyncio
async def test_get_project_access(client, db_session, user_headers, plain_user):
    linked = await create_project(db_session, project_number="24-01001", user_ids=[plain_user.id])
    unlinked = await create_project(db_session, project_number="24-01002")

    ok = await client.get(f"/api/v1/projects/get-project/{linked.id}", headers=user_headers)
    assert ok.status_code == status.HTTP_200_OK

    denied = await client.get(f"/api/v1/projects/get-project/{unlinked.id}", headers=user_headers)
    assert denied.status_code == status.HTTP_403_FORBIDDEN

    missing = await client.get(f"/api/v1/projects/get-project/{uuid4()}", headers=user_headers)
    assert missing.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_update_and_status_changes(client, db_session, user_headers, plain_user):
    project = await create_project(db_session, user_ids=[plain_user.id])

    updated = await client.patch(
        f"/api/v1/projects/update/{project.id}",
        json={"description": "Colorbond, 22 degree pitch", "total": 5500.5},
        headers=user_headers,
    )
    assert updated.status_code == status.HTTP_200_OK
    assert updated.json()["description"] == "Colorbond, 22 degree pitch"
    assert updated.json()["row_version"] == 2

    quoted = await client.patch(
        f"/api/v1/projects/update-status/{project.id}",
        json={"status": "Quote Sent"},
        headers=user_headers,
    )
    assert quoted.json()["status"] == "Quote Sent"

    invalid = await client.patch(
        f"/api/v1/projects/update-status/{project.id}",
        json={"status": "Done"},
        headers=user_headers,
    )
    assert invalid.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    completed = await client.put(f"/api/v1/projects/updateProjectToComplete/{project.id}", headers=user_headers)
    assert completed.json()["status"] == "Completed"
    assert completed.json()["row_version"] == 4


@pytest.mark.asyncio
async def test_assignment_endpoints(client, db_session, admin_headers, user_headers, plain_user, other_user):
    project = await create_project(db_session)
    acme = await create_client_record(db_session)

    with_client = await client.patch(
        f"/api/v1/projects/assignClient/{project.id}",
        json={"client_id": str(acme.id)},
        headers=admin_headers,
    )
    assert with_client.json()["linked_clients"] == [str(acme.id)]

    with_user = await client.patch(
        f"/api/v1/projects/assignUser/{project.id}",
        json={"user_id": str(plain_user.id)},
        headers=admin_headers,
    )
    assert with_user.json()["linked_users"] == [str(plain_user.id)]

    both_users = await client.patch(
        f"/api/v1/projects/assignUser/{project.id}",
        json={"user_id": str(other_user.id), "multi_assign": True},
        headers=admin_headers,
    )
    assert set(both_users.json()["linked_users"]) == {str(plain_user.id), str(other_user.id)}

    removed = await client.patch(
        f"/api/v1/projects/unassignUser/{project.id}",
        json={"user_id": str(other_user.id)},
        headers=admin_headers,
    )
    assert removed.json()["linked_users"] == [str(plain_user.id)]

    no_client = await client.patch(
        f"/api/v1/projects/unassignClient/{project.id}",
        json={"client_id": str(acme.id)},
        headers=admin_headers,
    )
    assert no_client.json()["linked_clients"] == []

    as_user = await client.patch(
        f"/api/v1/projects/assignUser/{project.id}",
        json={"user_id": str(plain_user.id)},
        headers=user_headers,
    )
    assert as_user.status_code == status.HTTP_403_FORBIDDEN

    unknown_client = await client.patch(
        f"/api/v1/projects/assignClient/{project.id}",
        json={"client_id": str(uuid4())},
        headers=admin_headers,
    )
    assert unknown_client.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_alias_round_trip(client, db_session, plain_user, user_headers, other_user):
    """
    Test: Generated aliases resolve back to their project for linked users only.
    """
    project = await create_project(db_session, project_number="24-01042", user_ids=[plain_user.id])

    generated = await client.post(f"/api/v1/projects/generate-alias/{project.id}", headers=user_headers)
    assert generated.status_code == status.HTTP_200_OK
    alias = generated.json()["alias"]
    assert alias.startswith("24-01042ART&")
    assert generated.json()["project_number"] == "24-01042"

    fetched = await client.get(f"/api/v1/projects/get-alias/{project.id}", headers=user_headers)
    assert fetched.json()["alias"] == alias

    resolved = await client.get(f"/api/v1/projects/resolve-alias/{alias}", headers=user_headers)
    assert resolved.status_code == status.HTTP_200_OK
    assert resolved.json()["id"] == str(project.id)

    by_uuid = await client.get(f"/api/v1/projects/resolve-alias/{project.id}", headers=user_headers)
    assert by_uuid.json()["id"] == str(project.id)

    outsider = await client.get(
        f"/api/v1/projects/resolve-alias/{alias}",
        headers=make_auth_headers(other_user),
    )
    assert outsider.status_code == status.HTTP_403_FORBIDDEN

    malformed = await client.get("/api/v1/projects/resolve-alias/not-an-alias", headers=user_headers)
    assert malformed.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
async def test_delete_project_removes_folder(client, db_session, admin_headers, storage_dirs):
    project = await create_project(db_session)
    files_dir, _ = storage_dirs
    project_folder = files_dir / "projects" / str(project.id)
    project_folder.mkdir(parents=True)
    (project_folder / "plan.pdf").write_bytes(b"pdf")

    response = await client.delete(f"/api/v1/projects/delete/{project.id}", headers=admin_headers)

    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert not project_folder.exists()
    missing = await client.get(f"/api/v1/projects/get-project/{project.id}", headers=admin_headers)
    assert missing.status_code == status.HTTP_404_NOT_FOUND
