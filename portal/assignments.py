"""Assigning clients and users to projects."""

from uuid import UUID

from portal.session import AuthSession


class ProjectAssignments:
    def __init__(self, session: AuthSession):
        self.api = session.api

    async def assign_client(self, project_id: UUID | str, client_id: UUID | str, multi_assign: bool = False) -> dict:
        """Link a client; without ``multi_assign`` it replaces the current client."""
        return await self.api.patch(
            f"/projects/assignClient/{project_id}",
            json={"client_id": str(client_id), "multi_assign": multi_assign},
        )

    async def unassign_client(self, project_id: UUID | str, client_id: UUID | str) -> dict:
        return await self.api.patch(
            f"/projects/unassignClient/{project_id}",
            json={"client_id": str(client_id)},
        )

    async def assign_user(self, project_id: UUID | str, user_id: UUID | str, multi_assign: bool = False) -> dict:
        """Link a user; without ``multi_assign`` it replaces the current users."""
        return await self.api.patch(
            f"/projects/assignUser/{project_id}",
            json={"user_id": str(user_id), "multi_assign": multi_assign},
        )

    async def unassign_user(self, project_id: UUID | str, user_id: UUID | str) -> dict:
        return await self.api.patch(
            f"/projects/unassignUser/{project_id}",
            json={"user_id": str(user_id)},
        )

    async def list_clients(self) -> list[dict]:
        return await self.api.get("/clients")
