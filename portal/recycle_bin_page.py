"""Recycle bin page: list, restore and permanently delete recycled files."""

import logging
from datetime import datetime
from uuid import UUID

from portal.http import ApiError, Failure, FetchState, Loading, Success
from portal.session import AuthSession
from services.recycle_bin_rules import ExpiryStatus, expiry_status

logger = logging.getLogger(__name__)


def expiry_tag(item: dict, now: datetime | None = None) -> ExpiryStatus:
    """Expiry badge for an item, computed locally from ``expires_at``."""
    expires_at = item["expires_at"]
    if isinstance(expires_at, str):
        expires_at = datetime.fromisoformat(expires_at.replace("Z", "+00:00"))
    return expiry_status(expires_at, now)


class RecycleBinPage:
    def __init__(self, session: AuthSession, limit: int = 20):
        self.api = session.api
        self.limit = limit
        self.items: list[dict] = []
        self.summary: dict = {}
        self.total = 0
        self.page = 1
        self.state: FetchState = Loading()

    async def load(
        self,
        *,
        client_id: UUID | str | None = None,
        search: str | None = None,
        file_type: str | None = None,
        sort_by: str = "deleted_at",
        sort_order: str = "desc",
        page: int = 1,
    ) -> FetchState:
        """Load one page; a client ID narrows to that client's bin."""
        path = f"/recycle-bin/client/{client_id}" if client_id else "/recycle-bin/items"
        params = {"sort_by": sort_by, "sort_order": sort_order, "page": page, "limit": self.limit}
        if search:
            params["search"] = search
        if file_type:
            params["file_type"] = file_type

        self.state = Loading()
        try:
            data = await self.api.get(path, params=params)
        except ApiError as e:
            logger.warning("Failed to load recycle bin: %s", e)
            self.state = Failure(e)
            return self.state

        self.items = data["items"]
        self.summary = data["summary"]
        self.total = data["total"]
        self.page = data["page"]
        self.state = Success(data)
        return self.state

    async def restore(self, item_id: UUID | str) -> dict:
        item = await self.api.post(f"/recycle-bin/restore/{item_id}")
        self.items = [existing for existing in self.items if existing["id"] != str(item_id)]
        return item

    async def restore_many(self, item_ids: list[UUID | str]) -> list[dict]:
        results = await self.api.post("/recycle-bin/restore-bulk", json={"ids": [str(i) for i in item_ids]})
        self._drop_succeeded(results)
        return results

    async def delete_permanently(self, item_ids: list[UUID | str]) -> list[dict]:
        results = await self.api.post("/recycle-bin/permanent-delete", json={"ids": [str(i) for i in item_ids]})
        self._drop_succeeded(results)
        return results

    def _drop_succeeded(self, results: list[dict]) -> None:
        done = {result["id"] for result in results if result["success"]}
        self.items = [item for item in self.items if item["id"] not in done]
