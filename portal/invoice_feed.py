"""Invoice feed: paged invoices and payments with client-side totals."""

import logging
from datetime import date
from uuid import UUID

from portal.http import ApiError, Failure, FetchState, Loading, Success
from portal.session import AuthSession

logger = logging.getLogger(__name__)


class InvoiceFeed:
    """
    Accumulates ``/invoices/transactions`` pages.

    ``load`` starts over with new filters; ``load_more`` appends the next page
    while the server reports ``has_more``.
    """

    def __init__(self, session: AuthSession, page_size: int = 50):
        self.api = session.api
        self.page_size = page_size
        self.rows: list[dict] = []
        self.filters: dict = {}
        self.has_more = False
        self.total = 0
        self.state: FetchState = Loading()

    async def load(
        self,
        *,
        status: str = "all",
        date_from: date | None = None,
        date_to: date | None = None,
        client_id: UUID | str | None = None,
    ) -> FetchState:
        self.filters = {"status": status}
        if date_from:
            self.filters["date_from"] = date_from.isoformat()
        if date_to:
            self.filters["date_to"] = date_to.isoformat()
        if client_id:
            self.filters["client_id"] = str(client_id)
        self.rows = []
        return await self._fetch(offset=0)

    async def load_more(self) -> FetchState | None:
        """Fetch the next page, or return None when there is nothing more."""
        if not self.has_more:
            return None
        return await self._fetch(offset=len(self.rows))

    async def _fetch(self, offset: int) -> FetchState:
        params = {**self.filters, "limit": self.page_size, "offset": offset}
        self.state = Loading()
        try:
            data = await self.api.get("/invoices/transactions", params=params)
        except ApiError as e:
            logger.warning("Failed to load transactions: %s", e)
            self.state = Failure(e)
            return self.state

        self.rows.extend(data["data"])
        self.has_more = data["pagination"]["has_more"]
        self.total = data["pagination"]["total"]
        self.state = Success(data)
        return self.state

    def totals(self) -> dict:
        """Totals over the loaded rows."""
        invoices = [row for row in self.rows if row["type"] == "Invoice"]
        payments = [row for row in self.rows if row["type"] == "Payment"]
        return {
            "invoiced": round(sum(row["amount"] for row in invoices), 2),
            "outstanding": round(sum(row["balance_due"] for row in invoices), 2),
            "overdue": sum(1 for row in invoices if row["is_overdue"]),
            "received": round(sum(row["amount"] for row in payments), 2),
        }
