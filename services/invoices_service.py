"""Service layer for the invoice feed and QuickBooks CSV import."""

import csv
import io
import logging
import re
import time
from datetime import date, datetime
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import is_admin
from models.client import Client
from models.invoice import CsvImportResult, Invoice, InvoiceStatus, InvoiceSummary, Payment
from models.user import User
from repos import clients_repo, invoices_repo, users_repo
from services.clients_service import generate_linking_code

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "date",
    "transaction_type",
    "invoice_number",
    "amount",
    "due_date",
    "customer",
    "split",
    "terms",
    "ar_paid",
    "open_balance",
    "sent",
    "delivery_address",
]

_AMOUNT_JUNK = re.compile(r"[$,\s\"“”]")


def parse_date(value: str | None) -> date | None:
    """Parse ``DD/MM/YYYY``, falling back to ISO dates. Unparsable values give None."""
    if not value or not value.strip():
        return None
    value = value.strip()

    parts = value.split("/")
    if len(parts) == 3:
        try:
            day, month, year = (int(part) for part in parts)
            return date(year, month, day)
        except ValueError:
            return None

    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def parse_amount(value: str | None) -> float:
    """Parse an amount such as ``"$1,234.50"``. Unparsable values give 0."""
    if not value:
        return 0.0
    try:
        return float(_AMOUNT_JUNK.sub("", str(value)))
    except ValueError:
        return 0.0


def determine_invoice_status(row: dict, today: date | None = None) -> InvoiceStatus:
    """
    Derive an invoice status from a QuickBooks export row.

    Paid beats an open balance, which is Overdue once the due date has
    passed and Sent before that.
    """
    today = today or date.today()
    if (row.get("ar_paid") or "").strip() == "Paid":
        return InvoiceStatus.PAID
    if parse_amount(row.get("open_balance")) > 0:
        due = parse_date(row.get("due_date"))
        if due and due < today:
            return InvoiceStatus.OVERDUE
        return InvoiceStatus.SENT
    if (row.get("sent") or "").strip() == "Sent":
        return InvoiceStatus.SENT
    return InvoiceStatus.DRAFT


def read_rows(content: str) -> tuple[int, list[dict]]:
    """
    Read export rows with fixed column names.

    Header rows, blank rows and rows without a customer are dropped.

    Returns:
        (total rows read, kept rows)
    """
    reader = csv.DictReader(io.StringIO(content), fieldnames=CSV_COLUMNS, restval="")
    total = 0
    rows = []
    for row in reader:
        total += 1
        row_date = (row.get("date") or "").strip()
        customer = (row.get("customer") or "").strip()
        if row_date in ("", "Date") or not customer:
            continue
        rows.append(row)
    return total, rows


async def _client_for_customer(
    session: AsyncSession,
    name: str,
    cache: dict[str, Client],
    result: CsvImportResult,
) -> Client:
    key = name.lower()
    if key in cache:
        return cache[key]

    client = await clients_repo.get_by_name(session, name=name)
    if client is None:
        client = await clients_repo.create(
            session,
            Client(
                name=name,
                user_linking_code=generate_linking_code(),
                admin_linking_code=generate_linking_code(),
            ),
        )
        result.clients_created += 1
    cache[key] = client
    return client


async def import_csv(session: AsyncSession, *, content: str, today: date | None = None) -> CsvImportResult:
    """
    Import a QuickBooks transaction export.

    Invoices already imported (by invoice number) are skipped. Each payment row
    becomes a payment applied in full to its invoice number.

    Args:
        session: Database session
        content: CSV text
        today: Reference date for overdue detection

    Returns:
        Import statistics
    """
    result = CsvImportResult()
    total, rows = read_rows(content)
    result.rows_processed = total
    clients: dict[str, Client] = {}

    for row in rows:
        customer = row["customer"].strip()
        invoice_number = (row.get("invoice_number") or "").strip()
        transaction_type = (row.get("transaction_type") or "").strip()
        if not invoice_number or transaction_type not in ("Invoice", "Payment"):
            result.skipped += 1
            continue

        row_date = parse_date(row.get("date"))
        if row_date is None:
            result.errors.append(f"{invoice_number}: invalid date {row.get('date')!r}")
            continue

        client = await _client_for_customer(session, customer, clients, result)
        amount = parse_amount(row.get("amount"))

        if transaction_type == "Invoice":
            if await invoices_repo.get_by_number(session, invoice_number=invoice_number):
                result.skipped += 1
                continue
            await invoices_repo.create_invoice(
                session,
                Invoice(
                    client_id=client.id,
                    invoice_number=invoice_number,
                    customer_name=customer,
                    invoice_date=row_date,
                    due_date=parse_date(row.get("due_date")) or row_date,
                    terms=(row.get("terms") or "").strip() or "7 Days",
                    total=amount,
                    balance_due=parse_amount(row.get("open_balance")),
                    status=determine_invoice_status(row, today).value,
                    source="quickbooks_csv",
                    line_items=[
                        {
                            "line_number": 1,
                            "description": f"Professional services for {customer}",
                            "quantity": 1,
                            "rate": amount,
                            "amount": amount,
                        }
                    ],
                ),
            )
            result.invoices_created += 1
        else:
            await invoices_repo.create_payment(
                session,
                Payment(
                    client_id=client.id,
                    payment_number=f"PAY-{invoice_number}-{int(time.time() * 1000)}",
                    customer_name=customer,
                    payment_date=row_date,
                    total_amount=amount,
                    unapplied_amount=0,
                    payment_method="Electronic Transfer",
                    memo=f"Payment for Invoice {invoice_number}",
                    status="Deposited",
                    source="quickbooks_csv",
                    invoice_applications=[
                        {
                            "invoice_number": invoice_number,
                            "applied_amount": amount,
                            "application_date": row_date.isoformat(),
                        }
                    ],
                ),
            )
            result.payments_created += 1

    await session.commit()
    logger.info(
        "CSV import: %d rows, %d invoices, %d payments, %d clients created, %d skipped",
        result.rows_processed,
        result.invoices_created,
        result.payments_created,
        result.clients_created,
        result.skipped,
    )
    return result


async def resolve_client_id(
    session: AsyncSession,
    *,
    user: User,
    client_id: UUID | None = None,
) -> UUID:
    """
    Pick the client whose invoices a user sees.

    Admins may name any client. Everyone else gets their first linked
    client, falling back to the client named like their company.

    Raises:
        HTTPException: 404 if no client can be found
    """
    if client_id is not None and is_admin(user):
        return client_id

    links = await users_repo.list_client_links(session, user_id=user.id)
    if links:
        return links[0].client_id

    if user.company:
        client = await clients_repo.get_by_name(session, name=user.company)
        if client:
            return client.id

    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="No linked client found for user",
    )


def invoice_row(invoice: Invoice, today: date) -> dict:
    return {
        "id": invoice.id,
        "date": invoice.invoice_date,
        "type": "Invoice",
        "number": invoice.invoice_number,
        "customer": invoice.customer_name,
        "memo": invoice.memo or "",
        "amount": invoice.total,
        "status": invoice.status,
        "balance_due": invoice.balance_due,
        "due_date": invoice.due_date,
        "line_items": invoice.line_items or [],
        "is_overdue": bool(invoice.due_date and invoice.due_date < today and invoice.balance_due > 0),
        "can_receive_payment": invoice.balance_due > 0,
    }


def payment_row(payment: Payment) -> dict:
    applications = payment.invoice_applications or []
    return {
        "id": payment.id,
        "date": payment.payment_date,
        "type": "Payment",
        "number": payment.payment_number,
        "customer": payment.customer_name,
        "memo": payment.memo or "",
        "amount": payment.total_amount,
        "status": payment.status,
        "payment_method": payment.payment_method,
        "unapplied_amount": payment.unapplied_amount,
        "invoice_applications": applications,
        "has_unapplied": payment.unapplied_amount > 0,
        "applied_invoices": len(applications),
    }


async def get_transactions(
    session: AsyncSession,
    *,
    client_id: UUID,
    status_filter: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    limit: int = 50,
    offset: int = 0,
    today: date | None = None,
) -> dict:
    """
    Unified invoice and payment feed, newest first, paginated.

    The status filter applies to invoices only; ``all`` disables it.
    """
    today = today or date.today()
    invoice_status = status_filter if status_filter and status_filter != "all" else None

    invoices = await invoices_repo.list_invoices(
        session,
        client_id=client_id,
        status=invoice_status,
        date_from=date_from,
        date_to=date_to,
    )
    payments = await invoices_repo.list_payments(
        session,
        client_id=client_id,
        date_from=date_from,
        date_to=date_to,
    )

    transactions = [invoice_row(invoice, today) for invoice in invoices]
    transactions.extend(payment_row(payment) for payment in payments)
    transactions.sort(key=lambda row: row["date"], reverse=True)

    total = len(transactions)
    return {
        "client_id": client_id,
        "data": transactions[offset:offset + limit],
        "pagination": {
            "total": total,
            "limit": limit,
            "offset": offset,
            "has_more": offset + limit < total,
        },
        "metadata": {
            "invoice_count": len(invoices),
            "payment_count": len(payments),
        },
    }


async def get_summary(session: AsyncSession, *, client_id: UUID, today: date | None = None) -> InvoiceSummary:
    today = today or date.today()
    invoices = await invoices_repo.list_invoices(session, client_id=client_id)
    return InvoiceSummary(
        client_id=client_id,
        invoice_count=len(invoices),
        total_invoiced=round(sum(invoice.total for invoice in invoices), 2),
        total_outstanding=round(sum(invoice.balance_due for invoice in invoices), 2),
        total_paid=round(sum(invoice.total - invoice.balance_due for invoice in invoices), 2),
        overdue_count=sum(1 for invoice in invoices if invoice_row(invoice, today)["is_overdue"]),
    )
