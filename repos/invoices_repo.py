"""Repository for Invoice and Payment database operations."""

from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.invoice import Invoice, Payment


async def get_by_number(session: AsyncSession, *, invoice_number: str) -> Invoice | None:
    result = await session.execute(
        select(Invoice).where(Invoice.invoice_number == invoice_number)
    )
    return result.scalar_one_or_none()


async def list_invoices(
    session: AsyncSession,
    *,
    client_id: UUID,
    status: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
) -> list[Invoice]:
    """
    List invoices of a client, newest first.

    Args:
        session: Database session
        client_id: Client ID to filter by
        status: Only invoices with this status
        date_from: Earliest invoice date (inclusive)
        date_to: Latest invoice date (inclusive)

    Returns:
        List of invoices
    """
    query = (
        select(Invoice)
        .where(Invoice.client_id == client_id)
        .order_by(Invoice.invoice_date.desc())
    )
    if status:
        query = query.where(Invoice.status == status)
    if date_from:
        query = query.where(Invoice.invoice_date >= date_from)
    if date_to:
        query = query.where(Invoice.invoice_date <= date_to)

    result = await session.execute(query)
    return [invoice for invoice in result.scalars().all()]


async def list_payments(
    session: AsyncSession,
    *,
    client_id: UUID,
    date_from: date | None = None,
    date_to: date | None = None,
) -> list[Payment]:
    """List payments of a client, newest first."""
    query = (
        select(Payment)
        .where(Payment.client_id == client_id)
        .order_by(Payment.payment_date.desc())
    )
    if date_from:
        query = query.where(Payment.payment_date >= date_from)
    if date_to:
        query = query.where(Payment.payment_date <= date_to)

    result = await session.execute(query)
    return [payment for payment in result.scalars().all()]


async def create_invoice(session: AsyncSession, invoice: Invoice) -> Invoice:
    session.add(invoice)
    await session.flush()
    return invoice


async def create_payment(session: AsyncSession, payment: Payment) -> Payment:
    session.add(payment)
    await session.flush()
    return payment
