"""Invoice and payment models imported from QuickBooks."""

from datetime import date, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict
from sqlalchemy import JSON, Date, DateTime, ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db import Base


class InvoiceStatus(str, Enum):
    DRAFT = "Draft"
    SENT = "Sent"
    OVERDUE = "Overdue"
    PAID = "Paid"


class Invoice(Base):
    """Invoice ORM model. Display-only copy of an accounting invoice."""

    __tablename__ = "invoices"

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
        index=True,
    )
    client_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    invoice_number: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    invoice_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    terms: Mapped[str | None] = mapped_column(String(100), nullable=True)
    memo: Mapped[str | None] = mapped_column(Text, nullable=True)
    total: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    balance_due: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=InvoiceStatus.DRAFT.value)
    source: Mapped[str] = mapped_column(String(50), nullable=False, default="quickbooks")
    qb_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    line_items: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )


class Payment(Base):
    """Payment ORM model. Applications to invoices are kept as JSON."""

    __tablename__ = "payments"

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
        index=True,
    )
    client_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    payment_number: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_amount: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    unapplied_amount: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    payment_method: Mapped[str | None] = mapped_column(String(100), nullable=True)
    memo: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="Deposited")
    source: Mapped[str] = mapped_column(String(50), nullable=False, default="quickbooks")
    qb_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    invoice_applications: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )


# Pydantic schemas
class InvoiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    client_id: UUID
    invoice_number: str
    customer_name: str
    invoice_date: date
    due_date: date | None = None
    terms: str | None = None
    memo: str | None = None
    total: float
    balance_due: float
    status: InvoiceStatus
    source: str
    line_items: list[dict[str, Any]] = []


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    client_id: UUID
    payment_number: str
    customer_name: str
    payment_date: date
    total_amount: float
    unapplied_amount: float
    payment_method: str | None = None
    memo: str | None = None
    status: str
    source: str
    invoice_applications: list[dict[str, Any]] = []


class InvoiceSummary(BaseModel):
    """Totals shown above the invoice feed."""

    client_id: UUID
    invoice_count: int
    total_invoiced: float
    total_outstanding: float
    total_paid: float
    overdue_count: int


class CsvImportResult(BaseModel):
    """Statistics of a QuickBooks CSV import."""

    rows_processed: int = 0
    invoices_created: int = 0
    payments_created: int = 0
    clients_created: int = 0
    skipped: int = 0
    errors: list[str] = []
