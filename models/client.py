"""Client model - a customer company that owns roofing projects."""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from sqlalchemy import JSON, DateTime, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db import Base
from models.address import Address, Contact
from models.user import UserResponse


class Client(Base):
    """Client ORM model - a company whose users request estimates."""

    __tablename__ = "clients"

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    legal_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    registration_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    billing_address: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    physical_address: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    main_contact: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    account_manager: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    website: Mapped[str | None] = mapped_column(String(255), nullable=True)
    industry: Mapped[str | None] = mapped_column(String(120), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    seat_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Linking codes
    user_linking_code: Mapped[str | None] = mapped_column(String(20), nullable=True, index=True)
    admin_linking_code: Mapped[str | None] = mapped_column(String(20), nullable=True, index=True)

    # QuickBooks connection
    qb_realm_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    qb_access_token: Mapped[str | None] = mapped_column(Text, nullable=True)
    qb_refresh_token: Mapped[str | None] = mapped_column(Text, nullable=True)
    qb_connected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    @property
    def quickbooks_connected(self) -> bool:
        return bool(self.qb_realm_id and self.qb_access_token)


# Pydantic schemas
class ClientBase(BaseModel):
    """Base client schema."""

    name: str = Field(min_length=1)
    legal_name: str | None = None
    registration_number: str | None = None
    billing_address: Address | None = None
    physical_address: Address | None = None
    main_contact: Contact | None = None
    account_manager: Contact | None = None
    website: str | None = None
    industry: str | None = None
    notes: str | None = None
    seat_limit: int = 1


class ClientCreate(ClientBase):
    """Schema for creating a client. Linking codes are generated server-side."""


class ClientUpdate(BaseModel):
    """Schema for updating a client. Only provided fields are applied."""

    name: str | None = Field(default=None, min_length=1)
    legal_name: str | None = None
    registration_number: str | None = None
    billing_address: Address | None = None
    physical_address: Address | None = None
    main_contact: Contact | None = None
    account_manager: Contact | None = None
    website: str | None = None
    industry: str | None = None
    notes: str | None = None
    seat_limit: int | None = None


class ClientResponse(ClientBase):
    """Schema for client response. QuickBooks tokens are never returned."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    quickbooks_connected: bool
    created_at: datetime
    updated_at: datetime
    linked_users: list[UUID] = []


class LinkingCodesResponse(BaseModel):
    """Both linking codes of a client."""

    user_linking_code: str | None
    admin_linking_code: str | None


class RegenerateCodesRequest(BaseModel):
    """Which linking code(s) to regenerate."""

    code_type: Literal["user", "admin", "both"] = "both"


class QuickBooksConnectRequest(BaseModel):
    """Connection details from a completed QuickBooks authorization."""

    realm_id: str = Field(min_length=1)
    access_token: str = Field(min_length=1)
    refresh_token: str | None = None


class QuickBooksStatusResponse(BaseModel):
    """QuickBooks connection status for a client."""

    connected: bool
    realm_id: str | None = None
    connected_at: datetime | None = None


class ClientUserAssignment(BaseModel):
    user_id: UUID
    company_admin: bool = False


class ClientUserResponse(UserResponse):
    """A user linked to a client."""

    company_admin: bool = False


class LinkingCodeRequest(BaseModel):
    """Ask for the linking code of the company owning a contact email."""

    email: EmailStr


class LinkingCodeResult(BaseModel):
    client_id: UUID
    client_name: str
    code_type: Literal["user", "admin"]
    code: str | None


class LinkRequest(BaseModel):
    code: str = Field(min_length=1)


class LinkResult(BaseModel):
    client_id: UUID
    client_name: str
    company_admin: bool


class SupportRequest(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    message: str = Field(min_length=1)
