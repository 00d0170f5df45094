"""Project model - a roofing estimation job."""

from datetime import date, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from sqlalchemy import JSON, Date, DateTime, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db import Base
from models.address import Address


class ProjectStatus(str, Enum):
    """Closed set of project statuses."""

    NEW_LEAD = "New Lead"
    ESTIMATE_REQUESTED = "Estimate Requested"
    ESTIMATE_COMPLETED = "Estimate Completed"
    QUOTE_SENT = "Quote Sent"
    APPROVED = "Approved"
    PROJECT_ACTIVE = "Project Active"
    COMPLETED = "Completed"
    ON_HOLD = "On Hold"
    RFI = "RFI"
    AWAITING_SUPPLIER_INPUT = "Awaiting Supplier Input"
    JOB_LOST = "Job Lost"
    CANCELLED = "Cancelled"


class Project(Base):
    """Project ORM model - represents one estimation job."""

    __tablename__ = "projects"

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    project_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=ProjectStatus.NEW_LEAD.value,
    )
    # Either an Address dict or a free-form string
    location: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    posting_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    sub_total: Mapped[float | None] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=True)
    gst: Mapped[float | None] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=True)
    total: Mapped[float | None] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=True)
    alias: Mapped[str | None] = mapped_column(String(120), nullable=True, unique=True, index=True)
    alias_created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )
    row_version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)


# Pydantic schemas
class ProjectBase(BaseModel):
    """Base project schema."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    status: ProjectStatus = ProjectStatus.NEW_LEAD
    location: Address | str | None = None
    description: str | None = None
    due_date: date | None = Field(
        default=None,
        validation_alias=AliasChoices("due_date", "dueDate"),
    )
    posting_date: date | None = None
    sub_total: float | None = None
    gst: float | None = None
    total: float | None = None


class ProjectCreate(ProjectBase):
    """Schema for creating a project.

    Note: project_number is allocated server-side.
    """

    linked_users: list[UUID] = []
    linked_clients: list[UUID] = []


class ProjectUpdate(BaseModel):
    """Schema for updating a project. Only provided fields are applied."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(default=None, min_length=1)
    status: ProjectStatus | None = None
    location: Address | str | None = None
    description: str | None = None
    due_date: date | None = Field(
        default=None,
        validation_alias=AliasChoices("due_date", "dueDate"),
    )
    posting_date: date | None = None
    sub_total: float | None = None
    gst: float | None = None
    total: float | None = None


class ProjectStatusUpdate(BaseModel):
    status: ProjectStatus


class ProjectClientAssignment(BaseModel):
    client_id: UUID
    multi_assign: bool = False


class ProjectUserAssignment(BaseModel):
    user_id: UUID
    multi_assign: bool = False


class ProjectResponse(ProjectBase):
    """Schema for project response."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    project_number: str
    alias: str | None = None
    created_at: datetime
    updated_at: datetime
    row_version: int
    linked_users: list[UUID] = []
    linked_clients: list[UUID] = []


class ProjectAliasResponse(BaseModel):
    project_id: UUID
    project_number: str
    alias: str
    created_at: datetime | None = None
