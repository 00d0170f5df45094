"""Recycle bin item - a soft-deleted file waiting for restore or purge."""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import JSON, BigInteger, Boolean, DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db import Base
from services.recycle_bin_rules import ExpiryStatus


class RecycleBinItem(Base):
    """RecycleBinItem ORM model."""

    __tablename__ = "recycle_bin_items"

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
        index=True,
    )
    # No FK: the file row may be gone by the time the item is purged
    file_id: Mapped[UUID | None] = mapped_column(Uuid, nullable=True, index=True)
    original_path: Mapped[str] = mapped_column(String(1000), nullable=False)
    file_name: Mapped[str] = mapped_column(String(500), nullable=False)
    file_type: Mapped[str] = mapped_column(String(10), nullable=False, default="file")
    file_extension: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    mime_type: Mapped[str] = mapped_column(String(255), nullable=False, default="application/octet-stream")
    client_id: Mapped[UUID | None] = mapped_column(Uuid, nullable=True, index=True)
    project_id: Mapped[UUID | None] = mapped_column(Uuid, nullable=True, index=True)
    deleted_by: Mapped[UUID | None] = mapped_column(Uuid, nullable=True)
    deleted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )
    deletion_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    deletion_method: Mapped[str] = mapped_column(String(50), nullable=False, default="manual")
    recycle_bin_path: Mapped[str] = mapped_column(String(1000), nullable=False)
    recycle_bin_folder: Mapped[str] = mapped_column(String(500), nullable=False)
    can_restore: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    restored_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    restored_by: Mapped[UUID | None] = mapped_column(Uuid, nullable=True)
    permanently_deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    cleanup_reason: Mapped[str | None] = mapped_column(String(50), nullable=True)
    audit_log: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)


# Pydantic schemas
class RecycleBinItemResponse(BaseModel):
    """Schema for recycle bin item response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    file_id: UUID | None = None
    original_path: str
    file_name: str
    file_type: str
    file_extension: str
    file_size: int
    mime_type: str
    client_id: UUID | None = None
    project_id: UUID | None = None
    deleted_by: UUID | None = None
    deleted_at: datetime
    deletion_reason: str | None = None
    can_restore: bool
    restored_at: datetime | None = None
    expires_at: datetime
    audit_log: list[dict[str, Any]] = []
    days_until_expiry: int = 0
    size_formatted: str = ""
    expiry: ExpiryStatus | None = None


class RecycleBinSummary(BaseModel):
    totalFiles: int = 0
    totalSize: int = 0
    totalSizeFormatted: str = "0 B"
    fileCount: int = 0
    folderCount: int = 0
    oldest: datetime | None = None
    newest: datetime | None = None


class RecycleBinListResponse(BaseModel):
    items: list[RecycleBinItemResponse]
    summary: RecycleBinSummary
    page: int
    limit: int
    total: int


class RecycleBinIdsRequest(BaseModel):
    ids: list[UUID] = Field(min_length=1)


class RecycleBinActionResult(BaseModel):
    id: UUID
    success: bool
    detail: str | None = None


class CleanupResult(BaseModel):
    expired_removed: int = 0
    size_removed: int = 0
    bytes_freed: int = 0
