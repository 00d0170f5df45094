"""Pure recycle bin helpers shared by the API and the portal client."""

import math
import os
from datetime import datetime, timedelta, timezone
from typing import Literal

from pydantic import BaseModel

MIME_TYPES = {
    ".pdf": "application/pdf",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".txt": "text/plain",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}
DEFAULT_MIME_TYPE = "application/octet-stream"

SIZE_UNITS = ("B", "KB", "MB", "GB")

DAY = timedelta(days=1)


class ExpiryStatus(BaseModel):
    """Colour-coded expiry tag for a recycle bin item."""

    status: Literal["expired", "critical", "warning", "safe"]
    color: Literal["red", "orange", "yellow", "green"]
    label: str
    days: int


def mime_type_for(filename: str) -> str:
    return MIME_TYPES.get(os.path.splitext(filename)[1].lower(), DEFAULT_MIME_TYPE)


def format_file_size(size: int) -> str:
    """
    Human-readable size with one decimal.

    Example:
        >>> format_file_size(1536)
        '1.5 KB'
    """
    if size <= 0:
        return "0 B"
    index = 0
    while index < len(SIZE_UNITS) - 1 and size >= 1024 ** (index + 1):
        index += 1
    return f"{size / 1024 ** index:.1f} {SIZE_UNITS[index]}"


def _as_utc(value: datetime) -> datetime:
    # Naive datetimes are stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def days_until_expiry(expires_at: datetime, now: datetime | None = None) -> int:
    """Whole days left, rounded up. Zero or negative means expired."""
    now = _as_utc(now or datetime.now(timezone.utc))
    return math.ceil((_as_utc(expires_at) - now) / DAY)


def expiry_status(expires_at: datetime, now: datetime | None = None) -> ExpiryStatus:
    days = days_until_expiry(expires_at, now)
    if days <= 0:
        return ExpiryStatus(status="expired", color="red", label="Expired", days=days)
    if days <= 1:
        return ExpiryStatus(status="critical", color="orange", label=f"{days} day left", days=days)
    if days <= 3:
        return ExpiryStatus(status="warning", color="yellow", label=f"{days} days left", days=days)
    return ExpiryStatus(status="safe", color="green", label=f"{days} days left", days=days)
