"""Repository for RecycleBinItem database operations."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.recycle_bin_item import RecycleBinItem


async def get_by_id(
    session: AsyncSession,
    *,
    item_id: UUID,
    restorable_only: bool = True,
) -> RecycleBinItem | None:
    """
    Get a recycle bin item by ID.

    Args:
        session: Database session
        item_id: Item ID to fetch
        restorable_only: If True, ignore items already restored or purged

    Returns:
        RecycleBinItem if found, None otherwise
    """
    query = select(RecycleBinItem).where(RecycleBinItem.id == item_id)
    if restorable_only:
        query = query.where(RecycleBinItem.can_restore.is_(True))

    result = await session.execute(query)
    return result.scalar_one_or_none()


async def list(
    session: AsyncSession,
    *,
    client_ids: "list[UUID] | None" = None,
    file_type: str | None = None,
    search: str | None = None,
) -> list[RecycleBinItem]:
    """
    List restorable items, newest deletion first.

    Args:
        session: Database session
        client_ids: Only items of these clients (None means every client)
        file_type: ``file`` or ``folder``
        search: Case-insensitive match on file name or original path

    Returns:
        List of items
    """
    query = (
        select(RecycleBinItem)
        .where(RecycleBinItem.can_restore.is_(True))
        .order_by(RecycleBinItem.deleted_at.desc())
    )

    if client_ids is not None:
        query = query.where(RecycleBinItem.client_id.in_(client_ids))
    if file_type:
        query = query.where(RecycleBinItem.file_type == file_type)
    if search:
        pattern = f"%{search.lower()}%"
        query = query.where(
            or_(
                func.lower(RecycleBinItem.file_name).like(pattern),
                func.lower(RecycleBinItem.original_path).like(pattern),
            )
        )

    result = await session.execute(query)
    return [item for item in result.scalars().all()]


async def list_expired(session: AsyncSession, *, now: datetime) -> "list[RecycleBinItem]":
    result = await session.execute(
        select(RecycleBinItem).where(
            RecycleBinItem.can_restore.is_(True),
            RecycleBinItem.expires_at < now,
        )
    )
    return [item for item in result.scalars().all()]


async def list_oldest_first(session: AsyncSession) -> "list[RecycleBinItem]":
    result = await session.execute(
        select(RecycleBinItem)
        .where(RecycleBinItem.can_restore.is_(True))
        .order_by(RecycleBinItem.deleted_at.asc())
    )
    return [item for item in result.scalars().all()]


async def total_size(session: AsyncSession) -> int:
    """Bytes held by restorable items across every client."""
    result = await session.execute(
        select(func.coalesce(func.sum(RecycleBinItem.file_size), 0)).where(
            RecycleBinItem.can_restore.is_(True)
        )
    )
    return int(result.scalar_one())


async def create(session: AsyncSession, item: RecycleBinItem) -> RecycleBinItem:
    """
    Create a new recycle bin item.

    Args:
        session: Database session
        item: RecycleBinItem instance to create

    Returns:
        Created item
    """
    session.add(item)
    await session.flush()
    await session.refresh(item)
    return item
