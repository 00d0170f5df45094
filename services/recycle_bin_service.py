"""Service layer for the recycle bin: soft delete, restore, purge and cleanup."""

import asyncio
import logging
import os
from datetime import datetime, timedelta
from pathlib import Path
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

import config
from api.access import require_client_access, require_project_access
from api.deps import is_admin
from models.project_file import ProjectFile
from models.recycle_bin_item import (
    CleanupResult,
    RecycleBinActionResult,
    RecycleBinItem,
    RecycleBinItemResponse,
    RecycleBinListResponse,
    RecycleBinSummary,
)
from models.user import User
from repos import files_repo, recycle_bin_repo, users_repo
from services import storage
from services.folder_watch import notifier
from services.recycle_bin_rules import (
    days_until_expiry,
    expiry_status,
    format_file_size,
    mime_type_for,
)

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "deleted_at": lambda item: item.deleted_at,
    "file_size": lambda item: item.file_size,
    "file_name": lambda item: item.file_name.lower(),
}


def recycle_bin_root() -> Path:
    return Path(config.settings.RECYCLE_BIN_DIR)


def recycle_bin_folder(client_id: UUID | None, now: datetime) -> str:
    """``YYYY/MM/DD/client_{id}``; projects without a client use ``client_unassigned``."""
    return f"{now:%Y/%m/%d}/client_{client_id or 'unassigned'}"


def audit_entry(action: str, user_id: UUID | None, details: str, now: datetime) -> dict:
    return {
        "action": action,
        "timestamp": now.isoformat(),
        "user_id": str(user_id) if user_id else None,
        "details": details,
    }


def _append_audit(item: RecycleBinItem, entry: dict) -> None:
    # Reassign so the JSON column is marked dirty
    item.audit_log = [*(item.audit_log or []), entry]


def is_excluded(filename: str) -> bool:
    extension = os.path.splitext(filename)[1].lower()
    return extension in {ext.lower() for ext in config.settings.RECYCLE_BIN_EXCLUDED_EXTENSIONS}


def to_response(item: RecycleBinItem, now: datetime | None = None) -> RecycleBinItemResponse:
    """Item response with days left, formatted size and expiry tag."""
    now = now or datetime.utcnow()
    response = RecycleBinItemResponse.model_validate(item)
    response.days_until_expiry = days_until_expiry(item.expires_at, now)
    response.size_formatted = format_file_size(item.file_size)
    response.expiry = expiry_status(item.expires_at, now)
    return response


def build_summary(items: list[RecycleBinItem]) -> RecycleBinSummary:
    if not items:
        return RecycleBinSummary()

    total_size = sum(item.file_size for item in items)
    deleted = [item.deleted_at for item in items]
    return RecycleBinSummary(
        totalFiles=len(items),
        totalSize=total_size,
        totalSizeFormatted=format_file_size(total_size),
        fileCount=sum(1 for item in items if item.file_type == "file"),
        folderCount=sum(1 for item in items if item.file_type == "folder"),
        oldest=min(deleted),
        newest=max(deleted),
    )


async def accessible_client_ids(session: AsyncSession, *, user: User) -> list[UUID] | None:
    """Client IDs whose recycle bin a user may see. None means every client."""
    if is_admin(user):
        return None
    links = await users_repo.list_client_links(session, user_id=user.id)
    return [link.client_id for link in links]


async def _require_item_access(session: AsyncSession, *, user: User, item: RecycleBinItem) -> None:
    if is_admin(user):
        return
    if item.client_id is not None:
        await require_client_access(session, user=user, client_id=item.client_id)
    elif item.project_id is not None:
        await require_project_access(session, user=user, project_id=item.project_id)
    else:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have access to this item",
        )


async def _get_item_or_404(session: AsyncSession, item_id: UUID) -> RecycleBinItem:
    item = await recycle_bin_repo.get_by_id(session, item_id=item_id)
    if not item:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Item not found in recycle bin or cannot be restored",
        )
    return item


async def delete_to_recycle_bin(
    session: AsyncSession,
    *,
    project_file: ProjectFile,
    user: User,
    client_id: UUID | None,
    reason: str = "user_action",
    method: str = "ui_delete",
    now: datetime | None = None,
) -> RecycleBinItem:
    """
    Move a stored file into the recycle bin.

    The file lands in ``RECYCLE_BIN_DIR/YYYY/MM/DD/client_{id}/{ms}_{name}``
    and expires after RECYCLE_BIN_RETENTION_DAYS.

    Args:
        session: Database session
        project_file: File to delete
        user: Deleting user
        client_id: Client the file is filed under (None when unassigned)
        reason: Free-text deletion reason
        method: How the deletion was triggered
        now: Deletion time

    Returns:
        Created recycle bin item

    Raises:
        HTTPException: 413 if the recycle bin would exceed its total size
    """
    now = now or datetime.utcnow()
    source = storage.resolve_path(project_file.storage_key)
    size = source.stat().st_size if source.exists() else project_file.size_bytes

    current_total = await recycle_bin_repo.total_size(session)
    if current_total + size > config.settings.RECYCLE_BIN_MAX_TOTAL_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Recycle bin storage limit exceeded. Please empty the recycle bin.",
        )

    folder = recycle_bin_folder(client_id, now)
    timestamp_ms = int(now.timestamp() * 1000)
    target = recycle_bin_root() / folder / f"{timestamp_ms}_{project_file.filename}"
    moved = source.exists()
    if moved:
        storage.move_file(source, target)

    item = RecycleBinItem(
        file_id=project_file.id,
        original_path=project_file.storage_key,
        file_name=project_file.filename,
        file_type="file",
        file_extension=os.path.splitext(project_file.filename)[1],
        file_size=size,
        mime_type=mime_type_for(project_file.filename),
        client_id=client_id,
        project_id=project_file.project_id,
        deleted_by=user.id,
        deleted_at=now,
        deletion_reason=reason,
        deletion_method=method,
        recycle_bin_path=str(target),
        recycle_bin_folder=folder,
        can_restore=True,
        expires_at=now + timedelta(days=config.settings.RECYCLE_BIN_RETENTION_DAYS),
        audit_log=[audit_entry("deleted", user.id, f"Deleted via {method}: {reason}", now)],
    )
    try:
        item = await recycle_bin_repo.create(session, item)
        project_file.deleted_at = now
        await session.commit()
    except Exception:
        # The record never landed, so the file goes back where it was
        if moved:
            storage.move_file(target, source)
        logger.warning("Recycle bin record for %s not saved; file left in place", project_file.storage_key)
        raise
    await session.refresh(item)

    logger.info("File moved to recycle bin: %s -> %s", project_file.storage_key, target)
    notifier.notify(project_file.project_id)
    return item


async def restore_item(
    session: AsyncSession,
    *,
    user: User,
    item_id: UUID,
    now: datetime | None = None,
) -> RecycleBinItem:
    """
    Move a recycled file back to its original location.

    An occupied original location gets ``{stem}_restored_{n}{ext}``.

    Raises:
        HTTPException: 404 if the item is unknown or already restored/purged,
            403 if the user has no access, 409 if the recycled file is missing
    """
    now = now or datetime.utcnow()
    item = await _get_item_or_404(session, item_id)
    await _require_item_access(session, user=user, item=item)

    source = Path(item.recycle_bin_path)
    if not source.exists():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Recycled file is missing from storage",
        )

    target = storage.available_path(storage.resolve_path(item.original_path), marker="_restored")
    storage.move_file(source, target)
    restored_key = storage.storage_key_for(target)

    project_file = await files_repo.get_any(session, file_id=item.file_id) if item.file_id else None
    if project_file is not None:
        project_file.deleted_at = None
        project_file.storage_key = restored_key
        project_file.filename = target.name

    item.can_restore = False
    item.restored_at = now
    item.restored_by = user.id
    _append_audit(item, audit_entry("restored", user.id, f"Restored to: {restored_key}", now))

    await session.commit()
    await session.refresh(item)

    logger.info("File restored from recycle bin: %s -> %s", item.recycle_bin_path, restored_key)
    if item.project_id:
        notifier.notify(item.project_id)
    return item


async def restore_bulk(
    session: AsyncSession,
    *,
    user: User,
    item_ids: list[UUID],
) -> list[RecycleBinActionResult]:
    """Restore several items, reporting success per item."""
    results = []
    for item_id in item_ids:
        try:
            await restore_item(session, user=user, item_id=item_id)
            results.append(RecycleBinActionResult(id=item_id, success=True))
        except HTTPException as e:
            results.append(RecycleBinActionResult(id=item_id, success=False, detail=str(e.detail)))
    return results


async def _purge(
    session: AsyncSession,
    item: RecycleBinItem,
    *,
    now: datetime,
    user_id: UUID | None = None,
    cleanup_reason: str | None = None,
) -> None:
    path = Path(item.recycle_bin_path)
    if path.exists():
        path.unlink()

    if item.file_id:
        await session.execute(
            delete(ProjectFile).where(
                ProjectFile.id == item.file_id,
                ProjectFile.deleted_at.is_not(None),
            )
        )

    item.can_restore = False
    item.permanently_deleted_at = now
    item.cleanup_reason = cleanup_reason
    details = f"Permanently deleted: {cleanup_reason or 'manual'}"
    _append_audit(item, audit_entry("permanently_deleted", user_id, details, now))


async def permanently_delete(
    session: AsyncSession,
    *,
    user: User,
    item_ids: list[UUID],
    now: datetime | None = None,
) -> list[RecycleBinActionResult]:
    """Purge items for good, reporting success per item."""
    now = now or datetime.utcnow()
    results = []
    for item_id in item_ids:
        item = await recycle_bin_repo.get_by_id(session, item_id=item_id)
        if item is None:
            results.append(RecycleBinActionResult(id=item_id, success=False, detail="Item not found"))
            continue
        try:
            await _require_item_access(session, user=user, item=item)
            await _purge(session, item, now=now, user_id=user.id)
        except HTTPException as e:
            results.append(RecycleBinActionResult(id=item_id, success=False, detail=str(e.detail)))
            continue
        except OSError as e:
            logger.warning("Failed to permanently delete item %s: %s", item_id, e)
            results.append(RecycleBinActionResult(id=item_id, success=False, detail=str(e)))
            continue
        results.append(RecycleBinActionResult(id=item_id, success=True))

    await session.commit()
    return results


async def cleanup(session: AsyncSession, *, now: datetime | None = None) -> CleanupResult:
    """
    Purge expired items, then the oldest items until the bin fits its size limit.

    Returns:
        Counts of items purged for each reason and bytes freed
    """
    now = now or datetime.utcnow()
    result = CleanupResult()

    for item in await recycle_bin_repo.list_expired(session, now=now):
        try:
            await _purge(session, item, now=now, cleanup_reason="time_limit")
        except OSError as e:
            logger.warning("Failed to clean up expired item %s: %s", item.id, e)
            continue
        result.expired_removed += 1
        result.bytes_freed += item.file_size
    await session.flush()

    total = await recycle_bin_repo.total_size(session)
    excess = total - config.settings.RECYCLE_BIN_MAX_TOTAL_SIZE
    if excess > 0:
        cleaned = 0
        for item in await recycle_bin_repo.list_oldest_first(session):
            if cleaned >= excess:
                break
            try:
                await _purge(session, item, now=now, cleanup_reason="size_limit")
            except OSError as e:
                logger.warning("Failed to clean up oversized item %s: %s", item.id, e)
                continue
            cleaned += item.file_size
            result.size_removed += 1
            result.bytes_freed += item.file_size

    await session.commit()
    logger.info(
        "Recycle bin cleanup completed: %d items, %s freed",
        result.expired_removed + result.size_removed,
        format_file_size(result.bytes_freed),
    )
    return result


async def run_scheduled_cleanup(
    session_factory: async_sessionmaker,
    *,
    interval_seconds: float,
    stop: asyncio.Event,
) -> None:
    """
    Run ``cleanup`` now and then every ``interval_seconds`` until ``stop`` is set.

    A failed run is logged and retried on the next tick.
    """
    while not stop.is_set():
        try:
            async with session_factory() as session:
                await cleanup(session)
        except Exception:
            # Keep the schedule alive; the next tick retries
            logger.exception("Scheduled recycle bin cleanup failed")
        try:
            await asyncio.wait_for(stop.wait(), timeout=interval_seconds)
        except asyncio.TimeoutError:
            pass


async def list_items(
    session: AsyncSession,
    *,
    client_ids: list[UUID] | None,
    file_type: str | None = None,
    search: str | None = None,
    sort_by: str = "deleted_at",
    sort_order: str = "desc",
    page: int = 1,
    limit: int = 20,
    now: datetime | None = None,
) -> RecycleBinListResponse:
    """
    List restorable items with filtering, sorting and paging.

    The summary covers every matching item, not just the current page.
    """
    items = await recycle_bin_repo.list(
        session,
        client_ids=client_ids,
        file_type=file_type,
        search=search,
    )
    key = SORT_FIELDS.get(sort_by, SORT_FIELDS["deleted_at"])
    items = sorted(items, key=key, reverse=sort_order != "asc")

    start = (page - 1) * limit
    page_items = items[start:start + limit]
    return RecycleBinListResponse(
        items=[to_response(item, now) for item in page_items],
        summary=build_summary(items),
        page=page,
        limit=limit,
        total=len(items),
    )
