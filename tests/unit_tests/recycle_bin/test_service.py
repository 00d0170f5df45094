"""Unit tests for the recycle bin service: soft delete, restore, purge and cleanup."""

from datetime import datetime, timedelta
from pathlib import Path
from uuid import uuid4

import pytest
from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

import config
from models.project_file import ProjectFile
from repos import files_repo, recycle_bin_repo
from services import recycle_bin_service, storage
from tests.factories import create_client_record, create_project, link_user_to_client

NOW = datetime(2024, 6, 1, 9, 30, 0)


async def _stored_file(
    session: AsyncSession,
    project,
    name: str = "plan.pdf",
    content: bytes = b"0123456789",
) -> ProjectFile:
    key = storage.generate_storage_key(project.id, "Plans", name)
    path = storage.resolve_path(key)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)

    project_file = ProjectFile(
        id=uuid4(),
        project_id=project.id,
        folder="Plans",
        filename=name,
        storage_key=key,
        size_bytes=len(content),
    )
    session.add(project_file)
    await session.commit()
    await session.refresh(project_file)
    return project_file


@pytest.mark.asyncio
async def test_delete_moves_file_into_dated_client_folder(db_session: AsyncSession, admin_user):
    """Test: Deleting files the item under YYYY/MM/DD/client_{id} with a 7 day expiry."""
    client = await create_client_record(db_session)
    project = await create_project(db_session, client_ids=[client.id])
    project_file = await _stored_file(db_session, project)
    original = storage.resolve_path(project_file.storage_key)

    item = await recycle_bin_service.delete_to_recycle_bin(
        db_session,
        project_file=project_file,
        user=admin_user,
        client_id=client.id,
        now=NOW,
    )

    assert not original.exists()
    recycled = Path(item.recycle_bin_path)
    assert recycled.exists()
    assert recycled.name.endswith("_plan.pdf")
    assert item.recycle_bin_folder == f"2024/06/01/client_{client.id}"
    assert item.expires_at == NOW + timedelta(days=7)
    assert item.file_size == 10
    assert item.mime_type == "application/pdf"
    assert item.can_restore is True
    assert item.audit_log[0]["action"] == "deleted"
    assert project_file.deleted_at == NOW
    assert await files_repo.get_by_id(db_session, project_id=project.id, file_id=project_file.id) is None


@pytest.mark.asyncio
async def test_delete_moves_file_back_when_commit_fails(db_session: AsyncSession, admin_user, storage_dirs, monkeypatch):
    """Test: A failed commit puts the file back and leaves nothing in the bin."""
    project = await create_project(db_session)
    project_file = await _stored_file(db_session, project)
    original = storage.resolve_path(project_file.storage_key)

    async def failing_commit():
        raise SQLAlchemyError("database is locked")

    monkeypatch.setattr(db_session, "commit", failing_commit)

    with pytest.raises(SQLAlchemyError):
        await recycle_bin_service.delete_to_recycle_bin(
            db_session,
            project_file=project_file,
            user=admin_user,
            client_id=None,
            now=NOW,
        )

    assert original.read_bytes() == b"0123456789"
    _, bin_dir = storage_dirs
    assert [path for path in bin_dir.rglob("*") if path.is_file()] == []

    await db_session.rollback()
    assert await recycle_bin_repo.total_size(db_session) == 0
    assert await files_repo.get_by_id(db_session, project_id=project.id, file_id=project_file.id) is not None


@pytest.mark.asyncio
async def test_delete_without_client_uses_unassigned_folder(db_session: AsyncSession, admin_user):
    project = await create_project(db_session)
    project_file = await _stored_file(db_session, project)

    item = await recycle_bin_service.delete_to_recycle_bin(
        db_session,
        project_file=project_file,
        user=admin_user,
        client_id=None,
        now=NOW,
    )

    assert item.recycle_bin_folder == "2024/06/01/client_unassigned"
    assert item.client_id is None


@pytest.mark.asyncio
async def test_delete_rejected_when_bin_is_full(db_session: AsyncSession, admin_user, monkeypatch):
    monkeypatch.setattr(config.settings, "RECYCLE_BIN_MAX_TOTAL_SIZE", 5)
    project = await create_project(db_session)
    project_file = await _stored_file(db_session, project)

    with pytest.raises(HTTPException) as exc_info:
        await recycle_bin_service.delete_to_recycle_bin(
            db_session,
            project_file=project_file,
            user=admin_user,
            client_id=None,
        )
    assert exc_info.value.status_code == status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    assert storage.resolve_path(project_file.storage_key).exists()


@pytest.mark.asyncio
async def test_restore_moves_file_back(db_session: AsyncSession, admin_user):
    """Test: Restoring puts the file back and reactivates its record."""
    project = await create_project(db_session)
    project_file = await _stored_file(db_session, project)
    item = await recycle_bin_service.delete_to_recycle_bin(
        db_session, project_file=project_file, user=admin_user, client_id=None, now=NOW
    )

    restored = await recycle_bin_service.restore_item(db_session, user=admin_user, item_id=item.id)

    assert restored.can_restore is False
    assert restored.restored_by == admin_user.id
    assert [entry["action"] for entry in restored.audit_log] == ["deleted", "restored"]
    assert storage.resolve_path(project_file.storage_key).exists()
    active = await files_repo.get_by_id(db_session, project_id=project.id, file_id=project_file.id)
    assert active is not None

    with pytest.raises(HTTPException) as exc_info:
        await recycle_bin_service.restore_item(db_session, user=admin_user, item_id=item.id)
    assert exc_info.value.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_restore_to_occupied_location_gets_restored_suffix(db_session: AsyncSession, admin_user):
    project = await create_project(db_session)
    project_file = await _stored_file(db_session, project)
    original_key = project_file.storage_key
    item = await recycle_bin_service.delete_to_recycle_bin(
        db_session, project_file=project_file, user=admin_user, client_id=None, now=NOW
    )
    storage.resolve_path(original_key).write_bytes(b"replacement")

    await recycle_bin_service.restore_item(db_session, user=admin_user, item_id=item.id)

    assert project_file.filename == "plan_restored_1.pdf"
    assert project_file.storage_key.endswith("Plans/plan_restored_1.pdf")
    assert storage.resolve_path(original_key).read_bytes() == b"replacement"


@pytest.mark.asyncio
async def test_restore_bulk_reports_access_failures(db_session: AsyncSession, admin_user, plain_user, other_user):
    client = await create_client_record(db_session)
    await link_user_to_client(db_session, user=plain_user, client=client)
    project = await create_project(db_session, client_ids=[client.id])
    project_file = await _stored_file(db_session, project)
    item = await recycle_bin_service.delete_to_recycle_bin(
        db_session, project_file=project_file, user=admin_user, client_id=client.id, now=NOW
    )
    missing_id = uuid4()

    denied = await recycle_bin_service.restore_bulk(db_session, user=other_user, item_ids=[item.id, missing_id])
    assert [result.success for result in denied] == [False, False]

    allowed = await recycle_bin_service.restore_bulk(db_session, user=plain_user, item_ids=[item.id])
    assert allowed[0].success is True


@pytest.mark.asyncio
async def test_permanent_delete_removes_file_and_record(db_session: AsyncSession, admin_user):
    project = await create_project(db_session)
    project_file = await _stored_file(db_session, project)
    item = await recycle_bin_service.delete_to_recycle_bin(
        db_session, project_file=project_file, user=admin_user, client_id=None, now=NOW
    )
    recycled = Path(item.recycle_bin_path)

    results = await recycle_bin_service.permanently_delete(db_session, user=admin_user, item_ids=[item.id, uuid4()])

    assert [result.success for result in results] == [True, False]
    assert results[1].detail == "Item not found"
    assert not recycled.exists()
    assert await files_repo.get_any(db_session, file_id=project_file.id) is None
    purged = await recycle_bin_repo.get_by_id(db_session, item_id=item.id, restorable_only=False)
    assert purged.permanently_deleted_at is not None
    assert purged.audit_log[-1]["action"] == "permanently_deleted"


@pytest.mark.asyncio
async def test_cleanup_purges_expired_then_oldest(db_session: AsyncSession, admin_user, monkeypatch):
    """Test: Cleanup removes expired items, then the oldest until under the size limit."""
    project = await create_project(db_session)
    items = []
    for days_ago, name in ((10, "expired.pdf"), (3, "old.pdf"), (2, "older.pdf"), (1, "newest.pdf")):
        project_file = await _stored_file(db_session, project, name=name)
        items.append(
            await recycle_bin_service.delete_to_recycle_bin(
                db_session,
                project_file=project_file,
                user=admin_user,
                client_id=None,
                now=NOW - timedelta(days=days_ago),
            )
        )

    monkeypatch.setattr(config.settings, "RECYCLE_BIN_MAX_TOTAL_SIZE", 15)
    result = await recycle_bin_service.cleanup(db_session, now=NOW)

    assert result.expired_removed == 1
    assert result.size_removed == 2
    assert result.bytes_freed == 30

    remaining = await recycle_bin_repo.list(db_session)
    assert [item.file_name for item in remaining] == ["newest.pdf"]
    expired = await recycle_bin_repo.get_by_id(db_session, item_id=items[0].id, restorable_only=False)
    assert expired.cleanup_reason == "time_limit"
    oldest = await recycle_bin_repo.get_by_id(db_session, item_id=items[1].id, restorable_only=False)
    assert oldest.cleanup_reason == "size_limit"


@pytest.mark.asyncio
async def test_list_items_filters_sorts_and_summarises(db_session: AsyncSession, admin_user):
    client = await create_client_record(db_session)
    project = await create_project(db_session, client_ids=[client.id])
    for offset, (name, content) in enumerate((("a-small.pdf", b"1"), ("b-large.jpg", b"123456"), ("c-mid.pdf", b"123"))):
        project_file = await _stored_file(db_session, project, name=name, content=content)
        await recycle_bin_service.delete_to_recycle_bin(
            db_session,
            project_file=project_file,
            user=admin_user,
            client_id=client.id,
            now=NOW + timedelta(minutes=offset),
        )

    by_size = await recycle_bin_service.list_items(
        db_session, client_ids=None, sort_by="file_size", sort_order="asc", now=NOW
    )
    assert [item.file_name for item in by_size.items] == ["a-small.pdf", "c-mid.pdf", "b-large.jpg"]
    assert by_size.summary.totalFiles == 3
    assert by_size.summary.totalSize == 10
    assert by_size.summary.fileCount == 3
    assert by_size.items[0].expiry.status == "safe"

    searched = await recycle_bin_service.list_items(db_session, client_ids=[client.id], search="PDF", limit=1, page=2)
    assert searched.total == 2
    assert [item.file_name for item in searched.items] == ["a-small.pdf"]

    none_visible = await recycle_bin_service.list_items(db_session, client_ids=[])
    assert none_visible.total == 0
    assert none_visible.summary.totalFiles == 0
