"""Service layer for project file uploads, downloads and deletion."""

import logging
from pathlib import Path
from uuid import UUID, uuid4

from fastapi import HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

import config
from models.project_file import ProjectFile
from models.recycle_bin_item import RecycleBinItem
from models.user import User
from repos import files_repo
from services import projects_service, recycle_bin_service, storage
from services.folder_watch import notifier
from services.recycle_bin_rules import mime_type_for

logger = logging.getLogger(__name__)


async def upload_file(
    session: AsyncSession,
    *,
    user: User,
    project_id: UUID,
    file: UploadFile,
    folder: str | None = None,
) -> ProjectFile:
    """
    Store an uploaded file under the project's folder.

    A name already taken in the folder gets a ``_{n}`` suffix.

    Raises:
        HTTPException: 404/403 from project access, 413 if the file is too large
    """
    project = await projects_service.get_project(session, user=user, project_id=project_id)

    folder = storage.sanitize_folder(folder)
    filename = storage.sanitize_filename(file.filename or "unnamed")
    path = storage.available_path(
        storage.resolve_path(storage.generate_storage_key(project.id, folder, filename))
    )
    storage_key = storage.storage_key_for(path)

    size_bytes, sha256 = await storage.save_upload(
        file,
        storage_key,
        max_bytes=config.settings.RECYCLE_BIN_MAX_FILE_SIZE,
    )

    project_file = ProjectFile(
        id=uuid4(),
        project_id=project.id,
        folder=folder,
        filename=path.name,
        storage_key=storage_key,
        mime_type=file.content_type or mime_type_for(path.name),
        size_bytes=size_bytes,
        sha256=sha256,
        uploaded_by=user.id,
    )
    try:
        created = await files_repo.create(session, project_file)
        await session.commit()
    except Exception:
        await storage.delete_file(storage_key)
        logger.warning("Upload record for %s not saved; stored file removed", storage_key)
        raise
    await session.refresh(created)

    logger.info("Uploaded %s (%d bytes) to project %s", storage_key, size_bytes, project.project_number)
    notifier.notify(project.id)
    return created


async def list_files(
    session: AsyncSession,
    *,
    user: User,
    project_id: UUID,
    folder: str | None = None,
) -> list[ProjectFile]:
    await projects_service.get_project(session, user=user, project_id=project_id)
    return await files_repo.list(
        session,
        project_id=project_id,
        folder=storage.sanitize_folder(folder) if folder is not None else None,
    )


async def get_file_for_download(
    session: AsyncSession,
    *,
    user: User,
    project_id: UUID,
    file_id: UUID,
) -> tuple[ProjectFile, Path]:
    """
    Resolve a file for streaming.

    Raises:
        HTTPException: 404 if the record or the stored file is missing
    """
    await projects_service.get_project(session, user=user, project_id=project_id)
    project_file = await files_repo.get_by_id(session, project_id=project_id, file_id=file_id)
    if not project_file:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="File not found",
        )

    path = storage.resolve_path(project_file.storage_key)
    if not path.exists():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="File is missing from storage",
        )
    return project_file, path


async def delete_file(
    session: AsyncSession,
    *,
    user: User,
    project_id: UUID,
    file_id: UUID,
    reason: str = "user_action",
) -> RecycleBinItem | None:
    """
    Delete a project file.

    Files with an excluded extension are removed outright; everything else is
    moved into the recycle bin under the project's first client.

    Returns:
        The recycle bin item, or None when the file was removed outright
    """
    await projects_service.get_project(session, user=user, project_id=project_id)
    project_file = await files_repo.get_by_id(session, project_id=project_id, file_id=file_id)
    if not project_file:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="File not found",
        )

    if recycle_bin_service.is_excluded(project_file.filename):
        await storage.delete_file(project_file.storage_key)
        await session.delete(project_file)
        await session.commit()
        logger.info("Removed excluded file %s", project_file.storage_key)
        notifier.notify(project_id)
        return None

    client_id = await projects_service.first_client_id(session, project_id=project_id)
    return await recycle_bin_service.delete_to_recycle_bin(
        session,
        project_file=project_file,
        user=user,
        client_id=client_id,
        reason=reason,
    )
