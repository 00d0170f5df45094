"""Project file endpoints: upload, list, download, delete and watch-disk."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

import config
from api.deps import get_current_user, get_db
from models.project_file import ProjectFileResponse
from models.user import User
from services import files_service, projects_service, recycle_bin_service
from services.folder_watch import notifier

router = APIRouter()


@router.post(
    "/files/{project_id}/upload",
    response_model=ProjectFileResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_file(
    project_id: UUID,
    file: UploadFile = File(...),
    folder: str | None = Form(default=None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Upload a file into a project folder.

    Raises:
        413 if the file exceeds the size limit.
    """
    try:
        return await files_service.upload_file(
            db,
            user=current_user,
            project_id=project_id,
            file=file,
            folder=folder,
        )
    except HTTPException:
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to upload file: {str(e)}",
        )


@router.get("/files/{project_id}", response_model=List[ProjectFileResponse])
async def list_files(
    project_id: UUID,
    folder: str | None = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await files_service.list_files(db, user=current_user, project_id=project_id, folder=folder)


@router.get("/files/{project_id}/download/{file_id}")
async def download_file(
    project_id: UUID,
    file_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    project_file, path = await files_service.get_file_for_download(
        db,
        user=current_user,
        project_id=project_id,
        file_id=file_id,
    )
    return FileResponse(
        path,
        media_type=project_file.mime_type or "application/octet-stream",
        filename=project_file.filename,
    )


@router.delete("/files/{project_id}/files/{file_id}")
async def delete_file(
    project_id: UUID,
    file_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a file into the recycle bin.

    Files with an excluded extension are removed outright.

    Returns:
        ``{"recycled": bool, "item": RecycleBinItemResponse | None}``
    """
    try:
        item = await files_service.delete_file(
            db,
            user=current_user,
            project_id=project_id,
            file_id=file_id,
        )
    except HTTPException:
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to delete file: {str(e)}",
        )

    if item is None:
        return {"recycled": False, "item": None}
    return {"recycled": True, "item": recycle_bin_service.to_response(item)}


@router.get("/files/{project_id}/watch-disk")
async def watch_disk(
    project_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Long-poll for changes to a project's files.

    Returns:
        200 with ``{changed, project_id, timestamp}`` on change, 204 on
        timeout or when watchers are disabled
    """
    if not config.settings.ENABLE_WATCHERS:
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    await projects_service.get_project(db, user=current_user, project_id=project_id)
    # Release the pooled connection before the long wait
    await db.close()
    change = await notifier.wait(project_id, timeout=config.settings.LONGPOLL_TIMEOUT_SECONDS)
    if change is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return change


@router.post("/files/{project_id}/notify-folder-update")
async def notify_folder_update(
    project_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await projects_service.get_project(db, user=current_user, project_id=project_id)
    woken = notifier.notify(project_id)
    return {"success": True, "notified": woken}
