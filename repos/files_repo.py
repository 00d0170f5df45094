"""Repository for ProjectFile database operations."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.project_file import ProjectFile


async def get_by_id(
    session: AsyncSession,
    *,
    project_id: UUID,
    file_id: UUID,
    include_deleted: bool = False,
) -> ProjectFile | None:
    """
    Get a project file by ID.

    Args:
        session: Database session
        project_id: Project the file must belong to
        file_id: File ID to fetch
        include_deleted: If True, include files sitting in the recycle bin

    Returns:
        ProjectFile if found, None otherwise
    """
    query = select(ProjectFile).where(
        ProjectFile.id == file_id,
        ProjectFile.project_id == project_id,
    )

    if not include_deleted:
        query = query.where(ProjectFile.deleted_at.is_(None))

    result = await session.execute(query)
    return result.scalar_one_or_none()


async def get_any(session: AsyncSession, *, file_id: UUID) -> ProjectFile | None:
    """Get a file by ID regardless of project or deletion state."""
    result = await session.execute(select(ProjectFile).where(ProjectFile.id == file_id))
    return result.scalar_one_or_none()


async def list(
    session: AsyncSession,
    *,
    project_id: UUID,
    folder: str | None = None,
    include_deleted: bool = False,
) -> list[ProjectFile]:
    """
    List files of a project ordered by folder and name.

    Args:
        session: Database session
        project_id: Project ID to filter by
        folder: Only files in this folder
        include_deleted: If True, include files sitting in the recycle bin

    Returns:
        List of files
    """
    query = (
        select(ProjectFile)
        .where(ProjectFile.project_id == project_id)
        .order_by(ProjectFile.folder, ProjectFile.filename)
    )

    if folder is not None:
        query = query.where(ProjectFile.folder == folder)
    if not include_deleted:
        query = query.where(ProjectFile.deleted_at.is_(None))

    result = await session.execute(query)
    return [project_file for project_file in result.scalars().all()]


async def create(session: AsyncSession, project_file: ProjectFile) -> ProjectFile:
    """
    Create a new file record.

    Args:
        session: Database session
        project_file: ProjectFile instance to create

    Returns:
        Created file record
    """
    session.add(project_file)
    await session.flush()
    await session.refresh(project_file)
    return project_file
