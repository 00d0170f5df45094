"""Project endpoints."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db, require_admin
from models.project import (
    ProjectAliasResponse,
    ProjectClientAssignment,
    ProjectCreate,
    ProjectResponse,
    ProjectStatus,
    ProjectStatusUpdate,
    ProjectUpdate,
    ProjectUserAssignment,
)
from models.user import User
from services import projects_service

router = APIRouter()


def _alias_response(project) -> ProjectAliasResponse:
    return ProjectAliasResponse(
        project_id=project.id,
        project_number=project.project_number,
        alias=project.alias,
        created_at=project.alias_created_at,
    )


@router.get("/projects/get-projects", response_model=List[ProjectResponse])
async def list_projects(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    List every project (Admin only), newest project number first.

    Returns:
        List of projects with their linked users and clients
    """
    try:
        projects = await projects_service.list_projects(db)
        return await projects_service.to_responses(db, projects)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch projects: {str(e)}",
        )


@router.get("/projects/get-user-projects", response_model=List[ProjectResponse])
async def list_user_projects(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        projects = await projects_service.list_user_projects(db, user=current_user)
        return await projects_service.to_responses(db, projects)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch projects: {str(e)}",
        )


@router.get("/projects/get-project/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Get a project by ID.

    Raises:
        404 if not found, 403 if a non-admin is not linked to it.
    """
    project = await projects_service.get_project(db, user=current_user, project_id=project_id)
    return await projects_service.to_response(db, project)


@router.post("/projects/addProject", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: ProjectCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Create a project. The project number is allocated for the current month.

    Args:
        payload: Project data, including user and client links
    """
    try:
        project = await projects_service.create_project(db, user=current_user, payload=payload)
        return await projects_service.to_response(db, project)
    except HTTPException:
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create project: {str(e)}",
        )


@router.patch("/projects/update/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: UUID,
    payload: ProjectUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Partially update a project. Nothing changes when no field differs."""
    try:
        project = await projects_service.update_project(
            db,
            user=current_user,
            project_id=project_id,
            payload=payload,
        )
        return await projects_service.to_response(db, project)
    except HTTPException:
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update project: {str(e)}",
        )


@router.patch("/projects/update-status/{project_id}", response_model=ProjectResponse)
async def update_status(
    project_id: UUID,
    payload: ProjectStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        project = await projects_service.update_status(
            db,
            user=current_user,
            project_id=project_id,
            new_status=payload.status,
        )
        return await projects_service.to_response(db, project)
    except HTTPException:
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update project status: {str(e)}",
        )


@router.put("/projects/updateProjectToComplete/{project_id}", response_model=ProjectResponse)
async def complete_project(
    project_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        project = await projects_service.update_status(
            db,
            user=current_user,
            project_id=project_id,
            new_status=ProjectStatus.COMPLETED,
        )
        return await projects_service.to_response(db, project)
    except HTTPException:
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to complete project: {str(e)}",
        )


@router.delete("/projects/delete/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete a project with its links, file records and stored files (Admin only)."""
    try:
        await projects_service.delete_project(db, project_id=project_id)
    except HTTPException:
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to delete project: {str(e)}",
        )


@router.patch("/projects/assignClient/{project_id}", response_model=ProjectResponse)
async def assign_client(
    project_id: UUID,
    payload: ProjectClientAssignment,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Link a client to a project (Admin only).

    Without multi_assign the client replaces the existing client links.
    """
    project = await projects_service.assign_client(
        db,
        project_id=project_id,
        client_id=payload.client_id,
        multi_assign=payload.multi_assign,
    )
    return await projects_service.to_response(db, project)


@router.patch("/projects/unassignClient/{project_id}", response_model=ProjectResponse)
async def unassign_client(
    project_id: UUID,
    payload: ProjectClientAssignment,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    project = await projects_service.unassign_client(db, project_id=project_id, client_id=payload.client_id)
    return await projects_service.to_response(db, project)


@router.patch("/projects/assignUser/{project_id}", response_model=ProjectResponse)
async def assign_user(
    project_id: UUID,
    payload: ProjectUserAssignment,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Link a user (usually an Estimator) to a project (Admin only).

    Without multi_assign the user replaces the existing user links.
    """
    project = await projects_service.assign_user(
        db,
        project_id=project_id,
        user_id=payload.user_id,
        multi_assign=payload.multi_assign,
    )
    return await projects_service.to_response(db, project)


@router.patch("/projects/unassignUser/{project_id}", response_model=ProjectResponse)
async def unassign_user(
    project_id: UUID,
    payload: ProjectUserAssignment,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    project = await projects_service.unassign_user(db, project_id=project_id, user_id=payload.user_id)
    return await projects_service.to_response(db, project)


@router.post("/projects/generate-alias/{project_id}", response_model=ProjectAliasResponse)
async def generate_alias(
    project_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Issue a new hybrid alias, replacing any previous one."""
    project = await projects_service.generate_alias(db, user=current_user, project_id=project_id)
    return _alias_response(project)


@router.get("/projects/get-alias/{project_id}", response_model=ProjectAliasResponse)
async def get_alias(
    project_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    project = await projects_service.get_or_create_alias(db, user=current_user, project_id=project_id)
    return _alias_response(project)


@router.get("/projects/resolve-alias/{alias}", response_model=ProjectResponse)
async def resolve_alias(
    alias: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Resolve a hybrid alias, a legacy 32-hex alias or a raw project ID.

    Raises:
        400 if malformed, 404 if unknown, 403 if a non-admin is not linked.
    """
    project = await projects_service.resolve_alias(db, user=current_user, alias=alias)
    return await projects_service.to_response(db, project)
