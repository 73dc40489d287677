"""Project-level authorization helpers."""
from typing import Optional

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import AuthenticatedUser
from app.data import models


async def require_project_member(
    db: AsyncSession,
    project_id: str,
    user: AuthenticatedUser,
    admin: bool = False,
) -> models.Project:
    """Return the project if `user` may access it.

    Organization owners always pass. Raises 404 for unknown projects and 403
    for non-members (or non-admins when `admin=True`).
    """
    result = await db.execute(
        select(models.Project, models.Organization.owner_id)
        .join(models.Organization, models.Organization.id == models.Project.organization_id)
        .where(models.Project.id == project_id)
    )
    row = result.one_or_none()
    if not row:
        raise HTTPException(status_code=404, detail="Project not found")
    project, owner_id = row
    if owner_id == user.id:
        return project

    result = await db.execute(
        select(models.Membership).where(
            models.Membership.project_id == project_id,
            models.Membership.user_id == user.id,
        )
    )
    membership = result.scalar_one_or_none()
    if not membership:
        raise HTTPException(status_code=403, detail="Not a member of this project")
    if admin and membership.role != "admin":
        raise HTTPException(status_code=403, detail="Project admin role required")
    return project


async def resolve_project_id(db: AsyncSession, kind: str, scope_id: str) -> Optional[str]:
    """Project that owns a sequencing scope, or None if the scope is unknown."""
    if kind in ("glossaries", "actors"):
        query = select(models.Project.id).where(models.Project.id == scope_id)
    elif kind == "usecases":
        query = select(models.Actor.project_id).where(models.Actor.id == scope_id)
    elif kind == "features":
        query = (
            select(models.Actor.project_id)
            .join(models.Usecase, models.Usecase.actor_id == models.Actor.id)
            .where(models.Usecase.id == scope_id)
        )
    elif kind == "feature_policies":
        query = (
            select(models.Actor.project_id)
            .join(models.Usecase, models.Usecase.actor_id == models.Actor.id)
            .join(models.Feature, models.Feature.usecase_id == models.Usecase.id)
            .where(models.Feature.id == scope_id)
        )
    else:
        return None

    result = await db.execute(query)
    return result.scalar_one_or_none()


async def require_scope_access(
    db: AsyncSession,
    kind: str,
    scope_id: str,
    user: AuthenticatedUser,
) -> str:
    """Authorize access to a sequencing scope; returns its project id."""
    project_id = await resolve_project_id(db, kind, scope_id)
    if project_id is None:
        raise HTTPException(status_code=404, detail="Scope not found")
    await require_project_member(db, project_id, user)
    return project_id
