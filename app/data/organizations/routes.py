"""Organization, project and membership API routes."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from typing import List

from app.auth.dependencies import AuthenticatedUser, get_current_user
from app.data import models
from app.data.access import require_project_member
from app.data.organizations.schemas import (
    MembershipCreate,
    MembershipResponse,
    MembershipUpdate,
    OrganizationCreate,
    OrganizationResponse,
    OrganizationUpdate,
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
)
from app.database import get_db

router = APIRouter()


async def _get_owned_organization(db: AsyncSession, org_id: str, user: AuthenticatedUser) -> models.Organization:
    result = await db.execute(
        select(models.Organization).where(models.Organization.id == org_id)
    )
    organization = result.scalar_one_or_none()
    if not organization:
        raise HTTPException(status_code=404, detail="Organization not found")
    if organization.owner_id != user.id:
        raise HTTPException(status_code=403, detail="Only the organization owner can do this")
    return organization


# ============================================================================
# ORGANIZATIONS
# ============================================================================

@router.post("/organizations", response_model=OrganizationResponse)
async def create_organization(
    data: OrganizationCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Create an organization owned by the caller."""
    organization = models.Organization(name=data.name, owner_id=current_user.id)
    db.add(organization)
    await db.commit()
    await db.refresh(organization)
    return organization


@router.get("/organizations", response_model=List[OrganizationResponse])
async def list_organizations(
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Organizations the caller owns or belongs to through a project."""
    member_orgs = (
        select(models.Project.organization_id)
        .join(models.Membership, models.Membership.project_id == models.Project.id)
        .where(models.Membership.user_id == current_user.id)
    )
    result = await db.execute(
        select(models.Organization)
        .where(
            or_(
                models.Organization.owner_id == current_user.id,
                models.Organization.id.in_(member_orgs),
            )
        )
        .order_by(models.Organization.created_at)
    )
    return result.scalars().all()


@router.put("/organizations/{org_id}", response_model=OrganizationResponse)
async def update_organization(
    org_id: str,
    data: OrganizationUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Rename an organization."""
    organization = await _get_owned_organization(db, org_id, current_user)
    organization.name = data.name
    await db.commit()
    await db.refresh(organization)
    return organization


@router.delete("/organizations/{org_id}")
async def delete_organization(
    org_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Delete an organization and everything under it."""
    organization = await _get_owned_organization(db, org_id, current_user)
    await db.delete(organization)
    await db.commit()
    return {"message": "Organization deleted successfully"}


# ============================================================================
# PROJECTS
# ============================================================================

@router.post("/organizations/{org_id}/projects", response_model=ProjectResponse)
async def create_project(
    org_id: str,
    data: ProjectCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Create a project. The creator becomes its first admin."""
    await _get_owned_organization(db, org_id, current_user)

    project = models.Project(organization_id=org_id, name=data.name)
    db.add(project)
    await db.flush()
    db.add(models.Membership(project_id=project.id, user_id=current_user.id, role="admin"))
    await db.commit()
    await db.refresh(project)
    return project


@router.get("/organizations/{org_id}/projects", response_model=List[ProjectResponse])
async def list_projects(
    org_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Projects of an organization visible to the caller."""
    result = await db.execute(
        select(models.Organization).where(models.Organization.id == org_id)
    )
    organization = result.scalar_one_or_none()
    if not organization:
        raise HTTPException(status_code=404, detail="Organization not found")

    query = select(models.Project).where(models.Project.organization_id == org_id)
    if organization.owner_id != current_user.id:
        query = query.join(
            models.Membership, models.Membership.project_id == models.Project.id
        ).where(models.Membership.user_id == current_user.id)

    result = await db.execute(query.order_by(models.Project.created_at))
    return result.scalars().all()


@router.put("/projects/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: str,
    data: ProjectUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Rename a project."""
    project = await require_project_member(db, project_id, current_user, admin=True)
    project.name = data.name
    await db.commit()
    await db.refresh(project)
    return project


@router.delete("/projects/{project_id}")
async def delete_project(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Delete a project and its glossary, policy tree and PRD."""
    project = await require_project_member(db, project_id, current_user, admin=True)
    await db.delete(project)
    await db.commit()
    return {"message": "Project deleted successfully"}


# ============================================================================
# MEMBERSHIPS
# ============================================================================

@router.get("/projects/{project_id}/members", response_model=List[MembershipResponse])
async def list_members(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Members of a project."""
    await require_project_member(db, project_id, current_user)
    result = await db.execute(
        select(models.Membership)
        .where(models.Membership.project_id == project_id)
        .order_by(models.Membership.created_at)
    )
    return result.scalars().all()


@router.post("/projects/{project_id}/members", response_model=MembershipResponse)
async def add_member(
    project_id: str,
    data: MembershipCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Add an existing user to a project."""
    await require_project_member(db, project_id, current_user, admin=True)

    result = await db.execute(
        select(models.Membership).where(
            models.Membership.project_id == project_id,
            models.Membership.user_id == data.user_id,
        )
    )
    if result.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="User is already a member")

    membership = models.Membership(
        project_id=project_id,
        user_id=data.user_id,
        role=data.role,
        receive_emails=data.receive_emails,
    )
    db.add(membership)
    await db.commit()
    await db.refresh(membership)
    return membership


@router.put("/projects/{project_id}/members/{membership_id}", response_model=MembershipResponse)
async def update_member(
    project_id: str,
    membership_id: str,
    data: MembershipUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Change a member's role or email preference."""
    await require_project_member(db, project_id, current_user, admin=True)

    result = await db.execute(
        select(models.Membership).where(
            models.Membership.id == membership_id,
            models.Membership.project_id == project_id,
        )
    )
    membership = result.scalar_one_or_none()
    if not membership:
        raise HTTPException(status_code=404, detail="Membership not found")

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(membership, field, value)

    await db.commit()
    await db.refresh(membership)
    return membership


@router.delete("/projects/{project_id}/members/{membership_id}")
async def remove_member(
    project_id: str,
    membership_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Remove a member from a project."""
    await require_project_member(db, project_id, current_user, admin=True)

    result = await db.execute(
        select(models.Membership).where(
            models.Membership.id == membership_id,
            models.Membership.project_id == project_id,
        )
    )
    membership = result.scalar_one_or_none()
    if not membership:
        raise HTTPException(status_code=404, detail="Membership not found")

    await db.delete(membership)
    await db.commit()
    return {"message": "Member removed successfully"}
