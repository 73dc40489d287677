"""PRD API routes."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.auth.dependencies import AuthenticatedUser, get_current_user
from app.data import models
from app.data.access import require_project_member
from app.data.prds.schemas import PrdResponse, PrdUpdate
from app.database import get_db

router = APIRouter()


@router.get("/projects/{project_id}/prd", response_model=PrdResponse)
async def get_prd(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """The project's PRD."""
    await require_project_member(db, project_id, current_user)
    result = await db.execute(select(models.Prd).where(models.Prd.project_id == project_id))
    prd = result.scalar_one_or_none()
    if not prd:
        raise HTTPException(status_code=404, detail="PRD not found")
    return prd


@router.put("/projects/{project_id}/prd", response_model=PrdResponse)
async def save_prd(
    project_id: str,
    data: PrdUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Create or overwrite the project's PRD."""
    await require_project_member(db, project_id, current_user)
    result = await db.execute(select(models.Prd).where(models.Prd.project_id == project_id))
    prd = result.scalar_one_or_none()

    if prd:
        prd.contents = data.contents
        prd.author_id = current_user.id
    else:
        prd = models.Prd(project_id=project_id, contents=data.contents, author_id=current_user.id)
        db.add(prd)

    await db.commit()
    await db.refresh(prd)
    return prd
