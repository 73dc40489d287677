"""Usecase API routes."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Tuple

from app.auth.dependencies import AuthenticatedUser, get_current_user
from app.data import models
from app.data.access import require_project_member
from app.data.cascade import delete_usecases
from app.data.usecases.schemas import UsecaseCreate, UsecaseResponse, UsecaseUpdate
from app.database import get_db
from app.sequencing.routes import get_coordinator, to_response
from app.sequencing.schemas import ReorderResponse

router = APIRouter()


async def _project_of_actor(db: AsyncSession, actor_id: str) -> str:
    result = await db.execute(select(models.Actor.project_id).where(models.Actor.id == actor_id))
    project_id = result.scalar_one_or_none()
    if not project_id:
        raise HTTPException(status_code=404, detail="Actor not found")
    return project_id


async def _get_usecase(db: AsyncSession, usecase_id: str) -> Tuple[models.Usecase, str]:
    result = await db.execute(
        select(models.Usecase, models.Actor.project_id)
        .join(models.Actor, models.Actor.id == models.Usecase.actor_id)
        .where(models.Usecase.id == usecase_id)
    )
    row = result.one_or_none()
    if not row:
        raise HTTPException(status_code=404, detail="Usecase not found")
    return row[0], row[1]


@router.get("/actors/{actor_id}/usecases", response_model=List[UsecaseResponse])
async def list_usecases(
    actor_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Usecases of an actor in sequence order."""
    await require_project_member(db, await _project_of_actor(db, actor_id), current_user)
    result = await db.execute(
        select(models.Usecase)
        .where(models.Usecase.actor_id == actor_id)
        .order_by(models.Usecase.sequence.asc(), models.Usecase.created_at.asc())
    )
    return result.scalars().all()


@router.post("/actors/{actor_id}/usecases", response_model=UsecaseResponse)
async def create_usecase(
    actor_id: str,
    data: UsecaseCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Add a usecase at the end of the actor's list."""
    await require_project_member(db, await _project_of_actor(db, actor_id), current_user)

    coordinator = get_coordinator(db, "usecases")
    usecase = models.Usecase(
        actor_id=actor_id,
        name=data.name.strip(),
        author_id=current_user.id,
        sequence=await coordinator.next_sequence(actor_id),
    )
    db.add(usecase)
    await db.commit()
    await db.refresh(usecase)
    return usecase


@router.put("/usecases/{usecase_id}", response_model=UsecaseResponse)
async def update_usecase(
    usecase_id: str,
    data: UsecaseUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Rename a usecase."""
    usecase, project_id = await _get_usecase(db, usecase_id)
    await require_project_member(db, project_id, current_user)

    usecase.name = data.name.strip()
    await db.commit()
    await db.refresh(usecase)
    return usecase


@router.delete("/usecases/{usecase_id}", response_model=ReorderResponse)
async def delete_usecase(
    usecase_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Delete a usecase with its features, then renumber the actor's usecases."""
    usecase, project_id = await _get_usecase(db, usecase_id)
    actor_id = usecase.actor_id
    await require_project_member(db, project_id, current_user)

    async def remove():
        await delete_usecases(db, [usecase_id])
        await db.commit()

    coordinator = get_coordinator(db, "usecases")
    result = await coordinator.delete(actor_id, usecase_id, remove)
    return to_response(result)
