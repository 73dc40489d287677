"""Actor API routes."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List

from app.auth.dependencies import AuthenticatedUser, get_current_user
from app.data import models
from app.data.access import require_project_member
from app.data.actors.schemas import ActorCreate, ActorResponse, ActorUpdate
from app.data.cascade import delete_actor as cascade_delete_actor
from app.database import get_db
from app.sequencing.routes import get_coordinator, to_response
from app.sequencing.schemas import ReorderResponse

router = APIRouter()


async def _get_actor(db: AsyncSession, actor_id: str) -> models.Actor:
    result = await db.execute(select(models.Actor).where(models.Actor.id == actor_id))
    actor = result.scalar_one_or_none()
    if not actor:
        raise HTTPException(status_code=404, detail="Actor not found")
    return actor


@router.get("/projects/{project_id}/actors", response_model=List[ActorResponse])
async def list_actors(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Actors of a project in sequence order."""
    await require_project_member(db, project_id, current_user)
    result = await db.execute(
        select(models.Actor)
        .where(models.Actor.project_id == project_id)
        .order_by(models.Actor.sequence.asc(), models.Actor.created_at.asc())
    )
    return result.scalars().all()


@router.post("/projects/{project_id}/actors", response_model=ActorResponse)
async def create_actor(
    project_id: str,
    data: ActorCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Add an actor at the end of the project's list."""
    await require_project_member(db, project_id, current_user)

    coordinator = get_coordinator(db, "actors")
    actor = models.Actor(
        project_id=project_id,
        name=data.name.strip(),
        author_id=current_user.id,
        sequence=await coordinator.next_sequence(project_id),
    )
    db.add(actor)
    await db.commit()
    await db.refresh(actor)
    return actor


@router.put("/actors/{actor_id}", response_model=ActorResponse)
async def update_actor(
    actor_id: str,
    data: ActorUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Rename an actor."""
    actor = await _get_actor(db, actor_id)
    await require_project_member(db, actor.project_id, current_user)

    actor.name = data.name.strip()
    await db.commit()
    await db.refresh(actor)
    return actor


@router.delete("/actors/{actor_id}", response_model=ReorderResponse)
async def delete_actor(
    actor_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Delete an actor with its usecases and features, then renumber the project's actors."""
    actor = await _get_actor(db, actor_id)
    project_id = actor.project_id
    await require_project_member(db, project_id, current_user)

    async def remove():
        await cascade_delete_actor(db, actor_id)
        await db.commit()

    coordinator = get_coordinator(db, "actors")
    result = await coordinator.delete(project_id, actor_id, remove)
    return to_response(result)
