"""Feature API routes."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Tuple

from app.auth.dependencies import AuthenticatedUser, get_current_user
from app.data import models
from app.data.access import require_project_member
from app.data.cascade import delete_features
from app.data.features.schemas import FeatureCreate, FeatureResponse, FeatureUpdate
from app.database import get_db
from app.sequencing.routes import get_coordinator, to_response
from app.sequencing.schemas import ReorderResponse

router = APIRouter()


async def _project_of_usecase(db: AsyncSession, usecase_id: str) -> str:
    result = await db.execute(
        select(models.Actor.project_id)
        .join(models.Usecase, models.Usecase.actor_id == models.Actor.id)
        .where(models.Usecase.id == usecase_id)
    )
    project_id = result.scalar_one_or_none()
    if not project_id:
        raise HTTPException(status_code=404, detail="Usecase not found")
    return project_id


async def get_feature_with_project(db: AsyncSession, feature_id: str) -> Tuple[models.Feature, str]:
    """A feature and the id of the project it belongs to. Raises 404."""
    result = await db.execute(
        select(models.Feature, models.Actor.project_id)
        .join(models.Usecase, models.Usecase.id == models.Feature.usecase_id)
        .join(models.Actor, models.Actor.id == models.Usecase.actor_id)
        .where(models.Feature.id == feature_id)
    )
    row = result.one_or_none()
    if not row:
        raise HTTPException(status_code=404, detail="Feature not found")
    return row[0], row[1]


@router.get("/usecases/{usecase_id}/features", response_model=List[FeatureResponse])
async def list_features(
    usecase_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Features of a usecase in sequence order."""
    await require_project_member(db, await _project_of_usecase(db, usecase_id), current_user)
    result = await db.execute(
        select(models.Feature)
        .where(models.Feature.usecase_id == usecase_id)
        .order_by(models.Feature.sequence.asc(), models.Feature.created_at.asc())
    )
    return result.scalars().all()


@router.post("/usecases/{usecase_id}/features", response_model=FeatureResponse)
async def create_feature(
    usecase_id: str,
    data: FeatureCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Add a feature at the end of the usecase's list."""
    await require_project_member(db, await _project_of_usecase(db, usecase_id), current_user)

    coordinator = get_coordinator(db, "features")
    feature = models.Feature(
        usecase_id=usecase_id,
        name=data.name.strip(),
        author_id=current_user.id,
        sequence=await coordinator.next_sequence(usecase_id),
    )
    db.add(feature)
    await db.commit()
    await db.refresh(feature)
    return feature


@router.put("/features/{feature_id}", response_model=FeatureResponse)
async def update_feature(
    feature_id: str,
    data: FeatureUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Rename a feature."""
    feature, project_id = await get_feature_with_project(db, feature_id)
    await require_project_member(db, project_id, current_user)

    feature.name = data.name.strip()
    await db.commit()
    await db.refresh(feature)
    return feature


@router.delete("/features/{feature_id}", response_model=ReorderResponse)
async def delete_feature(
    feature_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Delete a feature and its policy bindings, then renumber the usecase's features."""
    feature, project_id = await get_feature_with_project(db, feature_id)
    usecase_id = feature.usecase_id
    await require_project_member(db, project_id, current_user)

    async def remove():
        await delete_features(db, [feature_id])
        await db.commit()

    coordinator = get_coordinator(db, "features")
    result = await coordinator.delete(usecase_id, feature_id, remove)
    return to_response(result)
