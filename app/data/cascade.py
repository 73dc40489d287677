"""Dependent-row cleanup for the actor -> usecase -> feature tree.

Policies are project-level and survive; only their feature bindings go.
"""
from typing import Sequence

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.data import models


async def delete_features(db: AsyncSession, feature_ids: Sequence[str]) -> None:
    """Delete features together with their policy bindings."""
    if not feature_ids:
        return
    await db.execute(
        delete(models.FeaturePolicy).where(models.FeaturePolicy.feature_id.in_(feature_ids))
    )
    await db.execute(delete(models.Feature).where(models.Feature.id.in_(feature_ids)))


async def delete_usecases(db: AsyncSession, usecase_ids: Sequence[str]) -> None:
    """Delete usecases together with their features."""
    if not usecase_ids:
        return
    result = await db.execute(
        select(models.Feature.id).where(models.Feature.usecase_id.in_(usecase_ids))
    )
    await delete_features(db, result.scalars().all())
    await db.execute(delete(models.Usecase).where(models.Usecase.id.in_(usecase_ids)))


async def delete_actor(db: AsyncSession, actor_id: str) -> None:
    """Delete an actor and everything beneath it."""
    result = await db.execute(
        select(models.Usecase.id).where(models.Usecase.actor_id == actor_id)
    )
    await delete_usecases(db, result.scalars().all())
    await db.execute(delete(models.Actor).where(models.Actor.id == actor_id))
