"""Glossary API routes."""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from sqlalchemy.orm import selectinload
from typing import List, Literal

from app.auth.dependencies import AuthenticatedUser, get_current_user
from app.data import models
from app.data.access import require_project_member
from app.data.glossary.schemas import GlossaryCreate, GlossaryResponse, GlossaryUpdate
from app.database import get_db
from app.sequencing.routes import get_coordinator, to_response
from app.sequencing.schemas import ReorderResponse

router = APIRouter()

# Presentation-only orderings; none of them touch `sequence`
SORT_ORDERS = {
    "sequence": (models.Glossary.sequence.asc(),),
    "name": (models.Glossary.name.asc(),),
    "updated_at": (models.Glossary.updated_at.desc(),),
    "updated_at_old": (models.Glossary.updated_at.asc(),),
}


def _clean_links(urls: List[str]) -> List[str]:
    return [url.strip() for url in urls if url.strip()]


async def _get_glossary(db: AsyncSession, glossary_id: str) -> models.Glossary:
    result = await db.execute(
        select(models.Glossary)
        .options(selectinload(models.Glossary.links))
        .where(models.Glossary.id == glossary_id)
        .execution_options(populate_existing=True)
    )
    glossary = result.scalar_one_or_none()
    if not glossary:
        raise HTTPException(status_code=404, detail="Glossary term not found")
    return glossary


@router.get("/projects/{project_id}/glossaries", response_model=List[GlossaryResponse])
async def list_glossaries(
    project_id: str,
    sort: Literal["sequence", "name", "updated_at", "updated_at_old"] = Query(default="sequence"),
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Glossary terms of a project, in sequence order unless another sort is asked for."""
    await require_project_member(db, project_id, current_user)
    result = await db.execute(
        select(models.Glossary)
        .options(selectinload(models.Glossary.links))
        .where(models.Glossary.project_id == project_id)
        .order_by(*SORT_ORDERS[sort], models.Glossary.created_at.asc())
    )
    return result.scalars().all()


@router.get("/glossaries/{glossary_id}", response_model=GlossaryResponse)
async def get_glossary(
    glossary_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """A single glossary term."""
    glossary = await _get_glossary(db, glossary_id)
    await require_project_member(db, glossary.project_id, current_user)
    return glossary


@router.post("/projects/{project_id}/glossaries", response_model=GlossaryResponse)
async def create_glossary(
    project_id: str,
    data: GlossaryCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Add a glossary term at the end of the project's list."""
    await require_project_member(db, project_id, current_user)

    coordinator = get_coordinator(db, "glossaries")
    glossary = models.Glossary(
        project_id=project_id,
        name=data.name.strip(),
        definition=data.definition.strip(),
        author_id=current_user.id,
        sequence=await coordinator.next_sequence(project_id),
    )
    db.add(glossary)
    await db.flush()

    for url in _clean_links(data.github_links):
        db.add(models.GlossaryLink(glossary_id=glossary.id, url=url, type="github"))

    await db.commit()
    return await _get_glossary(db, glossary.id)


@router.put("/glossaries/{glossary_id}", response_model=GlossaryResponse)
async def update_glossary(
    glossary_id: str,
    data: GlossaryUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Edit a glossary term's content. Links are replaced when provided."""
    glossary = await _get_glossary(db, glossary_id)
    await require_project_member(db, glossary.project_id, current_user)

    if data.name is not None:
        glossary.name = data.name.strip()
    if data.definition is not None:
        glossary.definition = data.definition.strip()

    if data.github_links is not None:
        await db.execute(
            delete(models.GlossaryLink).where(models.GlossaryLink.glossary_id == glossary_id)
        )
        for url in _clean_links(data.github_links):
            db.add(models.GlossaryLink(glossary_id=glossary_id, url=url, type="github"))

    await db.commit()
    return await _get_glossary(db, glossary_id)


@router.delete("/glossaries/{glossary_id}", response_model=ReorderResponse)
async def delete_glossary(
    glossary_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Delete a glossary term and close the gap it leaves.

    Returns the renumbered terms of the project.
    """
    glossary = await _get_glossary(db, glossary_id)
    project_id = glossary.project_id
    await require_project_member(db, project_id, current_user)

    async def remove():
        await db.execute(delete(models.GlossaryLink).where(models.GlossaryLink.glossary_id == glossary_id))
        await db.execute(delete(models.PolicyTerm).where(models.PolicyTerm.glossary_id == glossary_id))
        await db.execute(delete(models.Glossary).where(models.Glossary.id == glossary_id))
        await db.commit()

    coordinator = get_coordinator(db, "glossaries")
    result = await coordinator.delete(project_id, glossary_id, remove)
    return to_response(result)
