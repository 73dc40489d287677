"""Sequencing API routes - ordered listings, drag-and-drop reorder, compaction."""
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.auth.dependencies import AuthenticatedUser, get_current_user
from app.data.access import require_scope_access
from app.database import get_db
from app.sequencing.coordinator import ReorderCoordinator
from app.sequencing.errors import (
    BackendUnavailableError,
    ItemNotFoundError,
    PartialReorderError,
    ReorderError,
)
from app.sequencing.models import ReorderResult
from app.sequencing.schemas import (
    PartialReorderResponse,
    ReorderRequest,
    ReorderResponse,
    SequencedItemResponse,
)
from app.sequencing.scopes import SCOPES
from app.sequencing.store import SequenceStore

router = APIRouter()


def get_coordinator(db: AsyncSession, kind: str) -> ReorderCoordinator:
    """Coordinator for one sequenced entity kind. Raises 404 for unknown kinds."""
    scope = SCOPES.get(kind)
    if scope is None:
        raise HTTPException(status_code=404, detail=f"Unknown sequence kind: {kind}")
    return ReorderCoordinator(SequenceStore(db, scope))


async def reorder_error_handler(request: Request, exc: ReorderError) -> JSONResponse:
    """Map coordinator errors onto HTTP responses."""
    if isinstance(exc, PartialReorderError):
        body = PartialReorderResponse(
            detail=str(exc),
            failed_ids=exc.failed_ids,
            items=[SequencedItemResponse(**item.to_dict()) for item in exc.items],
        )
        return JSONResponse(status_code=409, content=body.model_dump(mode="json"))
    if isinstance(exc, ItemNotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})
    if isinstance(exc, BackendUnavailableError):
        return JSONResponse(status_code=503, content={"detail": "Storage backend unavailable"})
    return JSONResponse(status_code=400, content={"detail": str(exc)})


def to_response(result: ReorderResult) -> ReorderResponse:
    return ReorderResponse(
        parent_scope_id=result.parent_scope_id,
        state=result.state.value,
        writes=result.writes,
        items=[SequencedItemResponse(**item.to_dict()) for item in result.items],
    )


@router.get("/{kind}/{scope_id}", response_model=List[SequencedItemResponse])
async def list_ordered(
    kind: str,
    scope_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Siblings of a scope, ascending by sequence."""
    coordinator = get_coordinator(db, kind)
    await require_scope_access(db, kind, scope_id, current_user)
    items = await coordinator.list_ordered(scope_id)
    return [SequencedItemResponse(**item.to_dict()) for item in items]


@router.post("/{kind}/{scope_id}/reorder", response_model=ReorderResponse)
async def reorder(
    kind: str,
    scope_id: str,
    data: ReorderRequest,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Move an item to a new 0-based position within its scope.

    Returns 409 with the persisted order if only some writes were applied.
    """
    coordinator = get_coordinator(db, kind)
    await require_scope_access(db, kind, scope_id, current_user)
    result = await coordinator.reorder(scope_id, data.item_id, data.new_index)
    return to_response(result)


@router.post("/{kind}/{scope_id}/compact", response_model=ReorderResponse)
async def compact(
    kind: str,
    scope_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Renumber a scope to 1..N, healing gaps or duplicates."""
    coordinator = get_coordinator(db, kind)
    await require_scope_access(db, kind, scope_id, current_user)
    result = await coordinator.compact(scope_id)
    return to_response(result)
