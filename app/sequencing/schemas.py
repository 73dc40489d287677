"""Pydantic schemas for the sequencing API."""
from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional


class SequencedItemResponse(BaseModel):
    """One sibling within a scope."""
    id: str
    parent_scope_id: str
    sequence: int
    updated_at: Optional[datetime] = None
    name: Optional[str] = None

    model_config = {"from_attributes": True}


class ReorderRequest(BaseModel):
    """A drop from the drag-and-drop list."""
    item_id: str
    new_index: int = Field(..., description="0-based destination; out-of-range values are clamped")


class ReorderResponse(BaseModel):
    """Ordering after a committed reorder, delete or compaction."""
    parent_scope_id: str
    state: str
    writes: int
    items: List[SequencedItemResponse]


class PartialReorderResponse(BaseModel):
    """Body of a 409: the persisted order after some writes failed."""
    detail: str
    failed_ids: List[str]
    items: List[SequencedItemResponse]
