"""Pydantic schemas for PRDs."""
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class PrdUpdate(BaseModel):
    """Schema for saving a project's PRD."""
    contents: str


class PrdResponse(BaseModel):
    """Schema for PRD response."""
    id: str
    project_id: str
    contents: str
    author_id: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
