"""Pydantic schemas for usecases."""
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class UsecaseCreate(BaseModel):
    """Schema for creating a usecase under an actor."""
    name: str = Field(..., min_length=1, max_length=255)


class UsecaseUpdate(BaseModel):
    """Schema for renaming a usecase."""
    name: str = Field(..., min_length=1, max_length=255)


class UsecaseResponse(BaseModel):
    """Schema for usecase response."""
    id: str
    actor_id: str
    name: str
    author_id: str
    sequence: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
