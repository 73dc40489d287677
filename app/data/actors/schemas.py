"""Pydantic schemas for actors."""
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class ActorCreate(BaseModel):
    """Schema for creating an actor. It is appended to the end of the list."""
    name: str = Field(..., min_length=1, max_length=255)


class ActorUpdate(BaseModel):
    """Schema for renaming an actor."""
    name: str = Field(..., min_length=1, max_length=255)


class ActorResponse(BaseModel):
    """Schema for actor response."""
    id: str
    project_id: str
    name: str
    author_id: str
    sequence: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
