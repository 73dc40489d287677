"""Pydantic schemas for features."""
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class FeatureCreate(BaseModel):
    """Schema for creating a feature under a usecase."""
    name: str = Field(..., min_length=1, max_length=255)


class FeatureUpdate(BaseModel):
    """Schema for renaming a feature."""
    name: str = Field(..., min_length=1, max_length=255)


class FeatureResponse(BaseModel):
    """Schema for feature response."""
    id: str
    usecase_id: str
    name: str
    author_id: str
    sequence: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
