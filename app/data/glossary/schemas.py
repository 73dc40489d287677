"""Pydantic schemas for glossary terms."""
from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional


class GlossaryLinkResponse(BaseModel):
    """Schema for a glossary link."""
    id: str
    url: str
    type: str

    model_config = {"from_attributes": True}


class GlossaryCreate(BaseModel):
    """Schema for creating a glossary term. It is appended to the end of the list."""
    name: str = Field(..., min_length=1, max_length=255)
    definition: str = Field(..., min_length=1)
    github_links: List[str] = []


class GlossaryUpdate(BaseModel):
    """Schema for editing a glossary term. Never changes its position."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    definition: Optional[str] = Field(default=None, min_length=1)
    github_links: Optional[List[str]] = None


class GlossaryResponse(BaseModel):
    """Schema for glossary response."""
    id: str
    project_id: str
    name: str
    definition: str
    author_id: str
    sequence: int
    links: List[GlossaryLinkResponse] = []
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
