"""Pydantic schemas for policies and their feature bindings."""
from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional

from app.sequencing.schemas import ReorderResponse


class PolicyLinkResponse(BaseModel):
    """Schema for a policy link."""
    id: str
    url: str
    type: str

    model_config = {"from_attributes": True}


class PolicyTermResponse(BaseModel):
    """Schema for a glossary term tagged on a policy."""
    glossary_id: str

    model_config = {"from_attributes": True}


class PolicyBindingSummary(BaseModel):
    """A feature a policy is bound to, with the policy's position there."""
    feature_id: str
    sequence: int

    model_config = {"from_attributes": True}


class PolicyCreate(BaseModel):
    """Schema for creating a policy.

    The policy is appended to the end of each listed feature's policies.
    """
    contents: str = Field(..., min_length=1)
    context_links: List[str] = []
    general_links: List[str] = []
    glossary_ids: List[str] = []
    feature_ids: List[str] = []


class PolicyUpdate(BaseModel):
    """Schema for editing a policy. Omitted lists are left untouched."""
    contents: Optional[str] = Field(default=None, min_length=1)
    context_links: Optional[List[str]] = None
    general_links: Optional[List[str]] = None
    glossary_ids: Optional[List[str]] = None
    feature_ids: Optional[List[str]] = None


class PolicyResponse(BaseModel):
    """Schema for policy response."""
    id: str
    project_id: str
    contents: str
    author_id: str
    links: List[PolicyLinkResponse] = []
    terms: List[PolicyTermResponse] = []
    feature_bindings: List[PolicyBindingSummary] = []
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class FeaturePolicyResponse(BaseModel):
    """A policy as it appears in one feature's ordered list."""
    id: str  # binding id, the item reordered within the feature
    feature_id: str
    sequence: int
    policy: PolicyResponse

    model_config = {"from_attributes": True}


class PolicyDeleteResponse(BaseModel):
    """Renumbered policy lists of every feature the policy was bound to."""
    message: str
    renumbered: List[ReorderResponse] = []
    failed_feature_ids: List[str] = []  # still gapped; healed by compaction
