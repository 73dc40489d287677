"""Pydantic schemas for organizations, projects and memberships."""
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Literal, Optional


class OrganizationCreate(BaseModel):
    """Schema for creating an organization."""
    name: str = Field(..., min_length=1, max_length=255)


class OrganizationUpdate(BaseModel):
    """Schema for renaming an organization."""
    name: str = Field(..., min_length=1, max_length=255)


class OrganizationResponse(BaseModel):
    """Schema for organization response."""
    id: str
    name: str
    owner_id: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ProjectCreate(BaseModel):
    """Schema for creating a project."""
    name: str = Field(..., min_length=1, max_length=255)


class ProjectUpdate(BaseModel):
    """Schema for renaming a project."""
    name: str = Field(..., min_length=1, max_length=255)


class ProjectResponse(BaseModel):
    """Schema for project response."""
    id: str
    organization_id: str
    name: str
    created_at: datetime

    model_config = {"from_attributes": True}


class MembershipCreate(BaseModel):
    """Schema for adding a member to a project."""
    user_id: str
    role: Literal["admin", "member"] = "member"
    receive_emails: bool = True


class MembershipUpdate(BaseModel):
    """Schema for changing a member's role or email preference."""
    role: Optional[Literal["admin", "member"]] = None
    receive_emails: Optional[bool] = None


class MembershipResponse(BaseModel):
    """Schema for membership response."""
    id: str
    project_id: str
    user_id: str
    role: str
    receive_emails: bool
    created_at: datetime

    model_config = {"from_attributes": True}
