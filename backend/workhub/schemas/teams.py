"""
Team Pydantic schemas.

Defines request/response models for team management and membership.
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field
from uuid import UUID

from ..database.models import UserRole


class TeamCreateRequest(BaseModel):
    """Team creation request schema."""
    name: str = Field(..., min_length=1, max_length=255, description="Team name")
    description: Optional[str] = Field(None, description="Team description")
    manager_id: Optional[UUID] = Field(None, description="User managing the team")


class TeamUpdateRequest(BaseModel):
    """Team update request schema."""
    name: Optional[str] = Field(None, min_length=1, max_length=255, description="Team name")
    description: Optional[str] = Field(None, description="Team description")
    manager_id: Optional[UUID] = Field(None, description="User managing the team")


class TeamMemberRequest(BaseModel):
    """Team membership request schema."""
    user_id: UUID = Field(..., description="User to add or remove")


class TeamMemberResponse(BaseModel):
    """Team member schema."""
    id: UUID = Field(..., description="User ID")
    name: str = Field(..., description="User name")
    email: str = Field(..., description="User email")
    role: UserRole = Field(..., description="User role")

    class Config:
        from_attributes = True


class TeamResponse(BaseModel):
    """Team response schema."""
    id: UUID = Field(..., description="Team ID")
    tenant_id: UUID = Field(..., description="Tenant ID")
    name: str = Field(..., description="Team name")
    description: Optional[str] = Field(None, description="Team description")
    manager_id: Optional[UUID] = Field(None, description="Team manager")
    members: List[TeamMemberResponse] = Field(default_factory=list, description="Team members")
    created_at: datetime = Field(..., description="Creation timestamp")

    class Config:
        from_attributes = True
