"""
Client portal Pydantic schemas.

Defines request/response models for portal sign-in and the client
dashboard.
"""
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field
from uuid import UUID


class PortalLoginRequest(BaseModel):
    """Portal sign-in request schema."""
    email: EmailStr = Field(..., description="Contact email")
    access_code: str = Field(..., min_length=1, description="Access code handed out by the company")


class PortalTokenResponse(BaseModel):
    """Portal session token schema."""
    access_token: str = Field(..., description="Portal bearer token")
    token_type: str = Field("bearer", description="Token type")
    expires_in: int = Field(..., description="Lifetime in seconds")


class PortalProjectResponse(BaseModel):
    """Project as shown to a client."""
    id: UUID = Field(..., description="Project ID")
    code: str = Field(..., description="Project code")
    name: str = Field(..., description="Project name")
    description: Optional[str] = Field(None, description="Project description")

    class Config:
        from_attributes = True


class PortalDashboardResponse(BaseModel):
    """Client dashboard schema."""
    client_id: UUID = Field(..., description="Client ID")
    client_name: str = Field(..., description="Client name")
    projects: List[PortalProjectResponse] = Field(..., description="Active projects")
