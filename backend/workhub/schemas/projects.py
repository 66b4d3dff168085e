"""
Client and project Pydantic schemas.

Defines request/response models for clients, client portal contacts and
projects.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, EmailStr, Field
from uuid import UUID


class ClientCreateRequest(BaseModel):
    """Client creation request schema."""
    name: str = Field(..., min_length=1, max_length=255, description="Client name")
    contact_email: Optional[EmailStr] = Field(None, description="Contact email")


class ClientResponse(BaseModel):
    """Client response schema."""
    id: UUID = Field(..., description="Client ID")
    tenant_id: UUID = Field(..., description="Tenant ID")
    name: str = Field(..., description="Client name")
    contact_email: Optional[str] = Field(None, description="Contact email")
    active: bool = Field(..., description="Whether client is active")
    created_at: datetime = Field(..., description="Creation timestamp")

    class Config:
        from_attributes = True


class ClientContactCreateRequest(BaseModel):
    """Portal contact creation request schema."""
    name: str = Field(..., min_length=1, max_length=200, description="Contact name")
    email: EmailStr = Field(..., description="Contact email, used to sign in to the portal")


class ClientContactResponse(BaseModel):
    """Portal contact response schema; the access code is only shown once."""
    id: UUID = Field(..., description="Contact ID")
    client_id: UUID = Field(..., description="Client ID")
    name: str = Field(..., description="Contact name")
    email: str = Field(..., description="Contact email")
    access_code: Optional[str] = Field(None, description="Portal access code")


class ProjectCreateRequest(BaseModel):
    """Project creation request schema."""
    code: str = Field(..., min_length=1, max_length=50, description="Project code, unique per company")
    name: str = Field(..., min_length=1, max_length=255, description="Project name")
    client_id: Optional[UUID] = Field(None, description="Client ID")
    description: Optional[str] = Field(None, description="Project description")
    hourly_rate: Optional[Decimal] = Field(None, ge=0, description="Hourly rate")


class ProjectStatusRequest(BaseModel):
    """Project activation request schema."""
    active: bool = Field(..., description="Whether hours may be booked on the project")


class ProjectResponse(BaseModel):
    """Project response schema."""
    id: UUID = Field(..., description="Project ID")
    tenant_id: UUID = Field(..., description="Tenant ID")
    client_id: Optional[UUID] = Field(None, description="Client ID")
    code: str = Field(..., description="Project code")
    name: str = Field(..., description="Project name")
    description: Optional[str] = Field(None, description="Project description")
    hourly_rate: Optional[Decimal] = Field(None, description="Hourly rate")
    active: bool = Field(..., description="Whether project is active")
    created_at: datetime = Field(..., description="Creation timestamp")

    class Config:
        from_attributes = True
