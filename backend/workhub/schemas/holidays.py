"""
Holiday Pydantic schemas.

Defines request/response models for global and company holidays.
"""
import datetime as dt
from typing import Optional
from pydantic import BaseModel, Field
from uuid import UUID


class HolidayCreateRequest(BaseModel):
    """Holiday creation request schema."""
    date: dt.date = Field(..., description="Holiday date")
    name: str = Field(..., min_length=1, max_length=255, description="Holiday name")
    type: str = Field("NATIONAL", max_length=50, description="NATIONAL, REGIONAL, LOCAL or COMPANY")
    is_global: bool = Field(False, description="Applies to every company")


class HolidayUpdateRequest(BaseModel):
    """Holiday update request schema."""
    name: Optional[str] = Field(None, min_length=1, max_length=255, description="Holiday name")
    type: Optional[str] = Field(None, max_length=50, description="Holiday type")


class HolidayResponse(BaseModel):
    """Holiday response schema."""
    id: UUID = Field(..., description="Holiday ID")
    date: dt.date = Field(..., description="Holiday date")
    name: str = Field(..., description="Holiday name")
    type: str = Field(..., description="Holiday type")
    year: int = Field(..., description="Calendar year")
    tenant_id: Optional[UUID] = Field(None, description="Owning company, empty for global holidays")
    is_global: bool = Field(..., description="Applies to every company")
