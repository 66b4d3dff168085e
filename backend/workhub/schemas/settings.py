"""
Company settings Pydantic schemas.

Defines request/response models for reading and updating tenant settings,
including the time-entry rule overrides.
"""
from decimal import Decimal
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field
from uuid import UUID


class TimeEntryRulesSettings(BaseModel):
    """Tenant overrides of the time-entry validation rules."""
    max_hours_per_entry: Optional[Decimal] = Field(None, gt=0, le=24, description="Maximum hours in one entry")
    daily_hours_ceiling: Optional[Decimal] = Field(None, gt=0, le=24, description="Daily hours ceiling")
    hard_daily_cap: Optional[bool] = Field(None, description="Reject instead of warn above the ceiling")
    future_grace_days: Optional[int] = Field(None, ge=0, le=31, description="Days ahead an entry may be dated")
    duration_tolerance_minutes: Optional[int] = Field(None, ge=0, le=60, description="Allowed gap between range and hours")


class SettingsUpdateRequest(BaseModel):
    """Company settings update request schema."""
    name: Optional[str] = Field(None, min_length=1, max_length=255, description="Company name")
    domain: Optional[str] = Field(None, max_length=255, description="Company domain")
    preferences: Optional[Dict[str, Any]] = Field(None, description="Free-form settings merged into the stored ones")
    time_entries: Optional[TimeEntryRulesSettings] = Field(None, description="Time-entry rule overrides")


class EffectiveRules(BaseModel):
    """Rules the validator applies for this company."""
    max_hours_per_entry: Decimal
    daily_hours_ceiling: Decimal
    hard_daily_cap: bool
    future_grace_days: int
    duration_tolerance_minutes: int


class SettingsResponse(BaseModel):
    """Company settings response schema."""
    tenant_id: UUID = Field(..., description="Tenant ID")
    name: str = Field(..., description="Company name")
    domain: Optional[str] = Field(None, description="Company domain")
    settings: Dict[str, Any] = Field(..., description="Stored settings")
    time_entry_rules: EffectiveRules = Field(..., description="Effective time-entry rules")
