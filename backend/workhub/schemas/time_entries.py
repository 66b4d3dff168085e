"""
Time entry Pydantic schemas.

Defines request/response models for booking, editing, submitting,
reviewing and listing time entries.
"""
import datetime as dt
from typing import Optional, List
from pydantic import BaseModel, Field
from uuid import UUID
from decimal import Decimal

from ..database.models import TimeEntryStatus


class TimeEntryCreateRequest(BaseModel):
    """Time entry creation request schema."""
    project_id: UUID = Field(..., description="Project ID")
    date: dt.date = Field(..., description="Work day")
    hours: Decimal = Field(..., description="Hours worked")
    start_time: Optional[dt.time] = Field(None, description="Start of the worked range")
    end_time: Optional[dt.time] = Field(None, description="End of the worked range")
    notes: Optional[str] = Field(None, max_length=2000, description="Work description")


class TimeEntryUpdateRequest(BaseModel):
    """Time entry update request schema; omitted fields keep their value."""
    project_id: Optional[UUID] = Field(None, description="Project ID")
    date: Optional[dt.date] = Field(None, description="Work day")
    hours: Optional[Decimal] = Field(None, description="Hours worked")
    start_time: Optional[dt.time] = Field(None, description="Start of the worked range")
    end_time: Optional[dt.time] = Field(None, description="End of the worked range")
    notes: Optional[str] = Field(None, max_length=2000, description="Work description")


class TimeEntrySubmitRequest(BaseModel):
    """Send draft entries for approval."""
    entry_ids: List[UUID] = Field(..., min_length=1, description="Entries to submit")


class TimeEntryReviewRequest(BaseModel):
    """Approve or reject a submitted time entry."""
    approve: bool = Field(..., description="True to approve, false to reject")
    reason: Optional[str] = Field(None, max_length=1000, description="Rejection reason, required to reject")


class TimeEntryBulkReviewRequest(TimeEntryReviewRequest):
    """Approve or reject several submitted time entries at once."""
    entry_ids: List[UUID] = Field(..., min_length=1, description="Entries to review")


class TimeEntryResponse(BaseModel):
    """Time entry response schema."""
    id: UUID = Field(..., description="Time entry ID")
    tenant_id: UUID = Field(..., description="Tenant ID")
    user_id: UUID = Field(..., description="User ID")
    project_id: UUID = Field(..., description="Project ID")
    date: dt.date = Field(..., description="Work day")
    start_time: Optional[dt.time] = Field(None, description="Start time")
    end_time: Optional[dt.time] = Field(None, description="End time")
    hours: Decimal = Field(..., description="Hours worked")
    notes: Optional[str] = Field(None, description="Work description")
    status: TimeEntryStatus = Field(..., description="Review status")
    submitted_at: Optional[dt.datetime] = Field(None, description="When the entry was submitted")
    reviewed_by_id: Optional[UUID] = Field(None, description="Reviewer")
    reviewed_at: Optional[dt.datetime] = Field(None, description="When the entry was reviewed")
    rejection_reason: Optional[str] = Field(None, description="Why the entry was rejected")
    created_at: dt.datetime = Field(..., description="Creation timestamp")
    updated_at: Optional[dt.datetime] = Field(None, description="Last update timestamp")

    class Config:
        from_attributes = True


class TimeEntriesListResponse(BaseModel):
    """Time entries list response schema."""
    entries: List[TimeEntryResponse] = Field(..., description="List of time entries")
    total: int = Field(..., description="Total number of entries")
    total_hours: Decimal = Field(..., description="Sum of hours")
