"""
Time entry API routes.

Provides endpoints to book, edit, submit, review, delete and list hours.
"""
from datetime import date
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status

from ...actions import time_entries as actions
from ...actions.base import ActionServices
from ...auth.dependencies import get_action_services, get_token
from ...database.models import TimeEntryStatus
from ...schemas.common import ActionResponse, DeletedResponse, ErrorResponse
from ...schemas.time_entries import (
    TimeEntriesListResponse, TimeEntryBulkReviewRequest, TimeEntryCreateRequest,
    TimeEntryResponse, TimeEntryReviewRequest, TimeEntrySubmitRequest, TimeEntryUpdateRequest
)
from ..results import unwrap

router = APIRouter(prefix="/time-entries", tags=["Time Entries"],
                   responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}})


# PUBLIC_INTERFACE
@router.post("/", response_model=ActionResponse[TimeEntryResponse], status_code=status.HTTP_201_CREATED,
             summary="Create time entry",
             description="Book hours for the current user. Daily-limit warnings are returned with the entry.",
             responses={422: {"model": ErrorResponse}, 409: {"model": ErrorResponse}})
async def create_time_entry(
    request: TimeEntryCreateRequest,
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    """Create a time entry for the caller."""
    return unwrap(actions.save_time_entry(services, token, request))


# PUBLIC_INTERFACE
@router.get("/", response_model=ActionResponse[TimeEntriesListResponse],
            summary="List time entries",
            description="List the time entries visible to the caller.")
async def list_time_entries(
    user_id: Optional[UUID] = Query(None, description="Filter by user"),
    project_id: Optional[UUID] = Query(None, description="Filter by project"),
    date_from: Optional[date] = Query(None, description="First day, inclusive"),
    date_to: Optional[date] = Query(None, description="Last day, inclusive"),
    entry_status: Optional[TimeEntryStatus] = Query(None, alias="status", description="Filter by status"),
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.list_time_entries(
        services, token, user_id=user_id, project_id=project_id,
        date_from=date_from, date_to=date_to, status=entry_status,
    ))


# PUBLIC_INTERFACE
@router.put("/{entry_id}", response_model=ActionResponse[TimeEntryResponse],
            summary="Update time entry",
            description="Change a time entry. Approved entries can only be changed by administrators.")
async def update_time_entry(
    entry_id: UUID,
    request: TimeEntryUpdateRequest,
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.update_time_entry(services, token, entry_id, request))


# PUBLIC_INTERFACE
@router.delete("/{entry_id}", response_model=ActionResponse[DeletedResponse],
               summary="Delete time entry")
async def delete_time_entry(
    entry_id: UUID,
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.delete_time_entry(services, token, entry_id))


# PUBLIC_INTERFACE
@router.post("/submit", response_model=ActionResponse[List[TimeEntryResponse]],
             summary="Submit time entries",
             description="Send the caller's draft entries for approval.",
             responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}})
async def submit_time_entries(
    request: TimeEntrySubmitRequest,
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.submit_time_entries(services, token, request.entry_ids))


# PUBLIC_INTERFACE
@router.post("/review", response_model=ActionResponse[List[TimeEntryResponse]],
             summary="Approve or reject several time entries",
             description="Review submitted entries as one unit. Rejecting requires a reason.",
             responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}})
async def review_time_entries(
    request: TimeEntryBulkReviewRequest,
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.review_time_entries(services, token, request.entry_ids,
                                              request.approve, request.reason))


# PUBLIC_INTERFACE
@router.post("/{entry_id}/review", response_model=ActionResponse[TimeEntryResponse],
             summary="Approve or reject time entry")
async def review_time_entry(
    entry_id: UUID,
    request: TimeEntryReviewRequest,
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    """Review a submitted entry; requires the approve permission on time entries."""
    return unwrap(actions.review_time_entry(services, token, entry_id, request.approve, request.reason))
