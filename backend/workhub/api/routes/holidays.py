"""
Holiday API routes.

Provides endpoints for global and company holidays.
"""
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status

from ...actions import holidays as actions
from ...actions.base import ActionServices
from ...auth.dependencies import get_action_services, get_token
from ...schemas.common import ActionResponse, DeletedResponse
from ...schemas.holidays import HolidayCreateRequest, HolidayResponse, HolidayUpdateRequest
from ..results import unwrap

router = APIRouter(prefix="/holidays", tags=["Holidays"])


# PUBLIC_INTERFACE
@router.get("/", response_model=ActionResponse[List[HolidayResponse]], summary="List holidays",
            description="Global holidays plus the caller's company holidays.")
async def list_holidays(
    year: Optional[int] = Query(None, ge=1900, le=2200, description="Calendar year"),
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.list_holidays(services, token, year=year))


# PUBLIC_INTERFACE
@router.post("/", response_model=ActionResponse[HolidayResponse], status_code=status.HTTP_201_CREATED,
             summary="Create holiday",
             description="Create a company holiday, or a global one when is_global is set (superadmin only).")
async def create_holiday(
    request: HolidayCreateRequest,
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.create_holiday(services, token, request))


# PUBLIC_INTERFACE
@router.put("/{holiday_id}", response_model=ActionResponse[HolidayResponse], summary="Update holiday")
async def update_holiday(
    holiday_id: UUID,
    request: HolidayUpdateRequest,
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.update_holiday(services, token, holiday_id, request))


# PUBLIC_INTERFACE
@router.delete("/{holiday_id}", response_model=ActionResponse[DeletedResponse], summary="Delete holiday")
async def delete_holiday(
    holiday_id: UUID,
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.delete_holiday(services, token, holiday_id))
