"""
Company settings API routes.
"""
from typing import Optional
from fastapi import APIRouter, Depends

from ...actions import settings as actions
from ...actions.base import ActionServices
from ...auth.dependencies import get_action_services, get_token
from ...schemas.common import ActionResponse
from ...schemas.settings import SettingsResponse, SettingsUpdateRequest
from ..results import unwrap

router = APIRouter(prefix="/settings", tags=["Settings"])


# PUBLIC_INTERFACE
@router.get("/", response_model=ActionResponse[SettingsResponse], summary="Get company settings",
            description="Stored settings and the effective time-entry rules of the caller's company.")
async def get_settings(
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.get_settings(services, token))


# PUBLIC_INTERFACE
@router.patch("/", response_model=ActionResponse[SettingsResponse], summary="Update company settings")
async def update_settings(
    request: SettingsUpdateRequest,
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.update_settings(services, token, request))
