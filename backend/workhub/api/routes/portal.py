"""
Client portal API routes.

Portal tokens are separate from staff tokens; a staff token is not accepted
here and a portal token is not accepted anywhere else.
"""
from typing import Optional
from fastapi import APIRouter, Depends

from ...actions import portal as actions
from ...actions.base import ActionServices
from ...auth.dependencies import get_action_services, get_token
from ...schemas.common import ActionResponse
from ...schemas.portal import PortalDashboardResponse, PortalLoginRequest, PortalTokenResponse
from ..results import unwrap

router = APIRouter(prefix="/portal", tags=["Client Portal"])


# PUBLIC_INTERFACE
@router.post("/login", response_model=ActionResponse[PortalTokenResponse], summary="Portal login",
             description="Exchange a contact email and access code for a 24 hour portal token.")
async def portal_login(
    request: PortalLoginRequest,
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.portal_login(services, request))


# PUBLIC_INTERFACE
@router.get("/dashboard", response_model=ActionResponse[PortalDashboardResponse],
            summary="Portal dashboard")
async def portal_dashboard(
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.portal_dashboard(services, token))
