"""
Team API routes.

Provides endpoints for team management and membership.
"""
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, status

from ...actions import teams as actions
from ...actions.base import ActionServices
from ...auth.dependencies import get_action_services, get_token
from ...schemas.common import ActionResponse, DeletedResponse
from ...schemas.teams import TeamCreateRequest, TeamMemberRequest, TeamResponse, TeamUpdateRequest
from ..results import unwrap

router = APIRouter(prefix="/teams", tags=["Teams"])


# PUBLIC_INTERFACE
@router.get("/", response_model=ActionResponse[List[TeamResponse]], summary="List teams")
async def list_teams(
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.list_teams(services, token))


# PUBLIC_INTERFACE
@router.post("/", response_model=ActionResponse[TeamResponse], status_code=status.HTTP_201_CREATED,
             summary="Create team", description="Create a team in the caller's company.")
async def create_team(
    request: TeamCreateRequest,
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.create_team(services, token, request))


# PUBLIC_INTERFACE
@router.put("/{team_id}", response_model=ActionResponse[TeamResponse], summary="Update team")
async def update_team(
    team_id: UUID,
    request: TeamUpdateRequest,
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.update_team(services, token, team_id, request))


# PUBLIC_INTERFACE
@router.delete("/{team_id}", response_model=ActionResponse[DeletedResponse], summary="Delete team")
async def delete_team(
    team_id: UUID,
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.delete_team(services, token, team_id))


# PUBLIC_INTERFACE
@router.post("/{team_id}/members", response_model=ActionResponse[TeamResponse],
             summary="Add team member", description="Add a user of the same company to the team.")
async def add_team_member(
    team_id: UUID,
    request: TeamMemberRequest,
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.add_team_member(services, token, team_id, request.user_id))


# PUBLIC_INTERFACE
@router.delete("/{team_id}/members/{user_id}", response_model=ActionResponse[TeamResponse],
               summary="Remove team member")
async def remove_team_member(
    team_id: UUID,
    user_id: UUID,
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.remove_team_member(services, token, team_id, user_id))
