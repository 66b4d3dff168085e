"""
Client and project API routes.

Provides endpoints for clients, client portal contacts and projects.
"""
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status

from ...actions import projects as actions
from ...actions.base import ActionServices
from ...auth.dependencies import get_action_services, get_token
from ...schemas.common import ActionResponse
from ...schemas.projects import (
    ClientContactCreateRequest, ClientContactResponse, ClientCreateRequest, ClientResponse,
    ProjectCreateRequest, ProjectResponse, ProjectStatusRequest
)
from ..results import unwrap

clients_router = APIRouter(prefix="/clients", tags=["Clients"])
projects_router = APIRouter(prefix="/projects", tags=["Projects"])


# PUBLIC_INTERFACE
@clients_router.get("/", response_model=ActionResponse[List[ClientResponse]], summary="List clients")
async def list_clients(
    active: Optional[bool] = Query(None, description="Filter by active status"),
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.list_clients(services, token, active=active))


# PUBLIC_INTERFACE
@clients_router.post("/", response_model=ActionResponse[ClientResponse],
                     status_code=status.HTTP_201_CREATED, summary="Create client")
async def create_client(
    request: ClientCreateRequest,
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.create_client(services, token, request))


# PUBLIC_INTERFACE
@clients_router.post("/{client_id}/contacts", response_model=ActionResponse[ClientContactResponse],
                     status_code=status.HTTP_201_CREATED, summary="Create portal contact",
                     description="Create a client contact; the response carries the portal access code once.")
async def create_client_contact(
    client_id: UUID,
    request: ClientContactCreateRequest,
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.create_client_contact(services, token, client_id, request))


# PUBLIC_INTERFACE
@projects_router.get("/", response_model=ActionResponse[List[ProjectResponse]], summary="List projects")
async def list_projects(
    active: Optional[bool] = Query(None, description="Filter by active status"),
    client_id: Optional[UUID] = Query(None, description="Filter by client"),
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.list_projects(services, token, active=active, client_id=client_id))


# PUBLIC_INTERFACE
@projects_router.post("/", response_model=ActionResponse[ProjectResponse],
                      status_code=status.HTTP_201_CREATED, summary="Create project")
async def create_project(
    request: ProjectCreateRequest,
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.create_project(services, token, request))


# PUBLIC_INTERFACE
@projects_router.patch("/{project_id}/status", response_model=ActionResponse[ProjectResponse],
                       summary="Activate or deactivate project")
async def set_project_status(
    project_id: UUID,
    request: ProjectStatusRequest,
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.set_project_active(services, token, project_id, request.active))
