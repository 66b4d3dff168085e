"""
Client and project actions.

Projects are what hours are booked on; deactivating a project stops new
bookings without touching existing entries. Client contacts get an access
code for the client portal that is shown once and stored hashed.
"""
from typing import Optional
from uuid import UUID

from ..audit.recorder import AuditOperation, snapshot_of
from ..auth.jwt_handler import AccessCodeHandler
from ..auth.permissions import Operation, PermissionScope
from ..database.models import Client, ClientContact, Project
from ..errors import Conflict
from ..schemas.projects import (
    ClientContactCreateRequest, ClientContactResponse, ClientCreateRequest, ClientResponse,
    ProjectCreateRequest, ProjectResponse
)
from .base import ActionResult, ActionServices

PROJECT_ROUTES = ("/projects", "/hours")
CLIENT_ROUTES = ("/admin/clients",)

DUPLICATE_CLIENT = "DUPLICATE_CLIENT"
DUPLICATE_CONTACT = "DUPLICATE_CONTACT"
DUPLICATE_PROJECT_CODE = "DUPLICATE_PROJECT_CODE"


# PUBLIC_INTERFACE
def create_client(services: ActionServices, token: Optional[str],
                  request: ClientCreateRequest) -> ActionResult:
    with services.action(token, "create_client") as action:
        action.resolve()
        company_id = action.company_id()
        action.authorize("clients", Operation.CREATE, PermissionScope(company_id=company_id))

        client = Client(tenant_id=company_id, name=request.name, contact_email=request.contact_email)
        action.persist(client, conflict=Conflict(
            f"A client named '{request.name}' already exists", DUPLICATE_CLIENT))
        action.record(AuditOperation.CREATE, "Client", client.id, snapshot_of(client))
        action.invalidate(*CLIENT_ROUTES)
        return action.succeed(ClientResponse.model_validate(client))
    return action.result


# PUBLIC_INTERFACE
def list_clients(services: ActionServices, token: Optional[str],
                 active: Optional[bool] = None) -> ActionResult:
    with services.action(token, "list_clients") as action:
        action.resolve()
        action.authorize("clients", Operation.READ)
        query = action.query(Client)
        if active is not None:
            query = query.filter(Client.active == active)
        clients = query.order_by(Client.name).all()
        return action.succeed([ClientResponse.model_validate(client) for client in clients])
    return action.result


# PUBLIC_INTERFACE
def create_client_contact(services: ActionServices, token: Optional[str], client_id: UUID,
                          request: ClientContactCreateRequest) -> ActionResult:
    """
    Give a client contact access to the portal.

    The generated access code is only returned by this call; the database
    keeps a bcrypt hash.
    """
    with services.action(token, "create_client_contact") as action:
        action.resolve()
        client = action.load(Client, client_id)
        action.authorize("clients", Operation.UPDATE,
                         PermissionScope(company_id=client.tenant_id), entity_id=client.id)

        access_code = AccessCodeHandler.generate_code()
        contact = ClientContact(
            client_id=client.id,
            name=request.name,
            email=request.email.lower(),
            access_code_hash=AccessCodeHandler.hash_code(access_code),
        )
        action.persist(contact, conflict=Conflict(
            "A portal contact with this email already exists", DUPLICATE_CONTACT))
        snapshot = snapshot_of(contact)
        snapshot.pop("access_code_hash", None)
        action.record(AuditOperation.CREATE, "ClientContact", contact.id, snapshot,
                      tenant_id=client.tenant_id)
        action.invalidate(*CLIENT_ROUTES)
        return action.succeed(ClientContactResponse(
            id=contact.id,
            client_id=contact.client_id,
            name=contact.name,
            email=contact.email,
            access_code=access_code,
        ))
    return action.result


# PUBLIC_INTERFACE
def create_project(services: ActionServices, token: Optional[str],
                   request: ProjectCreateRequest) -> ActionResult:
    with services.action(token, "create_project") as action:
        action.resolve()
        company_id = action.company_id()
        action.authorize("projects", Operation.CREATE, PermissionScope(company_id=company_id))
        if request.client_id:
            action.load(Client, request.client_id)

        project = Project(
            tenant_id=company_id,
            client_id=request.client_id,
            code=request.code,
            name=request.name,
            description=request.description,
            hourly_rate=request.hourly_rate,
        )
        action.persist(project, conflict=Conflict(
            f"Project code '{request.code}' is already in use", DUPLICATE_PROJECT_CODE))
        action.record(AuditOperation.CREATE, "Project", project.id, snapshot_of(project))
        action.invalidate(*PROJECT_ROUTES)
        return action.succeed(ProjectResponse.model_validate(project))
    return action.result


# PUBLIC_INTERFACE
def set_project_active(services: ActionServices, token: Optional[str], project_id: UUID,
                       active: bool) -> ActionResult:
    """Open or close a project for new time entries."""
    with services.action(token, "set_project_active") as action:
        action.resolve()
        project = action.load(Project, project_id)
        action.authorize("projects", Operation.UPDATE,
                         PermissionScope(company_id=project.tenant_id), entity_id=project.id)

        project.active = active
        action.persist(project)
        action.record(AuditOperation.UPDATE, "Project", project.id, snapshot_of(project),
                      details="activated" if active else "deactivated", tenant_id=project.tenant_id)
        action.invalidate(*PROJECT_ROUTES)
        return action.succeed(ProjectResponse.model_validate(project))
    return action.result


# PUBLIC_INTERFACE
def list_projects(services: ActionServices, token: Optional[str], active: Optional[bool] = None,
                  client_id: Optional[UUID] = None) -> ActionResult:
    with services.action(token, "list_projects") as action:
        action.resolve()
        action.authorize("projects", Operation.READ)
        query = action.query(Project)
        if active is not None:
            query = query.filter(Project.active == active)
        if client_id:
            query = query.filter(Project.client_id == client_id)
        projects = query.order_by(Project.code).all()
        return action.succeed([ProjectResponse.model_validate(project) for project in projects])
    return action.result
