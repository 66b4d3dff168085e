"""
Client portal actions.

Portal contacts sign in with their email and an access code and receive a
portal token valid for a fixed 24 hours. The dashboard only ever shows the
contact's own client.
"""
import logging
from typing import Optional

from ..auth.jwt_handler import AccessCodeHandler, JWTHandler, PORTAL_TOKEN_EXPIRE_HOURS
from ..auth.permissions import Operation, PermissionScope
from ..database.models import Client, ClientContact, Project
from ..errors import NotFound, Unauthenticated
from ..schemas.portal import (
    PortalDashboardResponse, PortalLoginRequest, PortalProjectResponse, PortalTokenResponse
)
from .base import ActionResult, ActionServices

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
def portal_login(services: ActionServices, request: PortalLoginRequest) -> ActionResult:
    """
    Exchange a contact's email and access code for a portal token.

    Unknown email, wrong code and inactive contacts or clients all fail the
    same way.
    """
    with services.action(None, "portal_login") as action:
        contact = services.db.query(ClientContact).filter(
            ClientContact.email == request.email.lower()
        ).first()
        if (contact is None or not contact.active or not contact.client.active
                or not AccessCodeHandler.verify_code(request.access_code, contact.access_code_hash)):
            logger.info(f"Failed portal login for {request.email}")
            raise Unauthenticated("Invalid email or access code")

        contact.last_login = services.now()
        action.persist(contact)
        token = JWTHandler.create_portal_token(contact.id, contact.client_id, contact.name)
        logger.info(f"Portal login for contact {contact.id} of client {contact.client_id}")
        return action.succeed(PortalTokenResponse(
            access_token=token,
            expires_in=PORTAL_TOKEN_EXPIRE_HOURS * 3600,
        ))
    return action.result


# PUBLIC_INTERFACE
def portal_dashboard(services: ActionServices, token: Optional[str]) -> ActionResult:
    """The contact's client and its active projects."""
    with services.action(token, "portal_dashboard") as action:
        identity = action.resolve_portal()
        action.authorize("projects", Operation.READ, PermissionScope(
            company_id=identity.company_id, client_id=identity.client_id))
        client = services.db.get(Client, identity.client_id)
        if client is None:
            raise NotFound("Client", identity.client_id)

        projects = action.query(Project).filter(
            Project.client_id == client.id,
            Project.active.is_(True),
        ).order_by(Project.code).all()
        return action.succeed(PortalDashboardResponse(
            client_id=client.id,
            client_name=client.name,
            projects=[PortalProjectResponse.model_validate(project) for project in projects],
        ))
    return action.result
