"""
Session resolution.

Turns an opaque bearer token into an Identity: who is calling, with which
role and department, on behalf of which company. Staff sessions and
client-portal sessions are verified independently.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from ..database.models import ClientContact, User, UserRole
from ..errors import MissingTenant, Unauthenticated
from .jwt_handler import JWTHandler, PORTAL_TOKEN_TYPE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """Caller of a request. Built once per request and never mutated."""

    id: UUID
    role: UserRole
    company_id: Optional[UUID]
    is_active: bool = True
    client_id: Optional[UUID] = None
    department: Optional[str] = None

    @property
    def is_superadmin(self) -> bool:
        return self.role == UserRole.SUPERADMIN

    @property
    def is_admin(self) -> bool:
        return self.role in (UserRole.ADMIN, UserRole.SUPERADMIN)

    @property
    def is_client(self) -> bool:
        return self.role == UserRole.CLIENT


class JWTSessionSource:
    """Session collaborator backed by staff JWTs."""

    def current_session(self, token: Optional[str]) -> Optional[Dict[str, Any]]:
        """
        Decode the session carried by a token.

        Returns:
            Optional[Dict[str, Any]]: {user_id, role, company_id} or None
        """
        if not token:
            return None
        payload = JWTHandler.verify_token(token)
        if payload is None or not payload.get("sub"):
            return None
        return {
            "user_id": payload["sub"],
            "role": payload.get("role"),
            "company_id": payload.get("tenant_id"),
        }


def _parse_uuid(value) -> Optional[UUID]:
    if value is None or isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


class SessionResolver:
    """
    Resolve staff identities.

    The token only says who the caller claims to be; role, company and the
    active flag are re-read from the users table on every call so that a
    change made between two requests takes effect immediately.
    """

    def __init__(self, db: Session, source: Optional[JWTSessionSource] = None):
        self.db = db
        self.source = source or JWTSessionSource()

    def resolve(self, token: Optional[str]) -> Identity:
        """
        Resolve the identity behind a session token.

        Raises:
            Unauthenticated: No session, invalid token, unknown or inactive user
            MissingTenant: Non-superadmin user without a company
        """
        session = self.source.current_session(token)
        if session is None:
            raise Unauthenticated()

        user_id = _parse_uuid(session.get("user_id"))
        if user_id is None:
            raise Unauthenticated("Invalid session subject")

        user = self.db.get(User, user_id)
        if user is None or not user.active:
            logger.info(f"Rejected session for unknown or inactive user {user_id}")
            raise Unauthenticated()

        if user.tenant_id is None and user.role != UserRole.SUPERADMIN:
            raise MissingTenant()

        return Identity(
            id=user.id,
            role=user.role,
            company_id=user.tenant_id,
            is_active=user.active,
            department=user.department,
        )


class PortalSessionResolver:
    """Resolve client-portal identities; bad tokens mean anonymous."""

    def __init__(self, db: Session):
        self.db = db

    def resolve(self, token: Optional[str]) -> Optional[Identity]:
        if not token:
            return None
        payload = JWTHandler.verify_token(token, token_type=PORTAL_TOKEN_TYPE)
        if payload is None:
            return None

        contact_id = _parse_uuid(payload.get("sub"))
        client_id = _parse_uuid(payload.get("client_id"))
        if contact_id is None or client_id is None:
            return None

        contact = self.db.get(ClientContact, contact_id)
        if contact is None or not contact.active or contact.client_id != client_id:
            return None
        if not contact.client.active:
            return None

        return Identity(
            id=contact.id,
            role=UserRole.CLIENT,
            company_id=contact.client.tenant_id,
            client_id=contact.client_id,
        )