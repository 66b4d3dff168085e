"""
Permission gate.

Role based access control with tenant isolation. Every action asks the gate
before it touches data; anything not granted in the matrix below is denied.
"""
import enum
from dataclasses import dataclass
from typing import Dict, Optional
from uuid import UUID

from ..database.models import UserRole
from ..errors import Forbidden
from .session import Identity


class Operation(str, enum.Enum):
    """Actions a permission can be granted for."""
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    APPROVE = "approve"


class Access(str, enum.Enum):
    """Outcome of a passed check; DEPARTMENT and OWN ask the caller to filter."""
    ALL = "all"
    DEPARTMENT = "department"
    OWN = "own"


RESOURCES = (
    "projects",
    "clients",
    "timeentries",
    "teams",
    "holidays",
    "quotes",
    "invoices",
    "settings",
    "chats",
    "auditlogs",
)

C, R, U, D, A = (Operation.CREATE, Operation.READ, Operation.UPDATE,
                 Operation.DELETE, Operation.APPROVE)

# ADMIN holds every permission inside its own company and SUPERADMIN holds
# every permission everywhere, so only the restricted roles are listed.
PERMISSIONS: Dict[UserRole, Dict[str, Dict[Operation, Access]]] = {
    UserRole.MANAGER: {
        "projects": {C: Access.ALL, R: Access.ALL, U: Access.ALL},
        "clients": {C: Access.ALL, R: Access.ALL, U: Access.ALL},
        "timeentries": {C: Access.ALL, R: Access.DEPARTMENT, U: Access.DEPARTMENT, D: Access.OWN,
                        A: Access.DEPARTMENT},
        "teams": {R: Access.ALL},
        "holidays": {R: Access.ALL},
        "quotes": {C: Access.ALL, R: Access.ALL, U: Access.ALL, D: Access.OWN},
        "invoices": {C: Access.ALL, R: Access.ALL},
        "settings": {R: Access.ALL},
        "chats": {C: Access.ALL, R: Access.ALL},
    },
    UserRole.WORKER: {
        "projects": {R: Access.ALL},
        "clients": {R: Access.ALL},
        "timeentries": {C: Access.ALL, R: Access.OWN, U: Access.OWN, D: Access.OWN},
        "teams": {R: Access.ALL},
        "holidays": {R: Access.ALL},
        "quotes": {C: Access.ALL, R: Access.OWN, U: Access.OWN, D: Access.OWN},
        "settings": {R: Access.ALL},
        "chats": {C: Access.ALL, R: Access.ALL},
    },
    UserRole.CLIENT: {
        "projects": {R: Access.OWN},
        "clients": {R: Access.OWN},
    },
}


@dataclass(frozen=True)
class PermissionScope:
    """
    Target of a permission check.

    company_id is the tenant that owns the target; owner_id is the staff user
    who owns it and department that user's department; client_id is the client
    it belongs to. A global scope targets data shared by every tenant.
    """

    company_id: Optional[UUID] = None
    owner_id: Optional[UUID] = None
    client_id: Optional[UUID] = None
    department: Optional[str] = None
    is_global: bool = False

    @classmethod
    def global_(cls) -> "PermissionScope":
        return cls(is_global=True)


def has_permission(role: UserRole, resource: str, operation: Operation) -> Optional[Access]:
    """Matrix lookup without tenant or ownership context; None means denied."""
    if role in (UserRole.SUPERADMIN, UserRole.ADMIN):
        return Access.ALL if resource in RESOURCES else None
    return PERMISSIONS.get(role, {}).get(resource, {}).get(operation)


class PermissionGate:
    """Stateless permission decisions. Safe to share; never caches results."""

    def check(self, identity: Identity, resource: str, operation: Operation,
              scope: Optional[PermissionScope] = None) -> Access:
        """
        Decide whether identity may perform operation on resource.

        Args:
            identity: Resolved caller
            resource: Resource tag, e.g. "timeentries"
            operation: Requested operation
            scope: Target tenant/owner/client; defaults to the caller's company

        Returns:
            Access: ALL, or DEPARTMENT/OWN when the caller must limit its
                query to its department or its own rows (a concrete target
                inside that limit yields ALL)

        Raises:
            Forbidden: When the request is not explicitly allowed
        """
        operation = Operation(operation)
        scope = scope or PermissionScope()
        denied = Forbidden(f"Not allowed to {operation.value} {resource}")

        if not identity.is_active or resource not in RESOURCES:
            raise denied

        if identity.role == UserRole.SUPERADMIN:
            return Access.ALL

        if operation == Operation.APPROVE and scope.owner_id == identity.id:
            raise Forbidden(f"You cannot approve your own {resource}")

        if identity.company_id is None or scope.is_global:
            raise denied
        if scope.company_id is not None and scope.company_id != identity.company_id:
            raise Forbidden("Access to another company is not allowed")

        access = has_permission(identity.role, resource, operation)
        if access is None:
            raise denied

        if access == Access.ALL:
            return access

        if access == Access.DEPARTMENT:
            return self._department_access(identity, resource, scope)

        # OWN grant: a concrete target must belong to the caller, otherwise
        # the caller gets OWN back and has to filter its own query.
        if identity.role == UserRole.CLIENT:
            if identity.client_id is None:
                raise denied
            if scope.client_id is None:
                return Access.OWN
            if scope.client_id != identity.client_id:
                raise Forbidden(f"Only your own {resource} are accessible")
            return Access.ALL

        if scope.owner_id is None:
            return Access.OWN
        if scope.owner_id != identity.id:
            raise Forbidden(f"You can only {operation.value} your own {resource}")
        return Access.ALL

    @staticmethod
    def _department_access(identity: Identity, resource: str, scope: PermissionScope) -> Access:
        if scope.owner_id is not None and scope.owner_id == identity.id:
            return Access.ALL
        if scope.owner_id is None and scope.department is None:
            return Access.DEPARTMENT
        if identity.department is not None and scope.department == identity.department:
            return Access.ALL
        raise Forbidden(f"Only {resource} of your own department are accessible")

    def can(self, identity: Identity, resource: str, operation: Operation,
            scope: Optional[PermissionScope] = None) -> bool:
        """Non-raising form of check()."""
        try:
            self.check(identity, resource, operation, scope)
        except Forbidden:
            return False
        return True
