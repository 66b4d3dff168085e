"""
Audit trail actions.
"""
from typing import Optional

from ..auth.permissions import Operation
from ..schemas.audit import AuditRecordResponse
from .base import ActionResult, ActionServices


# PUBLIC_INTERFACE
def list_audit_records(services: ActionServices, token: Optional[str],
                       entity_type: Optional[str] = None, entity_id: Optional[str] = None,
                       limit: int = 100) -> ActionResult:
    """Most recent audit records of the caller's company (every company for SUPERADMIN)."""
    with services.action(token, "list_audit_records") as action:
        identity = action.resolve()
        action.authorize("auditlogs", Operation.READ)
        records = services.recorder.list(identity.company_id, entity_type=entity_type,
                                         entity_id=entity_id, limit=max(1, min(limit, 500)))
        return action.succeed([AuditRecordResponse.model_validate(record) for record in records])
    return action.result
