"""
Audit log API routes.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from ...actions import audit as actions
from ...actions.base import ActionServices
from ...auth.dependencies import get_action_services, get_token
from ...schemas.audit import AuditRecordResponse
from ...schemas.common import ActionResponse
from ..results import unwrap

router = APIRouter(prefix="/audit-logs", tags=["Audit"])


# PUBLIC_INTERFACE
@router.get("/", response_model=ActionResponse[List[AuditRecordResponse]], summary="List audit records",
            description="Most recent audit records first, optionally for one entity.")
async def list_audit_records(
    entity_type: Optional[str] = Query(None, description="Entity type, e.g. TimeEntry"),
    entity_id: Optional[str] = Query(None, description="Entity ID"),
    limit: int = Query(100, ge=1, le=500, description="Maximum number of records"),
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.list_audit_records(services, token, entity_type=entity_type,
                                             entity_id=entity_id, limit=limit))
