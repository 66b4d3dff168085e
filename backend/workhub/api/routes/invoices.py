"""
Invoice API routes.
"""
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query

from ...actions import invoices as actions
from ...actions.base import ActionServices
from ...auth.dependencies import get_action_services, get_token
from ...database.models import InvoiceStatus
from ...schemas.common import ActionResponse
from ...schemas.invoices import InvoiceResponse
from ..results import unwrap

router = APIRouter(prefix="/invoices", tags=["Invoices"])


# PUBLIC_INTERFACE
@router.get("/", response_model=ActionResponse[List[InvoiceResponse]], summary="List invoices")
async def list_invoices(
    invoice_status: Optional[InvoiceStatus] = Query(None, alias="status", description="Filter by status"),
    client_id: Optional[UUID] = Query(None, description="Filter by client"),
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.list_invoices(services, token, status=invoice_status, client_id=client_id))
