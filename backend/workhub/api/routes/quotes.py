"""
Quote API routes.

Provides endpoints to create quotes, move them through their lifecycle,
convert accepted quotes to invoices and delete drafts.
"""
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status

from ...actions import invoices as invoice_actions
from ...actions import quotes as actions
from ...actions.base import ActionServices
from ...auth.dependencies import get_action_services, get_token
from ...database.models import QuoteStatus
from ...schemas.common import ActionResponse, DeletedResponse
from ...schemas.invoices import InvoiceResponse, QuoteConvertRequest
from ...schemas.quotes import QuoteCreateRequest, QuoteResponse, QuoteStatusUpdateRequest
from ..results import unwrap

router = APIRouter(prefix="/quotes", tags=["Quotes"])


# PUBLIC_INTERFACE
@router.get("/", response_model=ActionResponse[List[QuoteResponse]], summary="List quotes")
async def list_quotes(
    quote_status: Optional[QuoteStatus] = Query(None, alias="status", description="Filter by status"),
    client_id: Optional[UUID] = Query(None, description="Filter by client"),
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.list_quotes(services, token, status=quote_status, client_id=client_id))


# PUBLIC_INTERFACE
@router.post("/", response_model=ActionResponse[QuoteResponse], status_code=status.HTTP_201_CREATED,
             summary="Create quote", description="Create a numbered draft quote with computed totals.")
async def create_quote(
    request: QuoteCreateRequest,
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.create_quote(services, token, request))


# PUBLIC_INTERFACE
@router.post("/{quote_id}/status", response_model=ActionResponse[QuoteResponse],
             summary="Change quote status")
async def update_quote_status(
    quote_id: UUID,
    request: QuoteStatusUpdateRequest,
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.update_quote_status(services, token, quote_id, request.status))


# PUBLIC_INTERFACE
@router.delete("/{quote_id}", response_model=ActionResponse[DeletedResponse],
               summary="Delete draft quote")
async def delete_quote(
    quote_id: UUID,
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.delete_quote(services, token, quote_id))


# PUBLIC_INTERFACE
@router.post("/{quote_id}/convert", response_model=ActionResponse[InvoiceResponse],
             status_code=status.HTTP_201_CREATED, summary="Convert quote to invoice",
             description="Create a numbered draft invoice from an accepted quote.")
async def convert_quote(
    quote_id: UUID,
    request: QuoteConvertRequest,
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(invoice_actions.convert_quote(services, token, quote_id, request))
