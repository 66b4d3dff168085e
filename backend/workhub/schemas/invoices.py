"""
Invoice Pydantic schemas.

Defines the quote conversion request and invoice response models.
"""
import datetime as dt
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field
from uuid import UUID

from ..database.models import InvoiceStatus


class QuoteConvertRequest(BaseModel):
    """Convert an accepted quote into an invoice."""
    due_date: dt.date = Field(..., description="Payment due date")


class InvoiceItemResponse(BaseModel):
    """Invoice line response schema."""
    id: UUID = Field(..., description="Line ID")
    description: str = Field(..., description="Line description")
    quantity: Decimal = Field(..., description="Quantity")
    unit_price: Decimal = Field(..., description="Unit price")
    tax_rate: Decimal = Field(..., description="Tax rate in percent")
    subtotal: Decimal = Field(..., description="Quantity times unit price")
    tax_amount: Decimal = Field(..., description="Tax on the subtotal")
    total: Decimal = Field(..., description="Subtotal plus tax")
    position: int = Field(..., description="Line order")

    class Config:
        from_attributes = True


class InvoiceResponse(BaseModel):
    """Invoice response schema."""
    id: UUID = Field(..., description="Invoice ID")
    tenant_id: UUID = Field(..., description="Tenant ID")
    client_id: UUID = Field(..., description="Client ID")
    quote_id: Optional[UUID] = Field(None, description="Quote the invoice was converted from")
    number: str = Field(..., description="Invoice number")
    status: InvoiceStatus = Field(..., description="Invoice status")
    date: dt.date = Field(..., description="Issue date")
    due_date: dt.date = Field(..., description="Payment due date")
    notes: Optional[str] = Field(None, description="Notes")
    terms: Optional[str] = Field(None, description="Terms and conditions")
    subtotal: Decimal = Field(..., description="Sum of line subtotals")
    tax_amount: Decimal = Field(..., description="Sum of line taxes")
    total: Decimal = Field(..., description="Grand total")
    paid_amount: Decimal = Field(..., description="Amount paid so far")
    balance: Decimal = Field(..., description="Amount still due")
    created_by_id: UUID = Field(..., description="Author")
    created_at: dt.datetime = Field(..., description="Creation timestamp")
    items: List[InvoiceItemResponse] = Field(default_factory=list, description="Invoice lines")

    class Config:
        from_attributes = True
