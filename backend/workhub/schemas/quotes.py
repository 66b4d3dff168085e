"""
Quote Pydantic schemas.

Defines request/response models for quotes and their line items.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field
from uuid import UUID

from ..database.models import QuoteStatus


class QuoteItemRequest(BaseModel):
    """Quote line request schema."""
    description: str = Field(..., min_length=1, description="Line description")
    quantity: Decimal = Field(..., gt=0, description="Quantity")
    unit_price: Decimal = Field(..., ge=0, description="Unit price")
    tax_rate: Decimal = Field(Decimal("0"), ge=0, le=100, description="Tax rate in percent")


class QuoteCreateRequest(BaseModel):
    """Quote creation request schema."""
    client_id: UUID = Field(..., description="Client ID")
    valid_until: date = Field(..., description="Last day the quote is valid")
    notes: Optional[str] = Field(None, description="Notes")
    terms: Optional[str] = Field(None, description="Terms and conditions")
    items: List[QuoteItemRequest] = Field(..., min_length=1, description="Quote lines")


class QuoteStatusUpdateRequest(BaseModel):
    """Quote status transition request schema."""
    status: QuoteStatus = Field(..., description="Target status")


class QuoteItemResponse(BaseModel):
    """Quote line response schema."""
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


class QuoteResponse(BaseModel):
    """Quote response schema."""
    id: UUID = Field(..., description="Quote ID")
    tenant_id: UUID = Field(..., description="Tenant ID")
    client_id: UUID = Field(..., description="Client ID")
    number: str = Field(..., description="Quote number")
    status: QuoteStatus = Field(..., description="Quote status")
    valid_until: date = Field(..., description="Last day the quote is valid")
    notes: Optional[str] = Field(None, description="Notes")
    terms: Optional[str] = Field(None, description="Terms and conditions")
    subtotal: Decimal = Field(..., description="Sum of line subtotals")
    tax_amount: Decimal = Field(..., description="Sum of line taxes")
    total: Decimal = Field(..., description="Grand total")
    created_by_id: UUID = Field(..., description="Author")
    sent_at: Optional[datetime] = Field(None, description="When the quote was sent")
    accepted_at: Optional[datetime] = Field(None, description="When the quote was accepted")
    rejected_at: Optional[datetime] = Field(None, description="When the quote was rejected")
    converted_at: Optional[datetime] = Field(None, description="When the quote was converted")
    created_at: datetime = Field(..., description="Creation timestamp")
    items: List[QuoteItemResponse] = Field(default_factory=list, description="Quote lines")

    class Config:
        from_attributes = True
