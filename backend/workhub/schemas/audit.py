"""
Audit trail Pydantic schemas.
"""
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field
from uuid import UUID


class AuditRecordResponse(BaseModel):
    """Audit record response schema."""
    id: UUID = Field(..., description="Record ID")
    tenant_id: Optional[UUID] = Field(None, description="Tenant ID")
    actor_id: UUID = Field(..., description="Who performed the operation")
    operation: str = Field(..., description="CREATE, UPDATE, DELETE or DENIED_<ACTION>")
    entity_type: str = Field(..., description="Entity type")
    entity_id: Optional[str] = Field(None, description="Entity ID")
    snapshot: Optional[Any] = Field(None, description="Resulting state of the entity")
    details: Optional[str] = Field(None, description="Notes")
    timestamp: datetime = Field(..., description="When the record was written")

    class Config:
        from_attributes = True
