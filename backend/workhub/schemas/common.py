"""
Shared response envelopes.

Every mutating endpoint answers with the same {success, data, warnings}
shape; failures use ErrorResponse.
"""
from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel, Field
from uuid import UUID

DataT = TypeVar("DataT")


class ActionResponse(BaseModel, Generic[DataT]):
    """Successful action envelope."""
    success: bool = Field(True, description="Always true for successful actions")
    data: Optional[DataT] = Field(None, description="Resulting entity")
    warnings: List[str] = Field(default_factory=list, description="Non-blocking validation warnings")


class ErrorResponse(BaseModel):
    """Failed action envelope."""
    success: bool = Field(False, description="Always false for failures")
    error: str = Field(..., description="Human readable message")
    code: str = Field(..., description="Failure category")
    errors: List[str] = Field(default_factory=list, description="Business-rule error codes")
    warnings: List[str] = Field(default_factory=list, description="Non-blocking validation warnings")


class DeletedResponse(BaseModel):
    """Identifier of a removed entity."""
    id: UUID = Field(..., description="Deleted entity ID")
