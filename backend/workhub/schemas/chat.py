"""
Chat Pydantic schemas.

Defines request/response models for chats and their messages.
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field
from uuid import UUID


class ChatCreateRequest(BaseModel):
    """Chat creation request schema."""
    name: str = Field(..., min_length=1, max_length=255, description="Chat name")
    project_id: Optional[UUID] = Field(None, description="Project the chat belongs to")


class ChatResponse(BaseModel):
    """Chat response schema."""
    id: UUID = Field(..., description="Chat ID")
    tenant_id: UUID = Field(..., description="Tenant ID")
    project_id: Optional[UUID] = Field(None, description="Project ID")
    name: str = Field(..., description="Chat name")
    created_by_id: UUID = Field(..., description="Creator")
    created_at: datetime = Field(..., description="Creation timestamp")

    class Config:
        from_attributes = True


class MessageCreateRequest(BaseModel):
    """Message creation request schema."""
    content: str = Field(..., min_length=1, max_length=4000, description="Message text")


class MessageResponse(BaseModel):
    """Message response schema."""
    id: UUID = Field(..., description="Message ID")
    chat_id: UUID = Field(..., description="Chat ID")
    sender_id: UUID = Field(..., description="Author")
    content: str = Field(..., description="Message text")
    created_at: datetime = Field(..., description="Creation timestamp")

    class Config:
        from_attributes = True


class MessagesResponse(BaseModel):
    """Messages after a cursor, oldest first."""
    messages: List[MessageResponse] = Field(..., description="Messages")
    cursor: Optional[UUID] = Field(None, description="ID of the last returned message")
