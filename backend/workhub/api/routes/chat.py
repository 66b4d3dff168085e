"""
Chat API routes.

Messages are fetched with an `after_id` cursor so that pollers only
receive what they have not seen yet.
"""
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status

from ...actions import chat as actions
from ...actions.base import ActionServices
from ...auth.dependencies import get_action_services, get_token
from ...schemas.chat import (
    ChatCreateRequest, ChatResponse, MessageCreateRequest, MessageResponse, MessagesResponse
)
from ...schemas.common import ActionResponse
from ..results import unwrap

router = APIRouter(prefix="/chats", tags=["Chat"])


# PUBLIC_INTERFACE
@router.get("/", response_model=ActionResponse[List[ChatResponse]], summary="List chats")
async def list_chats(
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.list_chats(services, token))


# PUBLIC_INTERFACE
@router.post("/", response_model=ActionResponse[ChatResponse], status_code=status.HTTP_201_CREATED,
             summary="Create chat")
async def create_chat(
    request: ChatCreateRequest,
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.create_chat(services, token, request))


# PUBLIC_INTERFACE
@router.post("/{chat_id}/messages", response_model=ActionResponse[MessageResponse],
             status_code=status.HTTP_201_CREATED, summary="Post message")
async def post_message(
    chat_id: UUID,
    request: MessageCreateRequest,
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.post_message(services, token, chat_id, request.content))


# PUBLIC_INTERFACE
@router.get("/{chat_id}/messages", response_model=ActionResponse[MessagesResponse],
            summary="List messages",
            description="Messages after the `after_id` cursor, oldest first.")
async def list_messages(
    chat_id: UUID,
    after_id: Optional[UUID] = Query(None, description="Last message already seen"),
    limit: int = Query(100, ge=1, le=200, description="Page size"),
    token: Optional[str] = Depends(get_token),
    services: ActionServices = Depends(get_action_services)
):
    return unwrap(actions.list_messages(services, token, chat_id, after_id=after_id, limit=limit))
