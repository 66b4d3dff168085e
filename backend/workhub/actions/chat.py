"""
Internal chat actions.

Messages are read with a cursor: clients pass the id of the last message
they have seen and receive everything after it in (created_at, id) order.
"""
from typing import Optional
from uuid import UUID

from sqlalchemy import and_, or_

from ..audit.recorder import AuditOperation, snapshot_of
from ..auth.permissions import Operation, PermissionScope
from ..database.models import Chat, ChatMessage, Project
from ..errors import NotFound
from ..schemas.chat import ChatCreateRequest, ChatResponse, MessageResponse, MessagesResponse
from .base import ActionResult, ActionServices

RESOURCE = "chats"
MAX_PAGE = 200


def _chat_route(chat_id) -> str:
    return f"/chat/{chat_id}"


# PUBLIC_INTERFACE
def create_chat(services: ActionServices, token: Optional[str],
                request: ChatCreateRequest) -> ActionResult:
    with services.action(token, "create_chat") as action:
        identity = action.resolve()
        company_id = action.company_id()
        action.authorize(RESOURCE, Operation.CREATE, PermissionScope(company_id=company_id))
        if request.project_id:
            action.load(Project, request.project_id)

        chat = Chat(tenant_id=company_id, project_id=request.project_id,
                    name=request.name, created_by_id=identity.id)
        action.persist(chat)
        action.record(AuditOperation.CREATE, "Chat", chat.id, snapshot_of(chat))
        action.invalidate("/chat")
        return action.succeed(ChatResponse.model_validate(chat))
    return action.result


# PUBLIC_INTERFACE
def list_chats(services: ActionServices, token: Optional[str]) -> ActionResult:
    with services.action(token, "list_chats") as action:
        action.resolve()
        action.authorize(RESOURCE, Operation.READ)
        chats = action.query(Chat).order_by(Chat.created_at.desc()).all()
        return action.succeed([ChatResponse.model_validate(chat) for chat in chats])
    return action.result


# PUBLIC_INTERFACE
def post_message(services: ActionServices, token: Optional[str], chat_id: UUID,
                 content: str) -> ActionResult:
    """Append a message to a chat of the caller's company."""
    with services.action(token, "post_message") as action:
        identity = action.resolve()
        chat = action.load(Chat, chat_id)
        action.authorize(RESOURCE, Operation.CREATE,
                         PermissionScope(company_id=chat.tenant_id), entity_id=chat.id)

        message = ChatMessage(chat_id=chat.id, sender_id=identity.id, content=content)
        action.persist(message)
        action.record(AuditOperation.CREATE, "ChatMessage", message.id, snapshot_of(message),
                      tenant_id=chat.tenant_id)
        action.invalidate(_chat_route(chat.id))
        return action.succeed(MessageResponse.model_validate(message))
    return action.result


# PUBLIC_INTERFACE
def list_messages(services: ActionServices, token: Optional[str], chat_id: UUID,
                  after_id: Optional[UUID] = None, limit: int = 100) -> ActionResult:
    """
    Messages of a chat after the cursor message, oldest first.

    Args:
        services: Request collaborators
        token: Session token
        chat_id: Chat to read
        after_id: Last message the caller has seen; None reads from the start
        limit: Page size, capped at MAX_PAGE

    Returns:
        ActionResult: MessagesResponse whose cursor is the last returned id,
            or the given cursor when nothing new arrived
    """
    with services.action(token, "list_messages") as action:
        action.resolve()
        chat = action.load(Chat, chat_id)
        action.authorize(RESOURCE, Operation.READ, PermissionScope(company_id=chat.tenant_id))

        query = services.db.query(ChatMessage).filter(ChatMessage.chat_id == chat.id)
        if after_id is not None:
            cursor = services.db.query(ChatMessage).filter(
                ChatMessage.chat_id == chat.id,
                ChatMessage.id == after_id,
            ).first()
            if cursor is None:
                raise NotFound("Message", after_id)
            query = query.filter(or_(
                ChatMessage.created_at > cursor.created_at,
                and_(ChatMessage.created_at == cursor.created_at, ChatMessage.id > cursor.id),
            ))

        messages = query.order_by(ChatMessage.created_at, ChatMessage.id).limit(
            max(1, min(limit, MAX_PAGE))).all()
        return action.succeed(MessagesResponse(
            messages=[MessageResponse.model_validate(message) for message in messages],
            cursor=messages[-1].id if messages else after_id,
        ))
    return action.result
