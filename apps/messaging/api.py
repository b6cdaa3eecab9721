"""
Messaging API endpoints.
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from django.http import HttpRequest
from ninja import Router, File
from ninja.errors import HttpError
from ninja.files import UploadedFile

from apps.documents import storage_service
from apps.identity.decorators import require_auth, require_mentee
from .schemas import (
    ConversationIn, ConversationStatusIn, ConversationOut,
    MessageIn, MessageOut, UnreadOut, MarkReadOut, UploadedAttachmentOut,
)
from . import services

router = Router(tags=["Messaging"])


def _get_conversation(user, conversation_id: UUID):
    conversation = services.get_conversation(user, conversation_id)
    if conversation is None:
        raise HttpError(404, "Conversation not found")
    return conversation


@router.get("/conversations", response=List[ConversationOut], auth=None)
def list_conversations(request: HttpRequest, status: Optional[str] = None):
    user = require_auth(request)
    return services.list_conversations(user, status=status)


@router.post("/conversations", response={201: ConversationOut}, auth=None)
def create_conversation(request: HttpRequest, payload: ConversationIn):
    """Mentees open conversations; the coach defaults to their first active coach."""
    mentee = require_mentee(request)
    try:
        return 201, services.create_conversation(mentee, payload.subject, payload.coach_id)
    except ValueError as e:
        raise HttpError(400, str(e))


@router.patch("/conversations/{conversation_id}", response=ConversationOut, auth=None)
def update_conversation(request: HttpRequest, conversation_id: UUID, payload: ConversationStatusIn):
    user = require_auth(request)
    conversation = _get_conversation(user, conversation_id)
    try:
        return services.update_status(conversation, payload.status)
    except ValueError as e:
        raise HttpError(400, str(e))


@router.get("/conversations/{conversation_id}/messages", response=List[MessageOut], auth=None)
def list_messages(
    request: HttpRequest,
    conversation_id: UUID,
    before: Optional[datetime] = None,
    limit: int = services.DEFAULT_PAGE_SIZE,
):
    user = require_auth(request)
    conversation = _get_conversation(user, conversation_id)
    return services.list_messages(conversation, before=before, limit=limit)


@router.post("/conversations/{conversation_id}/messages", response={201: MessageOut}, auth=None)
def send_message(request: HttpRequest, conversation_id: UUID, payload: MessageIn):
    user = require_auth(request)
    conversation = _get_conversation(user, conversation_id)
    try:
        message = services.send_message(
            user,
            conversation,
            payload.content,
            attachments=[a.dict() for a in payload.attachments],
            message_type=payload.message_type,
        )
    except ValueError as e:
        raise HttpError(400, str(e))
    return 201, message


@router.post("/conversations/{conversation_id}/read", response=MarkReadOut, auth=None)
def mark_read(request: HttpRequest, conversation_id: UUID):
    user = require_auth(request)
    conversation = _get_conversation(user, conversation_id)
    return {"updated": services.mark_conversation_read(user, conversation)}


@router.get("/unread-count", response=UnreadOut, auth=None)
def unread_count(request: HttpRequest):
    user = require_auth(request)
    return {"unread_count": services.total_unread(user)}


@router.post("/conversations/{conversation_id}/attachments", response={201: UploadedAttachmentOut}, auth=None)
def upload_attachment(request: HttpRequest, conversation_id: UUID, file: UploadedFile = File(...)):
    """Store a file for a message; the returned metadata goes into the send payload."""
    user = require_auth(request)
    conversation = _get_conversation(user, conversation_id)

    allowed = storage_service.DOCUMENT_AND_IMAGE_TYPES
    is_valid, error = storage_service.validate_upload_file(file, allowed)
    if not is_valid:
        raise HttpError(400, error)

    path = storage_service.build_path(f"message-attachments/{conversation.id}", file, allowed)
    try:
        _, url = storage_service.save_file(file, path)
    except ValueError as e:
        raise HttpError(400, str(e))
    return 201, {
        "file_name": file.name,
        "file_url": url,
        "file_type": file.content_type or "",
        "file_size": file.size,
    }
