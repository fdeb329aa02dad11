"""Message API endpoints."""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from yolcu.api.schemas.common import ERROR_RESPONSES
from yolcu.api.schemas.message import (
    MessageHistoryResponse,
    MessageResponse,
    SendMessageRequest,
)
from yolcu.core.auth_utils import CurrentActor
from yolcu.dependencies import get_message_service
from yolcu.services.message_service import Attachment, MessageService

router = APIRouter(prefix="/rooms", tags=["messages"], responses=ERROR_RESPONSES)


@router.post(
    "/{room_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send a message to a room",
    description="Send a message, optionally with an uploaded file. Requires membership in the room.",
)
async def send_message(
    room_id: UUID,
    request: SendMessageRequest,
    message_service: Annotated[MessageService, Depends(get_message_service)],
    actor: CurrentActor,
) -> MessageResponse:
    attachment = None
    if request.attachment is not None:
        attachment = Attachment(**request.attachment.model_dump())

    message = message_service.send_message(
        room_id, actor, request.content, attachment=attachment
    )
    return MessageResponse.model_validate(message)


@router.get(
    "/{room_id}/messages",
    response_model=MessageHistoryResponse,
    summary="Get room message history",
    description="Messages in ascending order. Page backwards with 'before' or forwards with 'after'.",
)
async def get_messages(
    room_id: UUID,
    message_service: Annotated[MessageService, Depends(get_message_service)],
    actor: CurrentActor,
    limit: Annotated[int, Query(description="Page size (1-100)")] = 50,
    before: Annotated[
        Optional[UUID], Query(description="Return messages before this message id")
    ] = None,
    after: Annotated[
        Optional[UUID], Query(description="Return messages after this message id")
    ] = None,
) -> MessageHistoryResponse:
    messages = message_service.get_room_messages(
        room_id, actor, limit=limit, before=before, after=after
    )
    return MessageHistoryResponse(
        messages=[MessageResponse.model_validate(m) for m in messages],
        has_more=len(messages) == limit,
    )
