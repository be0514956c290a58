"""Culinary assistant chat."""

import logging
from typing import AsyncIterator, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from fridgechef.api.dependencies import get_controller
from fridgechef.constants import language_name
from fridgechef.middleware.rate_limit import rate_limit_dependency
from fridgechef.models.chat import ChatEvent
from fridgechef.models.state import ChatTranscript
from fridgechef.services.app_controller import AppController
from fridgechef.utils.exceptions import ValidationError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/chat", tags=["chat"])

NDJSON_MEDIA_TYPE = "application/x-ndjson"


class ChatRequest(BaseModel):
    """Request model for chat endpoint."""

    message: str = Field(..., description="User's message")


class OpenRequest(BaseModel):
    open: bool


class ChatLanguageRequest(BaseModel):
    language: str


async def ndjson_events(events: AsyncIterator[ChatEvent]) -> AsyncIterator[str]:
    """One JSON encoded ChatEvent per line."""
    async for event in events:
        yield event.model_dump_json() + "\n"


@router.get("", response_model=ChatTranscript)
async def get_transcript(
    language: Optional[str] = Query(None, description="Display language, defaults to the chat language"),
    controller: AppController = Depends(get_controller),
) -> ChatTranscript:
    if language is not None and language_name(language) is None:
        raise ValidationError(f"Unsupported language: {language}")
    return controller.chat.transcript(language)


@router.put("/open", response_model=ChatTranscript)
async def set_open(body: OpenRequest, controller: AppController = Depends(get_controller)) -> ChatTranscript:
    controller.set_chat_open(body.open)
    return controller.chat.transcript()


@router.put("/language", response_model=ChatTranscript)
async def set_language(
    body: ChatLanguageRequest, controller: AppController = Depends(get_controller)
) -> ChatTranscript:
    """Switch the chat language and translate finished messages; on failure they stay untranslated."""
    translated = await controller.set_chat_language(body.language)
    if not translated:
        logger.warning("Chat transcript not translated", extra={"language": body.language})
    return controller.chat.transcript()


@router.post("/messages")
async def send_message(
    chat_request: ChatRequest,
    _: None = Depends(rate_limit_dependency),
    controller: AppController = Depends(get_controller),
) -> StreamingResponse:
    """
    Send a message to the assistant.

    The user message is recorded before the response starts; the body is a
    newline-delimited JSON stream of chat events ending when the turn is over.
    """
    logger.info(
        "Route /chat/messages called",
        extra={"route": "/chat/messages", "params": {"message": chat_request.message[:200]}},
    )
    events = controller.stream_chat_message(chat_request.message)
    return StreamingResponse(ndjson_events(events), media_type=NDJSON_MEDIA_TYPE)
