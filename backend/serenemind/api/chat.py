"""
Chat API endpoints - Start sessions and exchange messages with the therapist.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from ..core.exceptions import (
    BadRequest,
    CorruptRecord,
    ProviderError,
    SessionNotFound,
    StorageUnavailable,
)
from ..services import ChatService
from .deps import get_chat_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/session", tags=["chat"])


class SendMessageRequest(BaseModel):
    """Body of POST /session/message. Fields are optional so that absence maps to 400."""
    model_config = ConfigDict(populate_by_name=True)

    session_id: Optional[str] = Field(None, alias="sessionId")
    message: Optional[str] = None


@router.post("/create")
async def create_session(chat: ChatService = Depends(get_chat_service)):
    """
    Create a new, empty chat session.

    Returns:
        {"sessionId": str}
    """
    try:
        session_id = await chat.start_session()
    except StorageUnavailable:
        logger.error("Error creating session", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create session"
        )
    return {"sessionId": session_id}


@router.post("/message")
async def send_message(
    body: SendMessageRequest,
    chat: ChatService = Depends(get_chat_service),
):
    """
    Send a user message and get the therapist's reply.

    Every fifth stored message also refreshes the session's wellness
    evaluation; that step never affects this response.

    Returns:
        {"response": str}
    """
    try:
        reply = await chat.handle_message(body.session_id, body.message)
    except BadRequest as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SessionNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    except ProviderError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate response from AI"
        )
    except (StorageUnavailable, CorruptRecord):
        logger.error("Error processing message", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to process message"
        )
    return {"response": reply}
