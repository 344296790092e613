"""
FastAPI dependencies resolving the services wired up in the app lifespan.
"""

from fastapi import Depends, Request

from ..config import settings
from ..services import ChatService, TherapistClient
from ..storage import SessionStore


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_therapist(request: Request) -> TherapistClient:
    return request.app.state.therapist


def get_chat_service(
    store: SessionStore = Depends(get_session_store),
    therapist: TherapistClient = Depends(get_therapist),
) -> ChatService:
    return ChatService(store, therapist, evaluation_interval=settings.evaluation_interval)
