"""Services module - AI client and chat orchestration."""

from .therapist import TherapistClient, render_transcript, extract_json_object
from .chat_service import ChatService, should_evaluate

__all__ = [
    'TherapistClient', 'render_transcript', 'extract_json_object',
    'ChatService', 'should_evaluate',
]
