"""
Chat Service - orchestrates the session store and the therapist client
for one user message at a time.
"""

import logging
from typing import Optional

from ..core.exceptions import BadRequest, SessionNotFound, SereneMindError
from ..core.logging_config import SessionLoggerAdapter
from ..storage import SessionStore
from .therapist import TherapistClient, render_transcript

logger = logging.getLogger(__name__)


def should_evaluate(message_count: int, interval: int = 5) -> bool:
    """True at positive multiples of ``interval`` (5, 10, 15... by default)."""
    return interval > 0 and message_count > 0 and message_count % interval == 0


class ChatService:
    """
    Runs the per-message exchange:

    1. validate input
    2. require the session to exist
    3. store the user message
    4. re-read the history
    5. ask the provider for a reply (failure ends the request; the user turn stays stored)
    6. store the assistant reply
    7. at every ``evaluation_interval``-th message, evaluate the transcript;
       evaluation failures are logged and never fail the request
    8. return the reply
    """

    def __init__(self, store: SessionStore, therapist: TherapistClient, evaluation_interval: int = 5):
        self.store = store
        self.therapist = therapist
        self.evaluation_interval = evaluation_interval

    async def start_session(self) -> str:
        return await self.store.create()

    async def handle_message(self, session_id: Optional[str], message: Optional[str]) -> str:
        """
        Process one user message and return the therapist's reply.

        Raises:
            BadRequest: Missing session id or blank message
            SessionNotFound: Unknown session
            ProviderError: The reply could not be generated
        """
        if not session_id or not message or not message.strip():
            raise BadRequest("Session ID and message are required")

        log = SessionLoggerAdapter(logger, {"session_id": session_id})

        if await self.store.get(session_id) is None:
            raise SessionNotFound(session_id)

        session = await self.store.append_message(session_id, "user", message)
        log.debug(f"User message stored ({session.message_count} messages)")

        try:
            reply = await self.therapist.generate_reply(session.history())
        except SereneMindError:
            log.error("Reply generation failed, user turn left unanswered", exc_info=True)
            raise

        session = await self.store.append_message(session_id, "assistant", reply)
        log.info(f"Reply stored ({session.message_count} messages)")

        if should_evaluate(session.message_count, self.evaluation_interval):
            await self._evaluate(session_id, log)

        return reply

    async def _evaluate(self, session_id: str, log: logging.LoggerAdapter) -> None:
        try:
            session = await self.store.get(session_id)
            if session is None:
                raise SessionNotFound(session_id)
            evaluation = await self.therapist.evaluate(render_transcript(session.history()))
            await self.store.set_evaluation(session_id, evaluation)
        except SereneMindError as e:
            log.warning(f"Evaluation skipped: {e}")
            return
        log.info(
            f"Evaluation stored at {session.message_count} messages",
            extra={"extra_fields": {"risk_level": evaluation.risk_level}}
        )
