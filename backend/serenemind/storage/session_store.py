"""
Session Store - Persistent storage for chat sessions using StorageInterface.
One JSON file per session under the sessions directory.
"""

import asyncio
import json
import logging
import re
import secrets
import time
import weakref
from typing import List, Optional

from pydantic import ValidationError

from ..core.exceptions import CorruptRecord, SessionNotFound, StorageUnavailable
from ..models import Evaluation, Message, Role, Session, SessionStats, utc_now
from .interface import StorageInterface

logger = logging.getLogger(__name__)

_SESSION_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,128}$")


def new_session_id() -> str:
    """session_<epoch millis>_<random hex>, e.g. session_1718000000000_3f9a1c0b2e"""
    return f"session_{int(time.time() * 1000)}_{secrets.token_hex(5)}"


class SessionStore:
    """
    Manages persistent storage of chat sessions.

    Each read-modify-write (append, set evaluation) holds a per-session lock,
    so concurrent requests against one session cannot drop each other's
    writes inside a single process.
    """

    def __init__(self, storage: StorageInterface, sessions_dir: str = "sessions"):
        """
        Initialize the session store.

        Args:
            storage: StorageInterface implementation (typically LocalStorage)
            sessions_dir: Directory, relative to the storage root, holding session files
        """
        self.storage = storage
        self.sessions_dir = sessions_dir.strip("/")
        # A lock lives only while some coroutine holds or awaits it
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock

    def _session_path(self, session_id: str) -> str:
        return f"{self.sessions_dir}/{session_id}.json"

    @staticmethod
    def is_valid_id(session_id: str) -> bool:
        return bool(session_id) and bool(_SESSION_ID_RE.match(session_id))

    async def _write(self, session: Session) -> None:
        content = json.dumps(session.to_json_dict(), indent=2, ensure_ascii=False)
        await self.storage.save(self._session_path(session.id), content)

    async def _read(self, session_id: str) -> Optional[Session]:
        content = await self.storage.load(self._session_path(session_id))
        if content is None:
            return None
        try:
            return Session.model_validate_json(content)
        except ValidationError as e:
            raise CorruptRecord(session_id, str(e)) from e

    async def _require(self, session_id: str) -> Session:
        session = await self.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    async def create(self) -> str:
        """
        Create a new empty session.

        Returns:
            str: The new session id

        Raises:
            StorageUnavailable: If the session file cannot be written
        """
        session_id = new_session_id()
        while await self.storage.exists(self._session_path(session_id)):
            session_id = new_session_id()

        now = utc_now()
        await self._write(Session(id=session_id, created_at=now, updated_at=now))
        logger.info(f"Session created: {session_id}")
        return session_id

    async def get(self, session_id: str) -> Optional[Session]:
        """
        Load a session by id.

        Returns:
            Optional[Session]: The session, or None if no record exists

        Raises:
            CorruptRecord: If the record exists but cannot be parsed
        """
        if not self.is_valid_id(session_id):
            return None
        return await self._read(session_id)

    async def append_message(self, session_id: str, role: Role, content: str) -> Session:
        """
        Append a message and bump ``updated_at``.

        Raises:
            SessionNotFound: If the session does not exist
        """
        async with self._lock_for(session_id):
            session = await self._require(session_id)
            message = Message(role=role, content=content)
            session.messages.append(message)
            session.updated_at = message.timestamp
            await self._write(session)
        return session

    async def set_evaluation(self, session_id: str, evaluation: Evaluation) -> Session:
        """
        Replace the session's evaluation.

        Raises:
            SessionNotFound: If the session does not exist
        """
        async with self._lock_for(session_id):
            session = await self._require(session_id)
            session.evaluation = evaluation
            await self._write(session)
        return session

    async def list_all(self) -> List[Session]:
        """All readable sessions, most recently updated first. Unreadable files are skipped."""
        sessions = []
        for path in await self.storage.list(self.sessions_dir, pattern="*.json"):
            session_id = path.rsplit("/", 1)[-1][:-len(".json")]
            try:
                session = await self._read(session_id)
            except (CorruptRecord, StorageUnavailable, ValueError) as e:
                logger.warning(f"Skipping unreadable session file {path}: {e}")
                continue
            if session is not None:
                sessions.append(session)

        sessions.sort(key=lambda s: s.updated_at, reverse=True)
        return sessions

    async def delete(self, session_id: str) -> bool:
        """
        Delete a session.

        Returns:
            bool: True if a record was removed, False if none existed
        """
        if not self.is_valid_id(session_id):
            return False
        async with self._lock_for(session_id):
            deleted = await self.storage.delete(self._session_path(session_id))
        if deleted:
            logger.info(f"Session deleted: {session_id}")
        return deleted

    async def delete_all(self) -> int:
        """Delete every session. Returns the number of records removed."""
        deleted = 0
        for session in await self.list_all():
            if await self.delete(session.id):
                deleted += 1
        return deleted

    async def stats(self) -> SessionStats:
        """Counts of sessions, evaluated sessions and risk levels."""
        sessions = await self.list_all()
        evaluations = [s.evaluation for s in sessions if s.evaluation is not None]
        risk_counts = {"low": 0, "medium": 0, "high": 0}
        for evaluation in evaluations:
            risk_counts[evaluation.risk_level] += 1

        average = None
        if evaluations:
            average = sum(e.wellness_score for e in evaluations) / len(evaluations)

        return SessionStats(
            total=len(sessions),
            with_evaluations=len(evaluations),
            high_risk=risk_counts["high"],
            medium_risk=risk_counts["medium"],
            low_risk=risk_counts["low"],
            average_wellness_score=average,
        )
