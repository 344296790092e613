"""
Admin API endpoints - Inspect and clear stored sessions.
No authentication: intended for operators on a trusted network.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ..core.exceptions import CorruptRecord, StorageUnavailable
from ..models import SessionSummary
from ..storage import SessionStore
from .deps import get_session_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/sessions")
async def list_sessions(store: SessionStore = Depends(get_session_store)):
    """
    List all sessions, most recently updated first, without message bodies.

    Returns:
        {"sessions": [{id, messageCount, evaluation?, createdAt, updatedAt}, ...]}
    """
    try:
        sessions = await store.list_all()
    except StorageUnavailable:
        logger.error("Error fetching sessions", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch sessions"
        )
    return {"sessions": [SessionSummary.from_session(s).to_json_dict() for s in sessions]}


@router.delete("/sessions")
async def clear_sessions(store: SessionStore = Depends(get_session_store)):
    """Delete every stored session."""
    try:
        deleted = await store.delete_all()
    except StorageUnavailable:
        logger.error("Error clearing sessions", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to clear sessions"
        )
    logger.info(f"Admin cleared {deleted} sessions")
    return {"message": "All sessions cleared", "deleted": deleted}


@router.get("/stats")
async def session_stats(store: SessionStore = Depends(get_session_store)):
    """Totals and risk-level breakdown for the dashboard header."""
    try:
        stats = await store.stats()
    except StorageUnavailable:
        logger.error("Error computing session stats", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute stats"
        )
    return {"stats": stats.to_json_dict()}


@router.get("/sessions/{session_id}")
async def get_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    """
    Full session including all messages and the evaluation.

    Returns:
        {"session": {...}}
    """
    try:
        session = await store.get(session_id)
    except (StorageUnavailable, CorruptRecord):
        logger.error(f"Error fetching session {session_id}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch session"
        )
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return {"session": session.to_json_dict()}


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    """Delete a single session."""
    try:
        deleted = await store.delete(session_id)
    except StorageUnavailable:
        logger.error(f"Error deleting session {session_id}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete session"
        )
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return {"message": f"Session {session_id} deleted"}
