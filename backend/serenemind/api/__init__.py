"""API module."""

from .chat import router as chat_router
from .admin import router as admin_router

__all__ = ['chat_router', 'admin_router']
