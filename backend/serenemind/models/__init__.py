"""Models module."""

from .session import (
    Role,
    RiskLevel,
    Message,
    Evaluation,
    Session,
    SessionSummary,
    SessionStats,
    utc_now,
)

__all__ = [
    'Role', 'RiskLevel',
    'Message', 'Evaluation', 'Session', 'SessionSummary', 'SessionStats',
    'utc_now',
]
