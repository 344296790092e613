"""
Session Models - Defines structures for chat sessions and wellness evaluations.

Field names are snake_case in Python and camelCase on disk and on the wire
(``wellnessScore``, ``createdAt``...), matching the session file layout.
"""

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Role = Literal["user", "assistant"]
RiskLevel = Literal["low", "medium", "high"]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys, populated by either name."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        """JSON-compatible dict with camelCase keys and unset optionals dropped."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Message(CamelModel):
    """A single conversation turn. Immutable once appended."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str
    timestamp: datetime = Field(default_factory=utc_now)


class Evaluation(CamelModel):
    """Structured wellness/risk assessment computed from a transcript."""

    wellness_score: int = Field(..., ge=1, le=100)
    emotional_state: str = Field(..., min_length=1)
    risk_level: RiskLevel
    key_concerns: List[str]
    recommendations: List[str]
    summary: str
    evaluated_at: datetime = Field(default_factory=utc_now)


class Session(CamelModel):
    """Full session with messages and the latest evaluation, if any."""

    id: str
    messages: List[Message] = Field(default_factory=list)
    evaluation: Optional[Evaluation] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def message_count(self) -> int:
        return len(self.messages)

    def history(self) -> List[dict]:
        """Role/content pairs in conversation order, without timestamps."""
        return [{"role": m.role, "content": m.content} for m in self.messages]


class SessionSummary(CamelModel):
    """Session projection for the admin list (no message bodies)."""

    id: str
    message_count: int
    evaluation: Optional[Evaluation] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_session(cls, session: Session) -> "SessionSummary":
        return cls(
            id=session.id,
            message_count=session.message_count,
            evaluation=session.evaluation,
            created_at=session.created_at,
            updated_at=session.updated_at,
        )


class SessionStats(CamelModel):
    """Aggregate counters for the admin dashboard."""

    total: int = 0
    with_evaluations: int = 0
    high_risk: int = 0
    medium_risk: int = 0
    low_risk: int = 0
    average_wellness_score: Optional[float] = None
