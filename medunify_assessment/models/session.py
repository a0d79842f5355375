"""Client-side session and message models."""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Tuple
from datetime import datetime, timezone
from medunify_assessment.models.assessment import TerminalAssessment
from medunify_assessment.models.status import MessageRole, SessionStatus
import uuid


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive timestamps as UTC so they compare with aware ones."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def unique_symptoms(symptoms: List[str]) -> List[str]:
    """Drop duplicates while keeping first-seen order."""
    return list(dict.fromkeys(s for s in symptoms if s))


class Message(BaseModel):
    """Individual turn in the message log. Immutable once created."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    role: MessageRole
    content: str
    options: Optional[Tuple[str, ...]] = None
    context_reference: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    assessment: Optional[TerminalAssessment] = None

    class Config:
        frozen = True


class Session(BaseModel):
    """Assessment session as tracked by the client.

    Also the shape returned by ``GET /chat/current``; ``progress`` and
    ``can_complete`` are not part of that payload and start at their defaults
    until the next question turn arrives.
    """

    session_id: str
    status: SessionStatus = SessionStatus.ACTIVE
    question_count: int = Field(default=0, ge=0)
    identified_symptoms: List[str] = Field(default_factory=list)
    last_message: str = ""
    started_at: datetime = Field(default_factory=utcnow)
    completed_at: Optional[datetime] = None
    has_assessment: bool = False

    # Mirrors of the last question turn
    progress: float = Field(default=0, ge=0, le=100)
    can_complete: bool = False

    @field_validator("identified_symptoms")
    @classmethod
    def _dedupe_symptoms(cls, value: List[str]) -> List[str]:
        return unique_symptoms(value)

    @field_validator("started_at", "completed_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    class Config:
        json_schema_extra = {
            "example": {
                "session_id": "s1",
                "status": "active",
                "question_count": 1,
                "identified_symptoms": ["headache", "fever"],
                "last_message": "How long have you had the fever?",
                "started_at": "2025-01-10T09:30:00Z",
                "has_assessment": False,
            }
        }
