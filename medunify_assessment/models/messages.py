"""API request and response models."""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from medunify_assessment.models.session import as_utc
from medunify_assessment.models.status import MessageRole, SessionStatus, UrgencyLevel


class ChatMessageRequest(BaseModel):
    """Body of ``POST /chat``."""

    message: str = Field(..., min_length=1, description="User message")
    session_id: Optional[str] = Field(
        None, description="Current session ID, null to start a new session"
    )


class ResetResponse(BaseModel):
    """Response when a session is reset and a fresh one is issued."""

    session_id: str
    message: str
    status: Optional[str] = None


class ConversationMessage(BaseModel):
    """One question or answer in a past session transcript."""

    role: MessageRole
    content: str
    options: Optional[List[str]] = None
    timestamp: Optional[datetime] = None


class IdentifiedCondition(BaseModel):
    """Condition headline stored with a completed session."""

    name: str
    confidence: float = Field(..., ge=0, le=100)
    urgency_level: UrgencyLevel


class SessionSummary(BaseModel):
    """Past session as listed by the history endpoints."""

    session_id: str
    status: SessionStatus
    question_count: int = Field(default=0, ge=0)
    identified_symptoms: List[str] = Field(default_factory=list)
    last_message: str = ""
    started_at: datetime
    completed_at: Optional[datetime] = None
    has_assessment: bool = False

    # Present only when include_conversation=true
    conversation_history: Optional[List[ConversationMessage]] = None

    # Present for completed sessions
    identified_conditions: Optional[List[IdentifiedCondition]] = None
    results_summary: Optional[str] = None

    @field_validator("started_at", "completed_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)
