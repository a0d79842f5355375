"""Assessment reply models returned by the chat endpoints."""

from pydantic import BaseModel, Field
from typing import List, Literal, Optional, Tuple, Union
from datetime import datetime
from medunify_assessment.models.status import OverallStatus, UrgencyLevel


class Condition(BaseModel):
    """A candidate health condition in a final assessment."""

    name: str
    confidence: float = Field(..., ge=0, le=100)
    urgency_level: UrgencyLevel
    description: Optional[str] = None
    matching_symptoms: Tuple[str, ...] = ()
    matching_lab_values: Tuple[str, ...] = ()
    risk_factors: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()

    class Config:
        frozen = True


class QuestionTurn(BaseModel):
    """Intermediate reply: the service needs more information."""

    response_type: Literal["question"] = "question"
    session_id: str
    message: str
    options: Optional[List[str]] = None
    context_reference: Optional[str] = None
    progress: float = Field(..., ge=0, le=100)
    question_count: int = Field(..., ge=0)
    assessment_confidence: Optional[float] = None
    can_complete: bool = False
    identified_symptoms: List[str] = Field(default_factory=list)


class TerminalAssessment(BaseModel):
    """Final reply: the structured assessment that closes the session."""

    response_type: Literal["assessment"] = "assessment"
    session_id: str
    message: str
    question_count: int = Field(..., ge=0)
    overall_status: OverallStatus
    conditions: Tuple[Condition, ...] = ()
    lifestyle_recommendations: Tuple[str, ...] = ()
    follow_up_timeframe: str = ""
    disclaimer: str = ""
    summary_for_doctor: str = ""
    completed_at: Optional[datetime] = None

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "session_id": "s1",
                "response_type": "assessment",
                "message": "Your assessment is ready.",
                "question_count": 3,
                "overall_status": "needs_attention",
                "conditions": [
                    {
                        "name": "Viral infection",
                        "confidence": 72,
                        "urgency_level": "moderate",
                    }
                ],
            }
        }


# Tagged union produced by the response interpreter
ChatReply = Union[QuestionTurn, TerminalAssessment]
