"""Client for the MedUnify AI Health Assessment conversation."""

from medunify_assessment.api.client import AssessmentClient
from medunify_assessment.exceptions import (
    AssessmentAPIError,
    AssessmentError,
    AuthenticationError,
    BusyError,
    ConflictError,
    InsufficientDataError,
    NetworkError,
    ServerError,
    SessionClosedError,
    SessionMismatchError,
    UnrecognizedReplyError,
    ValidationError,
)
from medunify_assessment.models.status import ChatState
from medunify_assessment.services.chat_orchestrator import ChatOrchestrator, TurnOutcome
from medunify_assessment.services.history_browser import HistoryBrowser

__all__ = [
    "AssessmentClient",
    "ChatOrchestrator",
    "ChatState",
    "HistoryBrowser",
    "TurnOutcome",
    "AssessmentError",
    "AssessmentAPIError",
    "AuthenticationError",
    "BusyError",
    "ConflictError",
    "InsufficientDataError",
    "NetworkError",
    "ServerError",
    "SessionClosedError",
    "SessionMismatchError",
    "UnrecognizedReplyError",
    "ValidationError",
]
