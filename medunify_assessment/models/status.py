"""Status and classification enums for the assessment conversation."""

from enum import Enum


class SessionStatus(str, Enum):
    """Server-side session status."""

    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class MessageRole(str, Enum):
    """Author of a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"


class UrgencyLevel(str, Enum):
    """Urgency of a single candidate condition (independent of confidence)."""

    LOW = "low"
    MODERATE = "moderate"
    MODERATE_HIGH = "moderate_high"
    HIGH = "high"
    URGENT = "urgent"
    EMERGENCY = "emergency"


class OverallStatus(str, Enum):
    """Overall outcome of a completed assessment."""

    HEALTHY = "healthy"
    NEEDS_ATTENTION = "needs_attention"
    CONCERNING = "concerning"
    URGENT = "urgent"


class ChatState(str, Enum):
    """States of the client-side chat state machine."""

    EMPTY = "empty"  # Nothing started yet
    ACTIVE = "active"  # Ready for the next turn
    WAITING = "waiting"  # One request outstanding
    COMPLETED = "completed"  # Final assessment received
    ERROR = "error"  # Last request failed, user may retry
