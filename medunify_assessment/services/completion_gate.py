"""Client-side gate for forcing an early assessment."""

from typing import Optional

from medunify_assessment.config.settings import settings
from medunify_assessment.exceptions import InsufficientDataError
from medunify_assessment.models.session import Session
from medunify_assessment.models.status import SessionStatus


def completion_blocker(
    session: Optional[Session], min_questions: Optional[int] = None
) -> Optional[str]:
    """Return why the session cannot be completed yet, or None if it can."""
    if min_questions is None:
        min_questions = settings.min_questions_for_completion

    if session is None:
        return "No active assessment session."
    if session.status != SessionStatus.ACTIVE:
        return f"Session is {session.status.value}."
    if session.question_count < min_questions:
        return (
            f"Cannot complete assessment yet. Need at least {min_questions} "
            f"answered questions, have {session.question_count}."
        )
    if not session.can_complete:
        return "Cannot complete assessment yet. Need more information."
    return None


def can_complete(session: Optional[Session], min_questions: Optional[int] = None) -> bool:
    """True when the user may force early completion of ``session``.

    The server stays authoritative and may still reject the attempt.
    """
    return completion_blocker(session, min_questions) is None


def ensure_can_complete(
    session: Optional[Session], min_questions: Optional[int] = None
) -> Session:
    """Raise InsufficientDataError unless ``session`` may be completed."""
    reason = completion_blocker(session, min_questions)
    if reason is not None:
        raise InsufficientDataError(reason)
    return session
