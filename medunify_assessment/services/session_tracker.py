"""Session tracking for the active assessment conversation."""

from typing import Optional
import logging

from medunify_assessment.exceptions import (
    ConflictError,
    SessionClosedError,
    SessionMismatchError,
)
from medunify_assessment.models.assessment import QuestionTurn, TerminalAssessment
from medunify_assessment.models.session import Session, unique_symptoms, utcnow
from medunify_assessment.models.status import SessionStatus

logger = logging.getLogger(__name__)


class SessionTracker:
    """
    Owns the current session and the marker for the outstanding request.

    Every reply is checked against the tracked session id before it is
    applied, so a reply from an abandoned or reset session can never land on
    the new one. Request tickets let the orchestrator tell whether a reply
    that just arrived was abandoned by a reset in the meantime.
    """

    def __init__(self):
        self._session: Optional[Session] = None
        self._ticket_counter = 0
        self._inflight: Optional[int] = None

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def current_session(self) -> Optional[Session]:
        """Snapshot of the tracked session (mutating it has no effect)."""
        if self._session is None:
            return None
        return self._session.model_copy(deep=True)

    @property
    def session_id(self) -> Optional[str]:
        return self._session.session_id if self._session else None

    @property
    def in_flight(self) -> bool:
        return self._inflight is not None

    # ------------------------------------------------------------------
    # Request tickets
    # ------------------------------------------------------------------

    def begin_request(self) -> int:
        """Mark a request as outstanding and return its ticket."""
        self._ticket_counter += 1
        self._inflight = self._ticket_counter
        return self._ticket_counter

    def finish_request(self, ticket: int) -> bool:
        """
        Clear the outstanding marker.

        Returns:
            False if the ticket was abandoned (the reply is stale)
        """
        if self._inflight != ticket:
            return False
        self._inflight = None
        return True

    def abandon_request(self) -> None:
        if self._inflight is not None:
            logger.info(f"Abandoning outstanding request ticket {self._inflight}")
        self._inflight = None

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def adopt(self, session: Session) -> None:
        """
        Replace the current session wholesale (resume or reset).

        Raises:
            ConflictError: a request is still outstanding
        """
        if self.in_flight:
            raise ConflictError(
                f"Cannot adopt session {session.session_id} while a request is outstanding"
            )
        previous = self.session_id
        self._session = session.model_copy(deep=True)
        logger.info(f"Adopted session {session.session_id} (previous: {previous})")

    def clear(self) -> None:
        self._session = None

    def _check_reply(self, session_id: str) -> Session:
        if self._session is None or self._session.session_id != session_id:
            raise SessionMismatchError(self.session_id, session_id)
        if self._session.status == SessionStatus.COMPLETED:
            raise SessionClosedError(
                f"Session {session_id} is completed and accepts no further turns"
            )
        return self._session

    def apply_question_turn(self, turn: QuestionTurn) -> Session:
        """
        Apply an intermediate reply to the tracked session.

        Raises:
            SessionMismatchError: reply belongs to another session
            SessionClosedError: session already has a final assessment
        """
        session = self._check_reply(turn.session_id)

        if turn.progress < session.progress:
            logger.warning(
                f"Session {session.session_id}: progress went back from "
                f"{session.progress} to {turn.progress}, keeping {session.progress}"
            )
        if turn.question_count < session.question_count:
            logger.warning(
                f"Session {session.session_id}: question_count went back from "
                f"{session.question_count} to {turn.question_count}"
            )

        session.question_count = max(session.question_count, turn.question_count)
        session.progress = max(session.progress, turn.progress)
        session.identified_symptoms = unique_symptoms(turn.identified_symptoms)
        session.can_complete = turn.can_complete
        session.last_message = turn.message
        return session.model_copy(deep=True)

    def apply_terminal_assessment(self, result: TerminalAssessment) -> Session:
        """
        Close the tracked session with its final assessment.

        Raises:
            SessionMismatchError: result belongs to another session
            SessionClosedError: session already has a final assessment
        """
        session = self._check_reply(result.session_id)

        session.status = SessionStatus.COMPLETED
        session.has_assessment = True
        session.progress = 100
        session.can_complete = False
        session.question_count = max(session.question_count, result.question_count)
        session.last_message = result.message
        session.completed_at = result.completed_at or utcnow()

        logger.info(
            f"Session {session.session_id} completed after {session.question_count} "
            f"questions: {result.overall_status.value}"
        )
        return session.model_copy(deep=True)
