"""Chat orchestrator: the state machine of the assessment conversation.

States and transitions::

    EMPTY     --start-------------------------------> ACTIVE
    ACTIVE    --send / select_option / force_complete-> WAITING
    ERROR     --send / select_option / force_complete-> WAITING   (user retry)
    WAITING   --question reply-----------------------> ACTIVE
    WAITING   --final assessment---------------------> COMPLETED
    WAITING   --failure------------------------------> ERROR
    any       --reset--------------------------------> ACTIVE    (new session)

Only one request is outstanding at a time; a second operation while
WAITING raises ``BusyError``. ``reset`` is the exception: it abandons the
outstanding request, whose reply is then discarded when it arrives.

Remote failures never raise out of an operation. They come back as
``TurnOutcome.error`` and leave the session and the log as they were, so the
user can simply resend. Local protocol violations raise.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Tuple
import logging

from medunify_assessment.api.client import AssessmentClient
from medunify_assessment.config.settings import settings
from medunify_assessment.exceptions import (
    AssessmentAPIError,
    AssessmentError,
    BusyError,
    SessionClosedError,
    SessionMismatchError,
)
from medunify_assessment.models.assessment import ChatReply, TerminalAssessment
from medunify_assessment.models.session import Message, Session
from medunify_assessment.models.status import ChatState, SessionStatus
from medunify_assessment.services import completion_gate, response_interpreter
from medunify_assessment.services.message_log import MessageLog
from medunify_assessment.services.session_tracker import SessionTracker

logger = logging.getLogger(__name__)


@dataclass
class TurnOutcome:
    """Result of one orchestrator operation."""

    reply: Optional[ChatReply] = None
    error: Optional[AssessmentError] = None
    stale: bool = False  # Reply arrived for a request abandoned by reset

    @property
    def ok(self) -> bool:
        return self.error is None and not self.stale

    @property
    def detail(self) -> Optional[str]:
        """Human-readable error message for a notification."""
        if self.error is None:
            return None
        return getattr(self.error, "detail", None) or str(self.error)


class ChatOrchestrator:
    """Drives one assessment conversation against the remote service."""

    def __init__(
        self,
        client: AssessmentClient,
        tracker: Optional[SessionTracker] = None,
        log: Optional[MessageLog] = None,
        min_questions: Optional[int] = None,
        welcome_message: Optional[str] = None,
        welcome_back_message: Optional[str] = None,
    ):
        self._client = client
        self._tracker = tracker or SessionTracker()
        self._log = log or MessageLog()
        self._min_questions = (
            min_questions
            if min_questions is not None
            else settings.min_questions_for_completion
        )
        self._welcome_message = welcome_message or settings.welcome_message
        self._welcome_back_message = welcome_back_message or settings.welcome_back_message

        self._state = ChatState.EMPTY
        self._assessment: Optional[TerminalAssessment] = None
        self._last_error: Optional[AssessmentError] = None

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    @property
    def state(self) -> ChatState:
        return self._state

    @property
    def session(self) -> Optional[Session]:
        return self._tracker.current_session

    @property
    def messages(self) -> Tuple[Message, ...]:
        return self._log.messages

    @property
    def assessment(self) -> Optional[TerminalAssessment]:
        return self._assessment

    @property
    def last_error(self) -> Optional[AssessmentError]:
        return self._last_error

    @property
    def is_busy(self) -> bool:
        return self._state == ChatState.WAITING

    @property
    def can_complete(self) -> bool:
        return completion_gate.can_complete(self.session, self._min_questions)

    # ------------------------------------------------------------------
    # Guards
    # ------------------------------------------------------------------

    def _transition(self, new_state: ChatState) -> None:
        if new_state != self._state:
            logger.debug(f"Chat state {self._state.value} -> {new_state.value}")
        self._state = new_state

    def _ensure_idle(self, action: str) -> None:
        if self._state == ChatState.WAITING:
            raise BusyError(f"Cannot {action} while waiting for the assessment service")

    def _ensure_open(self, action: str) -> None:
        session = self._tracker.current_session
        if self._state == ChatState.COMPLETED or (
            session is not None and session.status == SessionStatus.COMPLETED
        ):
            raise SessionClosedError(
                f"Cannot {action}: the assessment is complete. Reset to start over."
            )

    def _fail(self, error: AssessmentError) -> TurnOutcome:
        self._last_error = error
        self._transition(ChatState.ERROR)
        return TurnOutcome(error=error)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def start(self) -> TurnOutcome:
        """
        Resume the active server-side session or greet a new user.

        A single best-effort lookup: if it fails, the conversation simply
        starts without a session.
        """
        self._ensure_idle("start")
        if self._state != ChatState.EMPTY:
            logger.debug("start() called on a running conversation, ignoring")
            return TurnOutcome()

        ticket = self._tracker.begin_request()
        self._transition(ChatState.WAITING)

        session: Optional[Session] = None
        try:
            session = await self._client.get_current_session()
        except AssessmentAPIError as e:
            logger.warning(f"Current session lookup failed, starting fresh: {e!r}")
        except Exception:
            if self._tracker.finish_request(ticket):
                self._transition(ChatState.EMPTY)
            raise

        if not self._tracker.finish_request(ticket):
            logger.warning("Discarding current session lookup abandoned by reset")
            return TurnOutcome(stale=True)

        if session is not None and session.is_active:
            self._tracker.adopt(session)
            self._log.add_assistant_message(
                self._welcome_back_message.format(last_message=session.last_message)
            )
            logger.info(
                f"Resumed session {session.session_id} at question {session.question_count}"
            )
        else:
            self._log.add_assistant_message(self._welcome_message)

        self._transition(ChatState.ACTIVE)
        return TurnOutcome()

    async def send(self, text: str) -> TurnOutcome:
        """
        Send a free-text answer.

        The user message is appended before the request so it stays visible
        (and can be resent) if the request fails.

        Raises:
            BusyError: a request is already outstanding
            SessionClosedError: the session already has its final assessment
            ValueError: ``text`` is blank
        """
        self._ensure_idle("send a message")
        self._ensure_open("send a message")
        if text is None or not text.strip():
            raise ValueError("Message must not be blank")

        message = text.strip()
        self._log.add_user_message(message)
        session_id = self._tracker.session_id

        return await self._exchange(
            lambda: self._client.send_message(message, session_id),
            response_interpreter.classify,
        )

    async def select_option(self, option: str) -> TurnOutcome:
        """Answer with one of the offered options (same as sending it)."""
        return await self.send(option)

    async def force_complete(self) -> TurnOutcome:
        """
        Ask for the final assessment before the service is done asking.

        Raises:
            BusyError: a request is already outstanding
            SessionClosedError: the session already has its final assessment
            InsufficientDataError: the completion gate is closed (no request made)
        """
        self._ensure_idle("complete the assessment")
        self._ensure_open("complete the assessment")
        session = completion_gate.ensure_can_complete(
            self._tracker.current_session, self._min_questions
        )

        logger.info(
            f"Forcing completion of session {session.session_id} "
            f"after {session.question_count} questions"
        )
        return await self._exchange(
            lambda: self._client.complete_assessment(session.session_id),
            response_interpreter.classify_terminal,
        )

    async def reset(self) -> TurnOutcome:
        """
        Abandon the current session and start a fresh one.

        Always permitted, including while another request is outstanding.
        The old session and log are only discarded once the new session has
        been issued.
        """
        previous_id = self._tracker.session_id
        self._tracker.abandon_request()
        ticket = self._tracker.begin_request()
        self._transition(ChatState.WAITING)

        try:
            response = await self._client.reset_assessment()
        except AssessmentAPIError as e:
            if not self._tracker.finish_request(ticket):
                logger.warning(f"Ignoring failure of superseded reset: {e!r}")
                return TurnOutcome(error=e, stale=True)
            logger.warning(f"Reset failed, keeping session {previous_id}: {e!r}")
            return self._fail(e)
        except Exception:
            self._tracker.finish_request(ticket)
            self._transition(ChatState.ERROR)
            raise

        if not self._tracker.finish_request(ticket):
            logger.warning(f"Discarding superseded reset to session {response.session_id}")
            return TurnOutcome(stale=True)

        if response.session_id == previous_id:
            logger.warning(f"Reset returned the same session id {previous_id}")

        self._tracker.clear()
        self._log.clear()
        self._assessment = None
        self._last_error = None

        self._tracker.adopt(
            Session(session_id=response.session_id, last_message=response.message)
        )
        self._log.add_assistant_message(response.message)
        self._transition(ChatState.ACTIVE)

        logger.info(f"Reset session {previous_id} -> {response.session_id}")
        return TurnOutcome()

    # ------------------------------------------------------------------
    # Request/reply cycle
    # ------------------------------------------------------------------

    async def _exchange(
        self,
        call: Callable[[], Awaitable[Any]],
        interpret: Callable[[Any], ChatReply],
    ) -> TurnOutcome:
        ticket = self._tracker.begin_request()
        self._transition(ChatState.WAITING)

        try:
            reply = interpret(await call())
        except AssessmentAPIError as e:
            if not self._tracker.finish_request(ticket):
                logger.warning(f"Ignoring failure of abandoned request: {e!r}")
                return TurnOutcome(error=e, stale=True)
            logger.warning(f"Assessment request failed: {e!r}")
            return self._fail(e)
        except Exception:
            if self._tracker.finish_request(ticket):
                self._transition(ChatState.ERROR)
            raise

        if not self._tracker.finish_request(ticket):
            logger.warning(
                f"Discarding stale reply for session {reply.session_id} "
                "(request abandoned by reset)"
            )
            return TurnOutcome(reply=reply, stale=True)

        if self._tracker.session_id is None:
            # First turn: the service has just issued the session
            self._tracker.adopt(Session(session_id=reply.session_id))

        try:
            response_interpreter.project(reply, self._tracker, self._log)
        except (SessionMismatchError, SessionClosedError) as e:
            logger.error(f"Discarding reply that violates session invariants: {e}")
            return self._fail(e)

        self._last_error = None
        if isinstance(reply, TerminalAssessment):
            self._assessment = reply
            self._transition(ChatState.COMPLETED)
        else:
            self._transition(ChatState.ACTIVE)
        return TurnOutcome(reply=reply)
