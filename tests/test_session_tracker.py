"""
Tests for the session tracker and the message log.

Verifies that:
1. Replies are applied only to the session they belong to
2. Progress and question count never go backwards
3. A completed session rejects further turns
4. Adoption is refused while a request is outstanding
"""

import pytest

from medunify_assessment.exceptions import (
    ConflictError,
    SessionClosedError,
    SessionMismatchError,
)
from medunify_assessment.models.assessment import QuestionTurn, TerminalAssessment
from medunify_assessment.models.session import Message, Session
from medunify_assessment.models.status import MessageRole, SessionStatus
from medunify_assessment.services.message_log import MessageLog
from medunify_assessment.services.session_tracker import SessionTracker

from payloads import assessment_payload, question_payload


def turn(**kwargs) -> QuestionTurn:
    return QuestionTurn.model_validate(question_payload(**kwargs))


@pytest.fixture
def tracker():
    tracker = SessionTracker()
    tracker.adopt(Session(session_id="s1"))
    return tracker


class TestQuestionTurns:
    """Applying intermediate replies"""

    def test_first_turn_updates_tracked_fields(self, tracker):
        tracker.apply_question_turn(
            turn(question_count=1, progress=20, identified_symptoms=["headache", "fever"])
        )

        session = tracker.current_session
        assert session.question_count == 1
        assert session.progress == 20
        assert session.can_complete is False
        assert set(session.identified_symptoms) == {"headache", "fever"}

    def test_progress_is_monotonic(self, tracker):
        progresses = []
        for count, progress in [(1, 20), (2, 40), (3, 35), (4, 80)]:
            tracker.apply_question_turn(turn(question_count=count, progress=progress))
            progresses.append(tracker.current_session.progress)

        assert progresses == [20, 40, 40, 80]
        assert progresses == sorted(progresses)

    def test_question_count_never_decreases(self, tracker):
        tracker.apply_question_turn(turn(question_count=3, progress=60))
        tracker.apply_question_turn(turn(question_count=2, progress=60))

        assert tracker.current_session.question_count == 3

    def test_symptoms_replaced_by_server_payload(self, tracker):
        tracker.apply_question_turn(turn(identified_symptoms=["headache"]))
        tracker.apply_question_turn(
            turn(question_count=2, progress=40, identified_symptoms=["headache", "fever", "fever"])
        )

        assert tracker.current_session.identified_symptoms == ["headache", "fever"]

    def test_mismatched_session_is_rejected_without_mutation(self, tracker):
        before = tracker.current_session

        with pytest.raises(SessionMismatchError) as exc_info:
            tracker.apply_question_turn(turn(session_id="other", question_count=4))

        assert exc_info.value.expected == "s1"
        assert exc_info.value.received == "other"
        assert tracker.current_session == before

    def test_no_session_rejects_any_reply(self):
        with pytest.raises(SessionMismatchError):
            SessionTracker().apply_question_turn(turn())

    def test_snapshot_cannot_mutate_tracker(self, tracker):
        snapshot = tracker.current_session
        snapshot.question_count = 99

        assert tracker.current_session.question_count == 0


class TestTerminalAssessment:
    """Closing a session"""

    def test_assessment_completes_session(self, tracker):
        tracker.apply_question_turn(turn(question_count=3, progress=60))
        tracker.apply_terminal_assessment(
            TerminalAssessment.model_validate(assessment_payload(question_count=3))
        )

        session = tracker.current_session
        assert session.status == SessionStatus.COMPLETED
        assert session.has_assessment is True
        assert session.progress == 100
        assert session.completed_at is not None

    def test_completed_session_rejects_question_turns(self, tracker):
        tracker.apply_terminal_assessment(
            TerminalAssessment.model_validate(assessment_payload())
        )

        with pytest.raises(SessionClosedError):
            tracker.apply_question_turn(turn(question_count=4, progress=90))

    def test_assessment_for_other_session_is_rejected(self, tracker):
        with pytest.raises(SessionMismatchError):
            tracker.apply_terminal_assessment(
                TerminalAssessment.model_validate(assessment_payload(session_id="s2"))
            )
        assert tracker.current_session.status == SessionStatus.ACTIVE


class TestRequestTickets:
    """Outstanding request bookkeeping"""

    def test_adopt_refused_while_request_outstanding(self, tracker):
        tracker.begin_request()

        with pytest.raises(ConflictError):
            tracker.adopt(Session(session_id="s2"))
        assert tracker.session_id == "s1"

    def test_abandoned_ticket_reports_stale(self, tracker):
        ticket = tracker.begin_request()
        tracker.abandon_request()

        assert tracker.finish_request(ticket) is False
        assert tracker.in_flight is False

    def test_newer_ticket_supersedes_older(self, tracker):
        old = tracker.begin_request()
        tracker.abandon_request()
        new = tracker.begin_request()

        assert tracker.finish_request(old) is False
        assert tracker.in_flight is True
        assert tracker.finish_request(new) is True
        assert tracker.in_flight is False


class TestMessageLog:
    """Append-only conversation log"""

    def test_append_order_and_roles(self):
        log = MessageLog()
        log.add_user_message("I have a headache")
        log.add_assistant_message("Since when?", options=["Today", "This week"])

        assert [m.role for m in log] == [MessageRole.USER, MessageRole.ASSISTANT]
        assert log.last.options == ("Today", "This week")

    def test_messages_are_immutable(self):
        message = MessageLog().add_user_message("hello")

        with pytest.raises(Exception):
            message.content = "changed"

    def test_options_detached_from_caller_list(self):
        log = MessageLog()
        options = ["Today", "This week"]
        message = log.add_assistant_message("Since when?", options=options)

        options.append("Never")

        assert message.options == ("Today", "This week")
        with pytest.raises(AttributeError):
            message.options.append("Never")

    def test_duplicate_ids_rejected(self):
        log = MessageLog()
        message = log.add_user_message("hello")

        with pytest.raises(ValueError):
            log.append(Message(id=message.id, role=MessageRole.USER, content="again"))

    def test_ids_unique(self):
        log = MessageLog()
        for i in range(50):
            log.add_user_message(f"message {i}")

        assert len({m.id for m in log}) == 50

    def test_clear(self):
        log = MessageLog()
        log.add_user_message("hello")
        log.clear()

        assert len(log) == 0
        assert log.last is None
