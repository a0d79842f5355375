"""Tests for the early-completion gate."""

import pytest

from medunify_assessment.exceptions import InsufficientDataError
from medunify_assessment.models.session import Session
from medunify_assessment.models.status import SessionStatus
from medunify_assessment.services.completion_gate import can_complete, ensure_can_complete


def session(**overrides) -> Session:
    data = {"session_id": "s1", "question_count": 3, "can_complete": True}
    data.update(overrides)
    return Session(**data)


class TestCanComplete:

    def test_open_gate(self):
        assert can_complete(session()) is True

    @pytest.mark.parametrize("count", [0, 1, 2])
    def test_below_minimum_questions(self, count):
        """The client mirrors the server's three-question floor even if the server says yes"""
        assert can_complete(session(question_count=count)) is False

    def test_server_flag_required(self):
        assert can_complete(session(question_count=5, can_complete=False)) is False

    @pytest.mark.parametrize("status", [SessionStatus.COMPLETED, SessionStatus.ABANDONED])
    def test_only_active_sessions(self, status):
        assert can_complete(session(status=status)) is False

    def test_no_session(self):
        assert can_complete(None) is False

    def test_custom_minimum(self):
        assert can_complete(session(question_count=4), min_questions=5) is False


class TestEnsureCanComplete:

    def test_returns_session_when_open(self):
        assert ensure_can_complete(session()).session_id == "s1"

    def test_reason_mentions_minimum(self):
        with pytest.raises(InsufficientDataError, match="at least 3"):
            ensure_can_complete(session(question_count=2))
