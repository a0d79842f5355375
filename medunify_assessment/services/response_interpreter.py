"""Classification and projection of assessment chat replies.

The chat endpoint answers with one of two shapes: a follow-up question or
the final structured assessment. ``classify`` is the single place that tells
them apart; everything downstream works with the typed models.

A reply is terminal when it says so (``response_type == "assessment"``) or
carries a non-empty ``conditions`` list. Anything else must validate as a
question turn. Replies that fit neither, or that contradict themselves, are
``UnrecognizedReplyError`` rather than being coerced into either shape.
"""

from typing import Any
import logging

from pydantic import ValidationError as PydanticValidationError

from medunify_assessment.exceptions import UnrecognizedReplyError
from medunify_assessment.models.assessment import (
    ChatReply,
    QuestionTurn,
    TerminalAssessment,
)
from medunify_assessment.models.session import Message
from medunify_assessment.services.message_log import MessageLog
from medunify_assessment.services.session_tracker import SessionTracker

logger = logging.getLogger(__name__)

QUESTION = "question"
ASSESSMENT = "assessment"


def _is_terminal(raw: dict) -> bool:
    response_type = raw.get("response_type")
    conditions = raw.get("conditions")
    has_conditions = isinstance(conditions, list) and len(conditions) > 0

    if response_type == QUESTION and has_conditions:
        raise UnrecognizedReplyError(
            "Reply is marked as a question but carries assessment conditions."
        )
    if response_type not in (None, QUESTION, ASSESSMENT):
        raise UnrecognizedReplyError(f"Unknown response_type {response_type!r}.")
    return response_type == ASSESSMENT or has_conditions


def classify(raw: Any) -> ChatReply:
    """
    Turn a decoded chat reply into a QuestionTurn or a TerminalAssessment.

    Args:
        raw: Decoded JSON body of a 200 response

    Returns:
        The typed reply

    Raises:
        UnrecognizedReplyError: the reply matches neither shape
    """
    if not isinstance(raw, dict):
        raise UnrecognizedReplyError(
            f"Expected a JSON object, got {type(raw).__name__}."
        )

    terminal = _is_terminal(raw)
    model = TerminalAssessment if terminal else QuestionTurn
    payload = {**raw, "response_type": ASSESSMENT if terminal else QUESTION}

    try:
        reply = model.model_validate(payload)
    except PydanticValidationError as e:
        logger.error(f"Reply does not match {model.__name__}: {e}")
        raise UnrecognizedReplyError(
            f"Reply does not match the {model.__name__} shape."
        ) from e

    logger.debug(f"Classified reply for session {reply.session_id} as {reply.response_type}")
    return reply


def classify_terminal(raw: Any) -> TerminalAssessment:
    """Classify a reply that must be final (the complete endpoint)."""
    reply = classify(raw)
    if not isinstance(reply, TerminalAssessment):
        raise UnrecognizedReplyError(
            "Expected a final assessment but received another question."
        )
    return reply


def project(reply: ChatReply, tracker: SessionTracker, log: MessageLog) -> Message:
    """
    Apply a classified reply to the tracker, then append the assistant turn.

    The tracker update runs first: if its session guard rejects the reply,
    the log stays untouched.

    Returns:
        The appended assistant message
    """
    if isinstance(reply, TerminalAssessment):
        tracker.apply_terminal_assessment(reply)
        return log.add_assistant_message(reply.message, assessment=reply)

    tracker.apply_question_turn(reply)
    return log.add_assistant_message(
        reply.message,
        options=reply.options,
        context_reference=reply.context_reference,
    )
