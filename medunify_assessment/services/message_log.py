"""Ordered, append-only log of conversation turns."""

from typing import Iterator, List, Optional, Sequence, Tuple
import logging

from medunify_assessment.models.assessment import TerminalAssessment
from medunify_assessment.models.session import Message
from medunify_assessment.models.status import MessageRole

logger = logging.getLogger(__name__)


class MessageLog:
    """
    Conversation turns in the order they were appended.

    Messages are frozen once appended; the only way to drop history is
    ``clear()``, which the orchestrator calls on reset.
    """

    def __init__(self):
        self._messages: List[Message] = []

    def append(self, message: Message) -> Message:
        if any(m.id == message.id for m in self._messages):
            raise ValueError(f"Duplicate message id {message.id}")
        self._messages.append(message)
        return message

    def add_user_message(self, content: str) -> Message:
        return self.append(Message(role=MessageRole.USER, content=content))

    def add_assistant_message(
        self,
        content: str,
        options: Optional[Sequence[str]] = None,
        context_reference: Optional[str] = None,
        assessment: Optional[TerminalAssessment] = None,
    ) -> Message:
        return self.append(
            Message(
                role=MessageRole.ASSISTANT,
                content=content,
                options=tuple(options) if options else None,
                context_reference=context_reference,
                assessment=assessment,
            )
        )

    @property
    def messages(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def last(self) -> Optional[Message]:
        return self._messages[-1] if self._messages else None

    def clear(self) -> None:
        logger.debug(f"Clearing message log ({len(self._messages)} messages)")
        self._messages = []

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))
