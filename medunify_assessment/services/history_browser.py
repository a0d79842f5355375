"""Read-only access to past assessment sessions."""

from typing import List, Optional
import logging

from medunify_assessment.api.client import AssessmentClient
from medunify_assessment.config.settings import settings
from medunify_assessment.exceptions import AssessmentAPIError
from medunify_assessment.models.messages import ConversationMessage, SessionSummary

logger = logging.getLogger(__name__)


class HistoryBrowser:
    """
    Fetches past sessions for display.

    Shares nothing with the chat orchestrator but the HTTP client, so it can
    run while a chat turn is outstanding.
    """

    def __init__(self, client: AssessmentClient):
        self._client = client
        self.last_error: Optional[AssessmentAPIError] = None

    async def list(
        self, limit: Optional[int] = None, include_conversation: bool = False
    ) -> List[SessionSummary]:
        """
        List past sessions, most recent first.

        Args:
            limit: Maximum number of sessions (positive, default from settings)
            include_conversation: Include each session's Q&A transcript

        Returns:
            Sessions, or an empty list if the service could not be reached
        """
        if limit is None:
            limit = settings.history_default_limit
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValueError(f"limit must be a positive integer, got {limit!r}")

        try:
            sessions = await self._client.get_history(limit, include_conversation)
        except AssessmentAPIError as e:
            logger.error(f"Failed to load assessment history: {e!r}")
            self.last_error = e
            return []

        self.last_error = None
        sessions = sorted(sessions, key=lambda s: s.started_at, reverse=True)
        logger.info(f"Retrieved {len(sessions)} past sessions (limit: {limit})")
        return sessions[:limit]

    async def fetch_one(self, session_id: str) -> SessionSummary:
        """
        Get one session with its full conversation.

        Raises:
            AssessmentAPIError: the session could not be fetched
        """
        if not session_id:
            raise ValueError("session_id is required")
        return await self._client.get_session(session_id)

    async def conversation_for(self, summary: SessionSummary) -> List[ConversationMessage]:
        """
        Transcript of ``summary``, fetched on demand if the listing omitted it.

        Falls back to whatever the summary carried when the fetch fails.
        """
        if summary.conversation_history:
            return list(summary.conversation_history)

        try:
            full = await self.fetch_one(summary.session_id)
        except AssessmentAPIError as e:
            logger.warning(
                f"Could not load conversation for session {summary.session_id}: {e!r}"
            )
            self.last_error = e
            return list(summary.conversation_history or [])

        return list(full.conversation_history or [])
