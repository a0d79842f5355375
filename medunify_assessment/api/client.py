"""HTTP client for the remote AI Health Assessment API.

Wraps the six ``/chat`` endpoints of the assessment service. Every transport
or HTTP failure is translated into the ``AssessmentAPIError`` family so the
chat orchestrator only ever deals with one error vocabulary:

- no response at all (connection refused, timeout) -> ``NetworkError``
- HTTP 5xx or an undecodable body -> ``ServerError``
- HTTP 4xx -> ``ValidationError`` (``AuthenticationError`` for 401/403)

The chat and complete endpoints return the raw decoded JSON; deciding whether
it is a question or a final assessment is the response interpreter's job.
"""

from typing import Any, Dict, List, Optional
import logging
import time

import httpx
from pydantic import ValidationError as PydanticValidationError

from medunify_assessment.api.dependencies import (
    TokenProvider,
    get_auth_headers,
    settings_token_provider,
)
from medunify_assessment.config.settings import settings
from medunify_assessment.exceptions import (
    AssessmentAPIError,
    AuthenticationError,
    NetworkError,
    ServerError,
    ValidationError,
)
from medunify_assessment.models.messages import (
    ChatMessageRequest,
    ResetResponse,
    SessionSummary,
)
from medunify_assessment.models.session import Session

logger = logging.getLogger(__name__)


# Endpoint paths relative to settings.api_prefix
CHAT = "/chat"
COMPLETE = "/chat/complete"
RESET = "/chat/reset"
CURRENT = "/chat/current"
HISTORY = "/chat/history"


def _extract_detail(response: httpx.Response) -> Optional[str]:
    """Pull a human-readable message out of an error response."""
    try:
        data = response.json()
    except ValueError:
        return response.reason_phrase or None

    detail = data.get("detail") if isinstance(data, dict) else None
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list):
        # FastAPI request validation errors
        messages = [item.get("msg", "") for item in detail if isinstance(item, dict)]
        return "; ".join(m for m in messages if m) or None
    return response.reason_phrase or None


def error_for_response(response: httpx.Response) -> AssessmentAPIError:
    """Map a non-2xx response onto the error taxonomy."""
    status_code = response.status_code
    detail = _extract_detail(response)

    if status_code in (401, 403):
        return AuthenticationError(detail, status_code=status_code)
    if 400 <= status_code < 500:
        return ValidationError(detail, status_code=status_code)
    return ServerError(detail, status_code=status_code)


class AssessmentClient:
    """Async client for the assessment chat endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_prefix: Optional[str] = None,
        token_provider: Optional[TokenProvider] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Service root URL (overrides settings)
            api_prefix: Path prefix of the assessment router (overrides settings)
            token_provider: Callable returning the current bearer token
            timeout: Per-request timeout in seconds (overrides settings)
            transport: Custom httpx transport, used by tests
        """
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.api_prefix = (
            api_prefix if api_prefix is not None else settings.api_prefix
        ).rstrip("/")
        self.token_provider = token_provider or settings_token_provider
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self.transport = transport

        logger.info(
            f"Assessment client initialized - Server: {self.base_url}{self.api_prefix}"
        )

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Make an HTTP request to the assessment service.

        Args:
            method: HTTP method
            path: Endpoint path relative to the API prefix
            params: Query parameters
            json: JSON body

        Returns:
            Decoded JSON body, ``{}`` for an empty body

        Raises:
            NetworkError, ServerError, ValidationError, AuthenticationError
        """
        url = f"{self.api_prefix}{path}"
        headers = {"Accept": "application/json", **get_auth_headers(self.token_provider)}

        start_time = time.monotonic()
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.request(
                    method, url, params=params, json=json, headers=headers
                )
        except httpx.TimeoutException as e:
            logger.warning(f"Assessment request timeout: {method} {url}")
            raise NetworkError("The assessment service did not respond in time.") from e
        except httpx.TransportError as e:
            logger.warning(f"Assessment request failed: {method} {url}: {e}")
            raise NetworkError() from e

        duration_ms = (time.monotonic() - start_time) * 1000
        logger.debug(
            f"{method} {url} -> {response.status_code} ({duration_ms:.2f}ms)"
        )

        if response.is_error:
            error = error_for_response(response)
            level = logging.ERROR if response.status_code >= 500 else logging.WARNING
            logger.log(level, f"{method} {url} failed: {error!r}")
            raise error

        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Malformed JSON from {method} {url}: {e}")
            raise ServerError(
                "Malformed response from the assessment service.",
                status_code=response.status_code,
            ) from e

    async def send_message(self, message: str, session_id: Optional[str] = None) -> Any:
        """
        Send a chat message. ``session_id=None`` asks the service for a new session.

        Returns:
            Raw reply (question turn or final assessment)
        """
        payload = ChatMessageRequest(message=message, session_id=session_id or None)
        logger.debug(f"Sending chat message for session {payload.session_id}")
        return await self._request("POST", CHAT, json=payload.model_dump())

    async def complete_assessment(self, session_id: str) -> Any:
        """Force early completion of a session (server requires 3+ answers)."""
        return await self._request("POST", COMPLETE, params={"session_id": session_id})

    async def reset_assessment(self) -> ResetResponse:
        """Abandon the current session and start a fresh one."""
        data = await self._request("POST", RESET)
        return self._parse(ResetResponse, data)

    async def get_current_session(self) -> Optional[Session]:
        """
        Get the active session, if any.

        Returns:
            Session or None when the service answers 404
        """
        try:
            data = await self._request("GET", CURRENT)
        except ValidationError as e:
            if e.status_code == 404:
                return None
            raise
        if not data:
            return None
        return self._parse(Session, data)

    async def get_history(
        self, limit: int = 10, include_conversation: bool = False
    ) -> List[SessionSummary]:
        """
        Get past sessions, most recent first.

        Args:
            limit: Maximum number of sessions to return
            include_conversation: Include the full Q&A transcript per session
        """
        params: Dict[str, Any] = {"limit": limit}
        # Only include conversation if explicitly requested
        if include_conversation:
            params["include_conversation"] = "true"

        data = await self._request("GET", HISTORY, params=params)
        if not isinstance(data, list):
            raise ServerError("History response is not a list.", status_code=200)
        return [self._parse(SessionSummary, item) for item in data]

    async def get_session(self, session_id: str) -> SessionSummary:
        """Get one past session with its full conversation."""
        data = await self._request(
            "GET", f"{HISTORY}/{session_id}", params={"include_conversation": "true"}
        )
        return self._parse(SessionSummary, data)

    @staticmethod
    def _parse(model, data: Any):
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            logger.error(f"Invalid {model.__name__} payload: {e}")
            raise ServerError(
                f"Invalid {model.__name__} received from the assessment service.",
                status_code=200,
            ) from e
