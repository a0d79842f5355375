"""Error taxonomy for the assessment chat client.

Two families live here:

- ``AssessmentAPIError`` and its subclasses describe failures of the remote
  service (transport, HTTP status, unusable body). The chat orchestrator
  catches them and hands them back as a recoverable error value.
- ``ProtocolViolationError`` and its subclasses describe local invariant
  violations (busy orchestrator, closed or mismatched session). They are
  never caused by the remote service and are raised to the caller.
"""

from typing import Optional


class AssessmentError(Exception):
    """Base class for every error raised by this package."""


# ---------------------------------------------------------------------------
# Remote failures
# ---------------------------------------------------------------------------


class AssessmentAPIError(AssessmentError):
    """A remote call failed. ``detail`` is safe to show to the user."""

    default_detail = "An error occurred"

    def __init__(self, detail: Optional[str] = None, status_code: int = 0):
        self.detail = detail or self.default_detail
        self.status_code = status_code
        super().__init__(self.detail)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code}, detail={self.detail!r})"


class NetworkError(AssessmentAPIError):
    """No HTTP response was received (connection error or timeout)."""

    default_detail = "Network error. Please check your connection."

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, status_code=0)


class ServerError(AssessmentAPIError):
    """HTTP 5xx, or a body that could not be decoded."""

    default_detail = "The assessment service is unavailable. Please try again."


class ValidationError(AssessmentAPIError):
    """HTTP 4xx: the service rejected the request."""

    default_detail = "The request was rejected by the assessment service."


class AuthenticationError(ValidationError):
    """HTTP 401/403: missing, expired or insufficient credentials."""

    default_detail = "Not authenticated. Please sign in again."


class UnrecognizedReplyError(AssessmentAPIError):
    """A 200 reply matched neither the question nor the assessment shape."""

    default_detail = "Received an unexpected reply from the assessment service."

    def __init__(self, detail: Optional[str] = None, status_code: int = 200):
        super().__init__(detail, status_code=status_code)


# ---------------------------------------------------------------------------
# Local protocol violations
# ---------------------------------------------------------------------------


class ProtocolViolationError(AssessmentError):
    """A local conversation invariant would be broken."""


class SessionMismatchError(ProtocolViolationError):
    """A reply belongs to a different session than the tracked one."""

    def __init__(self, expected: Optional[str], received: Optional[str]):
        self.expected = expected
        self.received = received
        super().__init__(
            f"Reply for session {received!r} does not match current session {expected!r}"
        )


class SessionClosedError(ProtocolViolationError):
    """The session already has a final assessment."""


class BusyError(ProtocolViolationError):
    """Another request is still waiting for the assessment service."""


class ConflictError(ProtocolViolationError):
    """A session cannot be adopted while a request is outstanding."""


class InsufficientDataError(AssessmentError):
    """Not enough answered questions to force an assessment."""
