"""Bearer credential lookup for requests to the assessment service.

Token issuance and storage belong to the auth service. This module only
adapts whatever the caller has into the ``Authorization`` header; a missing
token is not an error here, the service answers 401 and the client surfaces
it as ``AuthenticationError``.
"""

from typing import Callable, Dict, Optional

from medunify_assessment.config.settings import settings
import logging

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]


def settings_token_provider() -> Optional[str]:
    """Return the access token configured through ``MEDUNIFY_ACCESS_TOKEN``."""
    return settings.access_token


def static_token_provider(token: Optional[str]) -> TokenProvider:
    """Wrap a fixed token (or ``None``) as a provider."""
    return lambda: token


def get_auth_headers(token_provider: Optional[TokenProvider]) -> Dict[str, str]:
    """Build authorization headers for a single request."""
    token = token_provider() if token_provider else None
    if not token:
        logger.debug("No access token available, sending unauthenticated request")
        return {}
    return {"Authorization": f"Bearer {token}"}
