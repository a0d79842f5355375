"""Shared fixtures: a fake assessment service reached through httpx's ASGI transport."""

import httpx
import pytest

from medunify_assessment.api.client import AssessmentClient
from medunify_assessment.api.dependencies import static_token_provider
from medunify_assessment.services.chat_orchestrator import ChatOrchestrator
from medunify_assessment.services.history_browser import HistoryBrowser

from fake_service import VALID_TOKEN, FakeAssessmentService, build_app

BASE_URL = "http://assessment.test"


@pytest.fixture
def service():
    return FakeAssessmentService()


@pytest.fixture
def client(service):
    transport = httpx.ASGITransport(app=build_app(service))
    return AssessmentClient(
        base_url=BASE_URL,
        api_prefix="/api/v1/assessment",
        token_provider=static_token_provider(VALID_TOKEN),
        transport=transport,
    )


@pytest.fixture
def orchestrator(client):
    return ChatOrchestrator(client, welcome_message="Welcome!")


@pytest.fixture
def history(client):
    return HistoryBrowser(client)
