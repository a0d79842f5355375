"""
Tests for the HTTP client's request shape and error mapping.

Uses httpx.MockTransport so every status code and transport failure can be
produced directly.
"""

import json

import httpx
import pytest

from medunify_assessment.api.client import AssessmentClient
from medunify_assessment.api.dependencies import static_token_provider
from medunify_assessment.exceptions import (
    AuthenticationError,
    NetworkError,
    ServerError,
    ValidationError,
)

from payloads import question_payload


def make_client(handler, token="abc"):
    return AssessmentClient(
        base_url="http://api.test",
        api_prefix="/api/v1/assessment",
        token_provider=static_token_provider(token),
        transport=httpx.MockTransport(handler),
    )


class TestRequests:
    """Outgoing request shape"""

    async def test_send_message_body_and_auth(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=question_payload())

        raw = await make_client(handler).send_message("I have a headache")

        assert seen["path"] == "/api/v1/assessment/chat"
        assert seen["auth"] == "Bearer abc"
        assert seen["body"] == {"message": "I have a headache", "session_id": None}
        assert raw["session_id"] == "s1"

    async def test_no_token_sends_no_auth_header(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json=[])

        await make_client(handler, token=None).get_history()

        assert seen["auth"] is None

    async def test_complete_passes_session_id_as_query(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={})

        await make_client(handler).complete_assessment("s1")

        assert seen["method"] == "POST"
        assert seen["path"] == "/api/v1/assessment/chat/complete"
        assert seen["params"] == {"session_id": "s1"}

    async def test_history_only_sends_include_conversation_when_requested(self):
        params = []

        def handler(request):
            params.append(dict(request.url.params))
            return httpx.Response(200, json=[])

        client = make_client(handler)
        await client.get_history(5)
        await client.get_history(5, include_conversation=True)

        assert params == [
            {"limit": "5"},
            {"limit": "5", "include_conversation": "true"},
        ]

    async def test_current_session_404_is_none(self):
        def handler(request):
            return httpx.Response(404, json={"detail": "No active session"})

        assert await make_client(handler).get_current_session() is None


class TestErrorMapping:
    """Translation of failures into the error taxonomy"""

    async def test_connection_error_is_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(NetworkError) as exc_info:
            await make_client(handler).send_message("hi")
        assert exc_info.value.status_code == 0

    async def test_timeout_is_network_error(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(NetworkError):
            await make_client(handler).reset_assessment()

    async def test_4xx_is_validation_error_with_detail(self):
        def handler(request):
            return httpx.Response(400, json={"detail": "Need at least 3 questions"})

        with pytest.raises(ValidationError) as exc_info:
            await make_client(handler).complete_assessment("s1")
        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == "Need at least 3 questions"

    async def test_fastapi_validation_detail_list(self):
        def handler(request):
            return httpx.Response(
                422, json={"detail": [{"loc": ["body", "message"], "msg": "Field required"}]}
            )

        with pytest.raises(ValidationError, match="Field required"):
            await make_client(handler).send_message("hi")

    @pytest.mark.parametrize("status_code", [401, 403])
    async def test_auth_failures(self, status_code):
        def handler(request):
            return httpx.Response(status_code, json={"detail": "Not authenticated."})

        with pytest.raises(AuthenticationError):
            await make_client(handler).get_history()

    async def test_5xx_is_server_error(self):
        def handler(request):
            return httpx.Response(503, text="Service Unavailable")

        with pytest.raises(ServerError) as exc_info:
            await make_client(handler).send_message("hi")
        assert exc_info.value.status_code == 503

    async def test_malformed_body_is_server_error(self):
        def handler(request):
            return httpx.Response(200, text="<html>not json</html>")

        with pytest.raises(ServerError):
            await make_client(handler).send_message("hi")

    async def test_invalid_history_item_is_server_error(self):
        def handler(request):
            return httpx.Response(200, json=[{"session_id": "s1"}])

        with pytest.raises(ServerError):
            await make_client(handler).get_history()

    async def test_reset_response_parsed(self):
        def handler(request):
            return httpx.Response(200, json={"session_id": "s2", "message": "Hello"})

        response = await make_client(handler).reset_assessment()

        assert response.session_id == "s2"
        assert response.message == "Hello"
