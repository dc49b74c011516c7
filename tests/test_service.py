import asyncio

import aiohttp
import pytest

from agents.crop_advisor.service import CompletionClient, RetryPolicy, extract_candidate_text
from core.config import Settings
from core.exceptions import CompletionFailure, ConfigurationError, FailureKind

from conftest import FakeTransport, gemini_body

def make_client(transport, timeout=25.0):
    return CompletionClient(
        api_key="test-key",
        endpoint="https://example.test/v1/models/gemini-1.5-pro:generateContent",
        timeout=timeout,
        transport=transport
    )

async def test_complete_returns_candidate_text():
    transport = FakeTransport([(200, gemini_body('{"categories": []}'))])
    client = make_client(transport)

    assert await client.complete("recommend crops") == '{"categories": []}'

    sent = transport.requests[0]
    assert sent["params"] == {"key": "test-key"}
    assert sent["payload"] == {
        "contents": [{"parts": [{"text": "recommend crops"}]}],
        "generationConfig": {"temperature": 0.2, "topK": 40, "topP": 0.95, "maxOutputTokens": 4096},
    }
    assert sent["timeout"] == 25.0

async def test_non_success_status_is_completion_failure():
    transport = FakeTransport([(503, {"error": {"message": "overloaded"}})])

    with pytest.raises(CompletionFailure) as exc_info:
        await make_client(transport).complete("prompt")

    assert exc_info.value.status == 503
    assert exc_info.value.kind == FailureKind.TRANSPORT
    assert "overloaded" in str(exc_info.value)

async def test_missing_text_is_completion_failure():
    transport = FakeTransport([(200, {"candidates": []})])
    with pytest.raises(CompletionFailure, match="Empty response"):
        await make_client(transport).complete("prompt")

@pytest.mark.parametrize("error", [
    aiohttp.ClientConnectionError("connection refused"),
    ConnectionResetError("reset by peer"),
])
async def test_transport_errors_are_completion_failures(error):
    with pytest.raises(CompletionFailure, match="Transport error"):
        await make_client(FakeTransport([error])).complete("prompt")

async def test_timeout_cancels_in_flight_call():
    cancelled = asyncio.Event()

    class HangingTransport(FakeTransport):
        async def post_json(self, url, payload, params, timeout):
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise

    client = make_client(HangingTransport([]), timeout=0.05)
    with pytest.raises(CompletionFailure, match="timed out"):
        await client.complete("prompt")
    assert cancelled.is_set()

def test_missing_api_key_is_configuration_error():
    with pytest.raises(ConfigurationError):
        CompletionClient(api_key="", endpoint="https://example.test")

def test_from_settings_requires_key():
    with pytest.raises(ConfigurationError, match="GEMINI_API_KEY"):
        CompletionClient.from_settings(Settings(gemini_api_key=None, _env_file=None))

def test_from_settings_uses_configuration(settings):
    client = CompletionClient.from_settings(settings, transport=FakeTransport([]))

    assert client.api_key == "test-key"
    assert client.timeout == 25.0
    assert client.endpoint == (
        "https://generativelanguage.googleapis.com/v1/models/gemini-1.5-pro:generateContent"
    )
    assert client.generation_config["maxOutputTokens"] == 4096

def test_extract_candidate_text():
    assert extract_candidate_text(gemini_body("hello")) == "hello"
    assert extract_candidate_text(gemini_body("   ")) is None
    assert extract_candidate_text(None) is None
    assert extract_candidate_text({"candidates": [{"content": {}}]}) is None

def test_retry_policy_backoff():
    policy = RetryPolicy(max_attempts=3, backoff_base_ms=1000)
    assert policy.delay_for(1) == 2.0
    assert policy.delay_for(2) == 4.0

def test_retry_policy_requires_an_attempt():
    with pytest.raises(ConfigurationError):
        RetryPolicy(max_attempts=0)
