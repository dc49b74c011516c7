# agents/crop_advisor/service.py
"""
Completion service - calls the external text generation endpoint
"""
import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

import aiohttp

from core.config import Settings, get_settings, validate_api_keys
from core.exceptions import CompletionFailure, ConfigurationError

logger = logging.getLogger(__name__)

class BaseTransport(ABC):
    """Outbound HTTP transport; swapped for a fake in tests"""

    @abstractmethod
    async def post_json(
        self,
        url: str,
        payload: Dict[str, Any],
        params: Dict[str, str],
        timeout: float
    ) -> Tuple[int, Any]:
        """POST a JSON body and return (status, decoded JSON body or None)"""
        pass

class AiohttpTransport(BaseTransport):
    """aiohttp based transport, one session per call"""

    async def post_json(
        self,
        url: str,
        payload: Dict[str, Any],
        params: Dict[str, str],
        timeout: float
    ) -> Tuple[int, Any]:
        client_timeout = aiohttp.ClientTimeout(total=timeout)
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            async with session.post(
                url,
                json=payload,
                params=params,
                headers={"Content-Type": "application/json"}
            ) as response:
                try:
                    body = await response.json(content_type=None)
                except (json.JSONDecodeError, aiohttp.ContentTypeError):
                    body = None
                return response.status, body

class RetryPolicy:
    """Bounded attempts with exponential backoff: 2^attempt * base milliseconds"""

    def __init__(self, max_attempts: int = 3, backoff_base_ms: int = 1000):
        if max_attempts < 1:
            raise ConfigurationError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.backoff_base_ms = backoff_base_ms

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the given (1-based) failed attempt"""
        return (2 ** attempt) * self.backoff_base_ms / 1000.0

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "RetryPolicy":
        return cls(
            max_attempts=int(config.get("max_attempts", 3)),
            backoff_base_ms=int(config.get("backoff_base_ms", 1000))
        )

def extract_candidate_text(body: Any) -> Optional[str]:
    """candidates[0].content.parts[0].text, or None when any level is missing"""
    try:
        text = body["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) and text.strip() else None

class CompletionClient:
    """
    Single-attempt client for the text generation endpoint.

    Each call is bounded by ``timeout`` seconds; on expiry the in-flight
    request is cancelled and reported as a CompletionFailure. Retrying is the
    caller's job so that parse failures share the same attempt budget.
    """

    def __init__(
        self,
        api_key: str,
        endpoint: str,
        timeout: float = 25.0,
        generation_config: Optional[Dict[str, Any]] = None,
        transport: Optional[BaseTransport] = None
    ):
        if not api_key:
            raise ConfigurationError("GEMINI_API_KEY environment variable is not set")
        self.api_key = api_key
        self.endpoint = endpoint
        self.timeout = timeout
        self.generation_config = generation_config or {
            "temperature": 0.2,
            "topK": 40,
            "topP": 0.95,
            "maxOutputTokens": 4096,
        }
        self.transport = transport or AiohttpTransport()

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        transport: Optional[BaseTransport] = None
    ) -> "CompletionClient":
        """Build a client from settings; raises ConfigurationError without an API key"""
        settings = settings or get_settings()
        validate_api_keys(settings)
        config = settings.get_agent_config("crop_advisor")
        return cls(
            api_key=settings.gemini_api_key,
            endpoint=settings.gemini_endpoint,
            timeout=float(config.get("request_timeout_seconds", 25)),
            generation_config={
                "temperature": config.get("temperature", 0.2),
                "topK": config.get("top_k", 40),
                "topP": config.get("top_p", 0.95),
                "maxOutputTokens": config.get("max_output_tokens", 4096),
            },
            transport=transport
        )

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "contents": [
                {
                    "parts": [
                        {"text": prompt}
                    ]
                }
            ],
            "generationConfig": dict(self.generation_config),
        }

    async def complete(self, prompt: str) -> str:
        """Send the prompt and return the raw response text"""
        payload = self.build_payload(prompt)
        logger.debug(f"Sending request to {self.endpoint}")

        try:
            status, body = await asyncio.wait_for(
                self.transport.post_json(self.endpoint, payload, {"key": self.api_key}, self.timeout),
                timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            raise CompletionFailure(f"Request timed out after {self.timeout:g}s") from e
        except (aiohttp.ClientError, OSError) as e:
            raise CompletionFailure(f"Transport error: {e}") from e

        if not 200 <= status < 300:
            detail = ""
            if isinstance(body, dict) and isinstance(body.get("error"), dict):
                detail = f" - {body['error'].get('message', '')}"
            raise CompletionFailure(f"API request failed: {status}{detail}", status=status)

        text = extract_candidate_text(body)
        if text is None:
            raise CompletionFailure("Empty response from AI service", status=status)

        logger.info("Received response from text generation service")
        return text
