# agents/crop_advisor/agent.py
"""
Crop advisor agent - AI crop recommendations from farm attributes
"""

import asyncio
import time
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

from agents.base import BaseAgent
from agents.crop_advisor.fallback import build_fallback_result
from agents.crop_advisor.models import (
    CacheEntry, FarmRequest, FarmRequestRaw, RecommendationResponse,
    RecommendationStatus, SOIL_TYPE_GROUPS, STANDARD_CATEGORIES, WATER_SOURCE_DETAILS
)
from agents.crop_advisor.normalizer import fingerprint, normalize_farm_request
from agents.crop_advisor.parser import extract_json, normalize_recommendations
from agents.crop_advisor.prompts import build_prompt
from agents.crop_advisor.service import CompletionClient, RetryPolicy
from core.cache import CacheManager
from core.config import Settings, get_settings
from core.exceptions import AttemptFailure, RetriesExhaustedError

class CropAdvisorAgent(BaseAgent[FarmRequest, RecommendationResponse]):
    """
    Crop recommendation agent backed by a generative text model

    Features:
    - Deterministic prompt built from normalized farm data
    - Bounded retries with exponential backoff; transport, extraction and
      schema failures share one attempt budget
    - Schema repair: every standard category present, one top pick each
    - 24 hour result cache keyed by request fingerprint
    - Static fallback recommendations when every attempt fails
    - Caller cancellation through an asyncio.Event
    """

    def __init__(
        self,
        client: Optional[CompletionClient] = None,
        cache: Optional[CacheManager] = None,
        settings: Optional[Settings] = None,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ):
        settings = settings or get_settings()
        # Raises ConfigurationError before anything else when the key is missing
        self.client = client or CompletionClient.from_settings(settings)
        super().__init__("crop_advisor", settings=settings, cache=cache)
        self.retry_policy = retry_policy or RetryPolicy.from_config(self.config)
        self._sleep = sleep
        self.logger.info(
            f"Crop advisor agent initialized (max attempts: {self.retry_policy.max_attempts})"
        )

    def _validate_config(self) -> None:
        """Validate crop advisor configuration"""
        required_config = [
            "request_timeout_seconds", "max_attempts", "backoff_base_ms"
        ]

        missing = [key for key in required_config if key not in self.config]
        if missing:
            self.logger.warning(f"Missing crop advisor config (using defaults): {missing}")

    async def recommend(
        self,
        raw: Union[FarmRequestRaw, Mapping[str, Any]],
        cancel: Optional[asyncio.Event] = None,
        use_cache: bool = True
    ) -> RecommendationResponse:
        """
        Entry point: normalize the farm data and run the recommendation flow.

        Raises ValidationError for malformed farm data before any network
        activity. Every other outcome is returned, not raised: fresh, cached,
        fallback or cancelled.
        """
        request = normalize_farm_request(raw)
        return await self.execute(request, cancel=cancel, use_cache=use_cache)

    def get_cache_key(self, request: FarmRequest) -> str:
        return fingerprint(request)

    async def process_request(
        self,
        request: FarmRequest,
        cancel: Optional[asyncio.Event] = None
    ) -> RecommendationResponse:
        """Build the prompt, then request/extract/normalize within the retry budget"""
        start_time = datetime.now()
        prompt = build_prompt(request)
        max_attempts = self.retry_policy.max_attempts
        last_failure: Optional[AttemptFailure] = None

        self.logger.info(
            f"Processing crop recommendation for {request.location.name} "
            f"({request.landSize:g} acres, {request.soilType.value}, {request.waterAvailability.value})"
        )

        for attempt in range(1, max_attempts + 1):
            if attempt > 1:
                delay = self.retry_policy.delay_for(attempt - 1)
                self.logger.info(f"Retrying in {delay:g}s (attempt {attempt}/{max_attempts})")
                await self._await_cancellable(self._sleep(delay), cancel)

            try:
                raw_text = await self._await_cancellable(self.client.complete(prompt), cancel)
                parsed = extract_json(raw_text)
                result = normalize_recommendations(parsed)
            except AttemptFailure as e:
                last_failure = e
                self.logger.warning(
                    f"Attempt {attempt}/{max_attempts} failed ({e.kind.value}): {e}"
                )
                continue

            filled = [c for c in result.categories if c.crops]
            elapsed = (datetime.now() - start_time).total_seconds()
            self.logger.info(
                f"Recommendations generated: {result.crop_count()} crops in "
                f"{len(filled)} categories after {attempt} attempt(s)"
            )
            return RecommendationResponse(
                success=True,
                status=RecommendationStatus.FRESH,
                data=result,
                message=f"{result.crop_count()} crops recommended across {len(filled)} categories",
                timestamp=datetime.now().isoformat(),
                metadata={
                    "fingerprint": self.get_cache_key(request),
                    "attempts": attempt,
                    "elapsed_seconds": round(elapsed, 3),
                    "fallback": False
                }
            )

        raise RetriesExhaustedError(last_failure, max_attempts)

    def get_fallback_response(self, request: FarmRequest, error: Exception) -> RecommendationResponse:
        """Static recommendations when every attempt failed"""
        if isinstance(error, RetriesExhaustedError):
            failure_kind = error.kind.value
            attempts = error.attempts
        else:
            failure_kind = "internal"
            attempts = None

        self.logger.error(f"Falling back to static recommendations ({failure_kind}): {error}")
        return RecommendationResponse(
            success=False,
            status=RecommendationStatus.FALLBACK,
            data=build_fallback_result(),
            message=f"Using fallback recommendations due to error: {error}",
            timestamp=datetime.now().isoformat(),
            metadata={
                "fingerprint": self.get_cache_key(request),
                "fallback": True,
                "failure_kind": failure_kind,
                "attempts": attempts,
                "error": str(error)
            }
        )

    def get_cancelled_response(self, request: FarmRequest) -> RecommendationResponse:
        return RecommendationResponse(
            success=False,
            status=RecommendationStatus.CANCELLED,
            data=None,
            message="Request cancelled",
            timestamp=datetime.now().isoformat(),
            metadata={"fingerprint": self.get_cache_key(request)}
        )

    def to_cache(self, response: RecommendationResponse) -> CacheEntry:
        return CacheEntry(result=response.data.model_copy(deep=True), createdAt=time.time())

    def from_cache(self, request: FarmRequest, cached: Any, cache_key: str) -> RecommendationResponse:
        entry = cached if isinstance(cached, CacheEntry) else CacheEntry.model_validate(cached)
        return RecommendationResponse(
            success=True,
            status=RecommendationStatus.CACHED,
            data=entry.result.model_copy(deep=True),
            message="Recommendations loaded from cache",
            timestamp=datetime.now().isoformat(),
            metadata={
                "fingerprint": cache_key,
                "cached_at": datetime.fromtimestamp(entry.createdAt).isoformat(),
                "fallback": False
            }
        )

    async def get_soil_types(self) -> List[Dict[str, Any]]:
        """Soil types accepted by the advisor, grouped as in the farm form"""
        return [
            {"group": group, "soil_types": [soil.value for soil in soils]}
            for group, soils in SOIL_TYPE_GROUPS.items()
        ]

    async def get_water_sources(self) -> List[Dict[str, Any]]:
        """Water availability categories with their inch ranges"""
        return [
            {
                "id": water.value,
                "name": details["name"],
                "description": details["description"],
                "inches": details["inches"]
            }
            for water, details in WATER_SOURCE_DETAILS.items()
        ]

    async def get_categories(self) -> List[str]:
        """Crop categories every recommendation contains"""
        return list(STANDARD_CATEGORIES)
