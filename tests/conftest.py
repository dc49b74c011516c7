import json
from typing import Any, List, Optional, Tuple, Union

import pytest

from agents.crop_advisor.service import BaseTransport
from core.cache import CacheManager
from core.config import Settings

@pytest.fixture
def settings() -> Settings:
    return Settings(gemini_api_key="test-key", _env_file=None)

@pytest.fixture
def farm_data() -> dict:
    return {
        "location": {"name": "Nairobi", "lat": -1.29, "lng": 36.82},
        "landSize": 10,
        "soilType": "Loamy",
        "waterAvailability": "rainfed",
        "budget": 1000,
        "farmingPriority": "balanced",
    }

@pytest.fixture
def model_answer() -> dict:
    return {
        "categories": [
            {
                "type": "Grains & Cereals",
                "crops": [
                    {
                        "name": "Maize",
                        "description": "Reliable staple",
                        "estimatedProfit": 900,
                        "marketPrice": 0.3,
                        "score": 88,
                        "growthPeriod": "4 months",
                        "waterRequirements": "Moderate",
                        "soilCompatibility": ["Loamy", "Clay Loam"],
                        "maturityPeriod": "100-120 days",
                        "bestPlantingTime": "March-April",
                        "isTopPick": True
                    }
                ]
            },
            {
                "type": "Vegetables",
                "crops": [
                    {"name": "Kale", "score": 75, "soilCompatibility": ["Loamy"], "isTopPick": False},
                    {"name": "Tomato", "score": 82, "soilCompatibility": ["Loamy"], "isTopPick": False}
                ]
            }
        ],
        "reasoning": "Moderate rainfall favours drought tolerant staples."
    }

@pytest.fixture
def model_text(model_answer) -> str:
    return "Here are your recommendations:\n```json\n" + json.dumps(model_answer) + "\n```"

class FakeCompletionClient:
    """Stands in for CompletionClient; replays queued texts or raises queued errors"""

    def __init__(self, outcomes: List[Union[str, Exception]], repeat_last: bool = True):
        self.outcomes = list(outcomes)
        self.repeat_last = repeat_last
        self.prompts: List[str] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if len(self.outcomes) > 1 or not self.repeat_last:
            outcome = self.outcomes.pop(0)
        else:
            outcome = self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

class FakeTransport(BaseTransport):
    """Replays queued (status, body) replies or raises queued errors"""

    def __init__(self, replies: List[Union[Tuple[int, Any], Exception]]):
        self.replies = list(replies)
        self.requests: List[dict] = []

    async def post_json(self, url, payload, params, timeout):
        self.requests.append({"url": url, "payload": payload, "params": params, "timeout": timeout})
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

class FakeTimer:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

class SleepRecorder:
    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)

def gemini_body(text: Optional[str]) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}

@pytest.fixture
def timer() -> FakeTimer:
    return FakeTimer()

@pytest.fixture
def cache(timer) -> CacheManager:
    return CacheManager(max_size=100, ttl=86400, timer=timer)

@pytest.fixture
def sleep() -> SleepRecorder:
    return SleepRecorder()
