# scripts/check_agent.py
"""
Manual check that the crop advisor works against the live AI service,
and optionally against a running server
"""

import asyncio
import sys

import httpx

from agents.crop_advisor.agent import CropAdvisorAgent
from core.config import get_settings
from core.exceptions import ConfigurationError
from core.logging import setup_logging

SAMPLE_FARM = {
    "location": {"name": "Nairobi", "lat": -1.29, "lng": 36.82},
    "landSize": 10,
    "soilType": "Loamy",
    "waterAvailability": "rainfed",
    "budget": 1000,
    "farmingPriority": "balanced",
}

async def check_crop_advisor() -> bool:
    """Run one recommendation end to end"""

    print("🧪 Checking Crop Advisor Agent")
    print("=" * 50)

    try:
        agent = CropAdvisorAgent()
    except ConfigurationError as e:
        print(f"   ❌ {e}")
        return False

    health = await agent.health_check()
    print(f"   Status: {health['status']}")

    response = await agent.recommend(SAMPLE_FARM, use_cache=False)
    print(f"   Status: {response.status.value}")
    print(f"   Message: {response.message}")
    for category in response.data.categories:
        top = category.top_pick
        print(f"   {category.type}: {len(category.crops)} crops"
              + (f", top pick {top.name}" if top else ""))

    if response.data.isFallback:
        print(f"\n⚠️  Fallback data returned ({response.metadata.get('failure_kind')})")
        return False

    print("\n✅ Live recommendation succeeded")
    return True

async def check_api(base_url: str = "http://localhost:8000") -> bool:
    """Hit the endpoints of a running server"""

    print("\n🌐 Checking API Endpoints")
    print("=" * 50)

    async with httpx.AsyncClient(timeout=120) as client:
        try:
            response = await client.get(f"{base_url}/api/health/")
        except httpx.ConnectError:
            print("   ⚠️  Server not running, skipping (start it with: python run.py)")
            return True
        print(f"   Health: {response.status_code}")

        response = await client.post(f"{base_url}/api/crop-advisor/recommendations", json=SAMPLE_FARM)
        print(f"   Recommendations: {response.status_code} ({response.json().get('status')})")
        return response.status_code == 200

async def main():
    setup_logging()
    settings = get_settings()
    print(f"Environment: {settings.environment.value}, model: {settings.gemini_model}\n")

    ok = await check_crop_advisor()
    ok = await check_api() and ok

    if not ok:
        print("\n❌ Some checks failed. See the logs above.")
        sys.exit(1)

if __name__ == "__main__":
    asyncio.run(main())
