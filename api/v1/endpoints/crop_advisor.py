import asyncio
import logging
import re
from datetime import date
from typing import Any, Dict

from fastapi import APIRouter, Body, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError as PydanticValidationError

from agents.base import agent_registry
from agents.crop_advisor.agent import CropAdvisorAgent
from agents.crop_advisor.models import RecommendationStatus, ReportRequest
from agents.crop_advisor.normalizer import normalize_farm_request, pydantic_errors
from agents.crop_advisor.report import build_text_report
from core.exceptions import ConfigurationError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter()

CLIENT_CLOSED_REQUEST = 499

def get_crop_advisor() -> CropAdvisorAgent:
    """Registered crop advisor, created on first use if startup could not build it"""
    agent = agent_registry.get("crop_advisor")
    if agent is None:
        # ConfigurationError surfaces as a 500 through the app handler
        agent = CropAdvisorAgent()
        agent_registry.register(agent)
    return agent

async def _watch_disconnect(request: Request, cancel: asyncio.Event, interval: float = 0.5) -> None:
    while not cancel.is_set():
        if await request.is_disconnected():
            logger.info("Client disconnected, cancelling recommendation")
            cancel.set()
            return
        await asyncio.sleep(interval)

@router.post("/recommendations")
async def get_recommendations(
    request: Request,
    farm: Dict[str, Any] = Body(..., description="Farm attributes (camelCase keys)"),
    use_cache: bool = Query(True, description="Reuse a cached result for identical farm data")
):
    """
    Get crop recommendations for a farm, grouped by crop category

    Always answers with categorized crops: freshly generated, cached, or the
    built-in fallback set when the AI service is unavailable.
    """
    agent = get_crop_advisor()

    cancel = asyncio.Event()
    watcher = asyncio.create_task(_watch_disconnect(request, cancel))
    try:
        response = await agent.recommend(farm, cancel=cancel, use_cache=use_cache)
    finally:
        watcher.cancel()
        await asyncio.gather(watcher, return_exceptions=True)

    if response.status == RecommendationStatus.CANCELLED:
        return JSONResponse(status_code=CLIENT_CLOSED_REQUEST, content=response.model_dump(mode="json"))
    return response

@router.post("/report", response_class=PlainTextResponse)
async def download_report(payload: Dict[str, Any] = Body(...)):
    """Plain-text report of a recommendation result"""
    try:
        report_request = ReportRequest.model_validate(payload)
        farm = normalize_farm_request(report_request.farm)
    except PydanticValidationError as e:
        raise ValidationError("Invalid report data", pydantic_errors(e)) from e

    name = report_request.farmName or farm.location.name
    today = date.today()
    content = build_text_report(farm, report_request.result, farm_name=name, generated_on=today)
    filename = f"CropAdvisor_Report_{re.sub(r'[^A-Za-z0-9]+', '_', name).strip('_')}_{today.isoformat()}.txt"
    return PlainTextResponse(
        content,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )

@router.get("/soils")
async def get_soil_types():
    """Get accepted soil types"""
    agent = get_crop_advisor()
    return {
        "success": True,
        "soil_groups": await agent.get_soil_types(),
        "note": "Soil type is matched case-insensitively"
    }

@router.get("/water-sources")
async def get_water_sources():
    """Get water availability categories"""
    agent = get_crop_advisor()
    return {
        "success": True,
        "water_sources": await agent.get_water_sources(),
        "note": "Numeric inches per season are mapped to these categories: <10 limited, <15 rainfed, <25 basic-irrigation, otherwise full-irrigation"
    }

@router.get("/categories")
async def get_categories():
    """Get crop categories included in every recommendation"""
    agent = get_crop_advisor()
    return {
        "success": True,
        "categories": await agent.get_categories()
    }

@router.get("/health")
async def crop_advisor_health():
    """Check crop advisor agent health"""
    try:
        agent = get_crop_advisor()
    except ConfigurationError as e:
        return {"agent": "crop_advisor", "status": "unhealthy", "error": str(e)}
    return await agent.health_check()
