from fastapi import APIRouter
from .endpoints import health, crop_advisor

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(crop_advisor.router, prefix="/crop-advisor", tags=["crop-advisor"])
