from fastapi import APIRouter
from datetime import datetime

from agents.base import agent_registry

router = APIRouter()

@router.get("/")
async def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "service": "Crop Advisor AI Backend",
        "agents": agent_registry.list_agents()
    }

@router.get("/agents")
async def agents_health():
    """Registered agents with their configuration and health"""
    return {
        "timestamp": datetime.now().isoformat(),
        "agents": agent_registry.get_agents_info(),
        "health": await agent_registry.health_check_all()
    }
