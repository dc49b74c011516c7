# run.py
"""
Main entry point for the Crop Advisor AI Backend
"""

import uvicorn
import logging
from contextlib import asynccontextmanager

from api.app import create_app
from core.config import get_settings
from core.exceptions import ConfigurationError
from core.logging import setup_logging
from agents.crop_advisor.agent import CropAdvisorAgent
from agents.base import agent_registry

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app):
    """Application lifespan management"""

    # Startup
    logger.info("🚀 Starting Crop Advisor AI Backend")

    logger.info("Initializing agents...")
    try:
        crop_advisor = CropAdvisorAgent()
        agent_registry.register(crop_advisor)
        logger.info("✅ Crop advisor agent registered")
    except ConfigurationError as e:
        # The service stays up; recommendation endpoints report the error
        logger.error(f"❌ Crop advisor agent not available: {e}")

    health_results = await agent_registry.health_check_all()
    for agent_name, health in health_results.items():
        status = "✅" if health["status"] == "healthy" else "❌"
        logger.info(f"{status} {agent_name}: {health['status']}")

    yield

    # Shutdown
    agent_registry.unregister("crop_advisor")
    logger.info("🛑 Shutting down Crop Advisor AI Backend")

def create_application():
    """Create FastAPI application with all configurations"""
    return create_app(lifespan=lifespan)

def main():
    """Main entry point"""
    settings = get_settings()

    logger.info(f"Starting server on {settings.api_host}:{settings.api_port}")
    logger.info(f"Environment: {settings.environment.value}")
    logger.info(f"Debug mode: {settings.debug}")

    if settings.debug:
        # Import string so reload works
        uvicorn.run(
            "run:create_application",
            factory=True,
            host=settings.api_host,
            port=settings.api_port,
            reload=True,
            log_level=settings.log_level.value.lower(),
            access_log=True
        )
    else:
        app = create_application()
        uvicorn.run(
            app,
            host=settings.api_host,
            port=settings.api_port,
            reload=False,
            log_level=settings.log_level.value.lower(),
            access_log=True
        )

if __name__ == "__main__":
    main()
