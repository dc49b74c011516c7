# core/config.py
"""
Configuration management for the crop advisor backend
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional, Dict, Any
import logging
from functools import lru_cache
from enum import Enum
from dotenv import load_dotenv

from core.exceptions import ConfigurationError

load_dotenv()

logger = logging.getLogger(__name__)

class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"

class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"

class Settings(BaseSettings):
    """Application settings with validation"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Environment
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = True

    # API Configuration
    api_title: str = "Crop Advisor AI Backend"
    api_version: str = "1.0.0"
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: LogLevel = LogLevel.INFO
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # CORS
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8080"
    ]
    cors_allow_credentials: bool = True
    cors_allow_methods: List[str] = ["*"]
    cors_allow_headers: List[str] = ["*"]

    # Text generation service
    gemini_api_key: Optional[str] = None
    gemini_api_base: str = "https://generativelanguage.googleapis.com/v1"
    gemini_model: str = "gemini-1.5-pro"

    # Cache Configuration
    cache_enabled: bool = True
    cache_default_ttl: int = 86400  # 24 hours
    cache_max_size: int = 1000

    # Agent Configurations
    crop_advisor_config: Dict[str, Any] = {
        "request_timeout_seconds": 25,
        "max_attempts": 3,
        "backoff_base_ms": 1000,
        "temperature": 0.2,
        "top_k": 40,
        "top_p": 0.95,
        "max_output_tokens": 4096
    }

    def get_agent_config(self, agent_name: str) -> Dict[str, Any]:
        """Get configuration for specific agent"""
        config_map = {
            "crop_advisor": self.crop_advisor_config,
        }
        return config_map.get(agent_name, {})

    @property
    def gemini_endpoint(self) -> str:
        return f"{self.gemini_api_base.rstrip('/')}/models/{self.gemini_model}:generateContent"

@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()

def validate_api_keys(settings: Settings) -> None:
    """Raise ConfigurationError when the text generation API key is missing"""
    if not settings.gemini_api_key:
        logger.error("GEMINI_API_KEY is not set")
        raise ConfigurationError("GEMINI_API_KEY environment variable is not set")
    logger.debug("GEMINI_API_KEY is set")
