import logging

import pytest

from core.config import Settings, validate_api_keys
from core.exceptions import ConfigurationError
from core.logging import setup_logging

def test_defaults(settings):
    config = settings.get_agent_config("crop_advisor")

    assert config["request_timeout_seconds"] == 25
    assert config["max_attempts"] == 3
    assert settings.cache_default_ttl == 86400
    assert settings.get_agent_config("unknown") == {}

def test_gemini_endpoint():
    settings = Settings(
        gemini_api_key="k", gemini_api_base="https://example.test/v1/", gemini_model="m", _env_file=None
    )
    assert settings.gemini_endpoint == "https://example.test/v1/models/m:generateContent"

def test_api_key_from_environment(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "from-env")
    assert Settings(_env_file=None).gemini_api_key == "from-env"

def test_validate_api_keys(settings):
    validate_api_keys(settings)
    with pytest.raises(ConfigurationError):
        validate_api_keys(Settings(gemini_api_key="", _env_file=None))

def test_setup_logging_levels():
    setup_logging(Settings(gemini_api_key="k", log_level="DEBUG", _env_file=None))

    assert logging.getLogger("agents").level == logging.DEBUG
    assert logging.getLogger("aiohttp").level == logging.WARNING

    setup_logging(Settings(gemini_api_key="k", log_level="ERROR", _env_file=None))
    assert logging.getLogger("agents").level == logging.ERROR
    assert logging.getLogger("httpx").level == logging.ERROR

    for name in ("agents", "aiohttp", "httpx", "httpcore", "asyncio"):
        logging.getLogger(name).setLevel(logging.NOTSET)
