# agents/base.py
"""
Base agent class for all AI agents in the system
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Dict, Optional, TypeVar, Generic, List
from pydantic import BaseModel
import logging
import asyncio
from datetime import datetime

from core.config import Settings, get_settings
from core.cache import CacheManager
from core.exceptions import AgentError, RequestCancelledError

# Type variables for generic typing
RequestType = TypeVar('RequestType', bound=BaseModel)
ResponseType = TypeVar('ResponseType', bound=BaseModel)
T = TypeVar('T')

class BaseAgent(ABC, Generic[RequestType, ResponseType]):
    """
    Base class for all AI agents

    Provides common functionality like:
    - Configuration management
    - Caching
    - Error handling and fallback responses
    - Caller cancellation
    - Logging
    """

    def __init__(
        self,
        agent_name: str,
        settings: Optional[Settings] = None,
        cache: Optional[CacheManager] = None
    ):
        self.agent_name = agent_name
        self.settings = settings or get_settings()
        self.config = self.settings.get_agent_config(agent_name)
        self.logger = logging.getLogger(f"agents.{agent_name}")
        if cache is not None:
            self.cache = cache
        elif self.settings.cache_enabled:
            self.cache = CacheManager(
                max_size=self.settings.cache_max_size,
                ttl=self.settings.cache_default_ttl
            )
        else:
            self.cache = None

        # Validate configuration
        self._validate_config()

        self.logger.info(f"Initialized {agent_name} agent")

    @abstractmethod
    def _validate_config(self) -> None:
        """Validate agent-specific configuration"""
        pass

    @abstractmethod
    async def process_request(
        self,
        request: RequestType,
        cancel: Optional[asyncio.Event] = None
    ) -> ResponseType:
        """Process agent request - must be implemented by subclasses"""
        pass

    @abstractmethod
    def get_fallback_response(self, request: RequestType, error: Exception) -> ResponseType:
        """Get fallback response when agent fails"""
        pass

    @abstractmethod
    def get_cancelled_response(self, request: RequestType) -> ResponseType:
        """Response returned when the caller cancels the request"""
        pass

    @abstractmethod
    def get_cache_key(self, request: RequestType) -> str:
        """Generate a stable cache key for request"""
        pass

    @abstractmethod
    def to_cache(self, response: ResponseType) -> Any:
        """Value stored in the cache for a successful response"""
        pass

    @abstractmethod
    def from_cache(self, request: RequestType, cached: Any, cache_key: str) -> ResponseType:
        """Rebuild a response from a cached value"""
        pass

    async def get_cached_response(self, cache_key: str) -> Optional[Any]:
        """Get cached response if available"""
        if self.cache is None:
            return None

        try:
            cached_data = await self.cache.get(cache_key)
            if cached_data is not None:
                self.logger.info(f"Cache hit for key: {cache_key}")
                return cached_data
        except Exception as e:
            self.logger.warning(f"Cache get error: {e}")

        return None

    async def set_cached_response(self, cache_key: str, response: ResponseType) -> None:
        """Cache response"""
        if self.cache is None:
            return

        try:
            await self.cache.set(cache_key, self.to_cache(response))
            self.logger.info(f"Cached response for key: {cache_key}")
        except Exception as e:
            self.logger.warning(f"Cache set error: {e}")

    async def _await_cancellable(
        self,
        awaitable: Awaitable[T],
        cancel: Optional[asyncio.Event]
    ) -> T:
        """
        Await ``awaitable`` unless ``cancel`` is set first, in which case the
        pending work is cancelled and RequestCancelledError is raised.
        """
        if cancel is None:
            return await awaitable

        if cancel.is_set():
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise RequestCancelledError("Request cancelled by caller")

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(cancel.wait())
        try:
            done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not task.done():
                task.cancel()

        if task in done:
            return task.result()

        # Let the cancelled work unwind before reporting
        await asyncio.wait({task})
        raise RequestCancelledError("Request cancelled by caller")

    async def execute(
        self,
        request: RequestType,
        cancel: Optional[asyncio.Event] = None,
        use_cache: bool = True
    ) -> ResponseType:
        """
        Main execution method with caching and error handling
        """
        start_time = datetime.now()
        cache_key = self.get_cache_key(request)

        # Check cache first
        if use_cache:
            cached_response = await self.get_cached_response(cache_key)
            if cached_response is not None:
                return self.from_cache(request, cached_response, cache_key)

        try:
            self.logger.info(f"Processing {self.agent_name} request")
            response = await self.process_request(request, cancel)
        except RequestCancelledError:
            self.logger.info(f"{self.agent_name} request cancelled by caller")
            return self.get_cancelled_response(request)
        except Exception as e:
            self.logger.error(f"Error processing request: {e}", exc_info=True)

            # Try to return fallback response
            try:
                fallback_response = self.get_fallback_response(request, e)
                self.logger.info("Returned fallback response")
                return fallback_response
            except Exception as fallback_error:
                self.logger.error(f"Fallback also failed: {fallback_error}")
                raise AgentError(f"{self.agent_name} agent failed: {e}") from e

        # Cache successful response
        if use_cache:
            await self.set_cached_response(cache_key, response)

        execution_time = (datetime.now() - start_time).total_seconds()
        self.logger.info(f"Request processed in {execution_time:.2f}s")

        return response

    async def health_check(self) -> Dict[str, Any]:
        """Agent health check"""
        try:
            # Basic configuration check
            self._validate_config()

            return {
                "agent": self.agent_name,
                "status": "healthy",
                "timestamp": datetime.now().isoformat(),
                "config_valid": True,
                "cache_enabled": self.cache is not None
            }
        except Exception as e:
            return {
                "agent": self.agent_name,
                "status": "unhealthy",
                "timestamp": datetime.now().isoformat(),
                "error": str(e),
                "config_valid": False
            }

    def get_agent_info(self) -> Dict[str, Any]:
        """Get agent information"""
        return {
            "name": self.agent_name,
            "version": "1.0.0",
            "config": self.config,
            "cache_enabled": self.cache is not None,
            "description": self.__class__.__doc__ or f"{self.agent_name} agent"
        }

class AgentRegistry:
    """Registry for managing multiple agents"""

    def __init__(self):
        self._agents: Dict[str, BaseAgent] = {}
        self.logger = logging.getLogger("agents.registry")

    def register(self, agent: BaseAgent) -> None:
        """Register an agent"""
        self._agents[agent.agent_name] = agent
        self.logger.info(f"Registered agent: {agent.agent_name}")

    def unregister(self, agent_name: str) -> None:
        self._agents.pop(agent_name, None)

    def get(self, agent_name: str) -> Optional[BaseAgent]:
        """Get agent by name"""
        return self._agents.get(agent_name)

    def list_agents(self) -> List[str]:
        """List all registered agent names"""
        return list(self._agents.keys())

    async def health_check_all(self) -> Dict[str, Any]:
        """Health check all agents"""
        results = {}
        for name, agent in self._agents.items():
            results[name] = await agent.health_check()
        return results

    def get_agents_info(self) -> Dict[str, Any]:
        """Get information about all agents"""
        return {
            name: agent.get_agent_info()
            for name, agent in self._agents.items()
        }

# Global agent registry
agent_registry = AgentRegistry()
