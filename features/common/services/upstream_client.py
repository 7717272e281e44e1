import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from core.config import settings
from features.common.exceptions.enrichment_exceptions import UpstreamUnavailable

logger = logging.getLogger(__name__)

class UpstreamClient:
    """Shared aiohttp session handling for the third-party data providers."""

    def __init__(self, timeout_ms: Optional[int] = None):
        self.timeout = aiohttp.ClientTimeout(total=(timeout_ms or settings.request_timeout_ms) / 1000)
        self._session: Optional[aiohttp.ClientSession] = None

    async def _init_session(self) -> aiohttp.ClientSession:
        if not self._session:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers={"User-Agent": settings.user_agent, "Accept": "application/json"}
            )
        return self._session

    async def close(self):
        if self._session:
            await self._session.close()
            self._session = None

    async def _get_json(self, url: str, params: Dict[str, Any]) -> Any:
        """GET and decode JSON, turning every transport problem into UpstreamUnavailable."""
        session = await self._init_session()
        try:
            async with session.get(url, params=params) as response:
                response.raise_for_status()
                return await response.json(content_type=None)
        except asyncio.TimeoutError:
            raise UpstreamUnavailable(f"Timed out after {self.timeout.total}s fetching {url}")
        except aiohttp.ClientError as e:
            raise UpstreamUnavailable(f"Error fetching {url}: {str(e)}")
        except ValueError as e:
            raise UpstreamUnavailable(f"Malformed JSON from {url}: {str(e)}")
