"""
Async Overpass API client with mirror failover
Tries each configured mirror once, in order, and returns the first usable payload.
"""

import asyncio
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional, Tuple

import aiohttp

from .error_handling import APIError, MirrorRequestError, handle_api_timeout
from .mirror_config import MirrorConfig, load_mirror_config
from .overpass_query import AVAILABILITY_PROBE_QUERY, build_details_query
from logging_config import get_logger, log_api_call

logger = get_logger(__name__)


class OverpassMirrorClient:
    """
    Sequential first-success-wins client over an ordered mirror list.

    Mirrors are assumed to fail independently, so a failed attempt moves
    straight on to the next mirror with no backoff. An injected session is
    used as-is and never closed here.
    """

    def __init__(self, config: Optional[MirrorConfig] = None,
                 session: Optional[aiohttp.ClientSession] = None):
        self.config = config or load_mirror_config()
        self._session = session

    @property
    def endpoints(self):
        return list(self.config.endpoints)

    def _attempt_timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=self.config.attempt_timeout,
                                     connect=self.config.connect_timeout)

    @asynccontextmanager
    async def _session_scope(self) -> AsyncIterator[aiohttp.ClientSession]:
        if self._session is not None:
            yield self._session
            return
        async with aiohttp.ClientSession(
            timeout=self._attempt_timeout(),
            headers={"User-Agent": self.config.user_agent},
        ) as session:
            yield session

    async def _post_query(self, session, endpoint: str, query: str) -> Dict[str, Any]:
        """Single POST against one mirror. Raises MirrorRequestError on any unusable answer."""
        headers = {
            "Content-Type": "text/plain",
            "User-Agent": self.config.user_agent,
        }
        async with session.post(endpoint, data=query.encode("utf-8"), headers=headers,
                                timeout=self._attempt_timeout()) as resp:
            status = resp.status
            if status in self.config.retryable_statuses:
                raise MirrorRequestError(f"Overpass HTTP {status} (overloaded or rate limited)",
                                         endpoint, status, retryable=True)
            if not 200 <= status < 300:
                raise MirrorRequestError(f"Overpass HTTP {status}", endpoint, status, retryable=False)
            try:
                data = await resp.json(content_type=None)
            except (aiohttp.ContentTypeError, ValueError) as e:
                raise MirrorRequestError(f"Overpass returned non-JSON response: {e}",
                                         endpoint, status) from e

        if not isinstance(data, dict) or not isinstance(data.get("elements"), list):
            raise MirrorRequestError("Overpass response has no elements array", endpoint, status)
        return data

    async def _attempt(self, session, endpoint: str, query: str) -> Dict[str, Any]:
        bounded = handle_api_timeout(self.config.attempt_timeout)(self._post_query)
        return await bounded(session, endpoint, query)

    async def fetch(self, query: str, caller: str = "healthcare") -> Optional[Tuple[str, Dict[str, Any]]]:
        """
        Run a query against the mirrors in order.

        Args:
            query: Overpass QL text
            caller: Label used in log records

        Returns:
            (endpoint, payload) from the first mirror that answered with a
            usable JSON payload, or None when every mirror failed.
        """
        total = len(self.config.endpoints)
        async with self._session_scope() as session:
            for index, endpoint in enumerate(self.config.endpoints, start=1):
                log_api_call(logger, "overpass", endpoint, operation=caller)
                start = time.monotonic()
                try:
                    payload = await self._attempt(session, endpoint, query)
                except MirrorRequestError as e:
                    kind = "retryable" if e.retryable else "non-retryable"
                    logger.warning(
                        f"Overpass mirror {index}/{total} failed ({kind}): {e}",
                        extra={"endpoint": endpoint, "status_code": e.status_code, "operation": caller}
                    )
                    continue
                except APIError as e:
                    logger.warning(
                        f"Overpass mirror {index}/{total} timed out: {e}",
                        extra={"endpoint": endpoint, "status_code": e.status_code, "operation": caller}
                    )
                    continue
                except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
                    logger.warning(
                        f"Overpass mirror {index}/{total} request error: {e}",
                        extra={"endpoint": endpoint, "error_type": type(e).__name__, "operation": caller}
                    )
                    continue

                elapsed = time.monotonic() - start
                logger.info(
                    f"Overpass mirror {index}/{total} answered with {len(payload['elements'])} elements",
                    extra={"endpoint": endpoint, "response_time": round(elapsed, 3), "operation": caller}
                )
                return endpoint, payload

        logger.warning(f"All {total} Overpass mirrors failed", extra={"operation": caller})
        return None

    async def get_element(self, element_type: str, element_id: int) -> Optional[Dict[str, Any]]:
        """Fetch a single OSM element through the mirror list."""
        result = await self.fetch(build_details_query(element_type, element_id), caller="details")
        if result is None:
            return None
        _, payload = result
        elements = payload["elements"]
        return elements[0] if elements else None

    async def probe(self) -> bool:
        """True as soon as any mirror answers a minimal query with a 2xx."""
        async with self._session_scope() as session:
            for endpoint in self.config.endpoints:
                try:
                    async with session.get(
                        endpoint,
                        params={"data": AVAILABILITY_PROBE_QUERY},
                        headers={"User-Agent": self.config.user_agent},
                        timeout=self._attempt_timeout(),
                    ) as resp:
                        if 200 <= resp.status < 300:
                            return True
                        logger.info(f"Overpass probe got HTTP {resp.status}",
                                    extra={"endpoint": endpoint, "status_code": resp.status})
                except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
                    logger.info(f"Overpass probe failed: {e}",
                                extra={"endpoint": endpoint, "error_type": type(e).__name__})
        return False
