"""Remote catalog search service client."""

import asyncio
from typing import Any, Dict, List, Optional

import aiohttp

from ..core.constants import BACKOFF_S, IDENTIFY_PATH, RETRYABLE_STATUS, SEARCH_LIMIT
from ..core.types import ScanCandidate
from ..ocr.normalize import normalize_collector_number, normalize_name, normalize_set_code
from ..utils.error_handler import CatalogLookupError, NetworkError
from ..utils.log import LoggerMixin
from .index import entry_from_dict


class HttpCatalogIndex(LoggerMixin):
    """Catalog index answered by the identify endpoint of a search service."""

    def __init__(self, base_url: str, api_key: Optional[str] = None, timeout_s: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = aiohttp.ClientTimeout(total=timeout_s)
        self.session: Optional[aiohttp.ClientSession] = None

    async def _ensure_session(self) -> None:
        """Ensure aiohttp session exists."""
        if self.session is None or self.session.closed:
            headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
            self.session = aiohttp.ClientSession(headers=headers, timeout=self.timeout)

    async def close(self) -> None:
        if self.session is not None and not self.session.closed:
            await self.session.close()
        self.session = None

    async def __aenter__(self) -> "HttpCatalogIndex":
        await self._ensure_session()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _post_with_backoff(self, url: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """POST with a fixed backoff schedule for retryable statuses."""
        await self._ensure_session()

        for attempt, delay in enumerate([0.0, *BACKOFF_S]):
            if delay > 0:
                await asyncio.sleep(delay)

            try:
                async with self.session.post(url, json=body) as response:
                    if response.status in RETRYABLE_STATUS and attempt < len(BACKOFF_S):
                        self.logger.debug(
                            "Retryable catalog response", status=response.status, attempt=attempt
                        )
                        continue
                    response.raise_for_status()
                    return await response.json()
            except aiohttp.ClientResponseError as e:
                if e.status in RETRYABLE_STATUS and attempt < len(BACKOFF_S):
                    continue
                raise CatalogLookupError(
                    f"Catalog service returned HTTP {e.status}",
                    details={"url": url, "status": e.status},
                ) from e
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise NetworkError(
                    "Catalog service unreachable", details={"url": url, "error": str(e)}
                ) from e

        raise CatalogLookupError("All retry attempts failed", details={"url": url})

    async def search(
        self,
        name: Optional[str] = None,
        collector_number: Optional[str] = None,
        set_code: Optional[str] = None,
        limit: int = SEARCH_LIMIT,
    ) -> List[ScanCandidate]:
        body: Dict[str, Any] = {"limit": limit}
        if name:
            body["name"] = normalize_name(name)
        if collector_number:
            body["collectorNumber"] = normalize_collector_number(collector_number)
        if set_code:
            body["setCode"] = normalize_set_code(set_code)

        context = self.log_start("catalog_search", name=body.get("name"))
        try:
            payload = await self._post_with_backoff(f"{self.base_url}{IDENTIFY_PATH}", body)
        except CatalogLookupError as e:
            self.log_error(context, e)
            raise

        candidates = [
            ScanCandidate(entry=entry_from_dict(c), score=max(0, int(c.get("score", 0))))
            for c in payload.get("candidates", [])
        ]
        # The service may return more than asked; its own order breaks ties
        candidates = sorted(candidates, key=lambda c: c.score, reverse=True)[: max(limit, 0)]
        self.log_success(context, returned=len(candidates))
        return candidates
