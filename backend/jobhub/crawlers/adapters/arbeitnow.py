from __future__ import annotations
import logging
from typing import Any

import httpx

from jobhub.crawlers.adapters.common import filter_jobs
from jobhub.crawlers.base import ProviderResult, SearchContext, SourceAdapter, SourceTag
from jobhub.crawlers.http_helpers import fetch_json
from jobhub.crawlers.normalize import normalize_many

logger = logging.getLogger(__name__)

FEED_URL = "https://www.arbeitnow.com/api/job-board-api"


class ArbeitnowAdapter(SourceAdapter):
    """Public firehose feed; no query parameter, so results are filtered client-side."""

    source_name = SourceTag.FIREHOSE_B.value

    def __init__(self, max_pages: int = 2, timeout: float = 20.0):
        self.max_pages = max_pages
        self.timeout = timeout

    async def _fetch(self, query: str, context: SearchContext) -> ProviderResult:
        items: list[dict[str, Any]] = []
        status = None
        for page in range(1, self.max_pages + 1):
            try:
                status, payload = await fetch_json(FEED_URL, params={"page": page}, timeout=self.timeout)
            except httpx.HTTPError as exc:
                if not items:
                    raise
                logger.warning("source=%s page=%s failed, keeping %s items: %s", self.source_name, page, len(items), exc)
                break
            batch = payload.get("data") if isinstance(payload, dict) else None
            if not isinstance(batch, list) or not batch:
                break
            items.extend(batch)
            links = payload.get("links") if isinstance(payload, dict) else None
            if isinstance(links, dict) and not links.get("next"):
                break

        jobs = filter_jobs(normalize_many(items, SourceTag.FIREHOSE_B), query)
        logger.info("source=%s scanned=%s matched=%s", self.source_name, len(items), len(jobs))
        return ProviderResult(jobs=jobs, status_code=status)
