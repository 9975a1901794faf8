"""Job search waterfall.

``JobSearchService.search_jobs`` consults the warehouse, then the primary
provider, then the regional provider (with a second warehouse look on a 429),
then both firehose feeds. Every stage yields a possibly empty list; nothing
raises to the caller. Successful live fetches are written back to the
warehouse in background tasks that the response never waits on.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
import logging
from typing import Literal

from jobhub.core.config import Settings
from jobhub.crawlers.adapters.adzuna import AdzunaAdapter
from jobhub.crawlers.adapters.arbeitnow import ArbeitnowAdapter
from jobhub.crawlers.adapters.joinrise import JoinRiseAdapter
from jobhub.crawlers.adapters.jsearch import JSearchAdapter
from jobhub.crawlers.base import CanonicalJob, SearchContext, SourceAdapter
from jobhub.services.warehouse import HttpWarehouse, JobWarehouse, SqlWarehouse
from jobhub.utils.hash import dedupe_key

logger = logging.getLogger(__name__)

SourceQuality = Literal["deep", "standard"]

# What a stringified JS object looks like when it leaks into a query box.
MALFORMED_QUERY_MARKER = "[object Object]"
DEFAULT_FALLBACK_QUERY = "Software Engineer"


@dataclass
class SearchResult:
    jobs: list[CanonicalJob] = field(default_factory=list)
    source_quality: SourceQuality | None = None


def sanitize_query(query: str | None, fallback: str = DEFAULT_FALLBACK_QUERY) -> str:
    text = (query if isinstance(query, str) else "").strip()
    if not text or text == MALFORMED_QUERY_MARKER:
        return fallback
    if MALFORMED_QUERY_MARKER in text:
        text = " ".join(text.replace(MALFORMED_QUERY_MARKER, " ").split())
    return text or fallback


def dedupe_jobs(jobs: list[CanonicalJob]) -> list[CanonicalJob]:
    """Keep the first job per id and per (title, employer, apply url)."""
    seen_ids: set[str] = set()
    seen_keys: set[tuple[str, str, str]] = set()
    out: list[CanonicalJob] = []
    for job in jobs:
        key = dedupe_key(job.title, job.employer_name, job.apply_url)
        if job.id in seen_ids or (key[2] and key in seen_keys):
            continue
        seen_ids.add(job.id)
        seen_keys.add(key)
        out.append(job)
    return out


class JobSearchService:
    def __init__(
        self,
        primary: SourceAdapter,
        regional: SourceAdapter,
        firehose: tuple[SourceAdapter, SourceAdapter],
        warehouse: JobWarehouse,
        window_hours: int = 48,
        min_warehouse_hits: int = 5,
        fallback_query: str = DEFAULT_FALLBACK_QUERY,
    ):
        self.primary = primary
        self.regional = regional
        self.firehose = firehose
        self.warehouse = warehouse
        self.window = timedelta(hours=window_hours)
        self.min_warehouse_hits = min_warehouse_hits
        self.fallback_query = fallback_query
        self._pending: set[asyncio.Task] = set()

    async def _query_warehouse(self, query: str) -> list[CanonicalJob]:
        posted_since = datetime.now(timezone.utc) - self.window
        return await self.warehouse.query(query, posted_since) or []

    def _persist(self, jobs: list[CanonicalJob]) -> None:
        if not jobs:
            return
        task = asyncio.create_task(self.warehouse.upsert_many(list(jobs)))
        self._pending.add(task)
        task.add_done_callback(self._on_persisted)

    def _on_persisted(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("background warehouse write failed", exc_info=exc)

    async def drain(self) -> None:
        """Wait for outstanding background warehouse writes."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def search_jobs(
        self,
        query: str,
        location: str | None = None,
        ip_detected_city: str | None = None,
    ) -> SearchResult:
        query = sanitize_query(query, self.fallback_query)
        context = SearchContext(location=location, ip_detected_city=ip_detected_city)

        cached = dedupe_jobs(await self._query_warehouse(query))
        if len(cached) > self.min_warehouse_hits:
            logger.info("query=%r served from warehouse hits=%s", query, len(cached))
            return SearchResult(cached, "standard")

        primary = await self.primary.fetch(query, context)
        if not primary.rate_limited and primary.jobs:
            self._persist(primary.jobs)
            return SearchResult(dedupe_jobs(primary.jobs), "deep")

        logger.info("query=%r primary empty or limited status=%s, trying regional", query, primary.status_code)
        # Only a 429 re-checks the warehouse; a 403 still counts as rate limited above.
        if primary.status_code == 429:
            regional, requeried = await asyncio.gather(
                self.regional.fetch(query, context),
                self._query_warehouse(query),
            )
        else:
            regional, requeried = await self.regional.fetch(query, context), []

        if regional.jobs:
            self._persist(regional.jobs)
            return SearchResult(dedupe_jobs(regional.jobs), "standard")
        if requeried:
            return SearchResult(dedupe_jobs(requeried), "standard")

        first, second = await asyncio.gather(*(adapter.fetch(query, context) for adapter in self.firehose))
        combined = first.jobs + second.jobs
        if combined:
            self._persist(combined)
            return SearchResult(dedupe_jobs(combined), "standard")

        logger.info("query=%r exhausted every source", query)
        return SearchResult()


def build_warehouse(cfg: Settings) -> JobWarehouse:
    if cfg.warehouse_url:
        return HttpWarehouse(cfg.warehouse_url)
    from jobhub.db.database import SessionLocal

    return SqlWarehouse(SessionLocal, limit=cfg.warehouse_query_limit)


def build_search_service(cfg: Settings, warehouse: JobWarehouse | None = None) -> JobSearchService:
    timeout = cfg.provider_timeout_seconds
    return JobSearchService(
        primary=JSearchAdapter(cfg.primary_api_key, cfg.primary_api_host, cfg.primary_num_pages, timeout),
        regional=AdzunaAdapter(
            cfg.regional_app_id,
            cfg.regional_app_key,
            cfg.regional_results_per_page,
            cfg.default_region,
            timeout,
        ),
        firehose=(JoinRiseAdapter(cfg.firehose_max_pages, timeout), ArbeitnowAdapter(cfg.firehose_max_pages, timeout)),
        warehouse=warehouse or build_warehouse(cfg),
        window_hours=cfg.warehouse_window_hours,
        min_warehouse_hits=cfg.warehouse_min_hits,
        fallback_query=cfg.fallback_query,
    )
