from __future__ import annotations
import logging

from jobhub.crawlers.base import ProviderResult, SearchContext, SourceAdapter, SourceTag
from jobhub.crawlers.http_helpers import fetch_json
from jobhub.crawlers.normalize import normalize_many
from jobhub.crawlers.regions import DEFAULT_REGION, resolve_region

logger = logging.getLogger(__name__)


def search_url(country: str, page: int = 1) -> str:
    return f"https://api.adzuna.com/v1/api/jobs/{country}/search/{page}"


class AdzunaAdapter(SourceAdapter):
    source_name = SourceTag.REGIONAL.value

    def __init__(
        self,
        app_id: str = "",
        app_key: str = "",
        results_per_page: int = 50,
        default_region: str = DEFAULT_REGION,
        timeout: float = 20.0,
    ):
        self.app_id = app_id
        self.app_key = app_key
        self.results_per_page = results_per_page
        self.default_region = default_region
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.app_id and self.app_key)

    def region_for(self, context: SearchContext) -> str:
        return resolve_region(context.location, context.ip_detected_city, default=self.default_region)

    async def _fetch(self, query: str, context: SearchContext) -> ProviderResult:
        if not self.configured:
            logger.warning("source=%s skipped: missing app id/key", self.source_name)
            return ProviderResult()

        country = self.region_for(context)
        params = {
            "app_id": self.app_id,
            "app_key": self.app_key,
            "what": query.strip(),
            "results_per_page": str(self.results_per_page),
            "content-type": "application/json",
        }
        status, payload = await fetch_json(search_url(country), params=params, timeout=self.timeout)
        if payload is None:
            logger.warning("source=%s country=%s bad response status=%s", self.source_name, country, status)
            return ProviderResult(status_code=status)

        results = payload.get("results") if isinstance(payload, dict) else None
        jobs = normalize_many(results, SourceTag.REGIONAL)
        logger.info("source=%s country=%s fetched=%s", self.source_name, country, len(jobs))
        return ProviderResult(jobs=jobs, status_code=status)
