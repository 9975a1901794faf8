from __future__ import annotations
import logging

from jobhub.crawlers.base import ProviderResult, SearchContext, SourceAdapter, SourceTag
from jobhub.crawlers.http_helpers import fetch_json
from jobhub.crawlers.normalize import normalize_many
from jobhub.crawlers.regions import sanitize_location

logger = logging.getLogger(__name__)

SEARCH_URL = "https://jsearch.p.rapidapi.com/search"


class JSearchAdapter(SourceAdapter):
    """Primary ("deep") provider. Reports 429/403 through ``ProviderResult.status_code``."""

    source_name = SourceTag.PRIMARY.value

    def __init__(self, api_key: str = "", api_host: str = "", num_pages: int = 1, timeout: float = 20.0):
        self.api_key = api_key
        self.api_host = api_host
        self.num_pages = num_pages
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.api_host)

    def build_query(self, query: str, context: SearchContext) -> str:
        location = sanitize_location(context.location)
        if location and location.lower() not in query.lower():
            return f"{query} in {location}"
        return query

    async def _fetch(self, query: str, context: SearchContext) -> ProviderResult:
        if not self.configured:
            logger.warning("source=%s skipped: missing api key/host", self.source_name)
            return ProviderResult()

        params = {"query": self.build_query(query.strip(), context), "page": "1", "num_pages": str(self.num_pages)}
        headers = {"x-rapidapi-key": self.api_key, "x-rapidapi-host": self.api_host}
        status, payload = await fetch_json(SEARCH_URL, params=params, headers=headers, timeout=self.timeout)
        if status in (403, 429):
            logger.warning("source=%s rate limited status=%s", self.source_name, status)
            return ProviderResult(status_code=status)
        if payload is None:
            logger.warning("source=%s bad response status=%s", self.source_name, status)
            return ProviderResult(status_code=status)

        data = payload.get("data") if isinstance(payload, dict) else None
        return ProviderResult(jobs=normalize_many(data, SourceTag.PRIMARY), status_code=status)
