from __future__ import annotations
import asyncio
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Job"
DEFAULT_EMPLOYER = "Unknown"
DEFAULT_APPLY_URL = "#"


class SourceTag(str, Enum):
    PRIMARY = "jsearch"
    REGIONAL = "adzuna"
    FIREHOSE_A = "joinrise"
    FIREHOSE_B = "arbeitnow"
    WAREHOUSE = "warehouse"


@dataclass(frozen=True)
class CanonicalJob:
    id: str
    title: str
    employer_name: str
    apply_url: str
    posted_at: datetime
    description: str = ""
    employer_logo_url: str | None = None
    city: str | None = None
    region: str | None = None
    country: str | None = None
    min_salary: int | None = None
    max_salary: int | None = None
    highlights: dict[str, tuple[str, ...]] | None = None
    source: str = ""

    @property
    def posted_at_utc(self) -> str:
        return self.posted_at.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

    def location_label(self) -> str:
        parts = [p for p in (self.city, self.region, self.country) if p]
        return ", ".join(parts) if parts else "Location not specified"

    def salary_label(self) -> str:
        if self.min_salary is None or self.max_salary is None:
            return "Competitive"
        return f"${round(self.min_salary / 1000)}k - ${round(self.max_salary / 1000)}k"

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["posted_at"] = self.posted_at_utc
        if self.highlights is not None:
            data["highlights"] = {k: list(v) for k, v in self.highlights.items()}
        return data


@dataclass(frozen=True)
class SearchContext:
    location: str | None = None
    ip_detected_city: str | None = None


@dataclass
class ProviderResult:
    jobs: list[CanonicalJob] = field(default_factory=list)
    status_code: int | None = None

    @property
    def rate_limited(self) -> bool:
        return self.status_code in (403, 429)


class SourceAdapter:
    source_name: str
    timeout: float = 20.0

    async def fetch(self, query: str, context: SearchContext | None = None) -> ProviderResult:
        """Run the provider call; failures of any kind come back as an empty result."""
        try:
            return await asyncio.wait_for(self._fetch(query, context or SearchContext()), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("source=%s timed out after %ss", self.source_name, self.timeout)
        except httpx.HTTPError as exc:
            logger.warning("source=%s transport error=%s", self.source_name, exc)
        except Exception:  # noqa: BLE001
            logger.exception("source=%s failed", self.source_name)
        return ProviderResult()

    async def _fetch(self, query: str, context: SearchContext) -> ProviderResult:
        raise NotImplementedError
