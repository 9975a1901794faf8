"""Mapping of every provider's raw job shape onto ``CanonicalJob``.

Each provider gets one normalizer, selected through ``NORMALIZERS`` by its
source tag. All normalizers are total: any field may be missing, null or of
the wrong type and the result still satisfies the canonical invariants
(non-empty id/title/employer/apply url, a real timestamp, ordered salaries).
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import math
from typing import Any, Callable

from jobhub.crawlers.base import (
    DEFAULT_APPLY_URL,
    DEFAULT_EMPLOYER,
    DEFAULT_TITLE,
    CanonicalJob,
    SourceTag,
)
from jobhub.crawlers.http_helpers import html_to_text
from jobhub.utils.hash import job_fallback_hash


@dataclass(frozen=True)
class RawJob:
    source: SourceTag
    payload: Any


def _text(value: Any) -> str:
    if value is None or isinstance(value, (dict, list, tuple, set)):
        return ""
    if isinstance(value, str):
        return value.strip()
    return str(value).strip()


def _optional_text(value: Any) -> str | None:
    return _text(value) or None


def _obj(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _salary(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if value < 0:
        return None
    return int(round(value))


def _salary_pair(low: Any, high: Any) -> tuple[int | None, int | None]:
    lo, hi = _salary(low), _salary(high)
    if lo is not None and hi is not None and lo > hi:
        lo, hi = hi, lo
    return lo, hi


def _timestamp(value: Any, now: datetime) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value) and value > 0:
        # Feeds mix epoch seconds and epoch milliseconds.
        seconds = value / 1000 if value > 1e11 else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return now
    raw = _text(value)
    if not raw:
        return now
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return now
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _highlights(value: Any) -> dict[str, tuple[str, ...]] | None:
    if not isinstance(value, dict):
        return None
    out: dict[str, tuple[str, ...]] = {}
    for key, items in value.items():
        name = _text(key)
        if not name or not isinstance(items, (list, tuple)):
            continue
        snippets = tuple(s for s in (_text(item) for item in items) if s)
        if snippets:
            out[name] = snippets
    return out or None


def _split_location(value: Any) -> tuple[str | None, str | None, str | None]:
    parts = [p.strip() for p in _text(value).split(",") if p.strip()]
    if not parts:
        return None, None, None
    if len(parts) == 1:
        return parts[0], None, None
    if len(parts) == 2:
        return parts[0], None, parts[1]
    return parts[0], ", ".join(parts[1:-1]), parts[-1]


def _build(
    source: SourceTag,
    provider_id: Any,
    title: Any,
    employer: Any,
    apply_url: Any,
    posted_at: Any,
    now: datetime,
    **extra: Any,
) -> CanonicalJob:
    title_s = _text(title) or DEFAULT_TITLE
    employer_s = _text(employer) or DEFAULT_EMPLOYER
    url_s = _text(apply_url) or DEFAULT_APPLY_URL
    pid = _text(provider_id) or job_fallback_hash(url_s, title_s, employer_s)
    job_id = pid if pid.startswith(f"{source.value}:") else f"{source.value}:{pid}"
    return CanonicalJob(
        id=job_id,
        title=title_s,
        employer_name=employer_s,
        apply_url=url_s,
        posted_at=_timestamp(posted_at, now),
        source=source.value,
        **extra,
    )


def _normalize_primary(item: dict, now: datetime) -> CanonicalJob:
    # Already in the trusted shape; every field is re-validated, nothing re-derived.
    lo, hi = _salary_pair(item.get("job_min_salary"), item.get("job_max_salary"))
    return _build(
        SourceTag.PRIMARY,
        item.get("job_id"),
        item.get("job_title"),
        item.get("employer_name"),
        item.get("job_apply_link"),
        item.get("job_posted_at_datetime_utc"),
        now,
        description=_text(item.get("job_description")),
        employer_logo_url=_optional_text(item.get("employer_logo")),
        city=_optional_text(item.get("job_city")),
        region=_optional_text(item.get("job_state")),
        country=_optional_text(item.get("job_country")),
        min_salary=lo,
        max_salary=hi,
        highlights=_highlights(item.get("job_highlights")),
    )


def _normalize_regional(item: dict, now: datetime) -> CanonicalJob:
    location = _obj(item.get("location"))
    raw_area = location.get("area")
    area = [a for a in (_text(x) for x in raw_area) if a] if isinstance(raw_area, list) else []
    country = area[0] if area else None
    region = area[1] if len(area) > 2 else None
    city = area[-1] if len(area) > 1 else _optional_text(location.get("display_name"))
    lo, hi = _salary_pair(item.get("salary_min"), item.get("salary_max"))
    return _build(
        SourceTag.REGIONAL,
        item.get("id"),
        html_to_text(_text(item.get("title"))),
        _obj(item.get("company")).get("display_name"),
        item.get("redirect_url"),
        item.get("created"),
        now,
        description=html_to_text(_text(item.get("description"))),
        city=city,
        region=region,
        country=country,
        min_salary=lo,
        max_salary=hi,
    )


def _normalize_firehose_a(item: dict, now: datetime) -> CanonicalJob:
    owner = _obj(item.get("owner"))
    breakdown = _obj(item.get("descriptionBreakdown"))
    city, region, country = _split_location(item.get("locationAddress"))
    lo, hi = _salary_pair(breakdown.get("salaryRangeMinYearly"), breakdown.get("salaryRangeMaxYearly"))
    skills = breakdown.get("skillRequirements")
    return _build(
        SourceTag.FIREHOSE_A,
        item.get("_id") or item.get("id"),
        item.get("title"),
        owner.get("companyName"),
        item.get("url"),
        item.get("createdAt"),
        now,
        description=html_to_text(_text(breakdown.get("oneSentenceJobSummary") or item.get("description"))),
        employer_logo_url=_optional_text(owner.get("photo")),
        city=city,
        region=region,
        country=country,
        min_salary=lo,
        max_salary=hi,
        highlights=_highlights({"Qualifications": skills}),
    )


def _normalize_firehose_b(item: dict, now: datetime) -> CanonicalJob:
    city, region, country = _split_location(item.get("location"))
    tags = item.get("tags")
    return _build(
        SourceTag.FIREHOSE_B,
        item.get("slug"),
        item.get("title"),
        item.get("company_name"),
        item.get("url"),
        item.get("created_at"),
        now,
        description=html_to_text(_text(item.get("description"))),
        city=city,
        region=region,
        country=country,
        highlights=_highlights({"Tags": tags}),
    )


def normalize_canonical(item: dict, now: datetime | None = None) -> CanonicalJob:
    """Rebuild a job from its own ``to_dict`` shape (warehouse transport)."""
    now = now or datetime.now(timezone.utc)
    lo, hi = _salary_pair(item.get("min_salary"), item.get("max_salary"))
    source = _text(item.get("source"))
    title = _text(item.get("title")) or DEFAULT_TITLE
    employer = _text(item.get("employer_name")) or DEFAULT_EMPLOYER
    url = _text(item.get("apply_url")) or DEFAULT_APPLY_URL
    return CanonicalJob(
        id=_text(item.get("id")) or f"{SourceTag.WAREHOUSE.value}:{job_fallback_hash(url, title, employer)}",
        title=title,
        employer_name=employer,
        apply_url=url,
        posted_at=_timestamp(item.get("posted_at"), now),
        description=_text(item.get("description")),
        employer_logo_url=_optional_text(item.get("employer_logo_url")),
        city=_optional_text(item.get("city")),
        region=_optional_text(item.get("region")),
        country=_optional_text(item.get("country")),
        min_salary=lo,
        max_salary=hi,
        highlights=_highlights(item.get("highlights")),
        source=source or SourceTag.WAREHOUSE.value,
    )


NORMALIZERS: dict[SourceTag, Callable[[dict, datetime], CanonicalJob]] = {
    SourceTag.PRIMARY: _normalize_primary,
    SourceTag.REGIONAL: _normalize_regional,
    SourceTag.FIREHOSE_A: _normalize_firehose_a,
    SourceTag.FIREHOSE_B: _normalize_firehose_b,
    SourceTag.WAREHOUSE: normalize_canonical,
}


def _source_tag(source: SourceTag | str | None) -> SourceTag:
    # Unknown tags fall back to the canonical shape.
    if source is None:
        return SourceTag.WAREHOUSE
    try:
        return SourceTag(source)
    except ValueError:
        return SourceTag.WAREHOUSE


def normalize(raw: RawJob | Any, source: SourceTag | str | None = None, now: datetime | None = None) -> CanonicalJob:
    """Convert one raw provider item to a ``CanonicalJob``. Never raises."""
    if isinstance(raw, RawJob):
        source, payload = raw.source, raw.payload
    else:
        payload = raw
    tag = _source_tag(source)
    return NORMALIZERS[tag](_obj(payload), now or datetime.now(timezone.utc))


def normalize_many(items: Any, source: SourceTag) -> list[CanonicalJob]:
    if not isinstance(items, list):
        return []
    now = datetime.now(timezone.utc)
    return [normalize(RawJob(source, item), now=now) for item in items if isinstance(item, dict)]
