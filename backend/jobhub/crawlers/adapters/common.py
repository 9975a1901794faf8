from __future__ import annotations

from jobhub.crawlers.base import CanonicalJob
from jobhub.crawlers.http_helpers import matches_query


def filter_jobs(jobs: list[CanonicalJob], query: str) -> list[CanonicalJob]:
    """Client-side filter for feeds that take no query parameter."""
    return [j for j in jobs if matches_query(query, j.title, j.employer_name, j.location_label())]
