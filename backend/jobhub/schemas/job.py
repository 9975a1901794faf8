from __future__ import annotations
from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from jobhub.crawlers.base import CanonicalJob


class JobOut(BaseModel):
    id: str
    title: str
    employer_name: str
    employer_logo_url: str | None = None
    description: str = ""
    apply_url: str
    city: str | None = None
    region: str | None = None
    country: str | None = None
    location: str
    posted_at: datetime
    min_salary: int | None = None
    max_salary: int | None = None
    salary: str
    highlights: dict[str, list[str]] | None = None
    source: str

    @classmethod
    def from_job(cls, job: CanonicalJob) -> "JobOut":
        return cls(
            id=job.id,
            title=job.title,
            employer_name=job.employer_name,
            employer_logo_url=job.employer_logo_url,
            description=job.description,
            apply_url=job.apply_url,
            city=job.city,
            region=job.region,
            country=job.country,
            location=job.location_label(),
            posted_at=job.posted_at,
            min_salary=job.min_salary,
            max_salary=job.max_salary,
            salary=job.salary_label(),
            highlights={k: list(v) for k, v in job.highlights.items()} if job.highlights else None,
            source=job.source,
        )


class SearchResultOut(BaseModel):
    jobs: list[JobOut]
    source_quality: Literal["deep", "standard"] | None = None
