from __future__ import annotations
from fastapi import APIRouter, Depends, Query

from jobhub.api.deps import get_search_service
from jobhub.schemas.job import JobOut, SearchResultOut
from jobhub.services.search_service import JobSearchService

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("/search", response_model=SearchResultOut)
async def search_jobs(
    q: str = Query(..., max_length=256),
    location: str | None = Query(default=None, max_length=256),
    ip_city: str | None = Query(default=None, max_length=128),
    service: JobSearchService = Depends(get_search_service),
):
    result = await service.search_jobs(q, location=location, ip_detected_city=ip_city)
    return SearchResultOut(jobs=[JobOut.from_job(job) for job in result.jobs], source_quality=result.source_quality)
