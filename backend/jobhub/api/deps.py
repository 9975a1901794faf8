from __future__ import annotations
from fastapi import HTTPException, Request

from jobhub.services.search_service import JobSearchService


def get_search_service(request: Request) -> JobSearchService:
    service = getattr(request.app.state, "search_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="search service not ready")
    return service
