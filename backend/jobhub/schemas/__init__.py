from __future__ import annotations
from jobhub.schemas.job import JobOut, SearchResultOut

__all__ = ["JobOut", "SearchResultOut"]
