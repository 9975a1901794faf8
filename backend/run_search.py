from __future__ import annotations
import asyncio
import json
import sys

from jobhub.core.config import settings
from jobhub.core.logging import configure_logging
from jobhub.schemas.job import SearchResultOut, JobOut
from jobhub.services.search_service import build_search_service


async def main(query: str, location: str | None) -> None:
    if not settings.warehouse_url:
        from jobhub.db.init_db import try_init_db

        try_init_db()
    service = build_search_service(settings)
    try:
        result = await service.search_jobs(query, location=location)
    finally:
        await service.drain()
    out = SearchResultOut(jobs=[JobOut.from_job(j) for j in result.jobs], source_quality=result.source_quality)
    print(json.dumps(out.model_dump(mode="json"), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("usage: run_search.py <query> [location]", file=sys.stderr)
        sys.exit(2)
    configure_logging(settings.log_level)
    asyncio.run(main(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else None))
