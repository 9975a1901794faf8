from __future__ import annotations
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobhub.api import health, search
from jobhub.core.config import settings
from jobhub.core.logging import configure_logging
from jobhub.services.search_service import build_search_service

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    configure_logging(settings.log_level)
    if not settings.warehouse_url:
        from jobhub.db.init_db import try_init_db

        try_init_db()
    app.state.search_service = build_search_service(settings)


@app.on_event("shutdown")
async def on_shutdown():
    service = getattr(app.state, "search_service", None)
    if service is not None:
        await service.drain()


app.include_router(health.router)
app.include_router(search.router, prefix=settings.api_prefix)
