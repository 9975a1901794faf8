"""Clients for the job warehouse: a recency-bounded store of previously seen postings.

Two transports share one interface. ``SqlWarehouse`` talks to the database
through SQLAlchemy; ``HttpWarehouse`` goes through an intermediary HTTP
endpoint for deployments that cannot reach the database directly.
``query`` returns ``None`` on transport failure so callers can tell "store
unreachable" from "no matches"; ``upsert_many`` never raises.
"""
from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import logging
from typing import Callable

import httpx
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jobhub.crawlers.base import CanonicalJob
from jobhub.crawlers.normalize import normalize_canonical
from jobhub.models.warehouse_job import WarehouseJob

logger = logging.getLogger(__name__)


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def query_terms(text: str) -> list[str]:
    needle = " ".join(text.lower().split())
    if not needle:
        return []
    terms = [needle]
    terms.extend(t for t in needle.split() if len(t) > 1 and t != needle)
    return terms


class JobWarehouse:
    async def query(self, text: str, posted_since: datetime) -> list[CanonicalJob] | None:
        raise NotImplementedError

    async def upsert_many(self, jobs: list[CanonicalJob]) -> None:
        raise NotImplementedError


class SqlWarehouse(JobWarehouse):
    def __init__(self, session_factory: Callable[[], Session], limit: int = 500):
        self.session_factory = session_factory
        self.limit = limit

    def _query_sync(self, text: str, posted_since: datetime) -> list[CanonicalJob]:
        query_filter = []
        for term in query_terms(text):
            like = f"%{term}%"
            query_filter.extend(
                [
                    WarehouseJob.title.ilike(like),
                    WarehouseJob.employer_name.ilike(like),
                    WarehouseJob.description.ilike(like),
                ]
            )

        db = self.session_factory()
        try:
            query = db.query(WarehouseJob).filter(WarehouseJob.posted_at >= _naive_utc(posted_since))
            if query_filter:
                query = query.filter(or_(*query_filter))
            rows = query.order_by(WarehouseJob.posted_at.desc()).limit(self.limit).all()
            return [self._to_job(row) for row in rows]
        finally:
            db.close()

    @staticmethod
    def _to_job(row: WarehouseJob) -> CanonicalJob:
        return normalize_canonical(
            {
                "id": row.id,
                "title": row.title,
                "employer_name": row.employer_name,
                "employer_logo_url": row.employer_logo_url,
                "description": row.description,
                "apply_url": row.apply_url,
                "city": row.city,
                "region": row.region,
                "country": row.country,
                "posted_at": row.posted_at,
                "min_salary": row.min_salary,
                "max_salary": row.max_salary,
                "highlights": row.highlights,
                "source": row.source,
            }
        )

    def _upsert_sync(self, jobs: list[CanonicalJob]) -> None:
        db = self.session_factory()
        try:
            for job in jobs:
                db.merge(
                    WarehouseJob(
                        id=job.id,
                        title=job.title,
                        employer_name=job.employer_name,
                        employer_logo_url=job.employer_logo_url,
                        description=job.description,
                        apply_url=job.apply_url,
                        city=job.city,
                        region=job.region,
                        country=job.country,
                        posted_at=_naive_utc(job.posted_at),
                        min_salary=job.min_salary,
                        max_salary=job.max_salary,
                        highlights={k: list(v) for k, v in job.highlights.items()} if job.highlights else None,
                        source=job.source,
                        updated_at=datetime.utcnow(),
                    )
                )
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        finally:
            db.close()

    async def query(self, text: str, posted_since: datetime) -> list[CanonicalJob] | None:
        try:
            return await asyncio.to_thread(self._query_sync, text, posted_since)
        except SQLAlchemyError as exc:
            logger.warning("warehouse query failed: %s", exc)
            return None

    async def upsert_many(self, jobs: list[CanonicalJob]) -> None:
        if not jobs:
            return
        try:
            await asyncio.to_thread(self._upsert_sync, jobs)
        except SQLAlchemyError as exc:
            logger.error("warehouse upsert of %s jobs failed: %s", len(jobs), exc)
            return
        logger.info("warehouse upserted %s jobs", len(jobs))


class HttpWarehouse(JobWarehouse):
    def __init__(self, base_url: str, timeout: float = 15.0, transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def query(self, text: str, posted_since: datetime) -> list[CanonicalJob] | None:
        params = {"q": text, "posted_since": posted_since.astimezone(timezone.utc).isoformat()}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.get(f"{self.base_url}/jobs/query", params=params)
                resp.raise_for_status()
                payload = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("warehouse query failed: %s", exc)
            return None

        items = payload.get("jobs") if isinstance(payload, dict) else payload
        if not isinstance(items, list):
            return None
        return [normalize_canonical(item) for item in items if isinstance(item, dict)]

    async def upsert_many(self, jobs: list[CanonicalJob]) -> None:
        if not jobs:
            return
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.post(f"{self.base_url}/jobs/upsert", json={"jobs": [j.to_dict() for j in jobs]})
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("warehouse upsert of %s jobs failed: %s", len(jobs), exc)
            return
        logger.info("warehouse upserted %s jobs", len(jobs))
