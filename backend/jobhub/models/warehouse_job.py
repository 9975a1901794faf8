from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from jobhub.db.database import Base


class WarehouseJob(Base):
    __tablename__ = "job_warehouse"

    id: Mapped[str] = mapped_column(String(256), primary_key=True)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    employer_name: Mapped[str] = mapped_column(String(256), nullable=False)
    employer_logo_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    apply_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    city: Mapped[Optional[str]] = mapped_column(String(256), nullable=True)
    region: Mapped[Optional[str]] = mapped_column(String(256), nullable=True)
    country: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    # Naive UTC.
    posted_at: Mapped[datetime] = mapped_column(DateTime, index=True, nullable=False)
    min_salary: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    max_salary: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    highlights: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    source: Mapped[str] = mapped_column(String(64), default="", nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
