from __future__ import annotations
from jobhub.models.warehouse_job import WarehouseJob

__all__ = ["WarehouseJob"]
