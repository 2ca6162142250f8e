# Health schemas.
# Created: 2026-10-12

from __future__ import annotations

from pydantic import BaseModel


class HealthSummary(BaseModel):
    status: str = "ok"
    store: str = "ok"
    version: str
