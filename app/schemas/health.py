"""
app/schemas/health.py

Health check response.
"""

from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    warehouse: str
