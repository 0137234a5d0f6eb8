"""
app/schemas/dashboard.py

Request and response schemas for dashboard endpoints.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AnalyzeRequest(BaseModel):
    """
    Date-range selection submitted by the rendering layer.

    Date-only bounds cover whole days.
    """

    model_config = ConfigDict(extra="forbid")

    current_start: date | datetime
    current_end: date | datetime
    comparison_enabled: bool = False
    comparison_start: date | datetime | None = None
    comparison_end: date | datetime | None = None


class DateBoundsResponse(BaseModel):
    """
    API response model for the available date bounds.
    """

    earliest: datetime
    latest: datetime
    is_fallback: bool = False


class DatasetLoadResponse(BaseModel):
    """
    API response model for one load cycle.
    """

    generation: int = Field(..., ge=0)
    committed: bool
    rows_by_file: dict[str, int] = Field(default_factory=dict)
    errors: dict[str, str] = Field(default_factory=dict)
    bounds: DateBoundsResponse


class DatasetUploadResponse(BaseModel):
    """
    API response model for a single-file replacement.
    """

    filename: str
    rows: int = Field(..., ge=0)
    error: str | None = None
    bounds: DateBoundsResponse


class DashboardAnalysisResponse(BaseModel):
    """
    Per-platform snapshots for one selection.
    """

    email: dict[str, Any]
    facebook: dict[str, Any]
    instagram: dict[str, Any]
    youtube: dict[str, Any]
    web: dict[str, Any]
    utm: dict[str, Any]


class HealthResponse(BaseModel):
    """
    API response model for the health check.
    """

    status: str
    datasets_loaded: bool
    load_errors: int = Field(default=0, ge=0)
