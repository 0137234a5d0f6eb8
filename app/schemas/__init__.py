"""
app/schemas package marker.
"""

from app.schemas.dashboard import (
    AnalyzeRequest,
    DashboardAnalysisResponse,
    DatasetLoadResponse,
    DatasetUploadResponse,
    DateBoundsResponse,
    HealthResponse,
)

__all__ = [
    "AnalyzeRequest",
    "DashboardAnalysisResponse",
    "DatasetLoadResponse",
    "DatasetUploadResponse",
    "DateBoundsResponse",
    "HealthResponse",
]
