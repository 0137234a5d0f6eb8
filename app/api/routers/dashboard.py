"""
app/api/routers/dashboard.py

Dashboard HTTP endpoints: load cycles, bounds, uploads, and analysis.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status

from app.api.dependencies import get_csv_upload, get_orchestrator
from app.domain.date_range import AvailableDateBounds, InvalidDateRangeError
from app.schemas.dashboard import (
    AnalyzeRequest,
    DashboardAnalysisResponse,
    DatasetLoadResponse,
    DatasetUploadResponse,
    DateBoundsResponse,
)
from app.services.dashboard_orchestrator import (
    DashboardOrchestrator,
    UnknownDatasetError,
    build_selection,
)

router = APIRouter(tags=["dashboard"])


def _bounds_response(bounds: AvailableDateBounds) -> DateBoundsResponse:
    return DateBoundsResponse(
        earliest=bounds.earliest,
        latest=bounds.latest,
        is_fallback=bounds.is_fallback,
    )


@router.post("/datasets/reload", response_model=DatasetLoadResponse)
async def reload_datasets(
    orchestrator: DashboardOrchestrator = Depends(get_orchestrator),
) -> DatasetLoadResponse:
    """
    Run a full load cycle over every manifest file.
    """

    result = await orchestrator.load_all()
    return DatasetLoadResponse(
        generation=result.generation,
        committed=result.committed,
        rows_by_file={filename: len(rows) for filename, rows in result.datasets.items()},
        errors=result.errors,
        bounds=_bounds_response(result.bounds),
    )


@router.get("/datasets/bounds", response_model=DateBoundsResponse)
def get_bounds(
    orchestrator: DashboardOrchestrator = Depends(get_orchestrator),
) -> DateBoundsResponse:
    """
    Return the available date bounds of the loaded datasets.
    """

    return _bounds_response(orchestrator.bounds)


@router.post("/datasets/{filename}", response_model=DatasetUploadResponse)
def upload_dataset(
    filename: str,
    file: UploadFile = Depends(get_csv_upload),
    orchestrator: DashboardOrchestrator = Depends(get_orchestrator),
) -> DatasetUploadResponse:
    """
    Replace one known dataset with an uploaded CSV file.
    """

    try:
        result = orchestrator.upload(filename, file.file.read())
    except UnknownDatasetError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_dict(),
        ) from exc
    finally:
        file.file.close()

    return DatasetUploadResponse(
        filename=result.filename,
        rows=result.rows,
        error=result.error,
        bounds=_bounds_response(result.bounds),
    )


@router.post("/analyze", response_model=DashboardAnalysisResponse)
def analyze(
    payload: AnalyzeRequest,
    orchestrator: DashboardOrchestrator = Depends(get_orchestrator),
) -> DashboardAnalysisResponse:
    """
    Compute every platform snapshot for the submitted date ranges.
    """

    try:
        selection = build_selection(
            payload.current_start,
            payload.current_end,
            payload.comparison_start,
            payload.comparison_end,
            payload.comparison_enabled,
        )
    except InvalidDateRangeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_dict(),
        ) from exc

    return DashboardAnalysisResponse(**orchestrator.analyze(selection))
