"""Import/Export Router"""
from fastapi import APIRouter, Depends, Request

from app.core.dependencies import get_store
from app.core.limits import limiter
from app.core.store import StudioStore
from app.studio.crud.imports import export_records, import_batch
from app.studio.schemas.imports import ExportResponse, ImportBatchRequest, ImportResult

router = APIRouter(prefix="/imports", tags=["Import/Export"])


@router.post("/", response_model=ImportResult)
@limiter.limit("5/minute")
async def import_records(
    request: Request,
    body: ImportBatchRequest,
    store: StudioStore = Depends(get_store),
):
    """
    Import students and memberships from flat records.

    Invalid records are skipped and reported in ``diagnostics``; valid
    records are applied. Imported end dates and prices are kept as given.
    """
    return import_batch(store, body.records)


@router.get("/export", response_model=ExportResponse)
@limiter.limit("10/minute")
async def export_all_records(
    request: Request,
    store: StudioStore = Depends(get_store),
):
    """Export one flat record per student-membership pair."""
    records = export_records(store)
    return ExportResponse(records=records, total=len(records))
