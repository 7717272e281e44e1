import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from features.common.exceptions.enrichment_exceptions import StorageFailure, ValidationFailure
from features.logs.models.log_types import (
    BackfillCriteria,
    BackfillGroup,
    BackfillResult,
    CreateLogResponse,
    FishingLogCreate,
    FishingRecord
)
from features.logs.services.backfill_service import BackfillService
from features.logs.services.log_service import LogService

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Logs"])

def get_log_service(request: Request) -> LogService:
    """Dependency to get the LogService instance."""
    return request.app.state.log_service

def get_backfill_service(request: Request) -> BackfillService:
    """Dependency to get the BackfillService instance."""
    return request.app.state.backfill_service

@router.post(
    "/log",
    response_model=CreateLogResponse,
    summary="Add a fishing log entry",
    description="Stores a new entry with sun, moon, pressure, weather and tide conditions at the time of catch"
)
async def create_log(
    entry: FishingLogCreate,
    service: LogService = Depends(get_log_service)
) -> CreateLogResponse:
    try:
        record = await service.create_entry(entry)
    except ValidationFailure as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageFailure as e:
        logger.error(f"Database error: {str(e)}")
        raise HTTPException(status_code=500, detail="Database error")
    return CreateLogResponse(id=record.id, record=record)

@router.get(
    "/log/{record_id}",
    response_model=FishingRecord,
    summary="Get a fishing log entry"
)
async def get_log(
    record_id: int,
    service: LogService = Depends(get_log_service)
) -> FishingRecord:
    try:
        record = await service.get_entry(record_id)
    except StorageFailure as e:
        logger.error(f"Database error: {str(e)}")
        raise HTTPException(status_code=500, detail="Database error")
    if record is None:
        raise HTTPException(status_code=404, detail=f"Entry {record_id} not found")
    return record

@router.post(
    "/backfill/{group}",
    response_model=BackfillResult,
    summary="Backfill environmental fields",
    description="Computes missing astronomy, barometric or tide fields for stored entries"
)
async def backfill(
    group: BackfillGroup,
    missing_only: bool = True,
    service: BackfillService = Depends(get_backfill_service)
) -> BackfillResult:
    try:
        return await service.backfill(BackfillCriteria(group=group, missing_only=missing_only))
    except StorageFailure as e:
        logger.error(f"Backfill aborted: {str(e)}")
        raise HTTPException(status_code=500, detail="Database error")
