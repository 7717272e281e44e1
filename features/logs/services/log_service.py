import logging
from typing import Optional

from features.common.exceptions.enrichment_exceptions import ValidationFailure
from features.logs.models.log_types import FishingLogBase, FishingLogCreate, FishingRecord
from features.logs.services.enrichment_service import EnrichmentService
from features.logs.services.record_store import RecordStore

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ["title", "date", "time", "catch_status"]

class LogService:
    """Creates fishing log entries with their environmental context."""

    def __init__(self, store: RecordStore, enrichment_service: EnrichmentService):
        self.store = store
        self.enrichment_service = enrichment_service

    @staticmethod
    def validate(entry: FishingLogCreate) -> None:
        missing = []
        for field in REQUIRED_FIELDS:
            value = getattr(entry, field)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(field)
        if missing:
            raise ValidationFailure(missing)

    async def create_entry(self, entry: FishingLogCreate) -> FishingRecord:
        self.validate(entry)

        context = await self.enrichment_service.enrich(entry)
        values = {
            **entry.model_dump(include=set(FishingLogBase.model_fields)),
            **context.model_dump()
        }
        record = await self.store.insert(values)
        logger.info(f"Logged entry {record.id} '{record.title}' (tide station {record.tide_station_id or 'none'})")
        return record

    async def get_entry(self, record_id: int) -> Optional[FishingRecord]:
        return await self.store.get(record_id)
