import logging
from typing import Any, Dict

from core.cache import SeriesCache
from features.common.exceptions.enrichment_exceptions import UpstreamUnavailable
from features.logs.models.log_types import BackfillCriteria, BackfillGroup, BackfillResult, FishingRecord
from features.logs.services.enrichment_service import EnrichmentService, catch_time
from features.logs.services.record_store import RecordStore
from features.weather.services.trend_classifier import baro_trend

logger = logging.getLogger(__name__)

class BackfillService:
    """Fills environmental fields on entries stored before they could be resolved.

    Astronomy and barometric groups only fill fields that are still null.
    The tide group always overwrites station, stage, height and rate with
    freshly computed values. Both policies are relied on by existing data
    and are kept as they are.
    """

    def __init__(self, store: RecordStore, enrichment_service: EnrichmentService):
        self.store = store
        self.enrichment_service = enrichment_service

    async def backfill(self, criteria: BackfillCriteria) -> BackfillResult:
        """Update matching entries and report how many were written.

        Rows whose data cannot be obtained are skipped. A StorageFailure
        from the store aborts the run.
        """
        if criteria.missing_only:
            records = await self.store.find_missing(criteria.fields)
        else:
            records = await self.store.all()

        result = BackfillResult(group=criteria.group, scanned_count=len(records))
        cache = SeriesCache()
        try:
            for record in records:
                try:
                    changes = await self._changes_for(criteria.group, record, cache)
                except UpstreamUnavailable as e:
                    logger.warning(f"Skipping record {record.id}: {str(e)}")
                    changes = {}

                if not changes:
                    result.skipped_count += 1
                    continue

                await self.store.update(record.id, changes)
                result.updated_count += 1
        finally:
            await cache.close()

        logger.info(
            f"{criteria.group.value.capitalize()} backfill: {result.updated_count} updated, "
            f"{result.skipped_count} skipped of {result.scanned_count} ({cache.misses} upstream fetches)"
        )
        return result

    async def _changes_for(
        self,
        group: BackfillGroup,
        record: FishingRecord,
        cache: SeriesCache
    ) -> Dict[str, Any]:
        when = catch_time(record)
        if not record.has_coordinates or when is None:
            return {}

        if group == BackfillGroup.ASTRONOMY:
            return await self._astronomy_changes(record, cache)
        if group == BackfillGroup.BAROMETRIC:
            return await self._barometric_changes(record, cache)
        return await self._tide_changes(record, cache)

    async def _astronomy_changes(self, record: FishingRecord, cache: SeriesCache) -> Dict[str, Any]:
        astronomy = await self.enrichment_service.resolve_astronomy(
            record.latitude, record.longitude, record.date, cache
        )
        if astronomy is None:
            return {}
        return {
            field: value
            for field, value in astronomy.model_dump().items()
            if value is not None and getattr(record, field) is None
        }

    async def _barometric_changes(self, record: FishingRecord, cache: SeriesCache) -> Dict[str, Any]:
        current, previous = await self.enrichment_service.resolve_pressure(
            record.latitude, record.longitude, catch_time(record), cache
        )

        changes: Dict[str, Any] = {}
        if record.barometric_current is None and current is not None:
            changes["barometric_current"] = current
        if record.barometric_prev_3h is None and previous is not None:
            changes["barometric_prev_3h"] = previous

        if record.barometric_trend is None:
            trend = baro_trend(
                changes.get("barometric_current", record.barometric_current),
                changes.get("barometric_prev_3h", record.barometric_prev_3h)
            )
            if trend is not None:
                changes["barometric_trend"] = trend
        return changes

    async def _tide_changes(self, record: FishingRecord, cache: SeriesCache) -> Dict[str, Any]:
        station, reading = await self.enrichment_service.resolve_tide(
            record.latitude, record.longitude, catch_time(record), cache
        )
        if station is None or reading is None:
            return {}
        return {
            "tide_station_id": station.id,
            "tide_stage": reading.stage,
            "tide_height_ft": round(reading.height_ft, 2),
            "tide_rate_ft_per_hr": round(reading.rate_ft_per_hr, 2)
        }
