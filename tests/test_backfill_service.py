"""
Tests for batch backfill of environmental fields.
"""

import pytest
from datetime import time

from conftest import CATCH_DAY, FakeAstronomyClient, FakeTideClient, FakeWeatherClient
from features.common.exceptions.enrichment_exceptions import StorageFailure
from features.logs.models.log_types import BackfillCriteria, BackfillGroup, FishingRecord
from features.logs.services.backfill_service import BackfillService
from features.logs.services.enrichment_service import EnrichmentService
from features.logs.services.record_store import InMemoryRecordStore
from features.stations.services.geo_index import GeoIndex
from features.tides.models.tide_types import TideStage
from features.weather.models.weather_types import BaroTrend


@pytest.fixture
def backfill_service(record_store, enrichment_service):
    return BackfillService(record_store, enrichment_service)


@pytest.mark.asyncio
async def test_barometric_backfill_fills_and_skips(backfill_service, record_store, weather_client):
    """Rows without coordinates or time are skipped and not counted."""
    result = await backfill_service.backfill(BackfillCriteria(group=BackfillGroup.BAROMETRIC))

    assert result.scanned_count == 4
    assert result.updated_count == 2
    assert result.skipped_count == 2

    first = await record_store.get(1)
    assert first.barometric_current == pytest.approx(1016.25)
    assert first.barometric_prev_3h == pytest.approx(1015.5)
    assert first.barometric_trend == BaroTrend.RISING

    # 10:30 sits between two hourly samples; the earlier one wins
    second = await record_store.get(2)
    assert second.barometric_current == pytest.approx(1016.5)
    assert second.barometric_prev_3h == pytest.approx(1015.75)

    untouched = await record_store.get(3)
    assert untouched.barometric_current is None


@pytest.mark.asyncio
async def test_shared_location_and_day_fetches_once(backfill_service, weather_client):
    await backfill_service.backfill(BackfillCriteria(group=BackfillGroup.BAROMETRIC))

    assert weather_client.pressure_calls == [(41.52, -70.68, CATCH_DAY)]


@pytest.mark.asyncio
async def test_cache_does_not_outlive_a_run(backfill_service, weather_client):
    await backfill_service.backfill(BackfillCriteria(group=BackfillGroup.BAROMETRIC, missing_only=False))
    await backfill_service.backfill(BackfillCriteria(group=BackfillGroup.BAROMETRIC, missing_only=False))

    assert len(weather_client.pressure_calls) == 2


@pytest.mark.asyncio
async def test_barometric_backfill_is_idempotent(backfill_service):
    """A second run over the same rows finds nothing left to fill."""
    await backfill_service.backfill(BackfillCriteria(group=BackfillGroup.BAROMETRIC))

    again = await backfill_service.backfill(BackfillCriteria(group=BackfillGroup.BAROMETRIC))
    assert again.updated_count == 0

    rerun_all = await backfill_service.backfill(BackfillCriteria(group=BackfillGroup.BAROMETRIC, missing_only=False))
    assert rerun_all.scanned_count == 4
    assert rerun_all.updated_count == 0


@pytest.mark.asyncio
async def test_barometric_backfill_preserves_stored_values(enrichment_service):
    """Stored readings are kept; the trend is derived from the final pair."""
    store = InMemoryRecordStore([
        FishingRecord(id=7, title="Manual reading", date=CATCH_DAY, time=time(9, 0),
                      latitude=41.52, longitude=-70.68, catch_status="caught",
                      barometric_current=1000.0)
    ])
    result = await BackfillService(store, enrichment_service).backfill(
        BackfillCriteria(group=BackfillGroup.BAROMETRIC)
    )

    record = await store.get(7)
    assert result.updated_count == 1
    assert record.barometric_current == 1000.0
    assert record.barometric_prev_3h == pytest.approx(1015.5)
    assert record.barometric_trend == BaroTrend.FALLING


@pytest.mark.asyncio
async def test_barometric_backfill_keeps_stored_trend(enrichment_service):
    store = InMemoryRecordStore([
        FishingRecord(id=8, title="Old trend", date=CATCH_DAY, time=time(9, 0),
                      latitude=41.52, longitude=-70.68, catch_status="caught",
                      barometric_trend=BaroTrend.STEADY)
    ])
    await BackfillService(store, enrichment_service).backfill(BackfillCriteria(group=BackfillGroup.BAROMETRIC))

    record = await store.get(8)
    assert record.barometric_current == pytest.approx(1016.25)
    assert record.barometric_trend == BaroTrend.STEADY


@pytest.mark.asyncio
async def test_barometric_backfill_skips_when_archive_fails(geo_index, record_store):
    service = BackfillService(record_store, EnrichmentService(
        geo_index=geo_index,
        astronomy_client=FakeAstronomyClient(),
        weather_client=FakeWeatherClient(fail_pressure=True),
        tide_client=FakeTideClient()
    ))
    result = await service.backfill(BackfillCriteria(group=BackfillGroup.BAROMETRIC))

    assert result.updated_count == 0
    assert (await record_store.get(1)).barometric_trend is None


@pytest.mark.asyncio
async def test_tide_backfill_always_overwrites(backfill_service, record_store, tide_client):
    """Tide fields are recomputed on every run, even for complete rows."""
    first = await backfill_service.backfill(BackfillCriteria(group=BackfillGroup.TIDE))
    assert first.updated_count == 2
    assert tide_client.dense_calls == [("8447930", CATCH_DAY)]
    assert tide_client.hilo_calls == [("8447930", CATCH_DAY)]

    before = await record_store.get(1)
    assert before.tide_station_id == "8447930"
    assert before.tide_stage == TideStage.RISING
    assert before.tide_height_ft == pytest.approx(5.0)
    assert before.tide_rate_ft_per_hr == pytest.approx(1.0)

    second = await backfill_service.backfill(BackfillCriteria(group=BackfillGroup.TIDE, missing_only=False))
    assert second.updated_count == 2

    after = await record_store.get(1)
    assert after.model_dump() == before.model_dump()


@pytest.mark.asyncio
async def test_tide_backfill_replaces_stored_stage(enrichment_service):
    store = InMemoryRecordStore([
        FishingRecord(id=9, title="Guessed stage", date=CATCH_DAY, time=time(9, 0),
                      latitude=41.52, longitude=-70.68, catch_status="caught",
                      tide_stage=TideStage.SLACK)
    ])
    await BackfillService(store, enrichment_service).backfill(BackfillCriteria(group=BackfillGroup.TIDE))

    assert (await store.get(9)).tide_stage == TideStage.RISING


@pytest.mark.asyncio
async def test_tide_backfill_skips_without_station(record_store, astronomy_client, weather_client, tide_client):
    service = BackfillService(record_store, EnrichmentService(
        geo_index=GeoIndex([]),
        astronomy_client=astronomy_client,
        weather_client=weather_client,
        tide_client=tide_client
    ))
    result = await service.backfill(BackfillCriteria(group=BackfillGroup.TIDE))

    assert result.updated_count == 0
    assert tide_client.dense_calls == []


@pytest.mark.asyncio
async def test_tide_backfill_skips_without_classifier_result(geo_index, record_store):
    service = BackfillService(record_store, EnrichmentService(
        geo_index=geo_index,
        astronomy_client=FakeAstronomyClient(),
        weather_client=FakeWeatherClient(),
        tide_client=FakeTideClient(dense=False, events=False)
    ))
    result = await service.backfill(BackfillCriteria(group=BackfillGroup.TIDE))

    assert result.updated_count == 0
    assert (await record_store.get(1)).tide_station_id is None


@pytest.mark.asyncio
async def test_astronomy_backfill_fills_missing_only(enrichment_service, astronomy_client):
    store = InMemoryRecordStore([
        FishingRecord(id=10, title="Dawn patrol", date=CATCH_DAY, time=time(5, 30),
                      latitude=41.52, longitude=-70.68, catch_status="caught",
                      sunrise="05:00"),
        FishingRecord(id=11, title="Same spot", date=CATCH_DAY, time=time(7, 0),
                      latitude=41.52, longitude=-70.68, catch_status="caught")
    ])
    result = await BackfillService(store, enrichment_service).backfill(
        BackfillCriteria(group=BackfillGroup.ASTRONOMY)
    )

    assert result.updated_count == 2
    assert len(astronomy_client.calls) == 1

    kept = await store.get(10)
    assert kept.sunrise == "05:00"
    assert kept.sunset == "20:10"
    assert kept.moonset is None
    assert (await store.get(11)).sunrise == "05:09"


class BrokenStore(InMemoryRecordStore):
    async def update(self, record_id, changes):
        raise StorageFailure("database unreachable")


@pytest.mark.asyncio
async def test_storage_failure_aborts_batch(stored_records, enrichment_service):
    service = BackfillService(BrokenStore(stored_records), enrichment_service)

    with pytest.raises(StorageFailure):
        await service.backfill(BackfillCriteria(group=BackfillGroup.BAROMETRIC))


@pytest.mark.asyncio
async def test_backfill_handles_time_with_offset(enrichment_service):
    """A stored time carrying an offset does not stop the rest of the batch."""
    store = InMemoryRecordStore([
        FishingRecord.model_validate({
            "id": 1, "title": "Offset", "date": CATCH_DAY.isoformat(), "time": "09:00+02:00",
            "latitude": 41.52, "longitude": -70.68, "catch_status": "caught"
        }),
        FishingRecord(id=2, title="Plain", date=CATCH_DAY, time=time(9, 0),
                      latitude=41.52, longitude=-70.68, catch_status="caught")
    ])
    service = BackfillService(store, enrichment_service)

    result = await service.backfill(BackfillCriteria(group=BackfillGroup.BAROMETRIC))

    assert result.updated_count == 2
    assert (await store.get(1)).barometric_current == pytest.approx(1016.25)
    assert (await store.get(2)).barometric_current == pytest.approx(1016.25)
