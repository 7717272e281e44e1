import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import argparse
import asyncio

from core.logging_config import setup_logging
from features.astronomy.services.astronomy_client import AstronomyClient
from features.logs.models.log_types import BackfillCriteria, BackfillGroup
from features.logs.services.backfill_service import BackfillService
from features.logs.services.enrichment_service import EnrichmentService
from features.logs.services.record_store import JsonFileRecordStore
from features.stations.services.geo_index import GeoIndex
from features.stations.services.station_directory import StationDirectory
from features.tides.services.tide_client import TideClient
from features.weather.services.weather_archive_client import WeatherArchiveClient

async def run(group: BackfillGroup, missing_only: bool) -> None:
    clients = [AstronomyClient(), WeatherArchiveClient(), TideClient()]
    try:
        enrichment_service = EnrichmentService(
            GeoIndex(StationDirectory().load_stations()),
            *clients
        )
        service = BackfillService(JsonFileRecordStore(), enrichment_service)
        result = await service.backfill(BackfillCriteria(group=group, missing_only=missing_only))
        print(f"{group.value}: updated {result.updated_count} of {result.scanned_count} entries")
    finally:
        for client in clients:
            await client.close()

def main():
    parser = argparse.ArgumentParser(description="Backfill environmental fields on stored log entries")
    parser.add_argument("group", choices=[g.value for g in BackfillGroup])
    parser.add_argument("--all", action="store_true", help="re-run over entries that are already complete")
    args = parser.parse_args()

    setup_logging()
    asyncio.run(run(BackfillGroup(args.group), missing_only=not args.all))

if __name__ == '__main__':
    main()
