import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio

from core.logging_config import setup_logging
from features.stations.services.station_directory import StationDirectory

async def refresh_stations() -> int:
    directory = StationDirectory()
    stations = await directory.fetch_from_noaa()
    if stations:
        directory.save_stations(stations)
    return len(stations)

def main():
    setup_logging()
    count = asyncio.run(refresh_stations())
    print(f"Saved {count} tide stations")

if __name__ == '__main__':
    main()
