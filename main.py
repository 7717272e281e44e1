from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime

from core.config import settings
from core.logging_config import setup_logging
from core.scheduler import Scheduler

# Feature routes
from features.logs.routes.log_routes import router as log_router
from features.stations.routes.station_routes import router as station_router

# Services and clients
from features.astronomy.services.astronomy_client import AstronomyClient
from features.logs.services.backfill_service import BackfillService
from features.logs.services.enrichment_service import EnrichmentService
from features.logs.services.log_service import LogService
from features.logs.services.record_store import JsonFileRecordStore
from features.stations.services.geo_index import GeoIndex
from features.stations.services.station_directory import StationDirectory
from features.tides.services.tide_client import TideClient
from features.weather.services.weather_archive_client import WeatherArchiveClient

setup_logging()
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    clients = []
    scheduler = None
    try:
        logger.info("🎣 Starting Catch Log API...")

        stations = await StationDirectory().load_or_fetch()
        geo_index = GeoIndex(stations)

        astronomy_client = AstronomyClient()
        weather_client = WeatherArchiveClient()
        tide_client = TideClient()
        clients = [astronomy_client, weather_client, tide_client]

        enrichment_service = EnrichmentService(
            geo_index=geo_index,
            astronomy_client=astronomy_client,
            weather_client=weather_client,
            tide_client=tide_client
        )
        store = JsonFileRecordStore()

        app.state.geo_index = geo_index
        app.state.log_service = LogService(store, enrichment_service)
        app.state.backfill_service = BackfillService(store, enrichment_service)

        if settings.backfill_schedule_enabled:
            scheduler = Scheduler(app.state.backfill_service)
            scheduler.start()

        logger.info(f"✨ API startup complete - {len(geo_index)} tide stations loaded")
        yield

    except Exception as e:
        logger.error(f"❌ Startup error: {str(e)}")
        raise
    finally:
        logger.info("🔄 Shutting down API...")
        if scheduler:
            scheduler.shutdown()
        for client in clients:
            await client.close()
        logger.info("👋 API shutdown complete")

app = FastAPI(
    title="Catch Log API",
    description="Fishing log with tide, weather, pressure and astronomy context",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(log_router)
app.include_router(station_router)

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "time": datetime.now().isoformat()
    }

if __name__ == "__main__":
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", 3000))

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=True,
        log_level="info",
        workers=1
    )
