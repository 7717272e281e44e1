from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Dict, List

class Settings(BaseSettings):
    """Application settings."""

    # Data directory
    data_dir: str = "data"
    stations_file: str = "data/tide_stations.json"
    records_file: str = "data/fishing_entries.json"

    # Astronomy (ipgeolocation.io)
    astronomy_base_url: str = "https://api.ipgeolocation.io/astronomy"
    astronomy_api_key: str | None = None

    # Open-Meteo historical archive
    weather_archive_url: str = "https://archive-api.open-meteo.com/v1/archive"
    weather_params: Dict = {
        "temperature_unit": "fahrenheit",
        "timezone": "auto"
    }

    # NOAA CO-OPS
    coops_metadata_url: str = "https://api.tidesandcurrents.noaa.gov/mdapi/prod/webapi"
    coops_base_url: str = "https://api.tidesandcurrents.noaa.gov/api/prod/datagetter"
    coops_params: Dict = {
        "product": "predictions",
        "datum": "MLLW",
        "units": "english",
        "time_zone": "lst_ldt",
        "format": "json"
    }
    coops_dense_interval: str = "6"  # minutes

    # Upstream requests
    request_timeout_ms: int = 15000
    user_agent: str = "catch-log/1.0"

    # Classification thresholds
    tide_slack_rate_ft_per_hr: float = 0.1
    tide_slack_window_minutes: int = 20
    baro_trend_deadband: float = 0.5  # hPa
    baro_lookback_hours: int = 3

    earth_radius_km: float = 6371.0

    # Nightly backfill
    backfill_schedule_enabled: bool = False
    backfill_cron_hour: int = 3
    backfill_groups: List[str] = ["astronomy", "barometric", "tide"]

    model_config = SettingsConfigDict(
        env_prefix="catchlog_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
