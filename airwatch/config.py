"""
Configuration management for AirWatch.

Loads settings from environment variables with sensible defaults.
All configuration is centralized here to avoid magic strings scattered
throughout the codebase.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default: float) -> float:
    """Read a float from the environment, falling back on empty/invalid values."""
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class DatabaseConfig:
    """Database configuration."""
    url: str = os.getenv('DATABASE_URL', 'sqlite:///airwatch.db')

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith('sqlite')


@dataclass(frozen=True)
class ThingSpeakConfig:
    """ThingSpeak channel feed configuration."""
    channel_id: Optional[str] = os.getenv('THINGSPEAK_CHANNEL_ID') or None
    read_api_key: Optional[str] = os.getenv('THINGSPEAK_READ_API_KEY') or None
    base_url: str = os.getenv('THINGSPEAK_BASE_URL', 'https://api.thingspeak.com')
    results_per_sync: int = int(os.getenv('THINGSPEAK_RESULTS', '20'))
    timeout_seconds: float = 15.0

    @property
    def is_configured(self) -> bool:
        return bool(self.channel_id and self.read_api_key)


@dataclass(frozen=True)
class IngestionConfig:
    """Data ingestion settings."""
    poll_interval: int = int(os.getenv('POLL_INTERVAL_SECONDS', '60'))
    default_location: str = os.getenv('DEFAULT_LOCATION', 'Factory Floor')


@dataclass(frozen=True)
class ForecastConfig:
    """Predictive analytics settings."""
    window_size: int = 24  # Samples per moving-average window
    history_hours: int = int(os.getenv('FORECAST_HISTORY_HOURS', '48'))
    default_horizon: int = int(os.getenv('FORECAST_DEFAULT_HORIZON', '6'))
    max_horizon: int = 48


@dataclass(frozen=True)
class AlertConfig:
    """Default alert thresholds, overridable per deployment."""
    temperature_limit: float = _env_float('TEMPERATURE_THRESHOLD', 35.0)  # °C
    humidity_limit: float = _env_float('HUMIDITY_THRESHOLD', 80.0)  # %
    co_limit: float = _env_float('CO_THRESHOLD', 100.0)  # ppm
    aqi_limit: float = _env_float('AQI_THRESHOLD', 150.0)


@dataclass(frozen=True)
class ConnectivityConfig:
    """
    Telemetry delivery settings for the fallback manager.

    Transport tiers map onto the device radios in priority order:
    primary = GSM, secondary = WiFi, tertiary = LoRaWAN gateway.
    """
    primary_url: Optional[str] = os.getenv('PRIMARY_TRANSPORT_URL') or None
    secondary_url: Optional[str] = os.getenv('SECONDARY_TRANSPORT_URL') or None
    tertiary_url: Optional[str] = os.getenv('TERTIARY_TRANSPORT_URL') or None
    batch_upload_url: Optional[str] = os.getenv('BATCH_UPLOAD_URL') or None
    timeout_seconds: float = _env_float('CONNECTIVITY_TIMEOUT_SECONDS', 5.0)
    max_cache_size: int = int(os.getenv('OFFLINE_CACHE_MAX_SIZE', '1000'))

    @property
    def relay_enabled(self) -> bool:
        return any((self.primary_url, self.secondary_url, self.tertiary_url))


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    database: DatabaseConfig
    thingspeak: ThingSpeakConfig
    ingestion: IngestionConfig
    forecast: ForecastConfig
    alerts: AlertConfig
    connectivity: ConnectivityConfig

    # Flask settings
    secret_key: str
    debug: bool


def load_config() -> AppConfig:
    """Load and validate all configuration."""
    return AppConfig(
        database=DatabaseConfig(),
        thingspeak=ThingSpeakConfig(),
        ingestion=IngestionConfig(),
        forecast=ForecastConfig(),
        alerts=AlertConfig(),
        connectivity=ConnectivityConfig(),
        secret_key=os.getenv('SECRET_KEY', 'dev-key-change-in-prod'),
        debug=os.getenv('FLASK_DEBUG', '0') == '1',
    )


# Singleton instance
config = load_config()
