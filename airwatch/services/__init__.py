"""
Services module for AirWatch.

Persistence-facing reads and writes shared by the API and ingestion.
"""

from airwatch.services.readings import (
    IngestResult,
    fetch_historical_samples,
    ingest_payloads,
    latest_readings,
    latest_sample,
    persist_alert,
    persist_alerts,
    persist_sample,
    persist_samples,
)

__all__ = [
    'IngestResult',
    'fetch_historical_samples',
    'ingest_payloads',
    'latest_readings',
    'latest_sample',
    'persist_alert',
    'persist_alerts',
    'persist_sample',
    'persist_samples',
]
