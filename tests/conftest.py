"""Shared fixtures for the AirWatch test suite.

The database URL must be set before airwatch.config is imported, so the
environment is prepared at module import time.
"""

import os

os.environ['DATABASE_URL'] = 'sqlite://'
for _name in (
    'THINGSPEAK_CHANNEL_ID',
    'THINGSPEAK_READ_API_KEY',
    'PRIMARY_TRANSPORT_URL',
    'SECONDARY_TRANSPORT_URL',
    'TERTIARY_TRANSPORT_URL',
    'BATCH_UPLOAD_URL',
):
    os.environ[_name] = ''

from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import Dict, List, Optional  # noqa: E402

import pytest  # noqa: E402

from airwatch.analytics.samples import Sample  # noqa: E402
from airwatch.models import drop_db, init_db  # noqa: E402

BASE_TIME = datetime(2024, 3, 1, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# DATABASE
# =============================================================================

@pytest.fixture(autouse=True)
def clean_db():
    """Fresh schema for every test."""
    init_db()
    yield
    drop_db()


# =============================================================================
# SAMPLES
# =============================================================================

def make_sample(
    fields: Optional[Dict[str, Optional[float]]] = None,
    timestamp: Optional[datetime] = None,
    channel_id: str = 'ch-1',
    location: str = 'Line 1',
) -> Sample:
    return Sample(
        timestamp=timestamp or BASE_TIME,
        channel_id=channel_id,
        location=location,
        fields=fields or {},
    )


def make_window(
    count: int,
    fields: Optional[Dict[str, float]] = None,
    start: datetime = BASE_TIME,
) -> List[Sample]:
    """Hourly samples with identical field values."""
    fields = fields or {
        'co': 5.0,
        'pm2_5': 10.0,
        'pm10': 20.0,
        'voc': 100.0,
        'methane': 2.0,
        'temperature': 22.0,
        'humidity': 45.0,
    }
    return [
        make_sample(fields, timestamp=start + timedelta(hours=i))
        for i in range(count)
    ]


@pytest.fixture
def sample_factory():
    return make_sample


@pytest.fixture
def window_factory():
    return make_window


# =============================================================================
# FLASK
# =============================================================================

@pytest.fixture
def app():
    from airwatch.app import create_app

    app = create_app(start_ingestion=False)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
