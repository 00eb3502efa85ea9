"""Tests for the ThingSpeak ingestion pipeline with a mocked client."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy import func, select

from airwatch.exceptions import IngestionError
from airwatch.ingestion import IngestionPipeline
from airwatch.ingestion.thingspeak_client import ChannelFeed
from airwatch.models import Alert, SensorReading
from airwatch.models.base import SessionLocal

START = datetime(2024, 3, 1, 8, tzinfo=timezone.utc)


def _count(model):
    with SessionLocal() as session:
        return session.execute(select(func.count()).select_from(model)).scalar_one()


@pytest.fixture
def feed(sample_factory):
    samples = [
        sample_factory({'co': 5.0, 'temperature': 22.0}, timestamp=START),
        sample_factory({'co': 6.0, 'temperature': 38.0}, timestamp=START + timedelta(hours=1)),
    ]
    return ChannelFeed(channel_id='ch-1', name='Line 1', samples=samples, total_entries=3)


@pytest.fixture
def client(feed):
    client = MagicMock()
    client.get_feed.return_value = feed
    return client


def test_sync_stores_readings_and_alerts(client):
    pipeline = IngestionPipeline(client=client)

    result = pipeline.sync(10)

    client.get_feed.assert_called_once_with(10)
    assert result.synced == 2
    assert result.skipped == 0
    assert result.total == 3
    assert len(result.alerts) == 1
    assert result.alerts[0].type == 'ThresholdBreach_TEMPERATURE'
    assert _count(SensorReading) == 2
    assert _count(Alert) == 1


def test_repeat_sync_skips_duplicates(client):
    pipeline = IngestionPipeline(client=client)
    pipeline.sync()
    second = pipeline.sync()

    assert second.synced == 0
    assert second.skipped == 2
    assert second.alerts == []
    assert second.samples == []
    assert _count(SensorReading) == 2
    assert _count(Alert) == 1


def test_callbacks_receive_result(client):
    pipeline = IngestionPipeline(client=client)
    received = []
    pipeline.add_update_callback(received.append)

    result = pipeline.sync()

    assert received == [result]
    assert [s.value('co') for s in result.samples] == [5.0, 6.0]


def test_failing_callback_does_not_abort_sync(client):
    pipeline = IngestionPipeline(client=client)
    pipeline.add_update_callback(MagicMock(side_effect=RuntimeError('boom')))

    assert pipeline.sync().synced == 2


def test_fetch_and_process_counts_errors():
    client = MagicMock()
    client.get_feed.side_effect = IngestionError('ThingSpeak API timeout')
    pipeline = IngestionPipeline(client=client)

    assert pipeline.fetch_and_process() == -1
    assert pipeline.stats['error_count'] == 1
    assert pipeline.stats['fetch_count'] == 0


def test_stats(client):
    pipeline = IngestionPipeline(client=client)
    assert pipeline.fetch_and_process() == 2

    stats = pipeline.stats
    assert stats['fetch_count'] == 1
    assert stats['alert_count'] == 1
    assert stats['running'] is False
    assert stats['last_fetch_time'] > 0
