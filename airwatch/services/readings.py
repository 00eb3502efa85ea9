"""
Reading and alert persistence services.

Thin query/command layer between the relational store and the rest of the
app: analytics pull sample windows from here, ingestion and the
batch-upload endpoint push readings and alerts through here.

Readings are deduplicated on (channel_id, timestamp). A payload replayed
from a device's offline cache, or a ThingSpeak feed entry seen on two
consecutive syncs, is skipped rather than stored twice.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from airwatch.alerts.evaluator import AlertRecord
from airwatch.analytics.samples import Sample
from airwatch.connectivity.payloads import AlertPayload, Payload, ReadingPayload, payload_from_dict
from airwatch.models import Alert, SensorReading
from airwatch.models.base import SessionLocal, get_session

logger = logging.getLogger(__name__)


@dataclass
class IngestResult:
    """Outcome counts for a batch of payloads."""
    total: int = 0
    successful: int = 0
    skipped: int = 0
    failed: int = 0
    results: List[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'total': self.total,
            'successful': self.successful,
            'skipped': self.skipped,
            'failed': self.failed,
        }


def fetch_historical_samples(
    start: datetime,
    end: datetime,
    channel_id: Optional[str] = None,
    location: Optional[str] = None,
) -> List[Sample]:
    """
    Readings in [start, end], oldest first, optionally filtered.

    Returns Samples ready for the forecast and correlation engines.
    """
    stmt = (
        select(SensorReading)
        .where(SensorReading.timestamp >= start)
        .where(SensorReading.timestamp <= end)
    )
    if channel_id:
        stmt = stmt.where(SensorReading.channel_id == channel_id)
    if location:
        stmt = stmt.where(SensorReading.location == location)
    stmt = stmt.order_by(SensorReading.timestamp.asc())

    with SessionLocal() as session:
        rows = session.execute(stmt).scalars().all()
        return [row.to_sample() for row in rows]


def latest_readings(limit: int = 10, location: Optional[str] = None) -> List[SensorReading]:
    """Most recent readings, newest first."""
    stmt = select(SensorReading)
    if location:
        stmt = stmt.where(SensorReading.location == location)
    stmt = stmt.order_by(SensorReading.timestamp.desc()).limit(limit)

    with SessionLocal() as session:
        return list(session.execute(stmt).scalars().all())


def latest_sample(location: Optional[str] = None) -> Optional[Sample]:
    """The newest reading as a Sample, or None if nothing is stored."""
    rows = latest_readings(limit=1, location=location)
    return rows[0].to_sample() if rows else None


def _reading_exists(session: Session, sample: Sample) -> bool:
    stmt = (
        select(SensorReading.id)
        .where(SensorReading.channel_id == sample.channel_id)
        .where(SensorReading.timestamp == sample.timestamp)
        .limit(1)
    )
    return session.execute(stmt).first() is not None


def persist_sample(sample: Sample, session: Optional[Session] = None) -> bool:
    """
    Store a sample unless one with the same channel and timestamp exists.

    Returns True if a row was written.
    """
    if session is None:
        with get_session() as own_session:
            return persist_sample(sample, own_session)

    if _reading_exists(session, sample):
        return False

    session.add(SensorReading.from_sample(sample))
    # Make the row visible to dedup checks later in the same batch
    session.flush()
    return True


def persist_samples(samples: Sequence[Sample]) -> int:
    """Store several samples in one transaction; returns count written."""
    with get_session() as session:
        return sum(1 for sample in samples if persist_sample(sample, session))


def persist_alert(record: AlertRecord, session: Optional[Session] = None) -> Alert:
    """Store an alert record."""
    if session is None:
        with get_session() as own_session:
            return persist_alert(record, own_session)

    alert = Alert.from_record(record)
    session.add(alert)
    session.flush()
    return alert


def persist_alerts(records: Sequence[AlertRecord]) -> List[Alert]:
    with get_session() as session:
        return [persist_alert(record, session) for record in records]


def ingest_payload(payload: Payload, session: Session) -> str:
    """Persist one payload; returns 'success' or 'skipped'."""
    if isinstance(payload, ReadingPayload):
        return 'success' if persist_sample(payload.sample, session) else 'skipped'
    if isinstance(payload, AlertPayload):
        persist_alert(payload.record, session)
        return 'success'
    raise ValueError(f'Unsupported payload type: {type(payload).__name__}')


def ingest_payloads(items: Sequence[dict]) -> IngestResult:
    """
    Persist a batch of payload dicts, as replayed from an offline cache.

    Malformed entries are counted as failed and the rest still stored.
    Readings without a timestamp fall back to the time they were cached.
    """
    result = IngestResult(total=len(items))

    with get_session() as session:
        for item in items:
            try:
                if not isinstance(item, dict):
                    raise ValueError('entry is not an object')
                if not item.get('timestamp') and item.get('cached_at'):
                    item = {**item, 'timestamp': item['cached_at']}
                payload = payload_from_dict(item)

                status = ingest_payload(payload, session)
            except ValueError as e:
                logger.warning(f'Error processing cached entry: {e}')
                result.failed += 1
                result.results.append({'status': 'error', 'error': str(e)})
                continue

            if status == 'success':
                result.successful += 1
                result.results.append({'status': 'success', 'kind': payload.kind})
            else:
                result.skipped += 1
                result.results.append({'status': 'skipped', 'reason': 'duplicate'})

    logger.info(
        f'Batch upload: {result.successful} stored, {result.skipped} duplicates, '
        f'{result.failed} failed of {result.total}'
    )
    return result
