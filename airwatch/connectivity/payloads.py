"""
Telemetry payload types for device-side delivery.

Payloads are a tagged union discriminated by 'kind', so cached entries
round-trip through JSON storage and the batch-upload endpoint without
losing their shape:

    {"kind": "reading", "timestamp": ..., "channel_id": ..., "location": ..., "fields": {...}}
    {"kind": "alert", "type": ..., "severity": ..., "message": ..., ...}
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional, Union

from airwatch.alerts.evaluator import AlertRecord, Severity
from airwatch.analytics.samples import CHANNELS, Sample, parse_timestamp


@dataclass(frozen=True)
class ReadingPayload:
    """A sensor reading submitted by a monitoring station."""
    sample: Sample

    kind = 'reading'

    def to_dict(self) -> dict:
        return {
            'kind': self.kind,
            'timestamp': self.sample.timestamp.isoformat(),
            'channel_id': self.sample.channel_id,
            'location': self.sample.location,
            'fields': {name: self.sample.value(name) for name in CHANNELS},
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ReadingPayload':
        fields = data.get('fields')
        if fields is None:
            # Flat layout, as sent by older firmware
            fields = {name: data.get(name) for name in CHANNELS}
        return cls(Sample(
            timestamp=parse_timestamp(data['timestamp']),
            channel_id=data.get('channel_id') or 'default',
            location=data.get('location') or 'default',
            fields=fields,
        ))


@dataclass(frozen=True)
class AlertPayload:
    """An alert raised on the device, forwarded for persistence."""
    record: AlertRecord

    kind = 'alert'

    def to_dict(self) -> dict:
        return {'kind': self.kind, **self.record.to_dict()}

    @classmethod
    def from_dict(cls, data: dict) -> 'AlertPayload':
        return cls(AlertRecord(
            type=data['type'],
            severity=Severity(data['severity']),
            message=data['message'],
            location=data.get('location') or 'default',
            channel_id=data.get('channel_id'),
            value=float(data['value']),
            threshold=float(data['threshold']),
            timestamp=parse_timestamp(data['timestamp']),
            acknowledged=bool(data.get('acknowledged', False)),
            resolved=bool(data.get('resolved', False)),
        ))


Payload = Union[ReadingPayload, AlertPayload]

PAYLOAD_KINDS: Dict[str, type] = {
    ReadingPayload.kind: ReadingPayload,
    AlertPayload.kind: AlertPayload,
}


def payload_from_dict(data: dict) -> Payload:
    """
    Rebuild a payload from its dict form.

    Raises:
        ValueError: unknown or missing kind, or malformed fields
    """
    kind = data.get('kind', ReadingPayload.kind)
    payload_cls = PAYLOAD_KINDS.get(kind)
    if payload_cls is None:
        raise ValueError(f'Unknown payload kind: {kind!r}')
    try:
        return payload_cls.from_dict(data)
    except (KeyError, TypeError) as e:
        raise ValueError(f'Malformed {kind} payload: {e}') from e


@dataclass(frozen=True)
class OfflineCacheEntry:
    """A payload that could not be delivered, held for replay."""
    payload: Payload
    cached_at: datetime

    def to_dict(self) -> dict:
        return {**self.payload.to_dict(), 'cached_at': self.cached_at.isoformat()}

    @classmethod
    def from_dict(cls, data: dict) -> 'OfflineCacheEntry':
        cached_at: Optional[str] = data.get('cached_at')
        return cls(
            payload=payload_from_dict(data),
            cached_at=parse_timestamp(cached_at) if cached_at else datetime.now(timezone.utc),
        )
