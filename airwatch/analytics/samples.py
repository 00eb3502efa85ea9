"""
Sensor sample types shared by the analytics engine.

A Sample is one time-stamped multivariate observation from a monitoring
channel. Each measured quantity is optional: a station without a VOC
sensor simply never reports 'voc', and that absence must not be read as
a zero concentration.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import List, Mapping, Optional, Sequence

# Measured quantities, in the order the dashboard lists them
CHANNELS = ('co', 'pm2_5', 'pm10', 'voc', 'methane', 'temperature', 'humidity')

# Channels that carry pollutant concentrations (trend-adjusted in forecasts)
POLLUTANT_CHANNELS = ('co', 'pm2_5', 'pm10', 'voc', 'methane')

# Samples per statistical window (one day at hourly cadence)
WINDOW_SIZE = 24


@dataclass(frozen=True)
class Sample:
    """
    A single recorded sensor observation.

    fields maps channel name -> value, with None (or a missing key)
    meaning the sensor did not report that quantity.
    """
    timestamp: datetime
    channel_id: str
    location: str
    fields: Mapping[str, Optional[float]] = field(default_factory=dict)

    def __post_init__(self):
        # Freeze the field mapping so recorded samples stay immutable
        cleaned = {
            name: (float(value) if value is not None else None)
            for name, value in dict(self.fields).items()
            if name in CHANNELS
        }
        object.__setattr__(self, 'fields', MappingProxyType(cleaned))

    def value(self, channel: str) -> Optional[float]:
        """Get the reading for a channel, or None if not reported."""
        return self.fields.get(channel)

    def with_fields(
        self,
        timestamp: datetime,
        fields: Mapping[str, Optional[float]],
    ) -> 'Sample':
        """Derive a new sample at another instant, keeping channel and location."""
        return Sample(
            timestamp=timestamp,
            channel_id=self.channel_id,
            location=self.location,
            fields=fields,
        )

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        return {
            'timestamp': self.timestamp.isoformat(),
            'channel_id': self.channel_id,
            'location': self.location,
            **{name: self.fields.get(name) for name in CHANNELS},
        }


def parse_timestamp(value) -> datetime:
    """Parse an ISO-8601 string (or pass through a datetime) as aware UTC."""
    if isinstance(value, datetime):
        ts = value
    else:
        ts = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def sort_window(samples: Sequence[Sample]) -> List[Sample]:
    """Return samples ordered by timestamp (stable for equal instants)."""
    return sorted(samples, key=lambda s: s.timestamp)


def channel_values(samples: Sequence[Sample], channel: str) -> List[Optional[float]]:
    """Extract one channel from a window, preserving missing values as None."""
    return [s.value(channel) for s in samples]

