"""
SensorReading model - time-series air-quality storage.

One row per (channel, timestamp) observation. This is the input to every
forecast and correlation request, queried by time range and optionally
narrowed to a channel or location.

Each pollutant/ambient channel is a nullable column: a station that lacks
a sensor leaves it NULL, and analytics skip NULLs rather than treating
them as zero.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, Float, Integer, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column

from airwatch.analytics.samples import CHANNELS, Sample
from airwatch.models.base import Base


class SensorReading(Base):
    """Recorded sensor observation."""

    __tablename__ = 'sensor_readings'

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment='Surrogate key'
    )

    channel_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment='Telemetry channel the reading came from'
    )

    location: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        index=True,
        comment='Monitoring site label'
    )

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        comment='Observation time (UTC)'
    )

    # Pollutants
    co: Mapped[Optional[float]] = mapped_column(Float, nullable=True, comment='CO in ppm')
    pm2_5: Mapped[Optional[float]] = mapped_column(Float, nullable=True, comment='PM2.5 in µg/m³')
    pm10: Mapped[Optional[float]] = mapped_column(Float, nullable=True, comment='PM10 in µg/m³')
    voc: Mapped[Optional[float]] = mapped_column(Float, nullable=True, comment='VOCs in ppb')
    methane: Mapped[Optional[float]] = mapped_column(Float, nullable=True, comment='CH4 in ppm')

    # Ambient
    temperature: Mapped[Optional[float]] = mapped_column(Float, nullable=True, comment='°C')
    humidity: Mapped[Optional[float]] = mapped_column(Float, nullable=True, comment='Relative humidity %')

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        comment='When the row was stored'
    )

    __table_args__ = (
        # Dedup lookups on replay and sync
        Index('ix_sensor_readings_channel_ts', 'channel_id', 'timestamp'),
    )

    @classmethod
    def from_sample(cls, sample: Sample) -> 'SensorReading':
        return cls(
            channel_id=sample.channel_id,
            location=sample.location,
            timestamp=sample.timestamp,
            **{name: sample.value(name) for name in CHANNELS},
        )

    def to_sample(self) -> Sample:
        timestamp = self.timestamp
        if timestamp.tzinfo is None:
            # SQLite drops tzinfo on read
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return Sample(
            timestamp=timestamp,
            channel_id=self.channel_id,
            location=self.location,
            fields={name: getattr(self, name) for name in CHANNELS},
        )

    def to_dict(self) -> dict:
        return {'id': self.id, **self.to_sample().to_dict()}

    def __repr__(self) -> str:
        return f'<SensorReading {self.channel_id} @ {self.timestamp}>'
