"""
Alert model - persisted threshold breaches.

Rows are written from AlertRecords produced by the threshold evaluator
and later acknowledged or resolved by operators from the dashboard.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, Float, Integer, DateTime, Boolean, Text
from sqlalchemy.orm import Mapped, mapped_column

from airwatch.alerts.evaluator import AlertRecord
from airwatch.models.base import Base


class Alert(Base):
    """Stored alert."""

    __tablename__ = 'alerts'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    alert_type: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment='e.g. ThresholdBreach_CO'
    )

    severity: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        index=True,
        comment='low | medium | high | critical'
    )

    message: Mapped[str] = mapped_column(Text, nullable=False)

    location: Mapped[str] = mapped_column(String(128), nullable=False)

    channel_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    value: Mapped[float] = mapped_column(Float, nullable=False)

    threshold: Mapped[float] = mapped_column(Float, nullable=False)

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        default=lambda: datetime.now(timezone.utc),
    )

    acknowledged: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    acknowledged_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    resolved: Mapped[bool] = mapped_column(Boolean, default=False)

    @classmethod
    def from_record(cls, record: AlertRecord) -> 'Alert':
        return cls(
            alert_type=record.type,
            severity=record.severity.value,
            message=record.message,
            location=record.location,
            channel_id=record.channel_id,
            value=record.value,
            threshold=record.threshold,
            timestamp=record.timestamp,
            acknowledged=record.acknowledged,
            resolved=record.resolved,
        )

    def acknowledge(self) -> None:
        self.acknowledged = True
        self.acknowledged_at = datetime.now(timezone.utc)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'type': self.alert_type,
            'severity': self.severity,
            'message': self.message,
            'location': self.location,
            'channel_id': self.channel_id,
            'value': self.value,
            'threshold': self.threshold,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'acknowledged': self.acknowledged,
            'acknowledged_at': self.acknowledged_at.isoformat() if self.acknowledged_at else None,
            'resolved': self.resolved,
        }
