"""
Threshold alert evaluation for individual samples.

Checks one observed sample against the configured limits and synthesizes
severity-graded alert records. Nothing is persisted here; records are
handed back to the caller, which owns storage and notification.

Severity cut points are metric specific and independent of the configured
limit:

    temperature  critical > 40 °C, high > 37 °C, else medium
    co           critical > 200 ppm, high > 150 ppm, else medium
    humidity     high > 90 %, else medium
    aqi          critical > 200, high > 175, else medium

The AQI check uses the pm2_5 reading as its proxy value.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional

from airwatch.alerts.thresholds import SUPPLEMENTARY_METRICS, ThresholdConfig
from airwatch.analytics.samples import Sample

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    """Alert severity tiers."""
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'
    CRITICAL = 'critical'


@dataclass
class AlertRecord:
    """
    A synthesized threshold-breach alert.

    Ownership passes to the persistence layer as soon as it is returned.
    """
    type: str
    severity: Severity
    message: str
    location: str
    value: float
    threshold: float
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    channel_id: Optional[str] = None
    acknowledged: bool = False
    resolved: bool = False

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        return {
            'type': self.type,
            'severity': self.severity.value,
            'message': self.message,
            'location': self.location,
            'channel_id': self.channel_id,
            'value': self.value,
            'threshold': self.threshold,
            'timestamp': self.timestamp.isoformat(),
            'acknowledged': self.acknowledged,
            'resolved': self.resolved,
        }


def _banded(critical: Optional[float], high: float) -> Callable[[float], Severity]:
    def severity(value: float) -> Severity:
        if critical is not None and value > critical:
            return Severity.CRITICAL
        if value > high:
            return Severity.HIGH
        return Severity.MEDIUM
    return severity


@dataclass(frozen=True)
class MonitoredMetric:
    """How one metric is read from a sample, graded and described."""
    name: str
    source_field: str
    label: str
    precision: int
    severity: Callable[[float], Severity]


MONITORED = (
    MonitoredMetric('temperature', 'temperature', 'Temperature', 1, _banded(40, 37)),
    MonitoredMetric('humidity', 'humidity', 'Humidity', 1, _banded(None, 90)),
    MonitoredMetric('co', 'co', 'Carbon monoxide', 1, _banded(200, 150)),
    MonitoredMetric('aqi', 'pm2_5', 'Air quality index', 0, _banded(200, 175)),
)

SUPPLEMENTARY_LABELS = {
    'voc': 'VOCs',
    'pm10': 'PM10',
    'methane': 'Methane',
}


def ratio_severity(value: float, limit: float) -> Severity:
    """Severity from how far a value overshoots a user-defined limit."""
    ratio = value / limit if limit else float('inf')
    if ratio >= 2:
        return Severity.HIGH
    if ratio >= 1.5:
        return Severity.MEDIUM
    return Severity.LOW


def alert_type(metric: str) -> str:
    return f'ThresholdBreach_{metric.upper()}'


class ThresholdAlertEvaluator:
    """Evaluates samples against a ThresholdConfig."""

    def evaluate(
        self,
        sample: Sample,
        thresholds: Optional[ThresholdConfig] = None,
    ) -> List[AlertRecord]:
        """
        Produce one alert per metric whose value exceeds its limit.

        An empty list is the normal, healthy outcome. Metrics missing
        from the sample or from the thresholds are skipped.
        """
        thresholds = thresholds if thresholds is not None else ThresholdConfig.defaults()
        alerts = []

        for metric in MONITORED:
            value = sample.value(metric.source_field)
            if value is None or metric.name not in thresholds:
                continue

            threshold = thresholds[metric.name]
            if value > threshold.limit:
                alerts.append(self._build(
                    sample,
                    metric=metric.name,
                    label=metric.label,
                    value=value,
                    limit=threshold.limit,
                    unit=threshold.unit,
                    precision=metric.precision,
                    severity=metric.severity(value),
                ))

        for name in SUPPLEMENTARY_METRICS:
            value = sample.value(name)
            if value is None or name not in thresholds:
                continue

            threshold = thresholds[name]
            if value > threshold.limit:
                alerts.append(self._build(
                    sample,
                    metric=name,
                    label=SUPPLEMENTARY_LABELS[name],
                    value=value,
                    limit=threshold.limit,
                    unit=threshold.unit,
                    precision=1,
                    severity=ratio_severity(value, threshold.limit),
                ))

        if alerts:
            logger.info(
                f'{len(alerts)} threshold breach(es) at {sample.location} '
                f'({sample.timestamp.isoformat()})'
            )
        return alerts

    @staticmethod
    def _build(
        sample: Sample,
        metric: str,
        label: str,
        value: float,
        limit: float,
        unit: str,
        precision: int,
        severity: Severity,
    ) -> AlertRecord:
        message = (
            f'{label} of {value:.{precision}f} {unit} exceeds the threshold of '
            f'{limit:.{precision}f} {unit} in {sample.location}.'
        )
        return AlertRecord(
            type=alert_type(metric),
            severity=severity,
            message=message,
            location=sample.location,
            channel_id=sample.channel_id,
            value=value,
            threshold=limit,
            timestamp=sample.timestamp,
        )
