"""
Alert threshold configuration.

A ThresholdConfig maps metric name -> MetricThreshold(limit, unit). The
four monitored metrics always have a limit; deployment defaults come from
AlertConfig and can be overridden per request from stored settings.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, Mapping, Optional

from airwatch.config import config

MONITORED_METRICS = ('temperature', 'humidity', 'co', 'aqi')

# Pollutant limits users may add on top of the monitored metrics
SUPPLEMENTARY_METRICS = ('voc', 'pm10', 'methane')

DEFAULT_UNITS = {
    'temperature': '°C',
    'humidity': '%',
    'co': 'ppm',
    'aqi': 'AQI',
    'voc': 'ppb',
    'pm10': 'µg/m³',
    'methane': 'ppm',
}


@dataclass(frozen=True)
class MetricThreshold:
    """Upper limit for one metric."""
    limit: float
    unit: str


class ThresholdConfig(Mapping[str, MetricThreshold]):
    """Read-only mapping of metric name to its threshold."""

    def __init__(self, thresholds: Mapping[str, MetricThreshold]):
        self._thresholds: Dict[str, MetricThreshold] = dict(thresholds)

    def __getitem__(self, metric: str) -> MetricThreshold:
        return self._thresholds[metric]

    def __iter__(self) -> Iterator[str]:
        return iter(self._thresholds)

    def __len__(self) -> int:
        return len(self._thresholds)

    @classmethod
    def defaults(cls) -> 'ThresholdConfig':
        """Thresholds from the deployment configuration."""
        limits = {
            'temperature': config.alerts.temperature_limit,
            'humidity': config.alerts.humidity_limit,
            'co': config.alerts.co_limit,
            'aqi': config.alerts.aqi_limit,
        }
        return cls({
            metric: MetricThreshold(limit=limit, unit=DEFAULT_UNITS[metric])
            for metric, limit in limits.items()
        })

    @classmethod
    def from_dict(cls, data: Optional[Mapping]) -> 'ThresholdConfig':
        """
        Build from stored settings, filling gaps with the defaults.

        Accepts either {metric: limit} or {metric: {"limit": x, "unit": u}}.
        Unknown metrics and unparseable limits are ignored.
        """
        thresholds = dict(cls.defaults()._thresholds)
        for metric, raw in (data or {}).items():
            if metric not in MONITORED_METRICS and metric not in SUPPLEMENTARY_METRICS:
                continue

            if isinstance(raw, Mapping):
                limit = raw.get('limit')
                unit = raw.get('unit') or DEFAULT_UNITS[metric]
            else:
                limit, unit = raw, DEFAULT_UNITS[metric]

            try:
                limit = float(limit)
            except (TypeError, ValueError):
                continue

            thresholds[metric] = MetricThreshold(limit=limit, unit=unit)
        return cls(thresholds)

    def to_dict(self) -> dict:
        return {
            metric: {'limit': t.limit, 'unit': t.unit}
            for metric, t in self._thresholds.items()
        }
