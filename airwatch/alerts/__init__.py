"""
Alerting module for AirWatch.

Per-sample threshold evaluation producing severity-graded alert records.
"""

from airwatch.alerts.evaluator import AlertRecord, Severity, ThresholdAlertEvaluator
from airwatch.alerts.thresholds import MetricThreshold, ThresholdConfig

__all__ = [
    'AlertRecord',
    'Severity',
    'ThresholdAlertEvaluator',
    'MetricThreshold',
    'ThresholdConfig',
]
