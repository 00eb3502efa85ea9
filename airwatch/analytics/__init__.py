"""
Analytics module for AirWatch.

Predictive and statistical analysis of multivariate air-quality sensor
data using NumPy:
- Moving averages and trend detection over sample windows
- Recursive moving-average forecasting with decaying confidence
- Health-threshold issue detection on predicted values
- Pairwise correlation across channels
- AQI estimation from the latest reading
"""

from airwatch.analytics.samples import CHANNELS, WINDOW_SIZE, Sample
from airwatch.analytics.statistics import (
    moving_average,
    trend_sign,
    pearson_correlation,
)
from airwatch.analytics.forecast import ForecastEngine, ForecastPoint
from airwatch.analytics.issues import IssueDetector
from airwatch.analytics.correlation import CorrelationAnalyzer, CorrelationMatrix
from airwatch.analytics.aqi import estimate_aqi

__all__ = [
    'CHANNELS',
    'WINDOW_SIZE',
    'Sample',
    'moving_average',
    'trend_sign',
    'pearson_correlation',
    'ForecastEngine',
    'ForecastPoint',
    'IssueDetector',
    'CorrelationAnalyzer',
    'CorrelationMatrix',
    'estimate_aqi',
]
