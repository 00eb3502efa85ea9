"""
API module for AirWatch.

Provides REST endpoints for:
- Predictive analytics (forecasts, correlations)
- Sensor readings and alerts
- Device transports and offline cache replay
- System status
"""

from airwatch.api.analytics import analytics_bp
from airwatch.api.alerts import alerts_bp
from airwatch.api.connectivity import connectivity_bp
from airwatch.api.metrics import metrics_bp
from airwatch.api.readings import readings_bp

__all__ = ['analytics_bp', 'alerts_bp', 'connectivity_bp', 'metrics_bp', 'readings_bp']
