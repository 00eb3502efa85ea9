"""
Predictive analytics API endpoints.

Provides endpoints for:
- GET /api/analytics/predictions - Forecasts and correlations from recent history
- GET /api/analytics/correlations - Correlation matrix with pair counts
"""

import logging
import time
from datetime import datetime, timedelta, timezone

from flask import Blueprint, jsonify, request

from airwatch.analytics import CorrelationAnalyzer, ForecastEngine
from airwatch.config import config
from airwatch.exceptions import InsufficientDataError
from airwatch.services.readings import fetch_historical_samples

logger = logging.getLogger(__name__)

analytics_bp = Blueprint('analytics', __name__, url_prefix='/api/analytics')

forecast_engine = ForecastEngine(window_size=config.forecast.window_size)
correlation_analyzer = CorrelationAnalyzer()


def _history_window():
    """Samples from the configured history period, filtered by query args."""
    end = datetime.now(timezone.utc)
    start = end - timedelta(hours=config.forecast.history_hours)
    return fetch_historical_samples(
        start,
        end,
        channel_id=request.args.get('channelId') or None,
        location=request.args.get('location') or None,
    )


@analytics_bp.route('/predictions', methods=['GET'])
def get_predictions():
    """
    Forecast channel values for the coming hours.

    Query parameters:
    - hoursAhead: int, forecast horizon in hours (default 6)
    - channelId: string, restrict history to one channel
    - location: string, restrict history to one site

    Returns 400 when there is too little history to forecast from.
    """
    start_time = time.perf_counter()

    try:
        hours_ahead = int(request.args.get('hoursAhead', config.forecast.default_horizon))
    except ValueError:
        return jsonify({'error': 'hoursAhead must be an integer'}), 400

    if not 1 <= hours_ahead <= config.forecast.max_horizon:
        return jsonify({
            'error': f'hoursAhead must be between 1 and {config.forecast.max_horizon}',
        }), 400

    samples = _history_window()

    try:
        predictions = forecast_engine.forecast(samples, hours_ahead)
    except InsufficientDataError as e:
        logger.info(f'Prediction request rejected: {e}')
        return jsonify({
            'error': 'Insufficient historical data for predictions',
            'required': e.required,
            'available': e.actual,
        }), 400

    correlations = correlation_analyzer.correlation_matrix(samples)

    query_time_ms = (time.perf_counter() - start_time) * 1000

    return jsonify({
        'predictions': [p.to_dict() for p in predictions],
        'correlations': correlations.to_dict(),
        'metadata': {
            'dataPointsAnalyzed': len(samples),
            'predictionRange': f'{hours_ahead} hours',
            'generatedAt': datetime.now(timezone.utc).isoformat(),
        },
        'query_time_ms': round(query_time_ms, 2),
    })


@analytics_bp.route('/correlations', methods=['GET'])
def get_correlations():
    """
    Pairwise correlation of all channels over the history period.

    Includes the number of complete pairs behind each coefficient.
    """
    samples = _history_window()
    matrix = correlation_analyzer.correlation_matrix(samples)

    return jsonify({
        'channels': list(matrix.channels),
        'correlations': matrix.to_dict(),
        'pair_counts': matrix.pair_counts,
        'dataPointsAnalyzed': len(samples),
    })
