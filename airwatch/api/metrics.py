"""
System status API endpoints.

Provides endpoints for:
- GET /api/metrics/status - System status and health
- POST /api/metrics/sync - Run one ThingSpeak sync cycle now
"""

import logging
import time
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError

from airwatch.alerts import ThresholdConfig
from airwatch.config import config
from airwatch.exceptions import IngestionError
from airwatch.models import SensorReading
from airwatch.models.base import SessionLocal

logger = logging.getLogger(__name__)

metrics_bp = Blueprint('metrics', __name__, url_prefix='/api/metrics')


@metrics_bp.route('/status', methods=['GET'])
def get_system_status():
    """
    Get system health and status information.

    Returns:
    - Ingestion pipeline status
    - Database connectivity and reading count
    - Active alert thresholds
    """
    start_time = time.perf_counter()

    pipeline = current_app.config.get('INGESTION_PIPELINE')
    pipeline_stats = pipeline.stats if pipeline else {'running': False}

    db_ok = True
    reading_count = None
    try:
        with SessionLocal() as session:
            session.execute(text('SELECT 1'))
            reading_count = session.execute(
                select(func.count()).select_from(SensorReading)
            ).scalar_one()
    except SQLAlchemyError as e:
        db_ok = False
        logger.error(f'Database health check failed: {e}')

    query_time_ms = (time.perf_counter() - start_time) * 1000

    return jsonify({
        'status': 'healthy' if (db_ok and pipeline_stats.get('running')) else 'degraded',
        'database': {
            'connected': db_ok,
            'type': 'sqlite' if config.database.is_sqlite else 'postgresql',
            'readings': reading_count,
        },
        'ingestion': pipeline_stats,
        'thresholds': ThresholdConfig.defaults().to_dict(),
        'config': {
            'poll_interval': config.ingestion.poll_interval,
            'forecast_history_hours': config.forecast.history_hours,
            'thingspeak_configured': config.thingspeak.is_configured,
        },
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'query_time_ms': round(query_time_ms, 2),
    })


@metrics_bp.route('/sync', methods=['POST'])
def sync_now():
    """
    Trigger a ThingSpeak sync outside the polling schedule.

    Optional JSON body: {"results": int} entries to fetch.
    """
    pipeline = current_app.config.get('INGESTION_PIPELINE')
    if pipeline is None:
        return jsonify({'error': 'Ingestion is not configured'}), 503

    data = request.get_json(silent=True) or {}
    try:
        results = int(data.get('results') or config.thingspeak.results_per_sync)
    except (TypeError, ValueError):
        return jsonify({'error': 'results must be an integer'}), 400

    try:
        result = pipeline.sync(results)
    except IngestionError as e:
        logger.error(f'Manual sync failed: {e}')
        return jsonify({'error': 'Failed to sync data from ThingSpeak', 'details': str(e)}), 502

    return jsonify({
        'success': True,
        'message': f'Synced {result.synced} new records to database',
        **result.to_dict(),
    })
