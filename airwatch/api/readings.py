"""
Sensor data API endpoints.

Provides endpoints for:
- GET /api/sensor-data - Latest stored readings
- GET /api/sensor-data/latest - Newest reading with estimated AQI
"""

import logging

from flask import Blueprint, jsonify, request

from airwatch.analytics.aqi import aqi_category, estimate_aqi
from airwatch.services.readings import latest_readings, latest_sample

logger = logging.getLogger(__name__)

readings_bp = Blueprint('readings', __name__, url_prefix='/api/sensor-data')


@readings_bp.route('', methods=['GET'])
def list_readings():
    """
    List recent readings, newest first.

    Query parameters:
    - limit: int, max results to return (default 10, max 500)
    - location: string, filter to one site
    """
    try:
        limit = min(int(request.args.get('limit', 10)), 500)
    except ValueError:
        return jsonify({'error': 'limit must be an integer'}), 400

    rows = latest_readings(limit=limit, location=request.args.get('location') or None)
    return jsonify([row.to_dict() for row in rows])


@readings_bp.route('/latest', methods=['GET'])
def get_latest():
    """Newest reading plus AQI estimate and category."""
    sample = latest_sample(location=request.args.get('location') or None)
    if sample is None:
        return jsonify({'error': 'No sensor data found'}), 404

    aqi = estimate_aqi(sample)
    return jsonify({
        'reading': sample.to_dict(),
        'aqi': aqi,
        'aqi_category': aqi_category(aqi) if aqi is not None else None,
    })
