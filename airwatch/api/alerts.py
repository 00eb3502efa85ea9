"""
Alert API endpoints.

Provides endpoints for:
- POST /api/alerts/check - Evaluate the latest reading and store breaches
- GET /api/alerts - List stored alerts
- POST /api/alerts/<id>/acknowledge - Mark an alert acknowledged
"""

import logging

from flask import Blueprint, jsonify, request
from sqlalchemy import select

from airwatch.alerts import ThresholdAlertEvaluator, ThresholdConfig
from airwatch.models import Alert
from airwatch.models.base import SessionLocal, get_session
from airwatch.services.readings import latest_sample, persist_alerts

logger = logging.getLogger(__name__)

alerts_bp = Blueprint('alerts', __name__, url_prefix='/api/alerts')

evaluator = ThresholdAlertEvaluator()


@alerts_bp.route('/check', methods=['POST'])
def check_alerts():
    """
    Check the newest reading against thresholds.

    Intended for a scheduler. Optional JSON body:
    - thresholds: {metric: limit} overrides for this check
    - location: only consider readings from this site
    """
    data = request.get_json(silent=True) or {}

    sample = latest_sample(location=data.get('location') or None)
    if sample is None:
        return jsonify({'message': 'No sensor data found', 'alerts': []})

    thresholds = ThresholdConfig.from_dict(data.get('thresholds'))
    records = evaluator.evaluate(sample, thresholds)
    stored = persist_alerts(records) if records else []

    return jsonify({
        'message': f'Alert check completed. {len(stored)} new alerts created.',
        'alerts': [alert.to_dict() for alert in stored],
    })


@alerts_bp.route('', methods=['GET'])
def list_alerts():
    """
    List alerts, newest first.

    Query parameters:
    - limit: int, max results (default 20, max 500)
    - severity: string, filter by severity
    - acknowledged: boolean, filter by acknowledgement state
    """
    try:
        limit = min(int(request.args.get('limit', 20)), 500)
    except ValueError:
        return jsonify({'error': 'limit must be an integer'}), 400

    stmt = select(Alert)

    severity = request.args.get('severity')
    if severity:
        stmt = stmt.where(Alert.severity == severity.lower())

    acknowledged = request.args.get('acknowledged')
    if acknowledged is not None:
        stmt = stmt.where(Alert.acknowledged == (acknowledged.lower() == 'true'))

    stmt = stmt.order_by(Alert.timestamp.desc()).limit(limit)

    with SessionLocal() as session:
        alerts = session.execute(stmt).scalars().all()
        return jsonify([alert.to_dict() for alert in alerts])


@alerts_bp.route('/<int:alert_id>/acknowledge', methods=['POST'])
def acknowledge_alert(alert_id: int):
    """Acknowledge an alert."""
    with get_session() as session:
        alert = session.get(Alert, alert_id)
        if alert is None:
            return jsonify({'error': 'Alert not found'}), 404
        alert.acknowledge()
        session.flush()
        body = alert.to_dict()

    logger.info(f'Alert {alert_id} acknowledged')
    return jsonify(body)
