"""
Connectivity API endpoints.

Server side of the device transports, plus relay status:
- GET /api/connectivity/check-<transport> - Reachability probe target
- GET /api/connectivity/status - Upstream relay status (if enabled)
- POST /api/transmit/<transport> - Receive a single payload
- POST /api/batch-upload - Replay of a device's offline cache
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from airwatch.connectivity.transports import TransportType
from airwatch.services.readings import ingest_payloads

logger = logging.getLogger(__name__)

connectivity_bp = Blueprint('connectivity', __name__, url_prefix='/api')

ONLINE_TRANSPORTS = {
    t.value for t in TransportType if t is not TransportType.OFFLINE
}


@connectivity_bp.route('/connectivity/check-<transport>', methods=['GET'])
def check_transport(transport: str):
    """Answer a device's availability probe for a transport tier."""
    if transport not in ONLINE_TRANSPORTS:
        return jsonify({'error': f'Unknown transport: {transport}'}), 404
    return jsonify({'status': 'connected', 'type': transport})


@connectivity_bp.route('/connectivity/status', methods=['GET'])
def relay_status():
    """Status of the upstream relay manager, when this node forwards readings."""
    manager = current_app.config.get('CONNECTIVITY_MANAGER')
    if manager is None:
        return jsonify({'enabled': False})
    return jsonify({'enabled': True, **manager.stats})


@connectivity_bp.route('/transmit/<transport>', methods=['POST'])
def receive_transmission(transport: str):
    """Store a single payload sent over a transport tier."""
    if transport not in ONLINE_TRANSPORTS:
        return jsonify({'error': f'Unknown transport: {transport}'}), 404

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'JSON object body required'}), 400

    result = ingest_payloads([data])
    if result.failed:
        return jsonify({'error': result.results[0].get('error', 'Invalid payload')}), 400

    return jsonify({'success': True, 'status': result.results[0]['status'], 'via': transport})


@connectivity_bp.route('/batch-upload', methods=['POST'])
def batch_upload():
    """
    Persist a batch of cached payloads.

    Entries whose (channel_id, timestamp) already exist are skipped, so
    a device may safely replay a batch after an ambiguous failure.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, list) or not data:
        return jsonify({'error': 'Invalid data format'}), 400

    result = ingest_payloads(data)

    return jsonify({
        'message': f'Processed {result.total} cached entries',
        'stats': result.to_dict(),
        'results': result.results,
    })
