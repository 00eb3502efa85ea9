"""Tests for the REST API through the Flask test client."""

from datetime import datetime, timedelta, timezone

import pytest

from airwatch.services.readings import persist_samples


def _recent(sample_factory, count, **fields):
    """`count` hourly readings ending just before now."""
    now = datetime.now(timezone.utc).replace(microsecond=0)
    values = fields or {'co': 5.0, 'pm2_5': 10.0, 'temperature': 22.0, 'humidity': 45.0}
    return [
        sample_factory(values, timestamp=now - timedelta(hours=count - i, minutes=5))
        for i in range(count)
    ]


def _reading(timestamp='2024-03-01T10:00:00Z', **fields):
    return {
        'kind': 'reading',
        'timestamp': timestamp,
        'channel_id': 'ch-7',
        'location': 'Line 7',
        'fields': fields or {'co': 4.0},
    }


# =============================================================================
# PREDICTIONS
# =============================================================================

class TestPredictions:

    def test_insufficient_history(self, client, sample_factory):
        persist_samples(_recent(sample_factory, 10))

        response = client.get('/api/analytics/predictions')

        assert response.status_code == 400
        body = response.get_json()
        assert body['error'] == 'Insufficient historical data for predictions'
        assert body['required'] == 24
        assert body['available'] == 10

    def test_forecast(self, client, sample_factory):
        persist_samples(_recent(sample_factory, 30))

        response = client.get('/api/analytics/predictions?hoursAhead=3')

        assert response.status_code == 200
        body = response.get_json()
        assert len(body['predictions']) == 3
        assert body['predictions'][0]['confidence'] == pytest.approx(0.9)
        assert body['predictions'][0]['predictions']['co'] == pytest.approx(5.0)
        assert body['correlations']['co']['co'] == 1.0
        assert body['metadata']['dataPointsAnalyzed'] == 30
        assert body['metadata']['predictionRange'] == '3 hours'
        assert 'query_time_ms' in body

    def test_old_readings_are_ignored(self, client, sample_factory):
        old = [
            s.with_fields(s.timestamp - timedelta(days=10), s.fields)
            for s in _recent(sample_factory, 30)
        ]
        persist_samples(old)

        assert client.get('/api/analytics/predictions').status_code == 400

    def test_location_filter(self, client, sample_factory):
        persist_samples(_recent(sample_factory, 30))

        response = client.get('/api/analytics/predictions?location=Elsewhere')
        assert response.status_code == 400
        assert response.get_json()['available'] == 0

    @pytest.mark.parametrize('hours', ['abc', '0', '49'])
    def test_invalid_horizon(self, client, hours):
        response = client.get(f'/api/analytics/predictions?hoursAhead={hours}')
        assert response.status_code == 400
        assert 'hoursAhead' in response.get_json()['error']

    def test_correlations(self, client, sample_factory):
        persist_samples(_recent(sample_factory, 5))

        body = client.get('/api/analytics/correlations').get_json()
        assert body['dataPointsAnalyzed'] == 5
        assert body['pair_counts']['co']['voc'] == 0
        assert body['correlations']['humidity']['humidity'] == 1.0


# =============================================================================
# READINGS
# =============================================================================

class TestReadings:

    def test_latest_without_data(self, client):
        response = client.get('/api/sensor-data/latest')
        assert response.status_code == 404

    def test_latest(self, client, sample_factory):
        persist_samples(_recent(sample_factory, 3, pm2_5=12.0, co=2.0))

        body = client.get('/api/sensor-data/latest').get_json()
        assert body['reading']['pm2_5'] == 12.0
        assert body['aqi'] == 50
        assert body['aqi_category'] == 'Good'

    def test_list_newest_first(self, client, sample_factory):
        samples = _recent(sample_factory, 5)
        persist_samples(samples)

        body = client.get('/api/sensor-data?limit=2').get_json()
        assert len(body) == 2
        assert body[0]['timestamp'] > body[1]['timestamp']

    def test_bad_limit(self, client):
        assert client.get('/api/sensor-data?limit=ten').status_code == 400


# =============================================================================
# ALERTS
# =============================================================================

class TestAlerts:

    def test_check_without_data(self, client):
        body = client.post('/api/alerts/check').get_json()
        assert body == {'message': 'No sensor data found', 'alerts': []}

    def test_check_creates_alert(self, client, sample_factory):
        persist_samples(_recent(sample_factory, 1, temperature=41.0))

        body = client.post('/api/alerts/check').get_json()

        assert len(body['alerts']) == 1
        alert = body['alerts'][0]
        assert alert['severity'] == 'critical'
        assert alert['value'] == 41.0
        assert alert['threshold'] == 35.0
        assert alert['acknowledged'] is False

    def test_check_with_threshold_override(self, client, sample_factory):
        persist_samples(_recent(sample_factory, 1, co=6.0))

        body = client.post('/api/alerts/check', json={'thresholds': {'co': 5}}).get_json()
        assert [a['type'] for a in body['alerts']] == ['ThresholdBreach_CO']

    def test_list_and_acknowledge(self, client, sample_factory):
        persist_samples(_recent(sample_factory, 1, temperature=38.0, humidity=95.0))
        client.post('/api/alerts/check')

        alerts = client.get('/api/alerts').get_json()
        assert len(alerts) == 2

        high = client.get('/api/alerts?severity=high').get_json()
        assert len(high) == 2

        response = client.post(f"/api/alerts/{alerts[0]['id']}/acknowledge")
        assert response.status_code == 200
        assert response.get_json()['acknowledged'] is True

        pending = client.get('/api/alerts?acknowledged=false').get_json()
        assert [a['id'] for a in pending] == [alerts[1]['id']]

    def test_acknowledge_unknown(self, client):
        assert client.post('/api/alerts/999/acknowledge').status_code == 404


# =============================================================================
# CONNECTIVITY
# =============================================================================

class TestConnectivity:

    @pytest.mark.parametrize('transport', ['primary', 'secondary', 'tertiary'])
    def test_probe_targets(self, client, transport):
        response = client.get(f'/api/connectivity/check-{transport}')
        assert response.status_code == 200
        assert response.get_json() == {'status': 'connected', 'type': transport}

    def test_offline_is_not_a_probe_target(self, client):
        assert client.get('/api/connectivity/check-offline').status_code == 404

    def test_transmit(self, client):
        first = client.post('/api/transmit/primary', json=_reading())
        second = client.post('/api/transmit/secondary', json=_reading())

        assert first.get_json()['status'] == 'success'
        assert second.get_json()['status'] == 'skipped'

    def test_transmit_malformed(self, client):
        response = client.post('/api/transmit/primary', json={'kind': 'reading'})
        assert response.status_code == 400

    def test_batch_upload_dedups(self, client):
        batch = [
            _reading('2024-03-01T10:00:00Z'),
            _reading('2024-03-01T10:00:00Z'),
            _reading('2024-03-01T11:00:00Z', co=5.0),
            {'kind': 'alert', 'type': 'ThresholdBreach_CO', 'severity': 'high',
             'message': 'CO high', 'location': 'Line 7', 'value': 160,
             'threshold': 100, 'timestamp': '2024-03-01T11:00:00Z'},
            {'kind': 'bogus'},
        ]

        response = client.post('/api/batch-upload', json=batch)

        assert response.status_code == 200
        stats = response.get_json()['stats']
        assert stats == {'total': 5, 'successful': 3, 'skipped': 1, 'failed': 1}

        replay = client.post('/api/batch-upload', json=batch[:3]).get_json()['stats']
        assert replay['skipped'] == 3

    def test_batch_upload_uses_cached_at_when_timestamp_missing(self, client):
        entry = _reading()
        del entry['timestamp']
        entry['cached_at'] = '2024-03-01T12:30:00Z'

        client.post('/api/batch-upload', json=[entry])

        readings = client.get('/api/sensor-data').get_json()
        assert readings[0]['timestamp'].startswith('2024-03-01T12:30:00')

    @pytest.mark.parametrize('body', [[], {'kind': 'reading'}])
    def test_batch_upload_rejects_non_lists(self, client, body):
        assert client.post('/api/batch-upload', json=body).status_code == 400

    def test_relay_disabled_by_default(self, client):
        assert client.get('/api/connectivity/status').get_json() == {'enabled': False}


# =============================================================================
# SYSTEM
# =============================================================================

def test_health(client):
    assert client.get('/health').get_json() == {'status': 'ok'}


def test_unknown_route_is_json_404(client):
    response = client.get('/api/nowhere')
    assert response.status_code == 404
    assert response.get_json() == {'error': 'Not found'}


def test_status(client, sample_factory):
    persist_samples(_recent(sample_factory, 2))

    body = client.get('/api/metrics/status').get_json()
    assert body['database']['connected'] is True
    assert body['database']['readings'] == 2
    assert body['ingestion'] == {'running': False}
    assert body['status'] == 'degraded'
    assert body['thresholds']['temperature']['limit'] == 35.0


def test_sync_requires_ingestion(client):
    assert client.post('/api/metrics/sync').status_code == 503
