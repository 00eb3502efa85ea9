"""Tests for the HTTP transport client, with requests mocked out."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
import requests

from airwatch.connectivity import HttpTransportClient, OfflineCacheEntry, ReadingPayload, TransportType
from airwatch.exceptions import TransportUnavailable

URLS = {
    TransportType.PRIMARY: 'http://gsm.example:5000/',
    TransportType.SECONDARY: 'http://wifi.example:5000',
}


def _response(ok=True, status_code=200, reason='OK'):
    response = MagicMock()
    response.ok = ok
    response.status_code = status_code
    response.reason = reason
    return response


@pytest.fixture
def session():
    session = MagicMock()
    session.get.return_value = _response()
    session.post.return_value = _response()
    return session


@pytest.fixture
def client(session):
    return HttpTransportClient(urls=URLS, timeout=2.0, session=session)


@pytest.fixture
def payload(sample_factory):
    return ReadingPayload(sample_factory({'co': 3.0}))


class TestProbe:

    def test_probe_hits_check_endpoint(self, client, session):
        assert client.probe(TransportType.PRIMARY) is True

        session.get.assert_called_once_with(
            'http://gsm.example:5000/api/connectivity/check-primary',
            headers={'Cache-Control': 'no-cache'},
            timeout=2.0,
        )

    def test_unconfigured_tier_is_unavailable(self, client, session):
        assert client.probe(TransportType.TERTIARY) is False
        session.get.assert_not_called()

    def test_error_status_is_unavailable(self, client, session):
        session.get.return_value = _response(ok=False, status_code=503)
        assert client.probe(TransportType.SECONDARY) is False

    def test_connection_error_is_unavailable(self, client, session):
        session.get.side_effect = requests.exceptions.ConnectionError('no route')
        assert client.probe(TransportType.PRIMARY) is False


class TestTransmit:

    def test_posts_payload(self, client, session, payload):
        client.transmit(TransportType.SECONDARY, payload)

        session.post.assert_called_once_with(
            'http://wifi.example:5000/api/transmit/secondary',
            json=payload.to_dict(),
            timeout=2.0,
        )

    def test_unconfigured_tier_raises(self, client, payload):
        with pytest.raises(TransportUnavailable, match='not configured'):
            client.transmit(TransportType.TERTIARY, payload)

    def test_timeout_raises(self, client, session, payload):
        session.post.side_effect = requests.exceptions.Timeout()
        with pytest.raises(TransportUnavailable, match='timeout'):
            client.transmit(TransportType.PRIMARY, payload)

    def test_rejected_raises(self, client, session, payload):
        session.post.return_value = _response(ok=False, status_code=500, reason='Internal Server Error')
        with pytest.raises(TransportUnavailable) as exc_info:
            client.transmit(TransportType.PRIMARY, payload)
        assert exc_info.value.transport == 'primary'
        assert 'HTTP 500' in str(exc_info.value)


class TestBatchFlush:

    def _entries(self, payload):
        return [OfflineCacheEntry(payload, datetime(2024, 3, 1, tzinfo=timezone.utc))]

    def test_posts_to_tier_batch_endpoint(self, client, session, payload):
        entries = self._entries(payload)
        client.batch_flush(TransportType.PRIMARY, entries)

        session.post.assert_called_once_with(
            'http://gsm.example:5000/api/batch-upload',
            json=[entries[0].to_dict()],
            timeout=2.0,
        )

    def test_dedicated_batch_url_wins(self, session, payload):
        client = HttpTransportClient(
            urls=URLS,
            batch_upload_url='http://cloud.example/api/batch-upload',
            session=session,
        )
        client.batch_flush(TransportType.SECONDARY, self._entries(payload))

        assert session.post.call_args.args[0] == 'http://cloud.example/api/batch-upload'

    def test_failure_raises(self, client, session, payload):
        session.post.side_effect = requests.exceptions.ConnectionError('reset')
        with pytest.raises(TransportUnavailable):
            client.batch_flush(TransportType.PRIMARY, self._entries(payload))
