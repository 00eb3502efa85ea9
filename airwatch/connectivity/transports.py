"""
Telemetry transports for the connectivity fallback manager.

Each tier (primary GSM, secondary WiFi, tertiary LoRaWAN gateway) is an
HTTP endpoint reached over a different radio. A transport exposes three
operations:

- probe:       GET  {url}/api/connectivity/check-{tier}  -> 2xx means available
- transmit:    POST {url}/api/transmit/{tier}            -> single payload
- batch_flush: POST {batch_url or url}/api/batch-upload  -> cached entries

Every request carries a bounded timeout so a dead link cannot block a
send cycle indefinitely.
"""

import logging
from enum import Enum
from typing import Dict, Optional, Sequence

import requests

from airwatch.config import config
from airwatch.connectivity.payloads import OfflineCacheEntry, Payload
from airwatch.exceptions import TransportUnavailable

logger = logging.getLogger(__name__)


class TransportType(str, Enum):
    """Delivery tiers in fallback order."""
    PRIMARY = 'primary'
    SECONDARY = 'secondary'
    TERTIARY = 'tertiary'
    OFFLINE = 'offline'


FALLBACK_PRIORITY = (
    TransportType.PRIMARY,
    TransportType.SECONDARY,
    TransportType.TERTIARY,
    TransportType.OFFLINE,
)


class HttpTransportClient:
    """
    Transport collaborator backed by per-tier HTTP endpoints.

    Tiers without a configured URL are reported unavailable.
    """

    def __init__(
        self,
        urls: Optional[Dict[TransportType, str]] = None,
        batch_upload_url: Optional[str] = None,
        timeout: float = 5.0,
        session: Optional[requests.Session] = None,
    ):
        self.urls = {t: u.rstrip('/') for t, u in (urls or {}).items() if u}
        self.batch_upload_url = batch_upload_url
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls) -> 'HttpTransportClient':
        """Create client from application configuration."""
        conn = config.connectivity
        return cls(
            urls={
                TransportType.PRIMARY: conn.primary_url,
                TransportType.SECONDARY: conn.secondary_url,
                TransportType.TERTIARY: conn.tertiary_url,
            },
            batch_upload_url=conn.batch_upload_url,
            timeout=conn.timeout_seconds,
        )

    def probe(self, transport: TransportType) -> bool:
        """Check whether a tier is reachable."""
        url = self.urls.get(transport)
        if not url:
            return False

        try:
            response = self.session.get(
                f'{url}/api/connectivity/check-{transport.value}',
                headers={'Cache-Control': 'no-cache'},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.debug(f'Probe {transport.value} failed: {e}')
            return False

        return response.ok

    def transmit(self, transport: TransportType, payload: Payload) -> None:
        """
        Send a single payload over a tier.

        Raises:
            TransportUnavailable: tier not configured, unreachable or rejected the payload
        """
        url = self.urls.get(transport)
        if not url:
            raise TransportUnavailable(transport.value, 'not configured')

        self._post(transport, f'{url}/api/transmit/{transport.value}', payload.to_dict())

    def batch_flush(
        self,
        transport: TransportType,
        entries: Sequence[OfflineCacheEntry],
    ) -> None:
        """
        Replay cached entries in one request.

        The receiving side skips readings it already stored, so a replay
        after a partial failure is safe.

        Raises:
            TransportUnavailable: the batch was not accepted
        """
        base = self.batch_upload_url or self.urls.get(transport)
        if not base:
            raise TransportUnavailable(transport.value, 'no batch upload endpoint')

        url = base if self.batch_upload_url else f'{base}/api/batch-upload'
        self._post(transport, url, [entry.to_dict() for entry in entries])

    def _post(self, transport: TransportType, url: str, body) -> None:
        try:
            response = self.session.post(url, json=body, timeout=self.timeout)
        except requests.exceptions.Timeout:
            raise TransportUnavailable(transport.value, 'timeout')
        except requests.exceptions.RequestException as e:
            raise TransportUnavailable(transport.value, str(e))

        if not response.ok:
            raise TransportUnavailable(
                transport.value,
                f'HTTP {response.status_code} {response.reason}',
            )
