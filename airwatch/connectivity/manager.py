"""
Connectivity fallback manager for outbound telemetry.

Decouples payload producers from link availability. Each send walks the
transport tiers in priority order:

    primary (GSM) -> secondary (WiFi) -> tertiary (LoRaWAN) -> offline

The first tier whose probe succeeds is used. If payloads are waiting in
the offline cache they are replayed as one batch before the new payload;
a failed replay puts them back at the front of the cache. If transmitting
the new payload fails, the next tier is tried.

The offline tier is not a real link. Reaching it means every online tier
was unavailable or refused the payload, so the payload is cached with its
caching time, the cache is trimmed to its maximum size (oldest first) and
mirrored to durable storage, and send() returns False.

A send runs to completion before returning; there are no retries beyond
one pass through the tiers. Callers re-invoke on their own schedule.
"""

import logging
import random
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from airwatch.config import config
from airwatch.connectivity.cache_store import MemoryCacheStore
from airwatch.connectivity.payloads import OfflineCacheEntry, Payload
from airwatch.connectivity.transports import FALLBACK_PRIORITY, TransportType
from airwatch.exceptions import TransportUnavailable

logger = logging.getLogger(__name__)

# Synthetic signal strength ranges per tier (percent, inclusive)
SIGNAL_STRENGTH_RANGES = {
    TransportType.PRIMARY: (60, 99),
    TransportType.SECONDARY: (70, 99),
    TransportType.TERTIARY: (50, 99),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ConnectionStatus:
    """Current link state as seen by the manager."""
    transport_type: TransportType
    strength: int
    last_connected: Optional[datetime]
    is_online: bool

    def to_dict(self) -> dict:
        return {
            'transport_type': self.transport_type.value,
            'strength': self.strength,
            'last_connected': self.last_connected.isoformat() if self.last_connected else None,
            'is_online': self.is_online,
        }


class ConnectivityFallbackManager:
    """
    Delivers payloads over the best available transport, caching on failure.

    Args:
        transport: Collaborator with probe(t), transmit(t, payload) and
            batch_flush(t, entries)
        store: Durable mirror with load() and save(entries)
        max_cache_size: Cap on cached entries before oldest-first eviction
        priority: Tier order; OFFLINE marks the cache fallback
        clock: Returns the current time (aware UTC)
        rng: Random source for synthetic signal strength
    """

    def __init__(
        self,
        transport,
        store=None,
        max_cache_size: Optional[int] = None,
        priority: Sequence[TransportType] = FALLBACK_PRIORITY,
        clock: Callable[[], datetime] = _utcnow,
        rng: Optional[random.Random] = None,
    ):
        self.transport = transport
        self.store = store if store is not None else MemoryCacheStore()
        self.max_cache_size = max_cache_size or config.connectivity.max_cache_size
        self.priority = tuple(priority)
        self._clock = clock
        self._rng = rng or random.Random()

        self._status = ConnectionStatus(
            transport_type=self.priority[0],
            strength=100,
            last_connected=clock(),
            is_online=True,
        )
        self._cache: List[OfflineCacheEntry] = []
        self._lock = threading.RLock()

        # Statistics
        self._sent = 0
        self._cached = 0
        self._flushed = 0
        self._flush_failures = 0
        self._evicted = 0

    def load_cached(self) -> int:
        """
        Restore cached entries from the durable store.

        Call once at start-up. Returns count of entries in the cache.
        """
        with self._lock:
            restored = self.store.load()
            self._cache = restored + self._cache
            self._enforce_capacity()
            if restored:
                logger.info(f'Restored {len(restored)} cached payloads')
            return len(self._cache)

    def send(self, payload: Payload) -> bool:
        """
        Deliver a payload, falling back tier by tier.

        Returns True if the payload went out over a link, False if it was
        cached for later replay. Never raises for link failures.
        """
        with self._lock:
            for transport_type in self.priority:
                if transport_type is TransportType.OFFLINE:
                    break

                if not self._probe(transport_type):
                    continue

                if self._cache:
                    self._flush_cache(transport_type)

                try:
                    self.transport.transmit(transport_type, payload)
                except TransportUnavailable as e:
                    logger.warning(f'Failed to send via {transport_type.value}: {e}')
                    continue

                self._status = ConnectionStatus(
                    transport_type=transport_type,
                    strength=self._signal_strength(transport_type),
                    last_connected=self._clock(),
                    is_online=True,
                )
                self._sent += 1
                return True

            self._cache_payload(payload)
            self._status = ConnectionStatus(
                transport_type=TransportType.OFFLINE,
                strength=0,
                last_connected=self._status.last_connected,
                is_online=False,
            )
            return False

    def _probe(self, transport_type: TransportType) -> bool:
        try:
            return bool(self.transport.probe(transport_type))
        except TransportUnavailable as e:
            logger.debug(f'Probe {transport_type.value} failed: {e}')
            return False

    def _flush_cache(self, transport_type: TransportType) -> None:
        """Replay every cached entry as one batch; restore them on failure."""
        pending = self._cache
        self._cache = []

        try:
            self.transport.batch_flush(transport_type, pending)
        except TransportUnavailable as e:
            self._cache = pending + self._cache
            self._flush_failures += 1
            logger.warning(f'Error sending {len(pending)} cached payloads: {e}')
            return

        self._flushed += len(pending)
        self.store.save(self._cache)
        logger.info(f'Replayed {len(pending)} cached payloads via {transport_type.value}')

    def _cache_payload(self, payload: Payload) -> None:
        self._cache.append(OfflineCacheEntry(payload=payload, cached_at=self._clock()))
        self._cached += 1
        self._enforce_capacity()
        self.store.save(self._cache)
        logger.info(f'All transports unavailable, cached payload ({len(self._cache)} pending)')

    def _enforce_capacity(self) -> None:
        overflow = len(self._cache) - self.max_cache_size
        if overflow > 0:
            del self._cache[:overflow]
            self._evicted += overflow
            logger.warning(f'Offline cache full, evicted {overflow} oldest payloads')

    def _signal_strength(self, transport_type: TransportType) -> int:
        low, high = SIGNAL_STRENGTH_RANGES.get(transport_type, (0, 0))
        return self._rng.randint(low, high)

    def get_status(self) -> ConnectionStatus:
        """Snapshot of the current connection status."""
        with self._lock:
            return replace(self._status)

    def cached_entries(self) -> List[OfflineCacheEntry]:
        """Copy of the pending entries, oldest first."""
        with self._lock:
            return list(self._cache)

    @property
    def cache_size(self) -> int:
        with self._lock:
            return len(self._cache)

    @property
    def stats(self) -> dict:
        """Get delivery statistics."""
        with self._lock:
            return {
                'status': self._status.to_dict(),
                'pending': len(self._cache),
                'max_cache_size': self.max_cache_size,
                'sent': self._sent,
                'cached': self._cached,
                'flushed': self._flushed,
                'flush_failures': self._flush_failures,
                'evicted': self._evicted,
            }
