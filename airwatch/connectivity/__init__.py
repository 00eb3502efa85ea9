"""
Connectivity module for AirWatch.

Multi-transport telemetry delivery with an offline cache that survives
restarts and is replayed when a link comes back.
"""

from airwatch.connectivity.cache_store import MemoryCacheStore, SqlCacheStore
from airwatch.connectivity.manager import ConnectionStatus, ConnectivityFallbackManager
from airwatch.connectivity.payloads import (
    AlertPayload,
    OfflineCacheEntry,
    ReadingPayload,
    payload_from_dict,
)
from airwatch.connectivity.transports import (
    FALLBACK_PRIORITY,
    HttpTransportClient,
    TransportType,
)

__all__ = [
    'MemoryCacheStore',
    'SqlCacheStore',
    'ConnectionStatus',
    'ConnectivityFallbackManager',
    'AlertPayload',
    'OfflineCacheEntry',
    'ReadingPayload',
    'payload_from_dict',
    'FALLBACK_PRIORITY',
    'HttpTransportClient',
    'TransportType',
]
