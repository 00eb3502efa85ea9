"""
Durable mirror for the offline telemetry cache.

The connectivity manager keeps undelivered payloads in memory and mirrors
the whole list to a store after every change, so a restart picks up
where it left off. Two stores are provided:

- SqlCacheStore:    JSON blob under one key in the key_values table
- MemoryCacheStore: process-local, for devices without a database
"""

import json
import logging
from typing import List, Sequence

from sqlalchemy.exc import SQLAlchemyError

from airwatch.connectivity.payloads import OfflineCacheEntry
from airwatch.models import KeyValue
from airwatch.models.base import SessionLocal

logger = logging.getLogger(__name__)

OFFLINE_CACHE_KEY = 'offline_cache'


class MemoryCacheStore:
    """Keeps the mirror in memory only."""

    def __init__(self):
        self._entries: List[OfflineCacheEntry] = []

    def load(self) -> List[OfflineCacheEntry]:
        return list(self._entries)

    def save(self, entries: Sequence[OfflineCacheEntry]) -> None:
        self._entries = list(entries)


class SqlCacheStore:
    """
    Persists the offline cache as JSON under a single key.

    Storage errors are logged and swallowed: losing the mirror must not
    stop a device from caching in memory.
    """

    def __init__(self, key: str = OFFLINE_CACHE_KEY, session_factory=SessionLocal):
        self.key = key
        self._session_factory = session_factory

    def load(self) -> List[OfflineCacheEntry]:
        """Read the mirrored entries, skipping any that no longer parse."""
        try:
            with self._session_factory() as session:
                row = session.get(KeyValue, self.key)
                raw = row.value if row else None
        except SQLAlchemyError as e:
            logger.warning(f'Failed to load offline cache: {e}')
            return []

        if not raw:
            return []

        try:
            items = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f'Discarding corrupt offline cache: {e}')
            return []

        entries = []
        for item in items:
            try:
                entries.append(OfflineCacheEntry.from_dict(item))
            except ValueError as e:
                logger.warning(f'Skipping unreadable cached entry: {e}')
        return entries

    def save(self, entries: Sequence[OfflineCacheEntry]) -> None:
        """Replace the mirror; an empty sequence removes the key."""
        try:
            with self._session_factory() as session:
                row = session.get(KeyValue, self.key)
                if not entries:
                    if row is not None:
                        session.delete(row)
                else:
                    value = json.dumps([entry.to_dict() for entry in entries])
                    if row is None:
                        session.add(KeyValue(key=self.key, value=value))
                    else:
                        row.value = value
                session.commit()
        except SQLAlchemyError as e:
            logger.warning(f'Failed to store offline cache: {e}')
