"""Tests for the durable offline cache mirror."""

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from airwatch.connectivity import OfflineCacheEntry, ReadingPayload, SqlCacheStore
from airwatch.models import KeyValue
from airwatch.models.base import SessionLocal


def _entries(sample_factory, count):
    return [
        OfflineCacheEntry(
            ReadingPayload(sample_factory({'co': float(i)}, timestamp=datetime(2024, 3, 1, i, tzinfo=timezone.utc))),
            cached_at=datetime(2024, 3, 2, i, tzinfo=timezone.utc),
        )
        for i in range(count)
    ]


def test_empty_store_loads_nothing():
    assert SqlCacheStore().load() == []


def test_round_trip_preserves_order(sample_factory):
    store = SqlCacheStore()
    entries = _entries(sample_factory, 3)

    store.save(entries)
    loaded = store.load()

    assert [e.to_dict() for e in loaded] == [e.to_dict() for e in entries]


def test_save_replaces_previous_mirror(sample_factory):
    store = SqlCacheStore()
    store.save(_entries(sample_factory, 3))
    store.save(_entries(sample_factory, 1))

    assert len(store.load()) == 1


def test_saving_empty_removes_key(sample_factory):
    store = SqlCacheStore()
    store.save(_entries(sample_factory, 2))
    store.save([])

    with SessionLocal() as session:
        assert session.get(KeyValue, 'offline_cache') is None
    assert store.load() == []


def test_separate_keys_are_independent(sample_factory):
    SqlCacheStore(key='device-a').save(_entries(sample_factory, 2))
    assert SqlCacheStore(key='device-b').load() == []


def test_corrupt_json_is_discarded():
    with SessionLocal() as session:
        session.add(KeyValue(key='offline_cache', value='{not json'))
        session.commit()

    assert SqlCacheStore().load() == []


def test_unreadable_entries_are_skipped(sample_factory):
    good = _entries(sample_factory, 1)[0].to_dict()
    with SessionLocal() as session:
        session.add(KeyValue(key='offline_cache', value=json.dumps([{'kind': 'mystery'}, good])))
        session.commit()

    loaded = SqlCacheStore().load()
    assert len(loaded) == 1
    assert loaded[0].payload.sample.value('co') == 0.0


def test_storage_errors_are_swallowed(sample_factory):
    session = MagicMock()
    session.__exit__.return_value = False
    session.__enter__.return_value.get.side_effect = OperationalError('SELECT', {}, Exception('disk I/O error'))
    store = SqlCacheStore(session_factory=lambda: session)

    assert store.load() == []
    store.save(_entries(sample_factory, 1))