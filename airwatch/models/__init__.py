"""
Database models for AirWatch.

Schema priorities:
1. Efficient time-range queries over sensor readings
2. Cheap dedup checks on (channel_id, timestamp) during sync and replay
3. Alert listing by severity and acknowledgement state
"""

from airwatch.models.base import Base, engine, SessionLocal, init_db, drop_db, get_session
from airwatch.models.sensor_reading import SensorReading
from airwatch.models.alert import Alert
from airwatch.models.key_value import KeyValue

__all__ = [
    'Base',
    'engine',
    'SessionLocal',
    'init_db',
    'drop_db',
    'get_session',
    'SensorReading',
    'Alert',
    'KeyValue',
]
