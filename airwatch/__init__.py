"""
AirWatch Backend Package.

Industrial air-quality monitoring platform built with Flask, SQLAlchemy, and NumPy.

Modules:
    api/            REST endpoints for readings, predictions, alerts, and device uploads
    models/         SQLAlchemy ORM models (SensorReading, Alert, KeyValue)
    ingestion/      ThingSpeak channel feed pipeline with background polling
    analytics/      NumPy-based forecasting, issue detection, and correlation
    alerts/         Per-reading threshold evaluation with severity grading
    connectivity/   Multi-transport delivery with a durable offline cache
    services/       Reading and alert persistence
    config.py       Centralized configuration from environment variables
"""

__version__ = '1.0.0'
