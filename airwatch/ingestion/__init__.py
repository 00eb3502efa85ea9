"""
Data ingestion module for AirWatch.

Handles polling the ThingSpeak channel feed, mapping feed fields onto
sensor channels, and loading new readings into the relational database.
"""

from airwatch.ingestion.thingspeak_client import ThingSpeakClient
from airwatch.ingestion.pipeline import IngestionPipeline, SyncResult

__all__ = ['ThingSpeakClient', 'IngestionPipeline', 'SyncResult']
