"""
Ingestion pipeline - orchestrates data flow from ThingSpeak to database.

Pipeline stages:
1. Fetch: Poll the ThingSpeak channel feed
2. Dedup + store: Append new readings, skipping (channel, timestamp) repeats
3. Alert: Evaluate every newly stored reading against the thresholds
4. Persist alerts and notify registered callbacks

Runs one cycle on demand (sync endpoint) or continuously on a background
thread at the configured poll interval.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from airwatch.alerts.evaluator import AlertRecord, ThresholdAlertEvaluator
from airwatch.alerts.thresholds import ThresholdConfig
from airwatch.analytics.samples import Sample
from airwatch.config import config
from airwatch.exceptions import IngestionError
from airwatch.ingestion.thingspeak_client import ThingSpeakClient
from airwatch.models.base import get_session
from airwatch.services.readings import persist_alert, persist_sample

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Counts for one ingestion cycle."""
    synced: int = 0
    skipped: int = 0
    total: int = 0
    alerts: List[AlertRecord] = field(default_factory=list)
    samples: List[Sample] = field(default_factory=list)  # newly stored only

    def to_dict(self) -> dict:
        return {
            'synced': self.synced,
            'skipped': self.skipped,
            'total': self.total,
            'alerts': [a.to_dict() for a in self.alerts],
        }


class IngestionPipeline:
    """
    Manages the data ingestion lifecycle.

    Coordinates fetching from ThingSpeak, deduplicated storage and
    threshold alerting. Can run as a background thread for continuous
    polling.
    """

    def __init__(
        self,
        client: Optional[ThingSpeakClient] = None,
        evaluator: Optional[ThresholdAlertEvaluator] = None,
        thresholds: Optional[ThresholdConfig] = None,
    ):
        """
        Initialize the ingestion pipeline.

        Args:
            client: ThingSpeak client (created from config if None)
            evaluator: Threshold evaluator for new readings
            thresholds: Alert limits (deployment defaults if None)
        """
        self.client = client or ThingSpeakClient.from_config()
        self.evaluator = evaluator or ThresholdAlertEvaluator()
        self.thresholds = thresholds or ThresholdConfig.defaults()

        # State tracking
        self._running = False
        self._thread: Optional[threading.Thread] = None
        self._last_fetch_time: float = 0
        self._fetch_count: int = 0
        self._error_count: int = 0
        self._alert_count: int = 0

        # Callbacks for external integration
        self._on_update_callbacks: List[Callable[[SyncResult], None]] = []

    def add_update_callback(self, callback: Callable[[SyncResult], None]) -> None:
        """
        Register callback to be invoked after each successful sync.

        Callback receives the SyncResult of the cycle.
        """
        self._on_update_callbacks.append(callback)

    def sync(self, results: Optional[int] = None) -> SyncResult:
        """
        Execute one ingestion cycle.

        Raises:
            IngestionError: the feed could not be fetched
        """
        feed = self.client.get_feed(results)
        self._last_fetch_time = time.time()
        self._fetch_count += 1

        result = SyncResult(total=feed.total_entries)

        with get_session() as session:
            for sample in feed.samples:
                if not persist_sample(sample, session):
                    result.skipped += 1
                    continue

                result.synced += 1
                result.samples.append(sample)
                alerts = self.evaluator.evaluate(sample, self.thresholds)
                for record in alerts:
                    persist_alert(record, session)
                result.alerts.extend(alerts)

        self._alert_count += len(result.alerts)
        logger.info(
            f'Synced {result.synced} new readings ({result.skipped} duplicates), '
            f'{len(result.alerts)} alerts'
        )

        for callback in self._on_update_callbacks:
            try:
                callback(result)
            except Exception as e:
                logger.error(f'Update callback error: {e}')

        return result

    def fetch_and_process(self) -> int:
        """
        Run one cycle, logging instead of raising.

        Returns count of new readings stored, or -1 on error.
        """
        try:
            return self.sync().synced
        except IngestionError as e:
            self._error_count += 1
            logger.error(f'Ingestion error: {e}')
            return -1

    def run_continuous(self, interval: Optional[float] = None) -> None:
        """
        Run ingestion loop continuously.

        This method blocks - use start_background() for non-blocking.
        """
        interval = interval or config.ingestion.poll_interval
        self._running = True

        logger.info(f'Starting continuous ingestion (interval={interval}s)')

        while self._running:
            self.fetch_and_process()
            time.sleep(interval)

        logger.info('Ingestion stopped')

    def start_background(self, interval: Optional[float] = None) -> None:
        """Start ingestion in background thread."""
        if self._thread and self._thread.is_alive():
            logger.warning('Ingestion already running')
            return

        self._thread = threading.Thread(
            target=self.run_continuous,
            args=(interval,),
            daemon=True,
        )
        self._thread.start()
        logger.info('Background ingestion started')

    def stop(self) -> None:
        """Stop background ingestion."""
        self._running = False
        if self._thread:
            self._thread.join(timeout=5)
        logger.info('Ingestion stopped')

    @property
    def stats(self) -> dict:
        """Get ingestion statistics."""
        return {
            'fetch_count': self._fetch_count,
            'error_count': self._error_count,
            'alert_count': self._alert_count,
            'last_fetch_time': self._last_fetch_time,
            'running': self._running,
        }
