"""
ThingSpeak channel feed client.

Monitoring stations publish to a ThingSpeak channel, eight numbered
fields per entry. The channel metadata names each field; those labels are
matched onto AirWatch channels so a station can order its fields freely:

    label contains 'co' (not 'voc')   -> co
    label contains 'voc'              -> voc
    'methane' or 'ch4'                -> methane
    'pm2.5', 'pm25' or 'pm2_5'        -> pm2_5
    'pm10'                            -> pm10
    'temp'                            -> temperature
    'hum'                             -> humidity
    'location'                        -> site label

Channels without labels use the firmware's fixed layout (DEFAULT_FIELD_MAP).
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional

import requests

from airwatch.analytics.samples import POLLUTANT_CHANNELS, Sample, parse_timestamp
from airwatch.config import config
from airwatch.exceptions import ConfigurationError, IngestionError

logger = logging.getLogger(__name__)

LOCATION_FIELD = 'location'

# Field layout written by the station firmware
DEFAULT_FIELD_MAP = {
    'field1': 'temperature',
    'field2': 'humidity',
    'field3': 'methane',
    'field4': 'co',
    'field5': 'voc',
    'field6': 'pm2_5',
    'field7': 'pm10',
    'field8': LOCATION_FIELD,
}


def match_field_label(label: str) -> Optional[str]:
    """Map a ThingSpeak field label onto an AirWatch channel name."""
    name = label.strip().lower()
    if not name:
        return None
    if 'location' in name:
        return LOCATION_FIELD
    if 'voc' in name:
        return 'voc'
    if 'co' in name:
        return 'co'
    if 'methane' in name or 'ch4' in name:
        return 'methane'
    if 'pm2.5' in name or 'pm25' in name or 'pm2_5' in name:
        return 'pm2_5'
    if 'pm10' in name:
        return 'pm10'
    if 'temp' in name:
        return 'temperature'
    if 'hum' in name:
        return 'humidity'
    return None


def build_field_map(channel: dict) -> Dict[str, str]:
    """
    Derive field -> channel mapping from channel metadata.

    Falls back to DEFAULT_FIELD_MAP when the channel labels none of its
    fields.
    """
    mapping = {}
    for i in range(1, 9):
        key = f'field{i}'
        label = channel.get(key)
        if label:
            matched = match_field_label(label)
            if matched:
                mapping[key] = matched
    return mapping or dict(DEFAULT_FIELD_MAP)


def _parse_value(raw) -> Optional[float]:
    if raw is None or raw == '':
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


@dataclass
class ChannelFeed:
    """Parsed response of a channel feed request."""
    channel_id: str
    name: Optional[str]
    samples: List[Sample]
    total_entries: int


def parse_feed_entry(
    entry: dict,
    field_map: Dict[str, str],
    channel_id: str,
    default_location: str,
) -> Optional[Sample]:
    """
    Convert one feed entry into a Sample.

    Returns None for entries without a timestamp or without any
    pollutant reading (ambient-only heartbeats are not stored).
    """
    created_at = entry.get('created_at')
    if not created_at:
        return None

    try:
        timestamp = parse_timestamp(created_at)
    except ValueError:
        logger.debug(f'Skipping entry with bad timestamp: {created_at!r}')
        return None

    fields = {}
    location = default_location
    for key, channel in field_map.items():
        raw = entry.get(key)
        if channel == LOCATION_FIELD:
            if raw:
                location = str(raw).strip() or default_location
            continue
        value = _parse_value(raw)
        if value is not None:
            fields[channel] = value

    if not any(name in fields for name in POLLUTANT_CHANNELS):
        return None

    return Sample(
        timestamp=timestamp,
        channel_id=channel_id,
        location=location,
        fields=fields,
    )


class ThingSpeakClient:
    """
    Client for the ThingSpeak channel feeds API.

    Handles:
    - GET requests to /channels/{id}/feeds.json
    - Field label mapping from channel metadata
    - Conversion of feed entries to Samples
    """

    def __init__(
        self,
        channel_id: str,
        read_api_key: str,
        base_url: str = 'https://api.thingspeak.com',
        timeout: float = 15.0,
        default_location: Optional[str] = None,
    ):
        self.channel_id = channel_id
        self.read_api_key = read_api_key
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.default_location = default_location or config.ingestion.default_location
        self.session = requests.Session()

    @classmethod
    def from_config(cls) -> 'ThingSpeakClient':
        """
        Create client from application configuration.

        Raises:
            ConfigurationError: channel id or read key not set
        """
        ts = config.thingspeak
        if not ts.is_configured:
            raise ConfigurationError(
                'ThingSpeak configuration missing. Set THINGSPEAK_CHANNEL_ID '
                'and THINGSPEAK_READ_API_KEY.'
            )
        return cls(
            channel_id=ts.channel_id,
            read_api_key=ts.read_api_key,
            base_url=ts.base_url,
            timeout=ts.timeout_seconds,
        )

    def _fetch_raw(self, results: int) -> dict:
        url = f'{self.base_url}/channels/{self.channel_id}/feeds.json'
        params = {'api_key': self.read_api_key, 'results': results}

        logger.debug(f'Fetching feeds: {url} results={results}')

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.Timeout as e:
            logger.error('ThingSpeak API timeout')
            raise IngestionError('ThingSpeak API timeout') from e
        except requests.exceptions.HTTPError as e:
            logger.error(f'ThingSpeak API error: {e.response.status_code}')
            raise IngestionError(f'ThingSpeak API error: {e.response.status_code}') from e
        except requests.exceptions.RequestException as e:
            logger.error(f'ThingSpeak request failed: {e}')
            raise IngestionError(f'ThingSpeak request failed: {e}') from e
        except ValueError as e:
            raise IngestionError('ThingSpeak returned invalid JSON') from e

    def get_feed(self, results: Optional[int] = None) -> ChannelFeed:
        """
        Fetch the latest feed entries as Samples.

        Raises:
            IngestionError: request failed or the response is malformed
        """
        results = results or config.thingspeak.results_per_sync
        data = self._fetch_raw(results)

        channel = data.get('channel')
        feeds = data.get('feeds')
        if not isinstance(channel, dict) or not isinstance(feeds, list):
            raise IngestionError('Invalid ThingSpeak response format')

        field_map = build_field_map(channel)
        location = channel.get('name') or self.default_location

        samples = []
        for entry in feeds:
            sample = parse_feed_entry(entry, field_map, self.channel_id, location)
            if sample:
                samples.append(sample)

        logger.info(f'Received {len(feeds)} feed entries, {len(samples)} with readings')

        return ChannelFeed(
            channel_id=self.channel_id,
            name=channel.get('name'),
            samples=samples,
            total_entries=len(feeds),
        )

