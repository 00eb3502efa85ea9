"""
Air Quality Index estimation from the latest reading.

Simplified EPA formula: linear interpolation across the PM2.5 breakpoint
table, then raised when CO or VOC levels alone indicate worse air than
particulates do. The result is clamped to the 0-500 AQI scale.
"""

from typing import Optional

from airwatch.analytics.samples import Sample

# (pm2_5 low, pm2_5 high, aqi low, aqi high)
PM25_BREAKPOINTS = (
    (0.0, 12.0, 0, 50),
    (12.1, 35.4, 51, 100),
    (35.5, 55.4, 101, 150),
    (55.5, 150.4, 151, 200),
    (150.5, 250.4, 201, 300),
)

AQI_CATEGORIES = (
    (50, 'Good'),
    (100, 'Moderate'),
    (150, 'Unhealthy for Sensitive Groups'),
    (200, 'Unhealthy'),
    (300, 'Very Unhealthy'),
)


def pm25_to_aqi(pm25: float) -> float:
    """Interpolate AQI from a PM2.5 concentration (µg/m³)."""
    if pm25 <= 12.0:
        return (50 / 12.0) * pm25

    for c_low, c_high, i_low, i_high in PM25_BREAKPOINTS[1:]:
        if pm25 <= c_high:
            return i_low + (i_high - i_low) / (c_high - c_low) * (pm25 - c_low)

    # Very unhealthy to hazardous; the excess is capped at the top band width
    c_low, c_high, i_low, i_high = PM25_BREAKPOINTS[-1]
    return i_low + (i_high - i_low) / (c_high - c_low) * min(c_high, pm25 - c_low)


def estimate_aqi(sample: Sample) -> Optional[int]:
    """
    Estimate the AQI for a sample.

    Returns None when the sample has none of pm2_5, co or voc.
    """
    pm25 = sample.value('pm2_5')
    co = sample.value('co')
    voc = sample.value('voc')

    if pm25 is None and co is None and voc is None:
        return None

    aqi = pm25_to_aqi(pm25) if pm25 is not None else 0.0

    if co is not None and co > 9:
        aqi = max(aqi, 101 + (co - 9) * 10)
    if voc is not None and voc > 200:
        aqi = max(aqi, 101 + (voc - 200) / 2)

    return int(min(500, max(0, round(aqi))))


def aqi_category(aqi: int) -> str:
    """Human-readable category for an AQI value."""
    for upper, label in AQI_CATEGORIES:
        if aqi <= upper:
            return label
    return 'Hazardous'
