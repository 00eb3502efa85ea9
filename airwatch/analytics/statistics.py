"""
Time-series statistics over sensor sample windows.

Pure NumPy routines used by the forecasting and correlation layers:

1. Moving average: mean of the values actually reported in the window
2. Trend sign: discretized direction of change between window halves
3. Pearson correlation: pairwise-complete linear correlation of two channels

Missing readings are converted to NaN and masked out before any
calculation, never treated as zero.
"""

from typing import Sequence

import numpy as np

from airwatch.analytics.samples import Sample, channel_values

# Relative change below which a channel is considered stable
TREND_STABLE_THRESHOLD = 0.05

# Minimum complete pairs for a meaningful correlation
MIN_CORRELATION_PAIRS = 3


def _as_array(samples: Sequence[Sample], channel: str) -> np.ndarray:
    """Channel values as a float array with NaN for missing readings."""
    values = channel_values(samples, channel)
    return np.array(
        [np.nan if v is None else v for v in values],
        dtype=np.float64,
    )


def moving_average(samples: Sequence[Sample], channel: str) -> float:
    """
    Mean of all reported values for a channel in the window.

    Returns 0.0 when the channel has no readings at all. Callers that
    need to tell "no data" apart from a genuine zero mean should check
    the window for readings first.
    """
    values = _as_array(samples, channel)
    valid = values[~np.isnan(values)]

    if len(valid) == 0:
        return 0.0

    return float(np.mean(valid))


def trend_sign(samples: Sequence[Sample], channel: str) -> int:
    """
    Determine trend direction for a channel: -1, 0 or +1.

    Splits the window at its midpoint and compares the moving averages
    of the earlier and later halves. A relative change under 5% is
    stable, as is any window whose earlier half averages to zero.
    """
    if len(samples) < 2:
        return 0

    midpoint = len(samples) // 2
    earlier = moving_average(samples[:midpoint], channel)
    later = moving_average(samples[midpoint:], channel)

    if earlier == 0:
        return 0

    relative_change = (later - earlier) / earlier

    if abs(relative_change) < TREND_STABLE_THRESHOLD:
        return 0
    return 1 if relative_change > 0 else -1


def _complete_pairs(
    samples: Sequence[Sample],
    channel_a: str,
    channel_b: str,
):
    a = _as_array(samples, channel_a)
    b = _as_array(samples, channel_b)
    mask = ~np.isnan(a) & ~np.isnan(b)
    return a[mask], b[mask]


def complete_pair_count(
    samples: Sequence[Sample],
    channel_a: str,
    channel_b: str,
) -> int:
    """Number of samples where both channels were reported."""
    a, _ = _complete_pairs(samples, channel_a, channel_b)
    return int(len(a))


def pearson_correlation(
    samples: Sequence[Sample],
    channel_a: str,
    channel_b: str,
) -> float:
    """
    Pearson correlation coefficient between two channels.

    Only samples where both channels are present take part. Returns 0.0
    with fewer than 3 complete pairs or when either channel has zero
    variance over those pairs.
    """
    a, b = _complete_pairs(samples, channel_a, channel_b)

    if len(a) < MIN_CORRELATION_PAIRS:
        return 0.0

    diff_a = a - np.mean(a)
    diff_b = b - np.mean(b)

    numerator = float(np.sum(diff_a * diff_b))
    denom_a = float(np.sum(diff_a * diff_a))
    denom_b = float(np.sum(diff_b * diff_b))

    if denom_a == 0 or denom_b == 0:
        return 0.0

    r = numerator / float(np.sqrt(denom_a * denom_b))
    # Rounding can push |r| a hair past 1 for perfectly linear channels
    return float(np.clip(r, -1.0, 1.0))
