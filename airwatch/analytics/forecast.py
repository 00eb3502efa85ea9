"""
Moving-average forecasting of air-quality channels.

The model is deliberately simple and auditable: each step's prediction is
the 24-sample moving average of a channel, nudged 5% per step in the
direction of its recent trend. Pollutant channels follow the trend;
temperature and humidity are forecast flat.

Forecasts are built recursively. After each step the predicted values are
appended to a working copy of the window as a synthetic sample, so step
h+1 is conditioned on step h. Error compounds as the horizon grows, which
the linearly decaying confidence score reflects.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from airwatch.analytics.issues import IssueDetector
from airwatch.analytics.samples import (
    CHANNELS,
    POLLUTANT_CHANNELS,
    WINDOW_SIZE,
    Sample,
    sort_window,
)
from airwatch.analytics.statistics import moving_average, trend_sign
from airwatch.exceptions import InsufficientDataError

logger = logging.getLogger(__name__)

# Fractional adjustment per step in the trend direction
TREND_STEP_FACTOR = 0.05

# Confidence lost per step, and the floor it decays to
CONFIDENCE_DECAY = 0.1
MIN_CONFIDENCE = 0.3

# Forecast step length, matching the hourly sampling cadence
STEP = timedelta(hours=1)


@dataclass(frozen=True)
class ForecastPoint:
    """A single future prediction with its confidence and flagged issues."""
    timestamp: datetime
    predicted_fields: Dict[str, float]
    confidence: float
    issues: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        return {
            'timestamp': self.timestamp.isoformat(),
            'predictions': dict(self.predicted_fields),
            'confidence': self.confidence,
            'potential_issues': list(self.issues),
        }


def step_confidence(step: int) -> float:
    """Confidence for the given step: 1 - 0.1*step, floored at 0.3."""
    return max(MIN_CONFIDENCE, 1 - step * CONFIDENCE_DECAY)


class ForecastEngine:
    """
    Produces N-step-ahead point forecasts from a window of samples.

    Configuration:
    - window_size: Samples per moving-average window (default 24)
    - issue_detector: Rule set applied to every predicted point
    """

    def __init__(
        self,
        window_size: int = WINDOW_SIZE,
        issue_detector: Optional[IssueDetector] = None,
    ):
        self.window_size = window_size
        self.issue_detector = issue_detector or IssueDetector()

    def forecast(
        self,
        window: Sequence[Sample],
        horizon_steps: int,
    ) -> List[ForecastPoint]:
        """
        Forecast horizon_steps hourly points past the last observation.

        Raises:
            InsufficientDataError: window has fewer than window_size samples
            ValueError: horizon_steps is less than 1
        """
        if len(window) < self.window_size:
            raise InsufficientDataError(self.window_size, len(window))
        if horizon_steps < 1:
            raise ValueError(f'horizon_steps must be >= 1, got {horizon_steps}')

        # Scratch copy; the caller's window is never touched
        working = sort_window(window)
        last_observed = working[-1]

        points = []
        for step in range(1, horizon_steps + 1):
            timestamp = last_observed.timestamp + step * STEP
            recent = working[-self.window_size:]

            predicted = self._predict_fields(recent, step)
            point = ForecastPoint(
                timestamp=timestamp,
                predicted_fields=predicted,
                confidence=step_confidence(step),
                issues=self.issue_detector.evaluate(predicted),
            )
            points.append(point)

            # Feed the prediction back in for the next step
            working.append(last_observed.with_fields(timestamp, predicted))

        logger.debug(
            f'Forecast {horizon_steps} steps from {len(window)} samples '
            f'ending {last_observed.timestamp.isoformat()}'
        )
        return points

    def _predict_fields(self, recent: Sequence[Sample], step: int) -> Dict[str, float]:
        """Trend-adjusted moving average for every channel at one step."""
        predicted = {}
        for channel in CHANNELS:
            base = moving_average(recent, channel)
            if channel in POLLUTANT_CHANNELS:
                trend = trend_sign(recent, channel)
                predicted[channel] = base + trend * step * TREND_STEP_FACTOR * base
            else:
                predicted[channel] = base
        return predicted
