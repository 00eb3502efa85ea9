"""
Pairwise correlation analysis across measured channels.

Computes a full Pearson correlation matrix for exploratory insight, e.g.
whether PM2.5 tracks humidity at a site. Each cell also records how many
complete sample pairs it was computed from, so a 0.0 from too little data
is distinguishable from a genuine absence of correlation.
"""

from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

from airwatch.analytics.samples import CHANNELS, Sample
from airwatch.analytics.statistics import complete_pair_count, pearson_correlation


@dataclass(frozen=True)
class CorrelationMatrix:
    """Symmetric channel x channel correlation with unit diagonal."""
    channels: Tuple[str, ...]
    coefficients: Dict[str, Dict[str, float]]
    pair_counts: Dict[str, Dict[str, int]]

    def get(self, channel_a: str, channel_b: str) -> float:
        return self.coefficients[channel_a][channel_b]

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        """Nested dict of coefficients, as the dashboard expects."""
        return {a: dict(row) for a, row in self.coefficients.items()}


class CorrelationAnalyzer:
    """Builds correlation matrices over a fixed channel set."""

    def __init__(self, channels: Sequence[str] = CHANNELS):
        self.channels = tuple(channels)

    def correlation_matrix(self, window: Sequence[Sample]) -> CorrelationMatrix:
        """
        Compute the correlation matrix for a window of samples.

        Every unordered pair is computed once and mirrored into both
        cells. The diagonal is fixed at 1.
        """
        coefficients = {a: {b: 0.0 for b in self.channels} for a in self.channels}
        pair_counts = {a: {b: 0 for b in self.channels} for a in self.channels}

        for i, channel_a in enumerate(self.channels):
            coefficients[channel_a][channel_a] = 1.0
            pair_counts[channel_a][channel_a] = complete_pair_count(
                window, channel_a, channel_a
            )

            for channel_b in self.channels[i + 1:]:
                r = pearson_correlation(window, channel_a, channel_b)
                n = complete_pair_count(window, channel_a, channel_b)

                coefficients[channel_a][channel_b] = r
                coefficients[channel_b][channel_a] = r
                pair_counts[channel_a][channel_b] = n
                pair_counts[channel_b][channel_a] = n

        return CorrelationMatrix(
            channels=self.channels,
            coefficients=coefficients,
            pair_counts=pair_counts,
        )
