"""Derived sentiment metrics and the rolling trend smoother."""

import logging
from typing import List, Optional, Sequence, Union

from .constants import TrendConstants
from .models import AnalysisStats

logger = logging.getLogger(__name__)


def window_size(length: int) -> int:
    """Trailing window width for a history of the given length."""
    return max(TrendConstants.MIN_WINDOW, length // TrendConstants.WINDOW_DIVISOR)


def smooth(history: Sequence[float]) -> List[float]:
    """
    Trailing moving average over the full score history.

    Each output value is the mean of history[max(0, i - w + 1) .. i] with
    w = window_size(len(history)), so the first w - 1 points average over
    fewer values. The window is fixed per call and derived from the length
    of the history passed in.
    """
    w = window_size(len(history))
    smoothed = []
    for i in range(len(history)):
        window = history[max(0, i - w + 1):i + 1]
        smoothed.append(sum(window) / len(window))
    return smoothed


def brand_sentiment(stats: AnalysisStats) -> float:
    """Positive share of polar comments: positive / (positive + negative) * 100."""
    polar = stats.positive + stats.negative
    if polar <= 0:
        return 0.0
    return stats.positive / polar * 100


def net_sentiment_score(stats: AnalysisStats) -> float:
    """(positive - negative) / total * 100, 0 for an empty analysis."""
    if stats.total <= 0:
        return 0.0
    return (stats.positive - stats.negative) / stats.total * 100


def share(count: int, denominator: int) -> float:
    """Percentage of count over denominator, 0 when the denominator is empty."""
    if denominator <= 0:
        return 0.0
    return count / denominator * 100


def verified_brand_sentiment(stats: AnalysisStats) -> float:
    return share(stats.verified_positive, stats.verified_positive + stats.verified_negative)


def average_engagement(stats: AnalysisStats) -> float:
    if stats.processed <= 0:
        return 0.0
    return stats.total_engagement / stats.processed


def evaluation_time(stats: AnalysisStats) -> float:
    """Seconds between start and completion, 0 while the run is incomplete."""
    if stats.end_time is None:
        return 0.0
    return stats.end_time - stats.start_time


def processing_speed(stats: AnalysisStats) -> Union[str, int]:
    """Records per second formatted to one decimal, or 0 when not derivable."""
    elapsed = evaluation_time(stats)
    if elapsed <= 0:
        return 0
    return f"{stats.total / elapsed:.1f}"


def trend_value(smoothed: Sequence[float], index: int) -> Optional[float]:
    """Smoothed value at index, or None past the end of the sequence."""
    if 0 <= index < len(smoothed):
        return smoothed[index]
    return None
