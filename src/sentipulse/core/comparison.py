"""Side-by-side comparison of two exported analyses."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .constants import ComparisonConstants
from .models import ExportedAnalysis
from .scoring import brand_sentiment, net_sentiment_score, smooth, trend_value


@dataclass(frozen=True)
class MetricRow:
    """One metric with a value per compared analysis."""
    metric: str
    first: float
    second: float


@dataclass(frozen=True)
class TrendPoint:
    """Smoothed trend values at one index; None where a side has no value."""
    index: int
    first: Optional[float]
    second: Optional[float]


@dataclass
class ComparisonResult:
    labels: Tuple[str, str]
    metrics: List[MetricRow] = field(default_factory=list)
    sentiment_counts: List[MetricRow] = field(default_factory=list)
    trend: List[TrendPoint] = field(default_factory=list)

    def metric(self, name: str) -> MetricRow:
        for row in self.metrics:
            if row.metric == name:
                return row
        raise KeyError(name)


def compare(first: ExportedAnalysis, second: ExportedAnalysis,
            labels: Tuple[str, str] = (ComparisonConstants.FIRST_LABEL,
                                       ComparisonConstants.SECOND_LABEL)) -> ComparisonResult:
    """
    Compare two analyses without modifying either.

    Each score history is smoothed with its own window width, then the two
    trends are zipped up to the longer length. Indices past the end of the
    shorter trend carry None for that side.
    """
    a, b = first.stats, second.stats

    metrics = [
        MetricRow("Total Comments", a.total, b.total),
        MetricRow("Verified Users", a.verified_total, b.verified_total),
        MetricRow("Brand Sentiment (%)", brand_sentiment(a), brand_sentiment(b)),
        MetricRow("Net Sentiment Score", net_sentiment_score(a), net_sentiment_score(b)),
        MetricRow("Avg Engagement", a.average_engagement or 0.0, b.average_engagement or 0.0),
        MetricRow("Total Engagement", a.total_engagement or 0.0, b.total_engagement or 0.0),
    ]

    sentiment_counts = [
        MetricRow("Positive", a.positive, b.positive),
        MetricRow("Negative", a.negative, b.negative),
        MetricRow("Neutral", a.neutral, b.neutral),
    ]

    trend_a = smooth(a.score_history)
    trend_b = smooth(b.score_history)
    length = max(len(trend_a), len(trend_b))
    trend = [
        TrendPoint(i, trend_value(trend_a, i), trend_value(trend_b, i))
        for i in range(length)
    ]

    return ComparisonResult(
        labels=tuple(labels),
        metrics=metrics,
        sentiment_counts=sentiment_counts,
        trend=trend,
    )
