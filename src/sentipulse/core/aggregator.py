"""Incremental folding of classifier results into running statistics."""

import logging
import time
from typing import Callable, List, Optional, Sequence

from .constants import SentimentConstants
from .models import AnalysisStats, ClassifiedComment, InputRecord, PendingComment, SentimentResult

logger = logging.getLogger(__name__)

StatsListener = Callable[[AnalysisStats], None]


def score_for(sentiment: str) -> int:
    """Trend score for a sentiment label; anything unrecognised counts as neutral."""
    return SentimentConstants.SCORE_MAP.get(sentiment, 0)


def normalize_sentiment(sentiment: str) -> str:
    label = (sentiment or "").strip().lower()
    return label if label in SentimentConstants.LABELS else SentimentConstants.NEUTRAL


def fold_comment(stats: AnalysisStats, comment: ClassifiedComment) -> AnalysisStats:
    """Apply one classified comment to the running stats in place."""
    stats.processed += 1
    if comment.is_verified:
        stats.verified_total += 1

    if comment.sentiment == SentimentConstants.POSITIVE:
        stats.positive += 1
        if comment.is_verified:
            stats.verified_positive += 1
    elif comment.sentiment == SentimentConstants.NEGATIVE:
        stats.negative += 1
        if comment.is_verified:
            stats.verified_negative += 1
    else:
        stats.neutral += 1
        if comment.is_verified:
            stats.verified_neutral += 1

    stats.total_engagement += comment.engagement
    stats.average_engagement = stats.total_engagement / stats.processed

    stats.score_history.append(score_for(comment.sentiment))
    stats.current_score = (stats.positive - stats.negative) / stats.processed * 100
    stats.current_comment = comment
    return stats


class StatsAggregator:
    """
    Owns the stats and comment list of a single run.

    Results are folded strictly in input order; every record produces a
    listener callback with a snapshot of the stats so progress can be shown
    per record rather than per batch.
    """

    def __init__(self, total: int, clock: Callable[[], float] = time.time):
        self._clock = clock
        self.stats = AnalysisStats(total=total, start_time=clock())
        self.comments: List[ClassifiedComment] = []

    @property
    def next_index(self) -> int:
        """0-based global index of the next record to be folded."""
        return len(self.comments)

    def mark_pending(self, batch_start: int, text: str,
                     on_update: Optional[StatsListener] = None) -> None:
        """Point the live display at a batch that is waiting on the classifier."""
        self.stats.current_comment = PendingComment(id=batch_start, text=text)
        if on_update:
            on_update(self.stats.snapshot())

    def fold(self, results: Sequence[SentimentResult], records: Sequence[InputRecord],
             on_update: Optional[StatsListener] = None) -> AnalysisStats:
        """Fold one batch of results, paired position by position with its records."""
        if len(results) != len(records):
            raise ValueError(
                f"Result count {len(results)} does not match batch size {len(records)}"
            )
        if self.stats.is_complete:
            raise RuntimeError("Cannot fold into a completed analysis")

        for result, record in zip(results, records):
            comment = ClassifiedComment(
                id=self.next_index + 1,
                text=record.text,
                sentiment=normalize_sentiment(result.sentiment),
                score=result.score,
                is_verified=record.is_verified,
                engagement=record.engagement,
            )
            self.comments.append(comment)
            fold_comment(self.stats, comment)
            if on_update:
                on_update(self.stats.snapshot())
        return self.stats

    def complete(self) -> AnalysisStats:
        """Stamp the end time once every record has been folded."""
        if self.stats.is_complete:
            return self.stats
        if self.stats.processed != self.stats.total:
            raise RuntimeError(
                f"Run incomplete: {self.stats.processed}/{self.stats.total} records processed"
            )
        self.stats.end_time = self._clock()
        logger.info(
            f"Analysis complete: {self.stats.processed} records "
            f"(+{self.stats.positive} / -{self.stats.negative} / ={self.stats.neutral})"
        )
        return self.stats
