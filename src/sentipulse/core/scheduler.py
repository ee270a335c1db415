"""Batch scheduling of classifier requests and ownership of a run's state."""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence

from .aggregator import StatsAggregator, StatsListener
from .config import settings
from .constants import BatchConstants
from .exceptions import RunInProgressError
from .models import AnalysisStats, ClassifiedComment, ExportedAnalysis, InputRecord, SentimentResult

logger = logging.getLogger(__name__)


class RunPhase(Enum):
    IDLE = "idle"
    AWAITING_DELAY = "awaiting_delay"
    AWAITING_CLASSIFIER = "awaiting_classifier"
    FOLDING = "folding"
    DONE = "done"


def partition(records: Sequence[InputRecord], batch_size: int) -> List[List[InputRecord]]:
    """Split records into consecutive batches of at most batch_size, keeping order."""
    if batch_size < BatchConstants.MIN_BATCH_SIZE:
        raise ValueError(f"batch_size must be >= {BatchConstants.MIN_BATCH_SIZE}, got {batch_size}")
    return [list(records[i:i + batch_size]) for i in range(0, len(records), batch_size)]


@dataclass
class PipelineState:
    """
    Everything one run owns: its batches, its aggregator and where it is.

    The scheduler advances the state one transition per `step` call:

        IDLE -> AWAITING_CLASSIFIER(0) -> FOLDING(0)
             -> [AWAITING_DELAY] -> AWAITING_CLASSIFIER(1) -> FOLDING(1) -> ... -> DONE

    An empty run goes straight from IDLE to DONE.
    """
    column_analyzed: str
    batches: List[List[InputRecord]]
    aggregator: StatsAggregator
    phase: RunPhase = RunPhase.IDLE
    batch_index: int = 0
    pending_results: Optional[List[SentimentResult]] = field(default=None, repr=False)

    @property
    def stats(self) -> AnalysisStats:
        return self.aggregator.stats

    @property
    def comments(self) -> List[ClassifiedComment]:
        return self.aggregator.comments

    @property
    def current_batch(self) -> List[InputRecord]:
        return self.batches[self.batch_index]

    @property
    def batch_start(self) -> int:
        return sum(len(b) for b in self.batches[:self.batch_index])


class BatchScheduler:
    """Dispatches batches to the classifier one at a time with a pause between them."""

    def __init__(self, classifier, batch_size: int = None, delay_ms: int = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.classifier = classifier
        self.batch_size = settings.batch_size if batch_size is None else batch_size
        self.delay_ms = settings.delay_ms if delay_ms is None else delay_ms
        self._sleep = sleep
        if self.batch_size < BatchConstants.MIN_BATCH_SIZE:
            raise ValueError(f"batch_size must be >= {BatchConstants.MIN_BATCH_SIZE}, got {self.batch_size}")
        if self.delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {self.delay_ms}")

    def prepare(self, records: Sequence[InputRecord], column_analyzed: str = "",
                clock: Callable[[], float] = time.time) -> PipelineState:
        """Create a fresh state for the given records; start time is stamped now."""
        return PipelineState(
            column_analyzed=column_analyzed,
            batches=partition(records, self.batch_size),
            aggregator=StatsAggregator(total=len(records), clock=clock),
        )

    def step(self, state: PipelineState, on_update: Optional[StatsListener] = None) -> PipelineState:
        """Perform one transition and return the state."""
        if state.phase is RunPhase.IDLE:
            if state.batches:
                state.batch_index = 0
                state.phase = RunPhase.AWAITING_CLASSIFIER
            else:
                self._finish(state, on_update)

        elif state.phase is RunPhase.AWAITING_DELAY:
            self._sleep(self.delay_ms / 1000.0)
            state.batch_index += 1
            state.phase = RunPhase.AWAITING_CLASSIFIER

        elif state.phase is RunPhase.AWAITING_CLASSIFIER:
            batch = state.current_batch
            texts = [record.text for record in batch]
            state.aggregator.mark_pending(state.batch_start, texts[0], on_update)
            logger.info(
                f"Dispatching batch {state.batch_index + 1}/{len(state.batches)} ({len(texts)} records)"
            )
            started = time.monotonic()
            state.pending_results = list(self.classifier.classify_batch(texts))
            logger.debug(f"Batch {state.batch_index + 1} classified in {time.monotonic() - started:.2f}s")
            state.phase = RunPhase.FOLDING

        elif state.phase is RunPhase.FOLDING:
            results, state.pending_results = state.pending_results, None
            state.aggregator.fold(results, state.current_batch, on_update)
            if state.batch_index + 1 < len(state.batches):
                if self.delay_ms > 0:
                    state.phase = RunPhase.AWAITING_DELAY
                else:
                    state.batch_index += 1
                    state.phase = RunPhase.AWAITING_CLASSIFIER
            else:
                self._finish(state, on_update)

        return state

    def run(self, state: PipelineState, on_update: Optional[StatsListener] = None) -> PipelineState:
        """
        Step until every batch has been classified and folded.

        `on_update` receives a snapshot per pending marker and per folded
        record, then one last snapshot after completion. Only that last one
        has `end_time` set; the one before it already shows processed == total.
        """
        while state.phase is not RunPhase.DONE:
            state = self.step(state, on_update)
        return state

    def _finish(self, state: PipelineState, on_update: Optional[StatsListener] = None) -> None:
        """Complete the run and emit the final snapshot, the only one with end_time set."""
        state.aggregator.complete()
        state.phase = RunPhase.DONE
        if on_update:
            on_update(state.stats.snapshot())


class SentimentPipeline:
    """
    Runs analyses one at a time.

    Starting a run (or resetting) while another run is in flight raises
    RunInProgressError; there is no cancellation.
    """

    def __init__(self, classifier, batch_size: int = None, delay_ms: int = None,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.time):
        self.classifier = classifier
        self.batch_size = batch_size
        self.delay_ms = delay_ms
        self._sleep = sleep
        self._clock = clock
        self._running = False
        self.state: Optional[PipelineState] = None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def stats(self) -> AnalysisStats:
        """Stats of the current run, or a zeroed summary when there is none."""
        if self.state is None:
            return AnalysisStats()
        return self.state.stats

    def run(self, records: Sequence[InputRecord], column_analyzed: str = "",
            on_update: Optional[StatsListener] = None,
            batch_size: int = None, delay_ms: int = None) -> PipelineState:
        """Classify every record with non-empty text and return the finished state."""
        if self._running:
            raise RunInProgressError("An analysis is already running; wait for it to finish")

        eligible = [r for r in records if r.text and r.text.strip()]
        dropped = len(records) - len(eligible)
        if dropped:
            logger.info(f"Skipping {dropped} records with empty text")

        scheduler = BatchScheduler(
            self.classifier,
            batch_size=batch_size if batch_size is not None else self.batch_size,
            delay_ms=delay_ms if delay_ms is not None else self.delay_ms,
            sleep=self._sleep,
        )
        self._running = True
        try:
            self.state = scheduler.prepare(eligible, column_analyzed, clock=self._clock)
            logger.info(
                f"Starting analysis of '{column_analyzed}': {len(eligible)} records in "
                f"{len(self.state.batches)} batches (batch size {scheduler.batch_size}, "
                f"delay {scheduler.delay_ms}ms)"
            )
            return scheduler.run(self.state, on_update)
        finally:
            self._running = False

    def reset(self) -> None:
        """Discard the current summary."""
        if self._running:
            raise RunInProgressError("Cannot reset while an analysis is running")
        self.state = None

    def export(self, timestamp: str = None) -> ExportedAnalysis:
        """Export the finished run in the interchange format."""
        from ..utils.data_prep import build_export

        if self.state is None or self.state.phase is not RunPhase.DONE:
            raise RuntimeError("No completed analysis to export")
        return build_export(self.state.column_analyzed, self.state.stats,
                            self.state.comments, timestamp=timestamp)
