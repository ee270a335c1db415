"""Shared fixtures for Sentipulse tests."""

import pytest

from sentipulse.core.models import InputRecord, SentimentResult


class ScriptedClassifier:
    """Returns pre-set labels in order and records every batch it receives."""

    def __init__(self, labels=None, scores=None):
        self.labels = list(labels or [])
        self.scores = list(scores or [])
        self.calls = []
        self._cursor = 0

    def classify_batch(self, texts):
        self.calls.append(list(texts))
        results = []
        for _ in texts:
            i = self._cursor
            label = self.labels[i] if i < len(self.labels) else "neutral"
            score = self.scores[i] if i < len(self.scores) else 0.0
            results.append(SentimentResult(sentiment=label, score=score))
            self._cursor += 1
        return results


class FakeClock:
    """Monotonic clock that advances a fixed step per call."""

    def __init__(self, start=1_700_000_000.0, step=0.5):
        self.now = start
        self.step = step

    def __call__(self):
        value = self.now
        self.now += self.step
        return value


@pytest.fixture
def make_records():
    def _make(count, verified=(), engagement=None):
        return [
            InputRecord(
                text=f"comment {i}",
                is_verified=i in verified,
                engagement=(engagement[i] if engagement else 0.0),
            )
            for i in range(count)
        ]
    return _make


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def scripted():
    """The ScriptedClassifier class, for building classifiers with custom labels."""
    return ScriptedClassifier


@pytest.fixture
def make_analysis(make_records):
    """Run a scripted pipeline over len(labels) records and export it."""
    from sentipulse.core.scheduler import SentimentPipeline

    def _make(labels, column="comment", verified=(), engagement=None, scores=None):
        pipeline = SentimentPipeline(
            ScriptedClassifier(labels, scores),
            batch_size=2,
            delay_ms=0,
            clock=FakeClock(),
        )
        pipeline.run(make_records(len(labels), verified, engagement), column)
        return pipeline.export(timestamp="2026-01-01T00:00:00+00:00")
    return _make
