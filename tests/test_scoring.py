"""Tests for the rolling smoother and derived metrics."""

import pytest
from hypothesis import given, settings, strategies as st

from sentipulse.core.models import AnalysisStats
from sentipulse.core.scoring import (
    average_engagement,
    brand_sentiment,
    evaluation_time,
    net_sentiment_score,
    processing_speed,
    share,
    smooth,
    trend_value,
    verified_brand_sentiment,
    window_size,
)


class TestWindowSize:
    """Test the smoother window law."""

    @pytest.mark.parametrize("length", [0, 1, 5, 29])
    def test_short_histories_use_three(self, length):
        assert window_size(length) == 3

    def test_grows_with_length(self):
        assert window_size(30) == 3
        assert window_size(40) == 4
        assert window_size(105) == 10
        assert window_size(1000) == 100


class TestSmooth:
    """Test the trailing moving average."""

    def test_empty(self):
        assert smooth([]) == []

    def test_trailing_window_of_three(self):
        history = [100, 100, -100, 0, 100]
        expected = [100.0, 100.0, 100 / 3, 0.0, 0.0]
        assert smooth(history) == pytest.approx(expected)

    def test_window_from_own_length(self):
        history = [100] * 20 + [-100] * 20  # w = 4
        smoothed = smooth(history)
        assert smoothed[19] == pytest.approx(100.0)
        assert smoothed[20] == pytest.approx(50.0)
        assert smoothed[23] == pytest.approx(-100.0)

    def test_does_not_modify_input(self):
        history = [0, 100, -100]
        smooth(history)
        assert history == [0, 100, -100]

    @given(st.lists(st.sampled_from([100, 0, -100]), max_size=200))
    @settings(max_examples=100, deadline=None)
    def test_same_length_and_first_value(self, history):
        smoothed = smooth(history)
        assert len(smoothed) == len(history)
        if history:
            assert smoothed[0] == history[0]
        assert all(-100 <= v <= 100 for v in smoothed)

    @given(st.lists(st.floats(min_value=-100, max_value=100, allow_nan=False), min_size=1, max_size=120))
    @settings(max_examples=100, deadline=None)
    def test_matches_window_mean(self, history):
        w = window_size(len(history))
        smoothed = smooth(history)
        i = len(history) - 1
        window = history[max(0, i - w + 1):]
        assert smoothed[i] == sum(window) / len(window)


class TestDerivedMetrics:
    """Test brand sentiment, net sentiment score and friends."""

    def test_brand_sentiment(self):
        stats = AnalysisStats(total=10, positive=6, negative=2, neutral=2)
        assert brand_sentiment(stats) == pytest.approx(75.0)

    def test_brand_sentiment_without_polar_comments(self):
        stats = AnalysisStats(total=4, neutral=4)
        assert brand_sentiment(stats) == 0

    def test_net_sentiment_score_uses_total(self):
        stats = AnalysisStats(total=10, processed=10, positive=6, negative=2, neutral=2)
        assert net_sentiment_score(stats) == pytest.approx(40.0)

    def test_net_sentiment_score_empty(self):
        assert net_sentiment_score(AnalysisStats()) == 0

    def test_share(self):
        assert share(1, 4) == pytest.approx(25.0)
        assert share(3, 0) == 0

    def test_verified_brand_sentiment(self):
        stats = AnalysisStats(verified_total=3, verified_positive=1, verified_negative=1, verified_neutral=1)
        assert verified_brand_sentiment(stats) == pytest.approx(50.0)

    def test_average_engagement(self):
        assert average_engagement(AnalysisStats()) == 0
        assert average_engagement(AnalysisStats(processed=4, total_engagement=10)) == pytest.approx(2.5)

    def test_recomputing_is_deterministic(self):
        stats = AnalysisStats(total=7, processed=7, positive=3, negative=3, neutral=1)
        assert brand_sentiment(stats) == brand_sentiment(stats)
        assert net_sentiment_score(stats) == net_sentiment_score(stats)


class TestTiming:
    """Test evaluation time and processing speed."""

    def test_incomplete_run(self):
        stats = AnalysisStats(total=5, start_time=100.0)
        assert evaluation_time(stats) == 0
        assert processing_speed(stats) == 0

    def test_complete_run(self):
        stats = AnalysisStats(total=10, processed=10, start_time=100.0, end_time=104.0)
        assert evaluation_time(stats) == pytest.approx(4.0)
        assert processing_speed(stats) == "2.5"

    def test_zero_duration(self):
        stats = AnalysisStats(total=3, processed=3, start_time=5.0, end_time=5.0)
        assert processing_speed(stats) == 0


def test_trend_value():
    assert trend_value([1.0, 2.0], 1) == 2.0
    assert trend_value([1.0, 2.0], 2) is None
