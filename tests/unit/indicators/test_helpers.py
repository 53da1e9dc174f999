"""
Unit tests for shared indicator helpers
"""

from collections import deque

import pytest

from domain.indicators.helpers import (
    Divergence,
    ReadingHistory,
    check_windows,
    detect_divergence,
    ema_step,
    highest,
    lowest,
    sma,
    std_dev,
)


@pytest.mark.unit
class TestNumericHelpers:
    def test_sma_uses_last_period_values(self):
        assert sma([1.0, 2.0, 3.0, 4.0, 5.0], 3) == pytest.approx(4.0)

    def test_sma_on_deque(self):
        assert sma(deque([2.0, 4.0, 6.0], maxlen=3), 2) == pytest.approx(5.0)

    def test_sma_insufficient_data(self):
        assert sma([1.0, 2.0], 3) is None
        assert sma([1.0, 2.0], 0) is None

    def test_ema_step(self):
        """α = 2/(period+1): period 3 → α = 0.5"""
        assert ema_step(10.0, 6.0, 3) == pytest.approx(8.0)

    def test_std_dev_population(self):
        assert std_dev([2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0], 8) == pytest.approx(2.0)
        assert std_dev([1.0], 2) is None

    def test_highest_lowest(self):
        window = deque([3.0, 9.0, 1.0, 4.0])
        assert highest(window) == 9.0
        assert lowest(window) == 1.0

    def test_check_windows_accepts_positive(self):
        check_windows("KDJ", k_period=9, d_period=1)

    @pytest.mark.parametrize("length", [0, -3])
    def test_check_windows_rejects_below_one(self, length):
        with pytest.raises(ValueError, match="RSI period must be >= 1"):
            check_windows("RSI", period=length)


@pytest.mark.unit
class TestDetectDivergence:
    def test_bullish(self):
        """Price lower low, indicator higher low"""
        assert detect_divergence([20.0, 25.0, 28.0], [100.0, 98.0, 95.0]) == Divergence.BULLISH

    def test_bearish(self):
        """Price higher high, indicator lower high"""
        assert detect_divergence([80.0, 75.0, 70.0], [100.0, 103.0, 105.0]) == Divergence.BEARISH

    def test_no_divergence_when_confirming(self):
        assert detect_divergence([20.0, 25.0, 30.0], [100.0, 102.0, 105.0]) is None

    def test_needs_three_points(self):
        assert detect_divergence([1.0, 2.0], [3.0, 2.0, 1.0]) is None
        assert detect_divergence([1.0, 2.0, 3.0], [3.0, 2.0]) is None

    def test_only_last_three_points_count(self):
        indicator = [90.0, 10.0, 20.0, 30.0]
        prices = [50.0, 100.0, 98.0, 95.0]
        assert detect_divergence(indicator, prices) == Divergence.BULLISH


@pytest.mark.unit
class TestReadingHistory:
    def test_capped(self):
        history = ReadingHistory(limit=3)
        for i in range(5):
            history.append(i)

        assert len(history) == 3
        assert history.last(10) == [2, 3, 4]
        assert history.latest() == 4

    def test_last_count(self):
        history = ReadingHistory()
        for i in range(5):
            history.append(i)

        assert history.last(2) == [3, 4]
        assert history.last(0) == []

    def test_empty(self):
        history = ReadingHistory()
        assert history.latest() is None
        assert history.last(5) == []

    def test_clear(self):
        history = ReadingHistory()
        history.append("a")
        history.clear()
        assert len(history) == 0
