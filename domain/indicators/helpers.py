"""
Shared numeric helpers for incremental indicators

Free functions over small bounded windows, plus the capped reading history
every indicator owns by composition.
"""

from collections import deque
from collections.abc import Iterable, Sequence
from enum import Enum
from itertools import islice

import numpy as np

from core.interfaces.indicators import HISTORY_LIMIT


class Divergence(str, Enum):
    """Price/indicator divergence direction"""

    BULLISH = "bullish"
    BEARISH = "bearish"


def check_windows(indicator: str, **windows: int) -> None:
    """
    Reject window lengths below 1

    Raises:
        ValueError: Naming the first offending parameter
    """
    for param, length in windows.items():
        if length < 1:
            raise ValueError(f"{indicator} {param} must be >= 1, got {length}")


def _tail(values: Sequence[float], period: int) -> list[float]:
    """Last `period` items of a list or deque"""
    return list(islice(values, len(values) - period, None))


def sma(values: Sequence[float], period: int) -> float | None:
    """
    Simple moving average of the last `period` values

    Returns:
        Mean, or None if fewer than `period` values are available
    """
    if period <= 0 or len(values) < period:
        return None
    return float(np.mean(_tail(values, period)))


def ema_step(value: float, previous: float, period: int) -> float:
    """
    One EMA recurrence step

    Formula: EMA = (value - EMA_prev) × α + EMA_prev, α = 2 / (period + 1)
    """
    multiplier = 2 / (period + 1)
    return (value - previous) * multiplier + previous


def std_dev(values: Sequence[float], period: int) -> float | None:
    """Population standard deviation of the last `period` values"""
    if period <= 0 or len(values) < period:
        return None
    return float(np.std(_tail(values, period)))


def highest(values: Iterable[float]) -> float:
    """Highest value in the window"""
    return max(values)


def lowest(values: Iterable[float]) -> float:
    """Lowest value in the window"""
    return min(values)


def detect_divergence(
    indicator_values: Sequence[float],
    prices: Sequence[float],
) -> Divergence | None:
    """
    Basic 3-point divergence between price and an indicator series

    Compares the newest point against the one two steps back:
    - Bullish: price makes a lower low, indicator a higher low
    - Bearish: price makes a higher high, indicator a lower high

    Args:
        indicator_values: Indicator series, most-recent-last
        prices: Price series, most-recent-last

    Returns:
        Divergence, or None with fewer than 3 points on either side
    """
    if len(indicator_values) < 3 or len(prices) < 3:
        return None

    ind = _tail(indicator_values, 3)
    px = _tail(prices, 3)

    if px[2] < px[0] and ind[2] > ind[0]:
        return Divergence.BULLISH
    if px[2] > px[0] and ind[2] < ind[0]:
        return Divergence.BEARISH
    return None


class ReadingHistory:
    """
    Capped, most-recent-last store of readings

    Holds at most `limit` readings; appending beyond that evicts the oldest.
    """

    def __init__(self, limit: int = HISTORY_LIMIT):
        self._values: deque = deque(maxlen=limit)

    def append(self, reading) -> None:
        self._values.append(reading)

    def latest(self):
        return self._values[-1] if self._values else None

    def last(self, count: int) -> list:
        """Up to `count` most recent readings, most-recent-last"""
        if count <= 0:
            return []
        return _tail(self._values, min(count, len(self._values)))

    def clear(self) -> None:
        self._values.clear()

    def __len__(self) -> int:
        return len(self._values)
