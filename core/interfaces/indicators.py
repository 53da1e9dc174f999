"""
Interface for incremental technical indicators

Every indicator is a bounded-memory state machine fed one candle at a time.
"""

from typing import Protocol, runtime_checkable

from core.models.indicators import IndicatorReading
from core.models.market_data import Candle

# Readings kept per indicator instance (oldest evicted first)
HISTORY_LIMIT = 100


@runtime_checkable
class Indicator(Protocol):
    """
    Incremental indicator interface

    Design principle:
    - Pure calculation logic (no I/O, never blocks)
    - One instance per (pair, timeframe), fed in timestamp order
    - Internal buffers never exceed the indicator's lookback window

    Implementations:
    - RSI, WilliamsR, KDJ (domain/indicators/momentum.py)
    - MACD, AwesomeOscillator (domain/indicators/trend.py)
    - OBV (domain/indicators/volume.py)

    Precondition:
        Candles arrive with non-decreasing timestamps. Out-of-order or
        duplicate candles are not detected here; the ingestion validator
        (core/validators/market_data.py) rejects them upstream. NaN prices or
        negative volume are not validated either and will propagate.
    """

    name: str

    def update(self, candle: Candle) -> IndicatorReading | None:
        """
        Consume one candle

        Returns:
            The new reading, or None while warming up
        """
        ...

    def value(self) -> IndicatorReading | None:
        """Latest reading, or None if not ready"""
        ...

    def history(self, count: int = 10) -> list[IndicatorReading]:
        """Up to `count` most recent readings, most-recent-last"""
        ...

    def is_ready(self) -> bool:
        """True once the first reading was produced (monotonic until reset)"""
        ...

    def reset(self) -> None:
        """Clear all state; the indicator warms up again from scratch"""
        ...

    def warmup_period(self) -> int:
        """Number of candles consumed before the first reading"""
        ...
