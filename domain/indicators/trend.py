"""
Trend-convergence indicators

Implementations:
- MACD: Moving Average Convergence Divergence
- AwesomeOscillator: Bill Williams' Awesome Oscillator
"""

from collections import deque
from collections.abc import Sequence

from core.models.indicators import AOReading, MACDReading
from core.models.market_data import Candle
from domain.indicators.helpers import (
    Divergence,
    ReadingHistory,
    check_windows,
    detect_divergence,
    ema_step,
    sma,
)


class MACD:
    """
    Moving Average Convergence Divergence

    Components:
        - MACD Line = EMA(fast) - EMA(slow)
        - Signal Line = EMA(signal) of MACD Line
        - Histogram = MACD Line - Signal Line

    Every EMA is seeded with the simple average of its first `period`
    inputs, then follows EMA = (x - EMA_prev) × 2/(period+1) + EMA_prev.

    The MACD line exists from candle max(fast, slow); the signal line needs
    `signal` MACD values, so the first reading arrives on candle
    max(fast, slow) + signal - 1.

    Interpretation:
        - Histogram turns positive: Bullish crossover
        - Histogram turns negative: Bearish crossover

    Example:
        >>> macd = MACD(fast_period=12, slow_period=26, signal_period=9)
        >>> for candle in candles:
        ...     macd.update(candle)
        >>> macd.is_bullish_crossover()
        False
    """

    name = "macd"

    def __init__(
        self, fast_period: int = 12, slow_period: int = 26, signal_period: int = 9
    ):
        """
        Initialize MACD

        Args:
            fast_period: Fast EMA period (default: 12)
            slow_period: Slow EMA period (default: 26)
            signal_period: Signal line EMA period (default: 9)
        """
        check_windows(
            "MACD", fast_period=fast_period, slow_period=slow_period, signal_period=signal_period
        )
        self.fast_period = fast_period
        self.slow_period = slow_period
        self.signal_period = signal_period
        self.params = {
            "fast_period": fast_period,
            "slow_period": slow_period,
            "signal_period": signal_period,
        }
        self._history = ReadingHistory()
        # Only the seed windows are ever averaged
        self._closes: deque[float] = deque(maxlen=max(fast_period, slow_period))
        self._macd_line: deque[float] = deque(maxlen=signal_period)
        self._close_count = 0
        self._macd_count = 0
        self._fast_ema: float | None = None
        self._slow_ema: float | None = None
        self._signal_ema: float | None = None
        self._ready = False

    def update(self, candle: Candle) -> MACDReading | None:
        """Consume one candle, return {macd_line, signal_line, histogram} once warmed up"""
        close = candle.close
        self._closes.append(close)
        self._close_count += 1

        self._fast_ema = self._step(self._fast_ema, close, self.fast_period)
        self._slow_ema = self._step(self._slow_ema, close, self.slow_period)

        if self._fast_ema is None or self._slow_ema is None:
            return None

        macd_value = self._fast_ema - self._slow_ema
        self._macd_line.append(macd_value)
        self._macd_count += 1

        if self._macd_count == self.signal_period:
            self._signal_ema = sma(self._macd_line, self.signal_period)
            self._ready = True
        elif self._macd_count > self.signal_period and self._signal_ema is not None:
            self._signal_ema = ema_step(macd_value, self._signal_ema, self.signal_period)

        if not self._ready:
            return None

        reading = MACDReading(
            macd_line=macd_value,
            signal_line=self._signal_ema,
            histogram=macd_value - self._signal_ema,
            timestamp=candle.timestamp,
        )
        self._history.append(reading)
        return reading

    def _step(self, ema: float | None, close: float, period: int) -> float | None:
        """Advance one close-price EMA: SMA seed at `period`, recurrence after"""
        if self._close_count == period:
            return sma(self._closes, period)
        if self._close_count > period and ema is not None:
            return ema_step(close, ema, period)
        return ema

    def value(self) -> MACDReading | None:
        return self._history.latest() if self._ready else None

    def history(self, count: int = 10) -> list[MACDReading]:
        return self._history.last(count)

    def is_ready(self) -> bool:
        return self._ready

    def reset(self) -> None:
        self._history.clear()
        self._closes.clear()
        self._macd_line.clear()
        self._close_count = 0
        self._macd_count = 0
        self._fast_ema = None
        self._slow_ema = None
        self._signal_ema = None
        self._ready = False

    def warmup_period(self) -> int:
        return max(self.fast_period, self.slow_period) + self.signal_period - 1

    def is_bullish_crossover(self) -> bool:
        """MACD crossed above signal (histogram negative -> positive)"""
        if len(self._history) < 2:
            return False
        previous, current = self._history.last(2)
        return previous.histogram < 0 and current.histogram > 0

    def is_bearish_crossover(self) -> bool:
        """MACD crossed below signal (histogram positive -> negative)"""
        if len(self._history) < 2:
            return False
        previous, current = self._history.last(2)
        return previous.histogram > 0 and current.histogram < 0

    def detect_divergence(self, prices: Sequence[float]) -> Divergence | None:
        """Price vs histogram divergence over the last 3 readings"""
        if not self._ready:
            return None
        return detect_divergence([r.histogram for r in self._history.last(3)], prices)

    def __repr__(self) -> str:
        return (
            f"MACD(fast_period={self.fast_period}, slow_period={self.slow_period}, "
            f"signal_period={self.signal_period})"
        )


class AwesomeOscillator:
    """
    Awesome Oscillator

    Formula:
        Median Price = (High + Low) / 2
        AO = SMA(Median, fast) - SMA(Median, slow)

    Interpretation:
        - AO crosses above zero: Bullish
        - AO crosses below zero: Bearish
        - Three negative bars, dipping then recovering: Bullish twin peaks
    """

    name = "ao"

    def __init__(self, fast_period: int = 5, slow_period: int = 34):
        check_windows("AO", fast_period=fast_period, slow_period=slow_period)
        self.fast_period = fast_period
        self.slow_period = slow_period
        self.params = {"fast_period": fast_period, "slow_period": slow_period}
        self._history = ReadingHistory()
        self._median_prices: deque[float] = deque(maxlen=slow_period)
        self._fast_sma: float | None = None
        self._slow_sma: float | None = None
        self._ready = False

    def update(self, candle: Candle) -> AOReading | None:
        """Consume one candle, return the AO reading once `slow_period` candles exist"""
        self._median_prices.append(candle.median_price)

        if len(self._median_prices) >= self.fast_period:
            self._fast_sma = sma(self._median_prices, self.fast_period)
        if len(self._median_prices) >= self.slow_period:
            self._slow_sma = sma(self._median_prices, self.slow_period)

        if self._fast_sma is None or self._slow_sma is None:
            return None

        reading = AOReading(
            ao=self._fast_sma - self._slow_sma,
            fast_sma=self._fast_sma,
            slow_sma=self._slow_sma,
            timestamp=candle.timestamp,
        )
        self._history.append(reading)
        self._ready = True
        return reading

    def value(self) -> AOReading | None:
        return self._history.latest() if self._ready else None

    def history(self, count: int = 10) -> list[AOReading]:
        return self._history.last(count)

    def is_ready(self) -> bool:
        return self._ready

    def reset(self) -> None:
        self._history.clear()
        self._median_prices.clear()
        self._fast_sma = None
        self._slow_sma = None
        self._ready = False

    def warmup_period(self) -> int:
        return self.slow_period

    def is_bullish_crossover(self) -> bool:
        """AO crossed above zero on the latest tick"""
        if len(self._history) < 2:
            return False
        previous, current = self._history.last(2)
        return previous.ao < 0 and current.ao > 0

    def is_bearish_crossover(self) -> bool:
        """AO crossed below zero on the latest tick"""
        if len(self._history) < 2:
            return False
        previous, current = self._history.last(2)
        return previous.ao > 0 and current.ao < 0

    def is_twin_peaks_bullish(self) -> bool:
        """Three negative bars where the middle one is the deepest"""
        if len(self._history) < 3:
            return False
        first, second, third = (r.ao for r in self._history.last(3))
        return first < 0 and second < 0 and third < 0 and second < first and third > second

    def __repr__(self) -> str:
        return f"AwesomeOscillator(fast_period={self.fast_period}, slow_period={self.slow_period})"
