"""
Momentum oscillators

Implementations:
- RSI: Relative Strength Index (Wilder smoothing)
- WilliamsR: Williams Percent Range
- KDJ: Stochastic oscillator with J line

All three are incremental: each update() is O(lookback) at worst and keeps
only lookback-sized buffers.
"""

from collections import deque
from collections.abc import Sequence

from core.models.indicators import KDJReading, RSIReading, WilliamsRReading
from core.models.market_data import Candle
from domain.indicators.helpers import (
    Divergence,
    ReadingHistory,
    check_windows,
    detect_divergence,
    highest,
    lowest,
    sma,
)


class RSI:
    """
    Relative Strength Index

    Formula:
        seed:     avg = mean of the first `period` gains (losses)
        then:     avg = (avg × (period - 1) + sample) / period
        RS = avg_gain / avg_loss
        RSI = 100 - (100 / (1 + RS)), or 100 when avg_loss == 0

    The first candle only seeds the previous close, so the first reading
    arrives on candle `period + 1`.

    Example:
        >>> rsi = RSI(period=14)
        >>> for candle in candles:
        ...     reading = rsi.update(candle)
        >>> if rsi.is_oversold():
        ...     print("Oversold")
    """

    name = "rsi"

    def __init__(self, period: int = 14):
        """
        Initialize RSI

        Args:
            period: Smoothing period (default: 14)
        """
        check_windows("RSI", period=period)
        self.period = period
        self.params = {"period": period}
        self._history = ReadingHistory()
        self._gains: deque[float] = deque(maxlen=period)
        self._losses: deque[float] = deque(maxlen=period)
        self._avg_gain = 0.0
        self._avg_loss = 0.0
        self._previous_close: float | None = None
        self._ready = False

    def update(self, candle: Candle) -> RSIReading | None:
        """Consume one candle, return the new reading once warmed up"""
        close = candle.close

        if self._previous_close is None:
            self._previous_close = close
            return None

        change = close - self._previous_close
        self._previous_close = close
        gain = change if change > 0 else 0.0
        loss = -change if change < 0 else 0.0

        self._gains.append(gain)
        self._losses.append(loss)

        if self._ready:
            # Wilder smoothing
            self._avg_gain = (self._avg_gain * (self.period - 1) + gain) / self.period
            self._avg_loss = (self._avg_loss * (self.period - 1) + loss) / self.period
        elif len(self._gains) == self.period:
            self._avg_gain = sma(self._gains, self.period)
            self._avg_loss = sma(self._losses, self.period)
            self._ready = True
        else:
            return None

        if self._avg_loss == 0:
            rsi = 100.0
        else:
            rs = self._avg_gain / self._avg_loss
            rsi = 100 - (100 / (1 + rs))

        reading = RSIReading(
            rsi=rsi,
            avg_gain=self._avg_gain,
            avg_loss=self._avg_loss,
            timestamp=candle.timestamp,
        )
        self._history.append(reading)
        return reading

    def value(self) -> RSIReading | None:
        return self._history.latest() if self._ready else None

    def history(self, count: int = 10) -> list[RSIReading]:
        return self._history.last(count)

    def is_ready(self) -> bool:
        return self._ready

    def reset(self) -> None:
        self._history.clear()
        self._gains.clear()
        self._losses.clear()
        self._avg_gain = 0.0
        self._avg_loss = 0.0
        self._previous_close = None
        self._ready = False

    def warmup_period(self) -> int:
        return self.period + 1

    def is_oversold(self, threshold: float = 30) -> bool:
        """RSI below threshold (default 30)"""
        reading = self.value()
        return reading is not None and reading.rsi < threshold

    def is_overbought(self, threshold: float = 70) -> bool:
        """RSI above threshold (default 70)"""
        reading = self.value()
        return reading is not None and reading.rsi > threshold

    def detect_divergence(self, prices: Sequence[float]) -> Divergence | None:
        """Price vs RSI divergence over the last 3 readings"""
        if not self._ready:
            return None
        return detect_divergence([r.rsi for r in self._history.last(3)], prices)

    def __repr__(self) -> str:
        return f"RSI(period={self.period})"


class WilliamsR:
    """
    Williams Percent Range

    Formula:
        %R = (Highest High - Close) / (Highest High - Lowest Low) × -100

    Range: -100 (at the low) to 0 (at the high).

    A window with no range (Highest High == Lowest Low) has no defined
    position; it reads -50, the midpoint, instead of dividing by zero.

    Interpretation:
        - %R <= -80: Oversold
        - %R >= -20: Overbought
    """

    name = "williams_r"

    # Reading for a flat window (zero high/low range)
    FLAT_RANGE_VALUE = -50.0

    def __init__(self, period: int = 14):
        check_windows("WilliamsR", period=period)
        self.period = period
        self.params = {"period": period}
        self._history = ReadingHistory()
        self._highs: deque[float] = deque(maxlen=period)
        self._lows: deque[float] = deque(maxlen=period)
        self._closes: deque[float] = deque(maxlen=period)
        self._ready = False

    def update(self, candle: Candle) -> WilliamsRReading | None:
        """Consume one candle, return the new reading once `period` candles exist"""
        self._highs.append(candle.high)
        self._lows.append(candle.low)
        self._closes.append(candle.close)

        if len(self._highs) < self.period:
            return None

        highest_high = highest(self._highs)
        lowest_low = lowest(self._lows)

        if highest_high == lowest_low:
            williams_r = self.FLAT_RANGE_VALUE
        else:
            williams_r = (highest_high - candle.close) / (highest_high - lowest_low) * -100

        reading = WilliamsRReading(
            williams_r=williams_r,
            highest_high=highest_high,
            lowest_low=lowest_low,
            timestamp=candle.timestamp,
        )
        self._history.append(reading)
        self._ready = True
        return reading

    def value(self) -> WilliamsRReading | None:
        return self._history.latest() if self._ready else None

    def history(self, count: int = 10) -> list[WilliamsRReading]:
        return self._history.last(count)

    def is_ready(self) -> bool:
        return self._ready

    def reset(self) -> None:
        self._history.clear()
        self._highs.clear()
        self._lows.clear()
        self._closes.clear()
        self._ready = False

    def warmup_period(self) -> int:
        return self.period

    def is_oversold(self, threshold: float = -80) -> bool:
        """%R at or below threshold (default -80)"""
        reading = self.value()
        return reading is not None and reading.williams_r <= threshold

    def is_overbought(self, threshold: float = -20) -> bool:
        """%R at or above threshold (default -20)"""
        reading = self.value()
        return reading is not None and reading.williams_r >= threshold

    def __repr__(self) -> str:
        return f"WilliamsR(period={self.period})"


class KDJ:
    """
    KDJ - stochastic oscillator extended with a J line

    Formula:
        RSV = (Close - Lowest Low) / (Highest High - Lowest Low) × 100
              (50 when the window has no range)
        K   = RSV on the first tick, then (K_prev × (smooth - 1) + RSV) / smooth
        D   = SMA of the K buffer the first time it holds d_period values,
              then (D_prev × (smooth - 1) + K) / smooth
        J   = 3K - 2D

    Note:
        D reuses K's smoothing constant after its SMA seed, unlike the
        textbook KDJ (independent D smoothing).

    Interpretation (J line):
        - J < 20: Oversold
        - J > 80: Overbought
        - K crosses above D: Golden cross
        - K crosses below D: Death cross
    """

    name = "kdj"

    def __init__(self, k_period: int = 9, d_period: int = 3, smooth: int = 3):
        """
        Initialize KDJ

        Args:
            k_period: RSV lookback (default: 9)
            d_period: K values averaged for the D seed (default: 3)
            smooth: Smoothing constant shared by K and D (default: 3)
        """
        check_windows("KDJ", k_period=k_period, d_period=d_period, smooth=smooth)
        self.k_period = k_period
        self.d_period = d_period
        self.smooth = smooth
        self.params = {"k_period": k_period, "d_period": d_period, "smooth": smooth}
        self._history = ReadingHistory()
        self._highs: deque[float] = deque(maxlen=k_period)
        self._lows: deque[float] = deque(maxlen=k_period)
        self._closes: deque[float] = deque(maxlen=k_period)
        self._k_values: deque[float] = deque(maxlen=d_period)
        self._d_value: float | None = None
        self._ready = False

    def update(self, candle: Candle) -> KDJReading | None:
        """Consume one candle, return {k, d, j} once both buffers are full"""
        self._highs.append(candle.high)
        self._lows.append(candle.low)
        self._closes.append(candle.close)

        if len(self._highs) < self.k_period:
            return None

        highest_high = highest(self._highs)
        lowest_low = lowest(self._lows)

        if highest_high == lowest_low:
            rsv = 50.0
        else:
            rsv = (candle.close - lowest_low) / (highest_high - lowest_low) * 100

        if not self._k_values:
            k = rsv
        else:
            k = (self._k_values[-1] * (self.smooth - 1) + rsv) / self.smooth
        self._k_values.append(k)

        if len(self._k_values) < self.d_period:
            return None

        if self._d_value is None:
            d = sma(self._k_values, self.d_period)
        else:
            d = (self._d_value * (self.smooth - 1) + k) / self.smooth
        self._d_value = d

        reading = KDJReading(k=k, d=d, j=3 * k - 2 * d, timestamp=candle.timestamp)
        self._history.append(reading)
        self._ready = True
        return reading

    def value(self) -> KDJReading | None:
        return self._history.latest() if self._ready else None

    def history(self, count: int = 10) -> list[KDJReading]:
        return self._history.last(count)

    def is_ready(self) -> bool:
        return self._ready

    def reset(self) -> None:
        self._history.clear()
        self._highs.clear()
        self._lows.clear()
        self._closes.clear()
        self._k_values.clear()
        self._d_value = None
        self._ready = False

    def warmup_period(self) -> int:
        return self.k_period + self.d_period - 1

    def is_oversold(self, threshold: float = 20) -> bool:
        """J line below threshold (default 20)"""
        reading = self.value()
        return reading is not None and reading.j < threshold

    def is_overbought(self, threshold: float = 80) -> bool:
        """J line above threshold (default 80)"""
        reading = self.value()
        return reading is not None and reading.j > threshold

    def is_golden_cross(self) -> bool:
        """K crossed above D on the latest tick"""
        if len(self._history) < 2:
            return False
        previous, current = self._history.last(2)
        return previous.k < previous.d and current.k > current.d

    def is_death_cross(self) -> bool:
        """K crossed below D on the latest tick"""
        if len(self._history) < 2:
            return False
        previous, current = self._history.last(2)
        return previous.k > previous.d and current.k < current.d

    def __repr__(self) -> str:
        return f"KDJ(k_period={self.k_period}, d_period={self.d_period}, smooth={self.smooth})"
