"""
Volume indicators

Implementations:
- OBV: On-Balance Volume with slope, EMA and z-score normalization
"""

import math
from collections import deque
from collections.abc import Sequence

from core.models.indicators import OBVReading
from core.models.market_data import Candle
from domain.indicators.helpers import (
    Divergence,
    ReadingHistory,
    check_windows,
    detect_divergence,
    ema_step,
    sma,
)

class OBV:
    """
    On-Balance Volume

    Formula:
        OBV += volume if close > previous close
        OBV -= volume if close < previous close
        slope = (OBV - OBV[-slope_window]) / slope_window × 100
        EMA of OBV seeded with the SMA of the first smoothing_ema values

    Normalization (normalize=True):
        z = (slope - mean(slopes)) / std(slopes), over every slope_window-step
        slope in the retained OBV history (2 × slope_window values), clamped
        to ±z_score_cap and rescaled to ±100. A flat slope series reads 0.

    The slope window keeps a sliding Welford mean and M2 so each tick is
    O(1); both are re-derived from the buffer once per full rotation to stop
    float drift from accumulating. A window of identical slopes is tracked
    by run length, so it reads exactly 0.

    Example:
        >>> obv = OBV(slope_window=14, smoothing_ema=5)
        >>> for candle in candles:
        ...     obv.update(candle)
        >>> obv.is_bullish()
        True
    """

    name = "obv"

    def __init__(
        self,
        slope_window: int = 14,
        smoothing_ema: int = 5,
        z_score_cap: float = 2.0,
        normalize: bool = True,
    ):
        """
        Initialize OBV

        Args:
            slope_window: OBV samples spanned by the slope (default: 14)
            smoothing_ema: EMA period over OBV (default: 5)
            z_score_cap: Absolute z-score clamp before rescaling (default: 2.0)
            normalize: Produce the ±100 normalized slope (default: True)
        """
        check_windows("OBV", slope_window=slope_window, smoothing_ema=smoothing_ema)
        self.slope_window = slope_window
        self.smoothing_ema = smoothing_ema
        self.z_score_cap = z_score_cap
        self.normalize = normalize
        self.params = {
            "slope_window": slope_window,
            "smoothing_ema": smoothing_ema,
            "z_score_cap": z_score_cap,
            "normalize": normalize,
        }
        self._history = ReadingHistory()
        self._obv_value = 0.0
        self._obv_history: deque[float] = deque(maxlen=2 * slope_window)
        self._sample_count = 0
        self._obv_ema: float | None = None
        self._previous_close: float | None = None
        self._slopes: deque[float] = deque(maxlen=slope_window)
        self._slope_mean = 0.0
        self._slope_m2 = 0.0
        self._slope_run = 0
        self._evictions = 0
        self._ready = False

    def update(self, candle: Candle) -> OBVReading | None:
        """Consume one candle, return the OBV reading once `slope_window` samples exist"""
        close = candle.close

        if self._previous_close is not None:
            if close > self._previous_close:
                self._obv_value += candle.volume
            elif close < self._previous_close:
                self._obv_value -= candle.volume
        self._previous_close = close

        self._obv_history.append(self._obv_value)
        self._sample_count += 1

        if self._sample_count == self.smoothing_ema:
            self._obv_ema = sma(self._obv_history, self.smoothing_ema)
        elif self._sample_count > self.smoothing_ema and self._obv_ema is not None:
            self._obv_ema = ema_step(self._obv_value, self._obv_ema, self.smoothing_ema)

        size = len(self._obv_history)
        if size > self.slope_window:
            self._push_slope(
                (self._obv_history[-1] - self._obv_history[-1 - self.slope_window])
                / self.slope_window
                * 100
            )

        if size < self.slope_window:
            return None

        self._ready = True
        old_obv = self._obv_history[size - self.slope_window]
        obv_slope = (self._obv_value - old_obv) / self.slope_window * 100

        normalized = None
        if self.normalize and self._slopes:
            normalized = self._normalize(obv_slope)

        reading = OBVReading(
            obv_value=self._obv_value,
            obv_slope=obv_slope,
            obv_ema=self._obv_ema,
            normalized=normalized,
            timestamp=candle.timestamp,
        )
        self._history.append(reading)
        return reading

    def _push_slope(self, slope: float) -> None:
        """Add a slope to the window, keeping the Welford mean and M2 in step"""
        if self._slopes and slope == self._slopes[-1]:
            self._slope_run += 1
        else:
            self._slope_run = 1

        if len(self._slopes) == self._slopes.maxlen:
            # Sliding update: replace the oldest sample in place
            evicted = self._slopes[0]
            old_mean = self._slope_mean
            self._slope_mean += (slope - evicted) / len(self._slopes)
            self._slope_m2 += (slope - evicted) * (slope - self._slope_mean + evicted - old_mean)
            self._slopes.append(slope)
            self._evictions += 1
        else:
            self._slopes.append(slope)
            delta = slope - self._slope_mean
            self._slope_mean += delta / len(self._slopes)
            self._slope_m2 += delta * (slope - self._slope_mean)

        if self._evictions >= self.slope_window:
            self._slope_mean = math.fsum(self._slopes) / len(self._slopes)
            self._slope_m2 = math.fsum((s - self._slope_mean) ** 2 for s in self._slopes)
            self._evictions = 0

    def _normalize(self, slope: float) -> float:
        """Z-score of `slope` against the slope window, clamped and scaled to ±100"""
        count = len(self._slopes)
        if self._slope_run >= count or self._slope_m2 <= 0.0:
            return 0.0

        z_score = (slope - self._slope_mean) / math.sqrt(self._slope_m2 / count)
        z_score = max(-self.z_score_cap, min(self.z_score_cap, z_score))
        return z_score / self.z_score_cap * 100

    def value(self) -> OBVReading | None:
        return self._history.latest() if self._ready else None

    def history(self, count: int = 10) -> list[OBVReading]:
        return self._history.last(count)

    def is_ready(self) -> bool:
        return self._ready

    def reset(self) -> None:
        self._history.clear()
        self._obv_value = 0.0
        self._obv_history.clear()
        self._sample_count = 0
        self._obv_ema = None
        self._previous_close = None
        self._slopes.clear()
        self._slope_mean = 0.0
        self._slope_m2 = 0.0
        self._slope_run = 0
        self._evictions = 0
        self._ready = False

    def warmup_period(self) -> int:
        return self.slope_window

    def is_bullish(self) -> bool:
        """Positive OBV slope (buying pressure)"""
        reading = self.value()
        return reading is not None and reading.obv_slope > 0

    def is_bearish(self) -> bool:
        """Negative OBV slope (selling pressure)"""
        reading = self.value()
        return reading is not None and reading.obv_slope < 0

    def detect_divergence(self, prices: Sequence[float]) -> Divergence | None:
        """Price vs OBV divergence over the last 3 readings"""
        if not self._ready:
            return None
        return detect_divergence([r.obv_value for r in self._history.last(3)], prices)

    def __repr__(self) -> str:
        return (
            f"OBV(slope_window={self.slope_window}, smoothing_ema={self.smoothing_ema}, "
            f"z_score_cap={self.z_score_cap}, normalize={self.normalize})"
        )
