"""
Data quality validator for incoming candles

Indicators trust their input: a NaN close or a negative volume would
silently poison every recurrence downstream. This validator rejects such
candles at the ingestion boundary, before they reach the engine.

Validates:
- Finite OHLCV values
- Non-negative volume
- OHLC consistency (low <= open/close <= high)
- Strictly increasing timestamps per (pair, timeframe)
"""

import logging
import math

from core.models.market_data import Candle

logger = logging.getLogger(__name__)


class CandleValidator:
    """
    Real-time candle validation

    Features:
    - Rejects malformed numeric input
    - Rejects out-of-order and duplicate candles per (pair, timeframe)
    - Tracks rejected counts
    """

    def __init__(self):
        self.last_timestamps: dict[tuple[str, str], int] = {}
        self.invalid_count = 0
        self.out_of_order_count = 0

    def validate_candle(
        self, pair: str, timeframe: str, candle: Candle
    ) -> tuple[bool, str | None]:
        """
        Validate candle data quality

        Checks:
        1. OHLCV values are finite
        2. Volume >= 0
        3. high >= low, open and close inside [low, high]
        4. Timestamp newer than the last accepted candle for this key

        Args:
            pair: Trading pair
            timeframe: Candle timeframe
            candle: Candle to validate

        Returns:
            (is_valid, error_message)
            - (True, None) if valid
            - (False, "error reason") if invalid

        Example:
            >>> validator = CandleValidator()
            >>> is_valid, error = validator.validate_candle("XBTUSDTM", "5m", candle)
            >>> if not is_valid:
            ...     logger.error(f"Invalid candle: {error}")
        """
        # 1. Finite values
        for field in ("open", "high", "low", "close", "volume"):
            value = getattr(candle, field)
            if not math.isfinite(value):
                self.invalid_count += 1
                return False, f"Non-finite {field}: {value}"

        # 2. Volume
        if candle.volume < 0:
            self.invalid_count += 1
            return False, f"Negative volume: {candle.volume}"

        # 3. OHLC consistency
        if candle.high < candle.low:
            self.invalid_count += 1
            return False, f"High below low: {candle.high} < {candle.low}"

        if not (candle.low <= candle.open <= candle.high) or not (
            candle.low <= candle.close <= candle.high
        ):
            self.invalid_count += 1
            return False, (
                f"Open/close outside range: o={candle.open} c={candle.close} "
                f"[{candle.low}, {candle.high}]"
            )

        # 4. Ordering (indicator recurrences depend on strict temporal order)
        key = (pair, timeframe)
        last_timestamp = self.last_timestamps.get(key)
        if last_timestamp is not None and candle.timestamp <= last_timestamp:
            self.out_of_order_count += 1
            return False, (
                f"Out-of-order candle for {pair}/{timeframe}: "
                f"{candle.timestamp} <= {last_timestamp}"
            )

        self.last_timestamps[key] = candle.timestamp
        return True, None

    def get_stats(self) -> dict[str, int]:
        """
        Get validation statistics

        Returns:
            Dictionary with:
            - invalid_count: Candles rejected for bad values
            - out_of_order_count: Candles rejected for ordering
            - streams_tracked: Number of (pair, timeframe) keys seen
        """
        return {
            "invalid_count": self.invalid_count,
            "out_of_order_count": self.out_of_order_count,
            "streams_tracked": len(self.last_timestamps),
        }

    def reset_stats(self) -> None:
        """Reset statistics counters"""
        self.invalid_count = 0
        self.out_of_order_count = 0
