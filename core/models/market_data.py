"""
Market data models

Pydantic models for market data structures:
- Candle: OHLCV candlestick delivered by the candle feed
"""

from pydantic import BaseModel, ConfigDict, Field


class Candle(BaseModel):
    """
    OHLCV candlestick

    Aggregated price data for one interval of a (pair, timeframe) stream.
    Immutable once received - indicators consume it read-only.

    Prices arrive from exchanges as strings or Decimals; pydantic coerces them
    to float since every indicator recurrence runs in float arithmetic.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: int = Field(description="Candle open time (epoch milliseconds)")
    open: float = Field(description="Opening price")
    high: float = Field(description="Highest price in interval")
    low: float = Field(description="Lowest price in interval")
    close: float = Field(description="Closing price")
    volume: float = Field(default=0.0, description="Total volume traded")

    @property
    def median_price(self) -> float:
        """(high + low) / 2, the Awesome Oscillator input"""
        return (self.high + self.low) / 2

    def to_dict(self) -> dict:
        """Convert to plain dictionary (JSON friendly)"""
        return {
            "timestamp": self.timestamp,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        }
