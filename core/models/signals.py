"""
Signal models

- SignalType: the seven-step signal scale produced by the scorer
- ScoreResult: raw scorer output for one readings bundle
- Signal: a scored signal bound to a (pair, timeframe)
- AlignmentEntry: latest signal held by the aligner for one role
- AlignedSignal: primary/secondary agreement with a confidence score
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class SignalType(str, Enum):
    """Signal scale, strongest buy to strongest sell"""

    STRONG_BUY = "STRONG_BUY"
    BUY = "BUY"
    BUY_WEAK = "BUY_WEAK"
    NEUTRAL = "NEUTRAL"
    SELL_WEAK = "SELL_WEAK"
    SELL = "SELL"
    STRONG_SELL = "STRONG_SELL"


Direction = Literal["BUY", "SELL", "NEUTRAL"]


class ScoreResult(BaseModel):
    """Output of the external scorer for one readings bundle"""

    model_config = ConfigDict(frozen=True)

    signal: SignalType
    score: float = Field(description="Signed score, positive = bullish")
    strength: str | None = Field(default=None, description="Free-form strength label")


class Signal(BaseModel):
    """
    Scored signal for one (pair, timeframe)

    Produced by the engine from a ScoreResult, consumed by the aligner and
    the emitter.
    """

    model_config = ConfigDict(frozen=True)

    pair: str
    timeframe: str
    signal: SignalType
    score: float
    timestamp: int = Field(description="Timestamp of the candle that triggered the signal")
    strength: str | None = None

    @property
    def direction(self) -> Direction:
        """
        Direction by substring match on the signal type

        "BUY" is checked before "SELL"; anything else is NEUTRAL.
        """
        value = self.signal.value
        if "BUY" in value:
            return "BUY"
        if "SELL" in value:
            return "SELL"
        return "NEUTRAL"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON emission"""
        return {
            "pair": self.pair,
            "timeframe": self.timeframe,
            "signal": self.signal.value,
            "score": self.score,
            "strength": self.strength,
            "timestamp": self.timestamp,
        }


class AlignmentEntry(BaseModel):
    """Latest signal for one (pair, role) plus the time the aligner received it"""

    model_config = ConfigDict(frozen=True)

    signal: Signal
    received_at: int = Field(description="Receipt time (epoch milliseconds)")

    def age(self, now: int) -> int:
        """Age in milliseconds relative to `now`"""
        return now - self.received_at


class AlignedSignal(BaseModel):
    """
    Primary and secondary timeframes agreeing on a direction

    Ephemeral: built on demand by the aligner, never stored.
    """

    model_config = ConfigDict(frozen=True)

    pair: str
    direction: Literal["BUY", "SELL"]
    confidence: float = Field(ge=0, le=100)
    primary: AlignmentEntry
    secondary: AlignmentEntry
    aligned_at: int

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON emission"""
        return {
            "pair": self.pair,
            "direction": self.direction,
            "confidence": self.confidence,
            "primary": {
                **self.primary.signal.to_dict(),
                "received_at": self.primary.received_at,
            },
            "secondary": {
                **self.secondary.signal.to_dict(),
                "received_at": self.secondary.received_at,
            },
            "aligned_at": self.aligned_at,
        }
