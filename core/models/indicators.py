"""
Indicator reading models

One frozen pydantic model per indicator kind, discriminated by `kind`.
A reading is what an indicator emits on every ready tick and what the
scorer receives inside the readings bundle.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class _Reading(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: int = Field(description="Timestamp of the candle that produced the reading")


class RSIReading(_Reading):
    """Relative Strength Index reading (0-100)"""

    kind: Literal["rsi"] = "rsi"
    rsi: float
    avg_gain: float
    avg_loss: float


class MACDReading(_Reading):
    """MACD line, signal line and histogram"""

    kind: Literal["macd"] = "macd"
    macd_line: float
    signal_line: float
    histogram: float


class WilliamsRReading(_Reading):
    """Williams %R reading (-100 to 0) with the window extremes it used"""

    kind: Literal["williams_r"] = "williams_r"
    williams_r: float
    highest_high: float
    lowest_low: float


class AOReading(_Reading):
    """Awesome Oscillator reading"""

    kind: Literal["ao"] = "ao"
    ao: float
    fast_sma: float
    slow_sma: float


class KDJReading(_Reading):
    """KDJ reading: K, D and J = 3K - 2D"""

    kind: Literal["kdj"] = "kdj"
    k: float
    d: float
    j: float


class OBVReading(_Reading):
    """
    On-Balance Volume reading

    obv_ema is None until smoothing_ema samples exist; normalized is None
    when normalization is disabled or no slope series exists yet.
    """

    kind: Literal["obv"] = "obv"
    obv_value: float
    obv_slope: float
    obv_ema: float | None = None
    normalized: float | None = None


IndicatorReading = Annotated[
    RSIReading | MACDReading | WilliamsRReading | AOReading | KDJReading | OBVReading,
    Field(discriminator="kind"),
]
