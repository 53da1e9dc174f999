"""Models module - Pydantic data models"""

from .indicators import (
    AOReading,
    IndicatorReading,
    KDJReading,
    MACDReading,
    OBVReading,
    RSIReading,
    WilliamsRReading,
)
from .market_data import Candle
from .signals import AlignedSignal, AlignmentEntry, ScoreResult, Signal, SignalType

__all__ = [
    "Candle",
    "IndicatorReading",
    "RSIReading",
    "MACDReading",
    "WilliamsRReading",
    "AOReading",
    "KDJReading",
    "OBVReading",
    "SignalType",
    "ScoreResult",
    "Signal",
    "AlignmentEntry",
    "AlignedSignal",
]
