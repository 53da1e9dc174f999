"""
Screener Service - Dual-timeframe candle screening

Streaming service that:
1. Receives closed candles per (pair, timeframe) from a feed
2. Updates a set of momentum/trend/volume indicators per key
3. Scores ready bundles through an external scorer
4. Aligns primary/secondary timeframe signals and emits the agreed ones
"""

from services.screener.aligner import TimeframeAligner, calculate_confidence
from services.screener.emitter import (
    CompositeSignalEmitter,
    JsonlSignalEmitter,
    LoggingSignalEmitter,
    create_emitter,
)
from services.screener.engine import ScreenerEngine
from services.screener.feed import QueueCandleFeed
from services.screener.indicator_set import IndicatorSet
from services.screener.main import ScreenerService

__all__ = [
    "TimeframeAligner",
    "calculate_confidence",
    "CompositeSignalEmitter",
    "JsonlSignalEmitter",
    "LoggingSignalEmitter",
    "create_emitter",
    "ScreenerEngine",
    "QueueCandleFeed",
    "IndicatorSet",
    "ScreenerService",
]
