"""Interfaces module - Abstract interfaces the screener core depends on"""

from .emitter import BaseSignalEmitter
from .indicators import HISTORY_LIMIT, Indicator
from .market_data import BaseCandleFeed, CandleCallback, FeedConnectionError
from .scoring import BaseSignalScorer

__all__ = [
    "HISTORY_LIMIT",
    "Indicator",
    "BaseSignalScorer",
    "BaseSignalEmitter",
    "BaseCandleFeed",
    "CandleCallback",
    "FeedConnectionError",
]
