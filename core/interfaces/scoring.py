"""
Abstract interface for signal scorers

The scorer turns a bundle of indicator readings into one scored signal.
Weighting is entirely the scorer's business; the engine only consumes
its ScoreResult.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping

from core.models.indicators import IndicatorReading
from core.models.signals import ScoreResult


class BaseSignalScorer(ABC):
    """
    Scorer interface

    Example:
        >>> class RSIOnlyScorer(BaseSignalScorer):
        ...     def score(self, readings):
        ...         rsi = readings["rsi"].rsi
        ...         if rsi < 30:
        ...             return ScoreResult(signal=SignalType.BUY, score=70.0)
        ...         return ScoreResult(signal=SignalType.NEUTRAL, score=0.0)
    """

    @abstractmethod
    def score(self, readings: Mapping[str, IndicatorReading]) -> ScoreResult:
        """
        Score one readings bundle

        Args:
            readings: Indicator name -> current reading. Only called when
                      every enabled indicator is ready.

        Returns:
            ScoreResult (NEUTRAL results are dropped by the engine)
        """
