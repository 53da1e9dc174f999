"""
Technical indicators module

Exports:
- Indicator (core/interfaces/indicators.py)
- Momentum: RSI, WilliamsR, KDJ
- Trend: MACD, AwesomeOscillator
- Volume: OBV
- Registry: IndicatorRegistry
"""

from core.interfaces.indicators import Indicator
from domain.indicators.helpers import Divergence
from domain.indicators.momentum import KDJ, RSI, WilliamsR
from domain.indicators.registry import IndicatorRegistry
from domain.indicators.trend import MACD, AwesomeOscillator
from domain.indicators.volume import OBV

__all__ = [
    "Indicator",
    "Divergence",
    "RSI",
    "WilliamsR",
    "KDJ",
    "MACD",
    "AwesomeOscillator",
    "OBV",
    "IndicatorRegistry",
]
