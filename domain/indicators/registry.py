"""
Indicator registry for managing and creating indicators

Factory pattern for indicator creation
"""

from core.interfaces.indicators import Indicator
from domain.indicators.momentum import KDJ, RSI, WilliamsR
from domain.indicators.trend import MACD, AwesomeOscillator
from domain.indicators.volume import OBV


class IndicatorRegistry:
    """
    Registry for indicator creation

    Provides factory methods for creating indicators by kind
    """

    # Registry of available indicators
    _indicators: dict[str, type] = {
        "rsi": RSI,
        "macd": MACD,
        "williams_r": WilliamsR,
        "ao": AwesomeOscillator,
        "kdj": KDJ,
        "obv": OBV,
    }

    @classmethod
    def create(cls, indicator_type: str, **params) -> Indicator:
        """
        Create indicator by kind

        Args:
            indicator_type: Indicator kind (rsi, macd, williams_r, ao, kdj, obv)
            **params: Indicator constructor parameters

        Returns:
            Fresh indicator instance (no shared state)

        Raises:
            ValueError: If indicator kind is not found
            TypeError: If params don't match the constructor

        Example:
            >>> rsi = IndicatorRegistry.create("rsi", period=14)
            >>> macd = IndicatorRegistry.create("macd", fast_period=12, slow_period=26)
        """
        indicator_class = cls._indicators.get(indicator_type.lower())
        if not indicator_class:
            available = ", ".join(cls.list_indicators())
            raise ValueError(f"Unknown indicator: {indicator_type}. Available: {available}")

        return indicator_class(**params)

    @classmethod
    def register(cls, name: str, indicator_class: type) -> None:
        """
        Register a new indicator kind

        Args:
            name: Indicator kind
            indicator_class: Class whose instances satisfy the Indicator protocol
        """
        cls._indicators[name.lower()] = indicator_class

    @classmethod
    def list_indicators(cls) -> list[str]:
        """
        List all available indicator kinds

        Example:
            >>> IndicatorRegistry.list_indicators()
            ['ao', 'kdj', 'macd', 'obv', 'rsi', 'williams_r']
        """
        return sorted(cls._indicators.keys())
