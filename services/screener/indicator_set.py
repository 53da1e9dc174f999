"""
Indicator Set - the named bundle of indicators for one (pair, timeframe)

Responsibility: Bridge between config layer and domain layer
- Build one fresh indicator per enabled kind via IndicatorRegistry
- Feed every candle to every member
- Report readiness of the bundle as a whole
"""

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from config.loader import ConfigError, IndicatorsConfig, parse_indicators_config
from core.interfaces.indicators import Indicator
from core.models.indicators import IndicatorReading
from core.models.market_data import Candle
from domain.indicators.registry import IndicatorRegistry

logger = logging.getLogger(__name__)


class IndicatorSet:
    """Enabled indicators for one (pair, timeframe), keyed by indicator name"""

    def __init__(self, pair: str, timeframe: str, indicators: Mapping[str, Indicator]):
        self.pair = pair
        self.timeframe = timeframe
        self.indicators: dict[str, Indicator] = dict(indicators)

    @classmethod
    def from_config(
        cls,
        pair: str,
        timeframe: str,
        config: IndicatorsConfig | Mapping[str, Any],
    ) -> "IndicatorSet":
        """
        Build a set from indicator configuration

        Either every enabled indicator is constructed or nothing is returned.

        Args:
            pair: Trading pair
            timeframe: Candle timeframe
            config: IndicatorsConfig or raw mapping {kind: {enabled, ...params}}

        Raises:
            ConfigError: If the config is structurally invalid

        Example:
            >>> indicator_set = IndicatorSet.from_config(
            ...     "XBTUSDTM", "5m", {"rsi": {"period": 21}, "obv": {"enabled": False}}
            ... )
            >>> list(indicator_set)  # kinds left out of the mapping keep their defaults
            ['rsi', 'macd', 'williams_r', 'ao', 'kdj']
        """
        indicators_config = parse_indicators_config(config)
        indicators = {}

        for kind, params in indicators_config.enabled_indicators().items():
            try:
                indicators[kind] = IndicatorRegistry.create(kind, **params)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"Cannot build {kind} for {pair}/{timeframe}: {e}") from e

        logger.debug(
            f"  ✓ Indicator set {pair}/{timeframe}: "
            f"{', '.join(repr(i) for i in indicators.values())}"
        )
        return cls(pair, timeframe, indicators)

    def update(self, candle: Candle) -> dict[str, IndicatorReading]:
        """
        Feed one candle to every indicator

        Indicators are independent, so order doesn't matter.

        Returns:
            Current readings of the ready indicators, keyed by name
        """
        for indicator in self.indicators.values():
            indicator.update(candle)
        return self.readings()

    def readings(self) -> dict[str, IndicatorReading]:
        """Current reading of every ready indicator"""
        bundle = {}
        for name, indicator in self.indicators.items():
            reading = indicator.value()
            if reading is not None:
                bundle[name] = reading
        return bundle

    def is_ready(self) -> bool:
        """True when every enabled indicator reports ready"""
        return all(indicator.is_ready() for indicator in self.indicators.values())

    def warmup_period(self) -> int:
        """Candles needed before the whole set is ready"""
        return max((i.warmup_period() for i in self.indicators.values()), default=0)

    def reset(self) -> None:
        for indicator in self.indicators.values():
            indicator.reset()

    def __getitem__(self, name: str) -> Indicator:
        return self.indicators[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.indicators)

    def __len__(self) -> int:
        return len(self.indicators)

    def __repr__(self) -> str:
        return f"IndicatorSet({self.pair}:{self.timeframe}, {list(self.indicators)})"
