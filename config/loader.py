"""
Configuration loader with YAML support and Pydantic validation

Screener configuration is loaded once per process into frozen models and
passed explicitly into constructors - nothing mutates it at runtime.

Validation here is structural only (right shape, right types). A window
length below 1 (e.g. a negative period) parses, but the indicator rejects
it when the engine builds the set, which surfaces as ConfigError.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from core.utils.config import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = str(Path(__file__).parent / "providers" / "screener.yaml")


class ConfigError(ValueError):
    """Malformed screener or indicator configuration (non-recoverable)"""


class _IndicatorConfig(BaseModel):
    """Common shape: an enable flag plus constructor parameters"""

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = True

    def indicator_params(self) -> dict[str, Any]:
        """Constructor kwargs for the indicator (everything except `enabled`)"""
        return self.model_dump(exclude={"enabled"})


class RSIConfig(_IndicatorConfig):
    period: int = 14


class MACDConfig(_IndicatorConfig):
    fast_period: int = 12
    slow_period: int = 26
    signal_period: int = 9


class WilliamsRConfig(_IndicatorConfig):
    period: int = 14


class AOConfig(_IndicatorConfig):
    fast_period: int = 5
    slow_period: int = 34


class KDJConfig(_IndicatorConfig):
    k_period: int = 9
    d_period: int = 3
    smooth: int = 3


class OBVConfig(_IndicatorConfig):
    slope_window: int = 14
    smoothing_ema: int = 5
    z_score_cap: float = 2.0
    normalize: bool = True


class IndicatorsConfig(BaseModel):
    """Per-indicator enable flags and parameters (keys are registry kinds)"""

    model_config = ConfigDict(frozen=True, extra="forbid")

    rsi: RSIConfig = RSIConfig()
    macd: MACDConfig = MACDConfig()
    williams_r: WilliamsRConfig = WilliamsRConfig()
    ao: AOConfig = AOConfig()
    kdj: KDJConfig = KDJConfig()
    obv: OBVConfig = OBVConfig()

    def enabled_indicators(self) -> dict[str, dict[str, Any]]:
        """
        Enabled indicators only

        Returns:
            {kind: constructor kwargs}, e.g. {"rsi": {"period": 14}, ...}
        """
        enabled = {}
        for kind in type(self).model_fields:
            config: _IndicatorConfig = getattr(self, kind)
            if config.enabled:
                enabled[kind] = config.indicator_params()
        return enabled


class TimeframesConfig(BaseModel):
    """Primary timeframe generates signals, secondary confirms them"""

    model_config = ConfigDict(frozen=True)

    primary: str = "5m"
    secondary: str = "15m"


class ScreeningConfig(BaseModel):
    """Rules applied before an aligned signal is emitted"""

    model_config = ConfigDict(frozen=True)

    require_alignment: bool = True
    min_confidence: float = 60.0


class AlignmentConfig(BaseModel):
    """
    Aligner windows (milliseconds)

    max_age_ms governs decision validity; cleanup_max_age_ms only bounds
    memory for pairs that stopped trading.
    """

    model_config = ConfigDict(frozen=True)

    max_age_ms: int = 60_000
    cleanup_max_age_ms: int = 300_000
    cleanup_interval_ms: int = 60_000


class FeedConfig(BaseModel):
    """Feed reconnection policy: exponential backoff, bounded attempts"""

    model_config = ConfigDict(frozen=True)

    reconnect_delay_ms: int = 5_000
    max_reconnect_delay_ms: int = 60_000
    # 0 = retry forever
    max_reconnect_attempts: int = 10


class OutputConfig(BaseModel):
    """Signal sinks"""

    model_config = ConfigDict(frozen=True)

    console: bool = True
    file: bool = False
    file_path: str = "data/logs/screener-signals.jsonl"


class ScreenerConfig(BaseModel):
    """Complete screener configuration"""

    model_config = ConfigDict(frozen=True)

    pairs: list[str] = []
    timeframes: TimeframesConfig = TimeframesConfig()
    indicators: IndicatorsConfig = IndicatorsConfig()
    screening: ScreeningConfig = ScreeningConfig()
    alignment: AlignmentConfig = AlignmentConfig()
    feed: FeedConfig = FeedConfig()
    output: OutputConfig = OutputConfig()

    @field_validator("pairs")
    @classmethod
    def pairs_unique(cls, v):
        if len(set(v)) != len(v):
            raise ValueError("Pairs list contains duplicates")
        return v


def parse_indicators_config(data: IndicatorsConfig | Mapping[str, Any]) -> IndicatorsConfig:
    """
    Validate an indicators mapping

    Args:
        data: IndicatorsConfig (returned as-is) or a raw mapping
              like {"rsi": {"enabled": True, "period": 14}, ...}

    Raises:
        ConfigError: If the mapping has the wrong shape or types
    """
    if isinstance(data, IndicatorsConfig):
        return data
    if not isinstance(data, Mapping):
        raise ConfigError(
            f"Indicator config must be a mapping, got {type(data).__name__}"
        )
    try:
        return IndicatorsConfig.model_validate(dict(data))
    except ValidationError as e:
        raise ConfigError(f"Invalid indicator config: {e}") from e


def parse_screener_config(data: Mapping[str, Any] | None) -> ScreenerConfig:
    """
    Validate a raw screener config mapping

    Raises:
        ConfigError: If validation fails
    """
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ConfigError(f"Screener config must be a mapping, got {type(data).__name__}")
    try:
        return ScreenerConfig.model_validate(dict(data))
    except ValidationError as e:
        raise ConfigError(f"Invalid screener config: {e}") from e


def load_screener_config(config_path: str = DEFAULT_CONFIG_PATH) -> ScreenerConfig:
    """
    Load and validate screener configuration from YAML

    Args:
        config_path: Path to screener.yaml

    Returns:
        ScreenerConfig: Validated, frozen configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigError: If the YAML is unreadable or the config is invalid

    Example:
        >>> config = load_screener_config()
        >>> print(config.timeframes.primary)
        5m
    """
    if not Path(config_path).exists():
        raise FileNotFoundError(f"Screener config not found: {config_path}")

    try:
        data = load_yaml(config_path)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    try:
        config = parse_screener_config(data)
    except ConfigError as e:
        logger.error(f"Failed to load screener config: {e}")
        raise

    logger.info(
        f"✓ Loaded screener config: {len(config.pairs)} pairs, "
        f"{config.timeframes.primary}/{config.timeframes.secondary}, "
        f"indicators: {', '.join(config.indicators.enabled_indicators())}"
    )
    return config


# Convenience exports
__all__ = [
    "ConfigError",
    "RSIConfig",
    "MACDConfig",
    "WilliamsRConfig",
    "AOConfig",
    "KDJConfig",
    "OBVConfig",
    "IndicatorsConfig",
    "TimeframesConfig",
    "ScreeningConfig",
    "AlignmentConfig",
    "FeedConfig",
    "OutputConfig",
    "ScreenerConfig",
    "parse_indicators_config",
    "parse_screener_config",
    "load_screener_config",
]
