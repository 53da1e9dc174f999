"""
Screener Engine - per-(pair, timeframe) orchestration

Clean separation of concerns:
- IndicatorSet → Update indicators, report readiness
- Scorer (external) → Turn a readings bundle into a scored signal
- TimeframeAligner → Join primary/secondary signals
- Emitter (external) → Output signals

Flow per candle:
    candle → IndicatorSet.update → (all ready?) → scorer → Signal
           → (not NEUTRAL?) → aligner + emitter → aligned? → emitter

on_candle() is synchronous and never awaits, so one candle is processed in
full before the next is accepted.
"""

import logging
import time
from collections.abc import Mapping
from typing import Any

from config.loader import ConfigError, IndicatorsConfig, ScreenerConfig
from core.interfaces.emitter import BaseSignalEmitter
from core.interfaces.scoring import BaseSignalScorer
from core.models.market_data import Candle
from core.models.signals import AlignedSignal, Signal, SignalType
from services.screener.aligner import Role, TimeframeAligner
from services.screener.indicator_set import IndicatorSet

logger = logging.getLogger(__name__)


class ScreenerEngine:
    """Drive indicator sets from candles and gate signals into the aligner"""

    def __init__(
        self,
        config: ScreenerConfig,
        scorer: BaseSignalScorer,
        aligner: TimeframeAligner | None = None,
        emitter: BaseSignalEmitter | None = None,
    ):
        """
        Initialize engine

        Args:
            config: Frozen screener config (timeframes, indicators, screening rules)
            scorer: Readings bundle → ScoreResult
            aligner: Shared aligner (default: new TimeframeAligner)
            emitter: Signal sink (default: none)
        """
        self.config = config
        self.scorer = scorer
        self.aligner = aligner if aligner is not None else TimeframeAligner()
        self.emitter = emitter

        # One indicator set per (pair, timeframe), owned exclusively by this engine
        self.indicator_sets: dict[tuple[str, str], IndicatorSet] = {}

        self.stats = {
            "candles_processed": 0,
            "signals_generated": 0,
            "aligned_signals": 0,
            "start_time": time.time(),
        }

    def register_indicator_set(
        self,
        pair: str,
        timeframe: str,
        enabled_indicators: IndicatorsConfig | Mapping[str, Any] | None = None,
    ) -> IndicatorSet:
        """
        Create the indicator set for (pair, timeframe)

        Replaces any existing set for the key, but only once the new one is
        fully built.

        Args:
            pair: Trading pair
            timeframe: Candle timeframe
            enabled_indicators: Indicator config (default: config.indicators)

        Raises:
            ConfigError: If the indicator config is malformed or enables nothing
        """
        if enabled_indicators is None:
            enabled_indicators = self.config.indicators

        indicator_set = IndicatorSet.from_config(pair, timeframe, enabled_indicators)
        if not len(indicator_set):
            raise ConfigError(f"No indicators enabled for {pair}/{timeframe}")

        self.indicator_sets[(pair, timeframe)] = indicator_set
        logger.info(
            f"✓ Registered {pair}/{timeframe}: {list(indicator_set)} "
            f"(warmup {indicator_set.warmup_period()} candles)"
        )
        return indicator_set

    def register_pairs(self) -> None:
        """Register every configured pair on both timeframes"""
        for pair in self.config.pairs:
            self.register_indicator_set(pair, self.config.timeframes.primary)
            self.register_indicator_set(pair, self.config.timeframes.secondary)

    def role_for(self, timeframe: str) -> Role | None:
        """Aligner role implied by a timeframe (None if neither)"""
        if timeframe == self.config.timeframes.primary:
            return "primary"
        if timeframe == self.config.timeframes.secondary:
            return "secondary"
        return None

    def on_candle(self, pair: str, timeframe: str, candle: Candle) -> Signal | None:
        """
        Process one candle - main entry point

        Steps:
        1. Update every indicator in the (pair, timeframe) set
        2. Stop unless every enabled indicator is ready
        3. Score the readings bundle
        4. Drop NEUTRAL
        5. Route to the aligner role and the emitter
        6. Emit an aligned signal if both timeframes agree with enough confidence

        Returns:
            The generated (non-NEUTRAL) signal, or None
        """
        indicator_set = self.indicator_sets.get((pair, timeframe))
        if indicator_set is None:
            return None

        readings = indicator_set.update(candle)
        self.stats["candles_processed"] += 1

        if not indicator_set.is_ready():
            return None

        result = self.scorer.score(readings)
        if result.signal == SignalType.NEUTRAL:
            return None

        signal = Signal(
            pair=pair,
            timeframe=timeframe,
            signal=result.signal,
            score=result.score,
            strength=result.strength,
            timestamp=candle.timestamp,
        )

        role = self.role_for(timeframe)
        if role is not None:
            self.aligner.add_signal(role, pair, signal)

        self._emit_signal(signal)
        self.stats["signals_generated"] += 1

        if self.config.screening.require_alignment:
            aligned = self.aligner.check_alignment(pair, self.config.alignment.max_age_ms)
            if aligned and aligned.confidence >= self.config.screening.min_confidence:
                self._emit_aligned(aligned)
                self.stats["aligned_signals"] += 1

        return signal

    def _emit_signal(self, signal: Signal) -> None:
        if self.emitter is None:
            return
        try:
            self.emitter.emit_signal(signal)
        except Exception as e:
            # Don't raise - output failures never affect indicator state
            logger.error(f"✗ Emitter error for {signal.pair}/{signal.timeframe}: {e}")

    def _emit_aligned(self, aligned: AlignedSignal) -> None:
        if self.emitter is None:
            return
        try:
            self.emitter.emit_aligned(aligned)
        except Exception as e:
            logger.error(f"✗ Emitter error for aligned {aligned.pair}: {e}")

    def reset(self) -> None:
        """Reset every indicator set (registrations are kept)"""
        for indicator_set in self.indicator_sets.values():
            indicator_set.reset()

    def get_stats(self) -> dict[str, Any]:
        """
        Engine counters (observability only)

        Returns:
            candles_processed, signals_generated, aligned_signals,
            runtime_seconds, indicator_sets
        """
        return {
            "candles_processed": self.stats["candles_processed"],
            "signals_generated": self.stats["signals_generated"],
            "aligned_signals": self.stats["aligned_signals"],
            "runtime_seconds": time.time() - self.stats["start_time"],
            "indicator_sets": len(self.indicator_sets),
        }
