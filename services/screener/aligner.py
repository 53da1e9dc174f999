"""
Timeframe Aligner - windowed join of primary and secondary signals

Per pair, holds only the latest signal of each role:

    {empty} → {primary-only | secondary-only} → {both}
            → {aligned | opposed | stale} → {empty (cleanup)}

Two independent age thresholds:
- check_alignment(max_age_ms): decision validity (tight, ~1 min)
- cleanup(max_age_ms): memory bound for inactive pairs (loose, ~5 min)

Not thread-safe: the ingestion path and the periodic cleanup must run on
the same event loop (or be serialized by the caller).
"""

import logging
import time
from collections.abc import Callable
from typing import Literal

from core.models.signals import AlignedSignal, AlignmentEntry, Signal

logger = logging.getLogger(__name__)

Role = Literal["primary", "secondary"]

PRIMARY_WEIGHT = 0.6
SECONDARY_WEIGHT = 0.4

DEFAULT_MAX_AGE_MS = 60_000
DEFAULT_CLEANUP_MAX_AGE_MS = 300_000


def now_ms() -> int:
    """Wall clock in epoch milliseconds"""
    return int(time.time() * 1000)


def calculate_confidence(primary: Signal, secondary: Signal) -> float:
    """
    Confidence of an aligned pair of signals (0-100)

    Formula: min(100, 0.6 × |primary.score| + 0.4 × |secondary.score|)

    Example:
        >>> calculate_confidence(primary_score_80, secondary_score_60)
        72.0
    """
    confidence = abs(primary.score) * PRIMARY_WEIGHT + abs(secondary.score) * SECONDARY_WEIGHT
    return min(100.0, confidence)


class TimeframeAligner:
    """
    Join of primary/secondary timeframe signals keyed by pair

    Example:
        >>> aligner = TimeframeAligner()
        >>> aligner.add_primary_signal("XBTUSDTM", signal_5m)
        >>> aligner.add_secondary_signal("XBTUSDTM", signal_15m)
        >>> aligned = aligner.check_alignment("XBTUSDTM")
        >>> if aligned:
        ...     print(aligned.direction, aligned.confidence)
    """

    def __init__(self, clock: Callable[[], int] = now_ms):
        """
        Initialize aligner

        Args:
            clock: Returns current time in epoch milliseconds (injectable for tests)
        """
        self.clock = clock
        self.primary_signals: dict[str, AlignmentEntry] = {}
        self.secondary_signals: dict[str, AlignmentEntry] = {}

    def add_primary_signal(self, pair: str, signal: Signal) -> None:
        """Overwrite the pair's primary entry with `signal`, received now"""
        self.primary_signals[pair] = AlignmentEntry(signal=signal, received_at=self.clock())

    def add_secondary_signal(self, pair: str, signal: Signal) -> None:
        """Overwrite the pair's secondary entry with `signal`, received now"""
        self.secondary_signals[pair] = AlignmentEntry(signal=signal, received_at=self.clock())

    def add_signal(self, role: Role, pair: str, signal: Signal) -> None:
        """Route a signal to the given role"""
        if role == "primary":
            self.add_primary_signal(pair, signal)
        elif role == "secondary":
            self.add_secondary_signal(pair, signal)
        else:
            raise ValueError(f"Unknown role: {role}")

    def get_entry(self, pair: str, role: Role) -> AlignmentEntry | None:
        """Current entry for (pair, role), stale or not"""
        entries = self.primary_signals if role == "primary" else self.secondary_signals
        return entries.get(pair)

    def check_alignment(
        self, pair: str, max_age_ms: int = DEFAULT_MAX_AGE_MS
    ) -> AlignedSignal | None:
        """
        Check whether both timeframes currently agree for a pair

        Returns None when:
        - either role has no entry
        - either entry is older than max_age_ms
        - directions differ, or either is NEUTRAL

        Args:
            pair: Trading pair
            max_age_ms: Maximum accepted signal age

        Returns:
            AlignedSignal with confidence, or None
        """
        primary = self.primary_signals.get(pair)
        secondary = self.secondary_signals.get(pair)

        if primary is None or secondary is None:
            return None

        now = self.clock()
        if primary.age(now) > max_age_ms or secondary.age(now) > max_age_ms:
            return None

        direction = primary.signal.direction
        if direction == "NEUTRAL" or direction != secondary.signal.direction:
            return None

        return AlignedSignal(
            pair=pair,
            direction=direction,
            confidence=calculate_confidence(primary.signal, secondary.signal),
            primary=primary,
            secondary=secondary,
            aligned_at=now,
        )

    def get_all_aligned(self, max_age_ms: int = DEFAULT_MAX_AGE_MS) -> list[AlignedSignal]:
        """
        Aligned signals for every pair with a primary entry

        Order follows primary-entry insertion order (dict order). A pair whose
        primary entry is overwritten keeps its original position.
        """
        aligned = []
        for pair in list(self.primary_signals):
            aligned_signal = self.check_alignment(pair, max_age_ms)
            if aligned_signal:
                aligned.append(aligned_signal)
        return aligned

    def cleanup(self, max_age_ms: int = DEFAULT_CLEANUP_MAX_AGE_MS) -> int:
        """
        Evict entries older than max_age_ms (either role, independently)

        Returns:
            Number of entries removed
        """
        now = self.clock()
        removed = 0

        for entries in (self.primary_signals, self.secondary_signals):
            stale = [pair for pair, entry in entries.items() if entry.age(now) > max_age_ms]
            for pair in stale:
                del entries[pair]
            removed += len(stale)

        if removed:
            logger.debug(f"Aligner cleanup: removed {removed} stale entries")
        return removed

    def pairs(self) -> set[str]:
        """Pairs with at least one live entry"""
        return set(self.primary_signals) | set(self.secondary_signals)

    def clear(self) -> None:
        self.primary_signals.clear()
        self.secondary_signals.clear()

    def __len__(self) -> int:
        """Total number of entries across both roles"""
        return len(self.primary_signals) + len(self.secondary_signals)
