"""
Unit tests for TimeframeAligner

Uses a hand-advanced clock so signal ages are exact.
"""

import pytest

from core.models.signals import SignalType
from services.screener.aligner import TimeframeAligner, calculate_confidence
from tests.factories import make_signal

PAIR = "XBTUSDTM"


@pytest.fixture
def aligner(clock):
    return TimeframeAligner(clock=clock)


@pytest.mark.unit
class TestConfidence:
    def test_weighted_scores(self):
        """0.6 × 80 + 0.4 × 60 = 72.0 exactly"""
        primary = make_signal(score=80.0)
        secondary = make_signal(score=60.0, timeframe="15m")

        assert calculate_confidence(primary, secondary) == 72.0

    def test_uses_absolute_scores(self):
        primary = make_signal(SignalType.SELL, score=-80.0)
        secondary = make_signal(SignalType.SELL, score=-60.0, timeframe="15m")

        assert calculate_confidence(primary, secondary) == 72.0

    def test_capped_at_100(self):
        primary = make_signal(score=150.0)
        secondary = make_signal(score=120.0, timeframe="15m")

        assert calculate_confidence(primary, secondary) == 100.0


@pytest.mark.unit
class TestCheckAlignment:
    def test_aligned_buy(self, aligner):
        aligner.add_primary_signal(PAIR, make_signal(SignalType.BUY, 80.0))
        secondary = make_signal(SignalType.STRONG_BUY, 60.0, timeframe="15m")
        aligner.add_secondary_signal(PAIR, secondary)

        aligned = aligner.check_alignment(PAIR)

        assert aligned is not None
        assert aligned.pair == PAIR
        assert aligned.direction == "BUY"
        assert aligned.confidence == 72.0
        assert aligned.primary.signal.timeframe == "5m"
        assert aligned.secondary.signal.timeframe == "15m"

    def test_aligned_sell_with_weak_variant(self, aligner):
        aligner.add_primary_signal(PAIR, make_signal(SignalType.SELL_WEAK, -40.0))
        aligner.add_secondary_signal(PAIR, make_signal(SignalType.SELL, -50.0, timeframe="15m"))

        aligned = aligner.check_alignment(PAIR)

        assert aligned is not None
        assert aligned.direction == "SELL"

    def test_opposed_directions(self, aligner):
        """BUY vs SELL → None regardless of scores or age"""
        aligner.add_primary_signal(PAIR, make_signal(SignalType.STRONG_BUY, 100.0))
        aligner.add_secondary_signal(PAIR, make_signal(SignalType.SELL, -100.0, timeframe="15m"))

        assert aligner.check_alignment(PAIR) is None

    def test_neutral_never_aligns(self, aligner):
        aligner.add_primary_signal(PAIR, make_signal(SignalType.NEUTRAL, 0.0))
        aligner.add_secondary_signal(PAIR, make_signal(SignalType.NEUTRAL, 0.0, timeframe="15m"))

        assert aligner.check_alignment(PAIR) is None

    def test_missing_role(self, aligner):
        aligner.add_primary_signal(PAIR, make_signal())

        assert aligner.check_alignment(PAIR) is None
        assert aligner.check_alignment("ETHUSDTM") is None

    def test_stale_entry(self, aligner, clock):
        """Age 70 000 ms with max_age 60 000 → None"""
        aligner.add_primary_signal(PAIR, make_signal())
        aligner.add_secondary_signal(PAIR, make_signal(timeframe="15m"))

        clock.advance(70_000)

        assert aligner.check_alignment(PAIR, max_age_ms=60_000) is None

    def test_age_at_boundary_still_valid(self, aligner, clock):
        aligner.add_primary_signal(PAIR, make_signal())
        aligner.add_secondary_signal(PAIR, make_signal(timeframe="15m"))

        clock.advance(60_000)

        assert aligner.check_alignment(PAIR, max_age_ms=60_000) is not None

    def test_latest_signal_wins(self, aligner):
        """A newer signal replaces the role entry"""
        aligner.add_primary_signal(PAIR, make_signal(SignalType.SELL, -70.0))
        aligner.add_primary_signal(PAIR, make_signal(SignalType.BUY, 70.0))
        aligner.add_secondary_signal(PAIR, make_signal(SignalType.BUY, 70.0, timeframe="15m"))

        aligned = aligner.check_alignment(PAIR)

        assert aligned.direction == "BUY"
        assert len(aligner) == 2

    def test_refresh_resets_age(self, aligner, clock):
        aligner.add_primary_signal(PAIR, make_signal())
        aligner.add_secondary_signal(PAIR, make_signal(timeframe="15m"))
        clock.advance(50_000)
        aligner.add_primary_signal(PAIR, make_signal())
        clock.advance(20_000)

        # Secondary is 70s old now
        assert aligner.check_alignment(PAIR) is None
        assert aligner.get_entry(PAIR, "primary").age(clock()) == 20_000

    def test_add_signal_routes_by_role(self, aligner):
        aligner.add_signal("primary", PAIR, make_signal())
        aligner.add_signal("secondary", PAIR, make_signal(timeframe="15m"))

        assert aligner.get_entry(PAIR, "primary").signal.timeframe == "5m"
        assert aligner.get_entry(PAIR, "secondary").signal.timeframe == "15m"

        with pytest.raises(ValueError):
            aligner.add_signal("tertiary", PAIR, make_signal())


@pytest.mark.unit
class TestGetAllAligned:
    def test_returns_aligned_pairs_only(self, aligner):
        for pair in ("XBTUSDTM", "ETHUSDTM", "SOLUSDTM"):
            aligner.add_primary_signal(pair, make_signal(pair=pair))
        aligner.add_secondary_signal("XBTUSDTM", make_signal(pair="XBTUSDTM", timeframe="15m"))
        aligner.add_secondary_signal(
            "ETHUSDTM", make_signal(SignalType.SELL, -60.0, pair="ETHUSDTM", timeframe="15m")
        )
        aligner.add_secondary_signal("SOLUSDTM", make_signal(pair="SOLUSDTM", timeframe="15m"))

        aligned = aligner.get_all_aligned()

        assert [a.pair for a in aligned] == ["XBTUSDTM", "SOLUSDTM"]

    def test_empty(self, aligner):
        assert aligner.get_all_aligned() == []


@pytest.mark.unit
class TestCleanup:
    def test_keeps_recent_entries(self, aligner, clock):
        """Entry at t=0 survives cleanup(300 000) at t=200 000"""
        aligner.add_primary_signal(PAIR, make_signal())
        clock.now = 200_000

        assert aligner.cleanup(300_000) == 0
        assert aligner.get_entry(PAIR, "primary") is not None

    def test_removes_stale_entries(self, aligner, clock):
        """Entry at t=0 is removed by cleanup(300 000) at t=400 000"""
        aligner.add_primary_signal(PAIR, make_signal())
        clock.now = 400_000

        assert aligner.cleanup(300_000) == 1
        assert aligner.get_entry(PAIR, "primary") is None
        assert len(aligner) == 0

    def test_roles_evicted_independently(self, aligner, clock):
        aligner.add_primary_signal(PAIR, make_signal())
        clock.now = 250_000
        aligner.add_secondary_signal(PAIR, make_signal(timeframe="15m"))
        clock.now = 400_000

        assert aligner.cleanup() == 1
        assert aligner.get_entry(PAIR, "primary") is None
        assert aligner.get_entry(PAIR, "secondary") is not None
        assert aligner.pairs() == {PAIR}

    def test_clear(self, aligner):
        aligner.add_primary_signal(PAIR, make_signal())
        aligner.add_secondary_signal("ETHUSDTM", make_signal(pair="ETHUSDTM"))

        aligner.clear()

        assert len(aligner) == 0
        assert aligner.pairs() == set()
