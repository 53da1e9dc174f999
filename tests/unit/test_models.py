"""
Unit tests for core models (Pydantic)

Tests Candle, indicator readings and signal models
"""

from decimal import Decimal

import pytest
from pydantic import TypeAdapter, ValidationError

from core.models.indicators import IndicatorReading, OBVReading, RSIReading
from core.models.market_data import Candle
from core.models.signals import AlignedSignal, AlignmentEntry, ScoreResult, SignalType
from tests.factories import make_signal


@pytest.mark.unit
class TestCandleModel:
    """Test Candle model validation and serialization"""

    def test_numeric_coercion(self):
        """Exchange strings and Decimals become floats"""
        candle = Candle(
            timestamp=1_700_000_000_000,
            open="50000.5",
            high=Decimal("50100"),
            low=49900,
            close="50050.25",
            volume="12.5",
        )

        assert candle.open == 50000.5
        assert candle.high == 50100.0
        assert isinstance(candle.low, float)
        assert candle.volume == 12.5

    def test_volume_defaults_to_zero(self):
        candle = Candle(timestamp=0, open=1, high=2, low=0.5, close=1.5)
        assert candle.volume == 0.0

    def test_median_price(self):
        candle = Candle(timestamp=0, open=1, high=12, low=8, close=10)
        assert candle.median_price == 10.0

    def test_frozen(self):
        candle = Candle(timestamp=0, open=1, high=2, low=0.5, close=1.5)
        with pytest.raises(ValidationError):
            candle.close = 3.0

    def test_to_dict(self):
        candle = Candle(timestamp=5, open=1, high=2, low=0.5, close=1.5, volume=10)
        assert candle.to_dict() == {
            "timestamp": 5,
            "open": 1.0,
            "high": 2.0,
            "low": 0.5,
            "close": 1.5,
            "volume": 10.0,
        }

    def test_invalid_price(self):
        with pytest.raises(ValidationError):
            Candle(timestamp=0, open="abc", high=2, low=0.5, close=1.5)


@pytest.mark.unit
class TestIndicatorReadings:
    def test_discriminated_by_kind(self):
        adapter = TypeAdapter(IndicatorReading)

        reading = adapter.validate_python(
            {"kind": "rsi", "rsi": 42.0, "avg_gain": 1.0, "avg_loss": 1.5, "timestamp": 1}
        )

        assert isinstance(reading, RSIReading)

    def test_obv_optional_fields(self):
        reading = OBVReading(
            obv_value=100.0, obv_slope=5.0, obv_ema=None, normalized=None, timestamp=1
        )
        assert reading.kind == "obv"
        assert reading.obv_ema is None


@pytest.mark.unit
class TestSignalModels:
    @pytest.mark.parametrize(
        "signal_type, direction",
        [
            (SignalType.STRONG_BUY, "BUY"),
            (SignalType.BUY, "BUY"),
            (SignalType.BUY_WEAK, "BUY"),
            (SignalType.NEUTRAL, "NEUTRAL"),
            (SignalType.SELL_WEAK, "SELL"),
            (SignalType.SELL, "SELL"),
            (SignalType.STRONG_SELL, "SELL"),
        ],
    )
    def test_direction(self, signal_type, direction):
        assert make_signal(signal_type).direction == direction

    def test_signal_from_string_value(self):
        result = ScoreResult(signal="STRONG_SELL", score=-88.0)
        assert result.signal is SignalType.STRONG_SELL

    def test_unknown_signal_type_rejected(self):
        with pytest.raises(ValidationError):
            ScoreResult(signal="HOLD", score=0.0)

    def test_signal_to_dict(self):
        signal = make_signal(SignalType.BUY_WEAK, 25.0)
        data = signal.to_dict()

        assert data["signal"] == "BUY_WEAK"
        assert data["score"] == 25.0
        assert data["pair"] == "XBTUSDTM"

    def test_entry_age(self):
        entry = AlignmentEntry(signal=make_signal(), received_at=1_000)
        assert entry.age(61_000) == 60_000

    def test_aligned_confidence_bounds(self):
        entry = AlignmentEntry(signal=make_signal(), received_at=0)
        with pytest.raises(ValidationError):
            AlignedSignal(
                pair="XBTUSDTM",
                direction="BUY",
                confidence=101.0,
                primary=entry,
                secondary=entry,
                aligned_at=0,
            )

    def test_aligned_direction_excludes_neutral(self):
        entry = AlignmentEntry(signal=make_signal(), received_at=0)
        with pytest.raises(ValidationError):
            AlignedSignal(
                pair="XBTUSDTM",
                direction="NEUTRAL",
                confidence=50.0,
                primary=entry,
                secondary=entry,
                aligned_at=0,
            )
