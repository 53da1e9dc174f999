"""
Unit tests for IndicatorRegistry and the Indicator protocol
"""

import pytest

from core.interfaces.indicators import Indicator
from domain.indicators import OBV, RSI, AwesomeOscillator, IndicatorRegistry
from tests.factories import make_candles, trending_closes


@pytest.mark.unit
class TestIndicatorRegistry:
    def test_list_indicators(self):
        assert IndicatorRegistry.list_indicators() == [
            "ao",
            "kdj",
            "macd",
            "obv",
            "rsi",
            "williams_r",
        ]

    @pytest.mark.parametrize("kind", ["rsi", "macd", "williams_r", "ao", "kdj", "obv"])
    def test_every_kind_satisfies_protocol(self, kind):
        indicator = IndicatorRegistry.create(kind)

        assert isinstance(indicator, Indicator)
        assert indicator.name == kind
        assert not indicator.is_ready()
        assert indicator.value() is None
        assert indicator.warmup_period() > 0

    @pytest.mark.parametrize("kind", ["rsi", "macd", "williams_r", "ao", "kdj", "obv"])
    def test_ready_exactly_at_warmup(self, kind):
        indicator = IndicatorRegistry.create(kind)
        candles = make_candles(trending_closes(indicator.warmup_period(), step=0.7))

        for candle in candles[:-1]:
            indicator.update(candle)
        assert not indicator.is_ready()

        indicator.update(candles[-1])
        assert indicator.is_ready()

    def test_create_with_params(self):
        rsi = IndicatorRegistry.create("rsi", period=21)
        ao = IndicatorRegistry.create("AO", fast_period=3, slow_period=10)

        assert isinstance(rsi, RSI)
        assert rsi.params == {"period": 21}
        assert isinstance(ao, AwesomeOscillator)
        assert ao.warmup_period() == 10

    def test_instances_are_independent(self):
        first = IndicatorRegistry.create("obv")
        second = IndicatorRegistry.create("obv")

        for candle in make_candles(trending_closes(20)):
            first.update(candle)

        assert first.is_ready()
        assert not second.is_ready()

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="Unknown indicator"):
            IndicatorRegistry.create("bollinger")

    def test_bad_params(self):
        with pytest.raises(TypeError):
            IndicatorRegistry.create("rsi", window=14)

    def test_register(self, monkeypatch):
        monkeypatch.setattr(IndicatorRegistry, "_indicators", dict(IndicatorRegistry._indicators))
        IndicatorRegistry.register("OBV_FAST", OBV)

        indicator = IndicatorRegistry.create("obv_fast", slope_window=3)

        assert isinstance(indicator, OBV)
        assert "obv_fast" in IndicatorRegistry.list_indicators()
