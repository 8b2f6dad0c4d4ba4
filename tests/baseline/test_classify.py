"""Tests for tickerbar.engine.classify and Classification parsing."""

from __future__ import annotations

import math

import pytest

from tickerbar.engine.classify import classify, percentage_change
from tickerbar.engine.primitives import Classification, InstrumentResult


class TestPercentageChange:
    def test_increase(self):
        assert percentage_change(110.0, 100.0) == pytest.approx(10.0)

    def test_decrease(self):
        assert percentage_change(90.0, 100.0) == pytest.approx(-10.0)

    def test_zero_base_is_none(self):
        assert percentage_change(5.0, 0.0) is None


class TestClassify:
    @pytest.mark.parametrize(
        "pct,expected",
        [
            (-10.0, Classification.CRITDOWN),
            (-5.0, Classification.DOWN),  # not strictly below critdown
            (-0.01, Classification.DOWN),
            (0.0, Classification.UP),
            (5.0, Classification.UP),  # not strictly above wayup
            (5.01, Classification.WAYUP),
        ],
    )
    def test_thresholds(self, thresholds, pct, expected):
        assert classify(pct, thresholds) is expected

    @pytest.mark.parametrize("pct", [None, math.nan])
    def test_unknown_change_is_up(self, thresholds, pct):
        assert classify(pct, thresholds) is Classification.UP


class TestClassificationParse:
    @pytest.mark.parametrize("raw", ["critdown", "CRITDOWN", Classification.CRITDOWN])
    def test_known(self, raw):
        assert Classification.parse(raw) is Classification.CRITDOWN

    @pytest.mark.parametrize("raw", ["", "flat", None])
    def test_unknown_falls_back_to_up(self, raw):
        assert Classification.parse(raw) is Classification.UP


def test_instrument_result_json_shape():
    result = InstrumentResult("BTC €1.00 (NA%)", Classification.WAYUP, "€1.00 (NA%)")
    assert result.asdict() == {"text": "BTC €1.00 (NA%)", "tooltip": "€1.00 (NA%)", "class": "wayup"}
