"""Checked uint256 arithmetic and gas metering"""
import sys

import pytest

from liquidation_model.src.constants import MAX_UINT256, RAD, RAY, WAD
from liquidation_model.src.errors import ArithmeticOverflowError, OutOfGas
from liquidation_model.src.fixed_point import (
    checked_add,
    checked_div,
    checked_mul,
    checked_sub,
    minimum,
    to_rad,
    to_ray,
    to_wad,
    wmultiply,
)
from liquidation_model.src.gas_meter import GasMeter, active_meter, charge_gas

class TestCheckedArithmetic:
    def test_add_overflow(self):
        assert checked_add(MAX_UINT256 - 1, 1) == MAX_UINT256
        with pytest.raises(ArithmeticOverflowError):
            checked_add(MAX_UINT256, 1)

    def test_sub_underflow(self):
        assert checked_sub(5, 5) == 0
        with pytest.raises(ArithmeticOverflowError):
            checked_sub(4, 5)

    def test_mul_overflow(self):
        with pytest.raises(ArithmeticOverflowError):
            checked_mul(MAX_UINT256 // 2 + 1, 2)

    def test_div_truncates(self):
        assert checked_div(7, 2) == 3
        with pytest.raises(ArithmeticOverflowError):
            checked_div(1, 0)

    def test_minimum(self):
        assert minimum(3, 7) == 3
        assert minimum(7, 3) == 3

    def test_scaled_multiplication(self):
        assert wmultiply(to_wad("1.5"), to_wad(2)) == to_wad(3)

class TestConversions:
    def test_decimal_strings_are_exact(self):
        assert to_wad("1.13") == 1_130_000_000_000_000_000
        assert to_ray("0.5") == RAY // 2
        assert to_rad(10) == 10 * RAD

    def test_fractions_below_unit_truncate(self):
        assert to_wad("0.0000000000000000019") == 1

class TestGasMeter:
    def test_charge_outside_metering_is_free(self):
        assert active_meter() is None
        charge_gas(10**9)

    def test_budget_exhaustion(self):
        meter = GasMeter(budget=5_000)
        with pytest.raises(OutOfGas):
            with meter.metering():
                charge_gas(2_100)
                charge_gas(2_100)
                charge_gas(2_100)
        assert meter.used == 6_300
        assert meter.exhausted
        assert meter.remaining == 0

    def test_spending_exactly_the_budget_is_allowed(self):
        meter = GasMeter(budget=4_200)
        with meter.metering():
            charge_gas(2_100)
            charge_gas(2_100)
        assert meter.used == 4_200
        assert not meter.exhausted

    def test_metering_is_scoped(self):
        outer, inner = GasMeter(10_000), GasMeter(10_000)
        with outer.metering():
            with inner.metering():
                charge_gas(100)
                assert active_meter() is inner
            charge_gas(50)
        assert active_meter() is None
        assert (outer.used, inner.used) == (50, 100)

    def test_pure_computation_draws_from_the_budget(self):
        def spin():
            n = 0
            while True:
                n += 1

        trace_before = sys.gettrace()
        meter = GasMeter(budget=30_000)
        with pytest.raises(OutOfGas):
            with meter.metering():
                spin()
        assert meter.exhausted
        assert sys.gettrace() is trace_before
        assert active_meter() is None

    def test_bounded_computation_is_charged_per_step(self):
        def count(limit):
            total = 0
            for i in range(limit):
                total += i
            return total

        meter = GasMeter(budget=10**6)
        with meter.metering():
            count(10)
        short = meter.used
        with meter.metering():
            count(1_000)
        assert short > 0
        assert meter.used - short > 20 * short
