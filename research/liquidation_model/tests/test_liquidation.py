"""Liquidation decision, sizing and execution"""
import numpy as np
import pytest

from liquidation_model.src.constants import MAX_UINT256, RAD, RAY, WAD
from liquidation_model.src.fixed_point import to_rad, to_ray, to_wad
from liquidation_model.src.events import OnAuctionCoinsUpdated, PositionLiquidated
from liquidation_model.src.state.position import Position
from liquidation_model.src.errors import (
    ContractDisabled,
    DustyRemainder,
    LiquidationLimitReached,
    PositionNotUnsafe,
    UnknownCollateralType,
    ZeroCollateralToSell,
    ZeroSizedLiquidation,
)
from liquidation_model.tests.principals import ALICE, BOB, ETH, GOV, KEEPER

class TestSafetyCheck:
    def test_safe_position_cannot_be_liquidated(self, env):
        env.open(ALICE, 200, 150)
        with pytest.raises(PositionNotUnsafe):
            env.liquidate(ALICE)

    def test_exactly_collateralized_position_is_safe(self, env):
        env.open(ALICE, 150, 150)
        with pytest.raises(PositionNotUnsafe):
            env.liquidate(ALICE)

    def test_zero_liquidation_price_is_ineligible(self, env):
        env.open(ALICE, 100, 150)
        env.ledger.update_liquidation_price(ETH, 0)
        with pytest.raises(PositionNotUnsafe):
            env.liquidate(ALICE)

    def test_accumulated_rate_can_make_position_unsafe(self, env):
        env.open(ALICE, 100, 95)
        with pytest.raises(PositionNotUnsafe):
            env.liquidate(ALICE)
        env.ledger.update_accumulated_rate(ETH, to_ray("1.1"))
        assert env.liquidate(ALICE) == 1

    def test_empty_position_is_not_unsafe(self, env):
        with pytest.raises(PositionNotUnsafe):
            env.liquidate(ALICE)

    def test_unknown_collateral_type(self, env):
        with pytest.raises(UnknownCollateralType):
            env.engine.liquidate("WBTC-A", ALICE, caller=KEEPER)

    def test_disabled_engine_refuses_liquidation(self, env):
        env.open(ALICE, 100, 150)
        env.engine.disable_contract(GOV)
        with pytest.raises(ContractDisabled):
            env.liquidate(ALICE)

class TestFullLiquidation:
    def test_reference_scenario(self, env):
        """100 collateral at price 1 against 150 debt, 10% penalty"""
        env.open(ALICE, 100, 150)

        auction_id = env.liquidate(ALICE)

        assert auction_id == 1
        assert env.position(ALICE) == Position(0, 0)
        assert env.engine.current_on_auction_system_coins == 165 * RAD

        auction = env.auction_house.auctions[auction_id]
        assert auction.collateral_to_sell == 100 * WAD
        assert auction.amount_to_raise == 165 * RAD
        assert auction.leftover_receiver == ALICE
        assert auction.proceeds_receiver == env.accounting.address

        event = env.engine.events.last(PositionLiquidated)
        assert event.collateral_type == ETH
        assert event.owner == ALICE
        assert event.collateral_amount == 100 * WAD
        assert event.debt_amount == 150 * WAD
        assert event.amount_to_raise == 165 * RAD
        assert event.auction_house == env.auction_house.address
        assert event.auction_id == auction_id

    def test_confiscation_routes_collateral_and_debt(self, env):
        env.open(ALICE, 100, 150)
        env.liquidate(ALICE)

        assert env.ledger.collateral_balance(ETH, env.engine.address) == 100 * WAD
        assert env.ledger.debt_balance(env.accounting.address) == 150 * RAD
        assert env.accounting.queue.total_queued_debt == 150 * RAD

    def test_counter_update_event(self, env):
        env.open(ALICE, 100, 150)
        env.liquidate(ALICE)
        assert env.engine.events.last(OnAuctionCoinsUpdated).current_on_auction_system_coins == 165 * RAD

    def test_queued_debt_includes_accumulated_rate(self, env):
        env.ledger.update_accumulated_rate(ETH, to_ray("1.2"))
        env.open(ALICE, 100, 150)
        env.liquidate(ALICE)

        assert env.accounting.queue.total_queued_debt == 150 * WAD * to_ray("1.2")
        assert env.engine.current_on_auction_system_coins == 150 * WAD * to_ray("1.2") * to_wad("1.1") // WAD

class TestPartialLiquidation:
    def test_quantity_cap_limits_the_slice(self, make_env):
        env = make_env(debt_floor=10 * RAD, liquidation_quantity_cap=55 * RAD)
        env.open(ALICE, 100, 150)

        env.liquidate(ALICE)

        # 55 RAD / rate 1 / penalty 1.1 = 50 debt, a third of the collateral
        assert env.position(ALICE) == Position(100 * WAD - 33333333333333333333, 100 * WAD)
        assert env.engine.current_on_auction_system_coins == 55 * RAD

    def test_global_headroom_limits_the_slice(self, make_env):
        env = make_env()
        env.engine.modify_parameters("on_auction_system_coin_limit", 100 * RAD, GOV)
        env.open(ALICE, 100, 150)

        env.liquidate(ALICE)

        sizing_debt = 100 * RAD * WAD // RAY // to_wad("1.1")
        assert env.position(ALICE).generated_debt == 150 * WAD - sizing_debt
        assert env.engine.current_on_auction_system_coins <= 100 * RAD
        assert env.engine.current_on_auction_system_coins == sizing_debt * RAY * to_wad("1.1") // WAD

    def test_dusty_remainder_is_refused(self, make_env):
        env = make_env(debt_floor=120 * RAD, liquidation_quantity_cap=55 * RAD)
        env.open(ALICE, 100, 150)

        with pytest.raises(DustyRemainder):
            env.liquidate(ALICE)
        assert env.position(ALICE) == Position(100 * WAD, 150 * WAD)
        assert env.engine.current_on_auction_system_coins == 0

    def test_remainder_exactly_at_floor_is_allowed(self, make_env):
        env = make_env(debt_floor=100 * RAD, liquidation_quantity_cap=55 * RAD)
        env.open(ALICE, 100, 150)
        env.liquidate(ALICE)
        assert env.position(ALICE).generated_debt * RAY == 100 * RAD

    def test_zero_sized_liquidation(self, make_env):
        env = make_env(liquidation_quantity_cap=1)
        env.open(ALICE, 100, 150)
        with pytest.raises(ZeroSizedLiquidation):
            env.liquidate(ALICE)

    def test_zero_collateral_to_sell(self, make_env):
        env = make_env(liquidation_quantity_cap=55 * RAD)
        env.ledger.open_position(ETH, ALICE, 1, 150 * WAD)
        with pytest.raises(ZeroCollateralToSell):
            env.liquidate(ALICE)

    def test_repeated_partial_liquidations_clear_the_position(self, make_env):
        env = make_env(debt_floor=10 * RAD, liquidation_quantity_cap=55 * RAD)
        env.open(ALICE, 100, 150)

        env.liquidate(ALICE)
        env.liquidate(ALICE)
        env.liquidate(ALICE)

        assert env.position(ALICE) == Position(0, 0)
        assert env.engine.current_on_auction_system_coins == 165 * RAD

@pytest.mark.parametrize("cap", np.linspace(20, 160, 15))
def test_partial_remainder_is_zero_or_above_floor(make_env, cap):
    env = make_env(debt_floor=30 * RAD, liquidation_quantity_cap=to_rad(round(cap, 6)))
    env.open(ALICE, 100, 150)
    try:
        env.liquidate(ALICE)
    except DustyRemainder:
        assert env.position(ALICE) == Position(100 * WAD, 150 * WAD)
        return
    remaining = env.position(ALICE).generated_debt * RAY
    assert remaining == 0 or remaining >= 30 * RAD

@pytest.mark.parametrize("locked, debt, cap", [
    (100, 150, 55),
    (1_000, 1_337, 400),
    (7, 9, 3),
    (12_345, 20_000, 7_777),
])
def test_seizure_is_proportional(make_env, locked, debt, cap):
    env = make_env(liquidation_quantity_cap=cap * RAD)
    env.open(ALICE, locked, debt)

    env.liquidate(ALICE)

    auction = env.auction_house.auctions[1]
    debt_taken = debt * WAD - env.position(ALICE).generated_debt
    seized_ratio = auction.collateral_to_sell / (locked * WAD)
    debt_ratio = debt_taken / (debt * WAD)
    assert np.isclose(seized_ratio, debt_ratio, rtol=1e-12)
    assert auction.collateral_to_sell == locked * WAD * debt_taken // (debt * WAD)

class TestGlobalLimit:
    def test_headroom_below_debt_floor(self, make_env):
        env = make_env(debt_floor=10 * RAD)
        env.engine.modify_parameters("on_auction_system_coin_limit", 5 * RAD, GOV)
        env.open(ALICE, 100, 150)

        with pytest.raises(LiquidationLimitReached):
            env.liquidate(ALICE)

    def test_limit_already_reached(self, make_env):
        env = make_env()
        env.engine.modify_parameters("on_auction_system_coin_limit", 165 * RAD, GOV)
        env.open(ALICE, 100, 150)
        env.open(BOB, 100, 150)

        env.liquidate(ALICE)
        with pytest.raises(LiquidationLimitReached):
            env.liquidate(BOB)
        assert env.position(BOB) == Position(100 * WAD, 150 * WAD)

    def test_settlement_frees_headroom(self, make_env):
        env = make_env()
        env.engine.modify_parameters("on_auction_system_coin_limit", 165 * RAD, GOV)
        env.open(ALICE, 100, 150)
        env.open(BOB, 100, 150)

        env.liquidate(ALICE)
        env.auction_house.settle(1)
        assert env.engine.current_on_auction_system_coins == 0
        assert env.liquidate(BOB) == 2

    def test_counter_never_exceeds_limit(self, make_env):
        env = make_env(debt_floor=RAD)
        env.engine.modify_parameters("on_auction_system_coin_limit", 400 * RAD, GOV)
        owners = [f"owner-{i}" for i in range(6)]
        for owner in owners:
            env.open(owner, 100, 150)

        before = env.engine.current_on_auction_system_coins
        for owner in owners:
            try:
                env.liquidate(owner)
            except LiquidationLimitReached:
                continue
            raised = env.engine.events.last(PositionLiquidated).amount_to_raise
            assert env.engine.current_on_auction_system_coins == before + raised
            assert env.engine.current_on_auction_system_coins <= 400 * RAD
            before = env.engine.current_on_auction_system_coins

class TestSizingRounding:
    def test_divisions_truncate_separately(self, make_env):
        rate = to_ray("1.0731")
        penalty = to_wad("1.13")
        cap = to_rad("97.123456789")
        env = make_env(liquidation_penalty=penalty, liquidation_quantity_cap=cap)
        env.ledger.update_accumulated_rate(ETH, rate)
        env.open(ALICE, 100, 150)

        expected = cap * WAD // rate // penalty
        assert env.engine.get_limit_adjusted_debt_to_liquidate(ETH, ALICE) == expected

    def test_preview_matches_execution(self, make_env):
        env = make_env(debt_floor=10 * RAD, liquidation_quantity_cap=55 * RAD)
        env.open(ALICE, 100, 150)

        sizing = env.engine.preview_liquidation(ETH, ALICE)
        env.liquidate(ALICE)

        event = env.engine.events.last(PositionLiquidated)
        assert (event.debt_amount, event.collateral_amount, event.amount_to_raise) == (
            sizing.limit_adjusted_debt, sizing.collateral_to_sell, sizing.amount_to_raise
        )

    def test_preview_has_no_side_effects(self, env):
        env.open(ALICE, 100, 150)
        events_before = len(env.engine.events)
        env.engine.preview_liquidation(ETH, ALICE)
        assert len(env.engine.events) == events_before
        assert env.position(ALICE) == Position(100 * WAD, 150 * WAD)

class TestAtomicity:
    def test_failed_auction_start_rolls_everything_back(self, env, monkeypatch):
        env.open(ALICE, 100, 150)

        def broken_start_auction(**kwargs):
            raise RuntimeError("auction house is paused")

        monkeypatch.setattr(env.auction_house, "start_auction", broken_start_auction)
        with pytest.raises(RuntimeError):
            env.liquidate(ALICE)

        assert env.position(ALICE) == Position(100 * WAD, 150 * WAD)
        assert env.ledger.collateral_balance(ETH, env.engine.address) == 0
        assert env.ledger.debt_balance(env.accounting.address) == 0
        assert env.accounting.queue.total_queued_debt == 0
        assert env.engine.current_on_auction_system_coins == 0
        assert env.engine.events.of_type(PositionLiquidated) == []

    def test_failed_liquidation_releases_reentrancy_guard(self, env):
        env.open(ALICE, 200, 150)
        with pytest.raises(PositionNotUnsafe):
            env.liquidate(ALICE)
        env.ledger.update_liquidation_price(ETH, to_ray("0.5"))
        assert env.liquidate(ALICE) == 1

def test_huge_cap_is_bounded_by_position_debt(make_env):
    env = make_env(liquidation_quantity_cap=MAX_UINT256 // RAY)
    env.open(ALICE, 100, 150)
    assert env.engine.get_limit_adjusted_debt_to_liquidate(ETH, ALICE) == 150 * WAD
