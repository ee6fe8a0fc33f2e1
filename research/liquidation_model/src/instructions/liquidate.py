"""Liquidation decision and sizing"""
import logging
from dataclasses import dataclass
from typing import Optional
from ..state.engine_config import LiquidationEngineState
from ..state.collateral import CollateralTypeConfig, CollateralTypeData
from ..state.position import Position
from ..atomic import atomic, participants
from .administration import get_collateral_config, require_enabled
from .rescue import attempt_rescue
from .. import events
from ..fixed_point import checked_div, checked_mul, checked_sub, minimum, wmultiply
from ..errors import (
    ArithmeticOverflowError,
    DustyRemainder,
    LiquidationLimitReached,
    PositionNotUnsafe,
    ZeroCollateralToSell,
    ZeroSizedLiquidation,
)
from ..constants import MAX_INT256, WAD

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class LiquidationSizing:
    """How much of a position one liquidation takes"""
    limit_adjusted_debt: int  # WAD
    collateral_to_sell: int  # WAD
    amount_to_raise: int  # RAD

    def is_partial(self, position: Position) -> bool:
        return self.limit_adjusted_debt != position.generated_debt

def limit_adjusted_debt(
    position: Position,
    data: CollateralTypeData,
    params: CollateralTypeConfig,
    headroom: int,
) -> int:
    """Largest debt slice allowed by the position, the per type cap and the global headroom.

    The two divisions truncate separately, in this order, to match the
    protocol's rounding at the edge of the cap.
    """
    available = minimum(params.liquidation_quantity_cap, headroom)
    if data.accumulated_rate == 0:
        return 0
    # available is RAD; * WAD / rate (RAY) / penalty (WAD) leaves WAD
    capped = checked_div(
        checked_div(checked_mul(available, WAD), data.accumulated_rate),
        params.liquidation_penalty,
    )
    return minimum(position.generated_debt, capped)

def size_liquidation(
    position: Position,
    data: CollateralTypeData,
    params: CollateralTypeConfig,
    headroom: int,
) -> LiquidationSizing:
    debt = limit_adjusted_debt(position, data, params, headroom)
    if position.generated_debt == 0:
        collateral = 0
    else:
        collateral = minimum(
            position.locked_collateral,
            checked_mul(position.locked_collateral, debt) // position.generated_debt,
        )
    amount_to_raise = wmultiply(checked_mul(debt, data.accumulated_rate), params.liquidation_penalty)
    return LiquidationSizing(debt, collateral, amount_to_raise)

def check_sizing(sizing: LiquidationSizing, position: Position, data: CollateralTypeData, debt_floor: int) -> None:
    if sizing.limit_adjusted_debt == 0:
        raise ZeroSizedLiquidation("Limit adjusted debt is zero")
    if sizing.collateral_to_sell == 0:
        raise ZeroCollateralToSell("Collateral to sell is zero")
    if sizing.is_partial(position):
        remaining = checked_mul(
            checked_sub(position.generated_debt, sizing.limit_adjusted_debt),
            data.accumulated_rate,
        )
        if remaining < debt_floor:
            raise DustyRemainder(f"Remaining debt {remaining} is below debt floor {debt_floor}")
    if sizing.collateral_to_sell > MAX_INT256 or sizing.limit_adjusted_debt > MAX_INT256:
        raise ArithmeticOverflowError("Collateral or debt to confiscate overflows int256")

def check_unsafe(position: Position, data: CollateralTypeData, collateral_type: str, owner: str) -> None:
    if not position.is_unsafe(data.accumulated_rate, data.liquidation_price):
        raise PositionNotUnsafe(f"Position {collateral_type}/{owner} is not unsafe")

def check_limit(state: LiquidationEngineState, debt_floor: int) -> None:
    config = state.config
    if config.current_on_auction_system_coins >= config.on_auction_system_coin_limit:
        raise LiquidationLimitReached("On-auction system coin limit reached")
    if config.auction_headroom() < debt_floor:
        raise LiquidationLimitReached(
            f"Auction headroom {config.auction_headroom()} is below debt floor {debt_floor}"
        )

def get_limit_adjusted_debt_to_liquidate(state: LiquidationEngineState, collateral_type: str, owner: str) -> int:
    """Debt the next liquidation of this position would take, ignoring the safety checks"""
    return preview_liquidation(state, collateral_type, owner).limit_adjusted_debt

def preview_liquidation(state: LiquidationEngineState, collateral_type: str, owner: str) -> LiquidationSizing:
    params = get_collateral_config(state, collateral_type)
    data = state.ledger.read_collateral_type_data(collateral_type)
    position = state.ledger.read_position(collateral_type, owner)
    return size_liquidation(position, data, params, state.config.auction_headroom())

def liquidate(state: LiquidationEngineState, collateral_type: str, owner: str, caller: str) -> Optional[int]:
    """Liquidate an unsafe position.

    Returns the id of the started auction, or None if the owner's rescuer made
    the position safe again.
    """
    require_enabled(state)
    params = get_collateral_config(state, collateral_type)

    debt_floor = state.ledger.read_collateral_type_params(collateral_type).debt_floor
    data = state.ledger.read_collateral_type_data(collateral_type)
    position = state.ledger.read_position(collateral_type, owner)

    check_unsafe(position, data, collateral_type, owner)
    check_limit(state, debt_floor)

    attempt_rescue(state, collateral_type, owner, caller)

    data = state.ledger.read_collateral_type_data(collateral_type)
    position = state.ledger.read_position(collateral_type, owner)
    if not position.is_unsafe(data.accumulated_rate, data.liquidation_price):
        logger.debug("Position %s/%s is safe after rescue, nothing to liquidate", collateral_type, owner)
        return None

    sizing = size_liquidation(position, data, params, state.config.auction_headroom())
    check_sizing(sizing, position, data, debt_floor)
    logger.debug("Sized liquidation of %s/%s: %s", collateral_type, owner, sizing)

    with atomic(participants(state)):
        auction_id = _execute(state, collateral_type, owner, params, data, sizing)

    logger.info(
        "Liquidated %s/%s: collateral %s, debt %s, raising %s in auction %s",
        collateral_type, owner, sizing.collateral_to_sell, sizing.limit_adjusted_debt,
        sizing.amount_to_raise, auction_id,
    )
    return auction_id

def _execute(
    state: LiquidationEngineState,
    collateral_type: str,
    owner: str,
    params: CollateralTypeConfig,
    data: CollateralTypeData,
    sizing: LiquidationSizing,
) -> int:
    config = state.config
    accounting = config.accounting_subsystem_reference

    state.ledger.confiscate(
        collateral_type,
        owner,
        state.address,
        accounting.address,
        -sizing.collateral_to_sell,
        -sizing.limit_adjusted_debt,
    )
    accounting.queue_debt(checked_mul(sizing.limit_adjusted_debt, data.accumulated_rate))

    config.add_coins_to_auction(sizing.amount_to_raise)
    auction_id = params.auction_house_reference.start_auction(
        leftover_receiver=owner,
        proceeds_receiver=accounting.address,
        amount_to_raise=sizing.amount_to_raise,
        collateral_to_sell=sizing.collateral_to_sell,
    )
    state.event_log.emit(events.OnAuctionCoinsUpdated(config.current_on_auction_system_coins))

    state.event_log.emit(events.PositionLiquidated(
        collateral_type=collateral_type,
        owner=owner,
        collateral_amount=sizing.collateral_to_sell,
        debt_amount=sizing.limit_adjusted_debt,
        amount_to_raise=sizing.amount_to_raise,
        auction_house=params.auction_house_address,
        auction_id=auction_id,
    ))
    return auction_id
