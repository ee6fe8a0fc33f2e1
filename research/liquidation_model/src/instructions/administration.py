"""Governance entry points: authorizations, collateral registration, parameters"""
import logging
from dataclasses import replace
from typing import Any
from ..state.engine_config import EngineConfig, LiquidationEngineState
from ..state.collateral import CollateralTypeConfig
from ..interfaces import is_live
from .. import events
from ..errors import (
    AlreadyInitialized,
    ContractDisabled,
    InvalidParameterValue,
    UnknownCollateralType,
    UnrecognizedParameter,
)
from ..constants import (
    COLLATERAL_PARAMETERS,
    DEFAULT_LIQUIDATION_PENALTY,
    DEFAULT_LIQUIDATION_QUANTITY_CAP,
    GLOBAL_PARAMETERS,
    MAX_LIQUIDATION_QUANTITY,
    WAD,
)

logger = logging.getLogger(__name__)

def add_authorization(state: LiquidationEngineState, account: str, caller: str) -> None:
    state.authorizations.require(caller)
    state.authorizations.grant(account)
    state.event_log.emit(events.AuthorizationAdded(account))

def remove_authorization(state: LiquidationEngineState, account: str, caller: str) -> None:
    state.authorizations.require(caller)
    state.authorizations.revoke(account)
    state.event_log.emit(events.AuthorizationRemoved(account))

def disable_contract(state: LiquidationEngineState, caller: str) -> None:
    """Stop all future liquidations (global settlement)"""
    state.authorizations.require(caller)
    state.config.contract_enabled = False
    logger.info("Liquidation engine %s disabled by %s", state.address, caller)
    state.event_log.emit(events.EngineDisabled())

def require_enabled(state: LiquidationEngineState) -> None:
    if not state.config.contract_enabled:
        raise ContractDisabled(f"Liquidation engine {state.address} is disabled")

def validate_engine_config(config: EngineConfig) -> None:
    if not is_live(config.accounting_subsystem_reference, "queue_debt"):
        raise InvalidParameterValue("Accounting subsystem reference is not a live contract")
    if config.rescue_call_budget <= 0:
        raise InvalidParameterValue("Rescue call budget must be positive")
    if config.on_auction_system_coin_limit < 0:
        raise InvalidParameterValue("On-auction system coin limit cannot be negative")

def validate_collateral_config(params: CollateralTypeConfig) -> None:
    if not is_live(params.auction_house_reference, "start_auction"):
        raise InvalidParameterValue("Auction house reference is not a live contract")
    if params.liquidation_penalty < WAD:
        raise InvalidParameterValue(
            f"Liquidation penalty {params.liquidation_penalty} is below 1 WAD"
        )
    if not 0 <= params.liquidation_quantity_cap <= MAX_LIQUIDATION_QUANTITY:
        raise InvalidParameterValue(
            f"Liquidation quantity cap {params.liquidation_quantity_cap} overflows the raise amount"
        )

def _swap_auction_house(state: LiquidationEngineState, old: Any, new: Any) -> None:
    """Let the new auction house move the engine's seized collateral, and stop the old one"""
    if old is not None:
        state.ledger.deny_modification(state.address, old.address)
    state.ledger.approve_modification(state.address, new.address)

def init_collateral_type(
    state: LiquidationEngineState,
    collateral_type: str,
    auction_house: Any,
    caller: str,
    liquidation_penalty: int = DEFAULT_LIQUIDATION_PENALTY,
    liquidation_quantity_cap: int = DEFAULT_LIQUIDATION_QUANTITY_CAP,
) -> None:
    """Register liquidation parameters for a new collateral type"""
    state.authorizations.require(caller)
    if collateral_type in state.collateral_types:
        raise AlreadyInitialized(f"Collateral type {collateral_type!r} already initialized")

    params = CollateralTypeConfig(
        auction_house_reference=auction_house,
        liquidation_penalty=liquidation_penalty,
        liquidation_quantity_cap=liquidation_quantity_cap,
    )
    validate_collateral_config(params)

    _swap_auction_house(state, None, auction_house)
    state.collateral_types[collateral_type] = params

    logger.info(
        "Initialized collateral type %s with auction house %s, penalty %s, cap %s",
        collateral_type, auction_house.address, liquidation_penalty, liquidation_quantity_cap,
    )
    state.event_log.emit(events.CollateralTypeInitialized(
        collateral_type=collateral_type,
        auction_house=auction_house.address,
        liquidation_penalty=liquidation_penalty,
        liquidation_quantity_cap=liquidation_quantity_cap,
    ))

def modify_parameters(state: LiquidationEngineState, parameter: str, value: Any, caller: str) -> None:
    """Update a global parameter"""
    state.authorizations.require(caller)
    if parameter not in GLOBAL_PARAMETERS:
        raise UnrecognizedParameter(f"Unrecognized parameter {parameter!r}")

    candidate = replace(state.config, **{parameter: value})
    validate_engine_config(candidate)
    state.config = candidate

    logged_value = value.address if parameter == "accounting_subsystem_reference" else value
    logger.info("Modified %s to %s", parameter, logged_value)
    state.event_log.emit(events.ParameterModified(parameter=parameter, value=logged_value))

def modify_collateral_parameters(
    state: LiquidationEngineState, collateral_type: str, parameter: str, value: Any, caller: str
) -> None:
    """Update a per collateral type parameter"""
    state.authorizations.require(caller)
    if parameter not in COLLATERAL_PARAMETERS:
        raise UnrecognizedParameter(f"Unrecognized parameter {parameter!r}")
    current = get_collateral_config(state, collateral_type)

    candidate = replace(current, **{parameter: value})
    validate_collateral_config(candidate)

    if parameter == "auction_house_reference":
        _swap_auction_house(state, current.auction_house_reference, value)
        logged_value = value.address
    else:
        logged_value = value
    state.collateral_types[collateral_type] = candidate

    logger.info("Modified %s of %s to %s", parameter, collateral_type, logged_value)
    state.event_log.emit(events.ParameterModified(
        parameter=parameter, value=logged_value, collateral_type=collateral_type
    ))

def get_collateral_config(state: LiquidationEngineState, collateral_type: str) -> CollateralTypeConfig:
    try:
        return state.collateral_types[collateral_type]
    except KeyError:
        raise UnknownCollateralType(f"Collateral type {collateral_type!r} is not initialized") from None

def remove_coins_from_auction(state: LiquidationEngineState, amount: int, caller: str) -> None:
    """Called by an auction house when an auction settles"""
    state.authorizations.require(caller)
    state.config.remove_coins_from_auction(amount)
    state.event_log.emit(events.OnAuctionCoinsUpdated(state.config.current_on_auction_system_coins))
