"""Liquidation engine: one instance owns its state and talks to injected collaborators"""
import functools
import logging
from typing import Any, Callable, Optional, TypeVar

from .constants import DEFAULT_ENGINE_ADDRESS
from .errors import ReentrancyError
from .events import EventLog
from .interfaces import AccountingSubsystem, AuctionHouse, PositionLedger, Rescuer
from .instructions import administration, liquidate as liquidation, rescue
from .instructions.liquidate import LiquidationSizing
from .state.collateral import CollateralTypeConfig
from .state.engine_config import EngineConfig, LiquidationEngineState

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

def non_reentrant(method: F) -> F:
    """Reject calls into any guarded entry point while another one is running"""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        if self._entered:
            raise ReentrancyError(f"Re-entrant call to {method.__name__}")
        self._entered = True
        try:
            return method(self, *args, **kwargs)
        finally:
            self._entered = False

    return wrapper  # type: ignore[return-value]

class LiquidationEngine:
    """Decides, sizes and executes liquidations of unsafe positions.

    Every entry point takes the calling principal explicitly as `caller`.
    The deployer starts out as the only authorized account.
    """

    def __init__(self, ledger: PositionLedger, accounting: AccountingSubsystem, deployer: str,
                 address: str = DEFAULT_ENGINE_ADDRESS):
        self.state = LiquidationEngineState.create(ledger, accounting, deployer, address)
        self._entered = False
        administration.validate_engine_config(self.state.config)
        logger.info("Deployed liquidation engine %s, authorized deployer %s", address, deployer)

    @property
    def address(self) -> str:
        return self.state.address

    @property
    def config(self) -> EngineConfig:
        return self.state.config

    @property
    def events(self) -> EventLog:
        return self.state.event_log

    @property
    def current_on_auction_system_coins(self) -> int:
        return self.state.config.current_on_auction_system_coins

    def collateral_type(self, collateral_type: str) -> CollateralTypeConfig:
        return administration.get_collateral_config(self.state, collateral_type)

    def is_authorized(self, account: str) -> bool:
        return self.state.authorizations.is_authorized(account)

    def is_rescuer_approved(self, address: str) -> bool:
        return self.state.rescuers.is_approved(address)

    def chosen_rescuer(self, collateral_type: str, owner: str) -> str:
        return self.state.rescuers.chosen_address(collateral_type, owner)

    # --- Administration

    @non_reentrant
    def add_authorization(self, account: str, caller: str) -> None:
        administration.add_authorization(self.state, account, caller)

    @non_reentrant
    def remove_authorization(self, account: str, caller: str) -> None:
        administration.remove_authorization(self.state, account, caller)

    @non_reentrant
    def disable_contract(self, caller: str) -> None:
        administration.disable_contract(self.state, caller)

    @non_reentrant
    def init_collateral_type(self, collateral_type: str, auction_house: AuctionHouse, caller: str, **params) -> None:
        administration.init_collateral_type(self.state, collateral_type, auction_house, caller, **params)

    @non_reentrant
    def modify_parameters(self, parameter: str, value: Any, caller: str) -> None:
        administration.modify_parameters(self.state, parameter, value, caller)

    @non_reentrant
    def modify_collateral_parameters(self, collateral_type: str, parameter: str, value: Any, caller: str) -> None:
        administration.modify_collateral_parameters(self.state, collateral_type, parameter, value, caller)

    @non_reentrant
    def remove_coins_from_auction(self, amount: int, caller: str) -> None:
        administration.remove_coins_from_auction(self.state, amount, caller)

    # --- Rescuers

    @non_reentrant
    def approve_rescuer(self, candidate: Rescuer, caller: str) -> None:
        rescue.approve_rescuer(self.state, candidate, caller)

    @non_reentrant
    def revoke_rescuer(self, address: str, caller: str) -> None:
        rescue.revoke_rescuer(self.state, address, caller)

    @non_reentrant
    def choose_rescuer(self, collateral_type: str, owner: str, rescuer: str, caller: str) -> None:
        rescue.choose_rescuer(self.state, collateral_type, owner, rescuer, caller)

    # --- Liquidation

    @non_reentrant
    def liquidate(self, collateral_type: str, owner: str, caller: str) -> Optional[int]:
        return liquidation.liquidate(self.state, collateral_type, owner, caller)

    def get_limit_adjusted_debt_to_liquidate(self, collateral_type: str, owner: str) -> int:
        return liquidation.get_limit_adjusted_debt_to_liquidate(self.state, collateral_type, owner)

    def preview_liquidation(self, collateral_type: str, owner: str) -> LiquidationSizing:
        return liquidation.preview_liquidation(self.state, collateral_type, owner)
