"""Liquidation engine configuration and state management"""
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Tuple
from ..constants import (
    DEFAULT_ENGINE_ADDRESS,
    DEFAULT_ON_AUCTION_SYSTEM_COIN_LIMIT,
    DEFAULT_RESCUE_CALL_BUDGET,
)
from ..fixed_point import checked_add, checked_sub
from .collateral import CollateralTypeConfig
from .permissions import AuthorizationSet
from .rescue_registry import RescueRegistry
from ..events import EventLog

@dataclass
class EngineConfig:
    """Global parameters and running counters of one engine instance"""
    accounting_subsystem_reference: Any  # AccountingSubsystem
    on_auction_system_coin_limit: int = DEFAULT_ON_AUCTION_SYSTEM_COIN_LIMIT  # RAD
    rescue_call_budget: int = DEFAULT_RESCUE_CALL_BUDGET  # gas units
    current_on_auction_system_coins: int = 0  # RAD
    contract_enabled: bool = True

    def auction_headroom(self) -> int:
        """Room left under the global on-auction limit, in RAD"""
        if self.current_on_auction_system_coins >= self.on_auction_system_coin_limit:
            return 0
        return self.on_auction_system_coin_limit - self.current_on_auction_system_coins

    def add_coins_to_auction(self, amount: int) -> None:
        self.current_on_auction_system_coins = checked_add(
            self.current_on_auction_system_coins, amount
        )

    def remove_coins_from_auction(self, amount: int) -> None:
        self.current_on_auction_system_coins = checked_sub(
            self.current_on_auction_system_coins, amount
        )

@dataclass
class LiquidationEngineState:
    """Everything an engine owns, handed to every instruction"""
    address: str
    ledger: Any  # PositionLedger
    config: EngineConfig
    collateral_types: Dict[str, CollateralTypeConfig] = field(default_factory=dict)
    rescuers: RescueRegistry = field(default_factory=RescueRegistry)
    authorizations: AuthorizationSet = field(default_factory=AuthorizationSet)
    event_log: EventLog = field(default_factory=EventLog)

    @classmethod
    def create(cls, ledger, accounting, deployer: str,
               address: str = DEFAULT_ENGINE_ADDRESS) -> "LiquidationEngineState":
        state = cls(
            address=address,
            ledger=ledger,
            config=EngineConfig(accounting_subsystem_reference=accounting),
        )
        state.authorizations.grant(deployer)
        return state

    def snapshot(self) -> Tuple:
        return (
            replace(self.config),
            {name: replace(params) for name, params in self.collateral_types.items()},
            RescueRegistry(dict(self.rescuers.approved), dict(self.rescuers.chosen)),
            AuthorizationSet(dict(self.authorizations.roles)),
        )

    def restore(self, snapshot: Tuple) -> None:
        self.config, self.collateral_types, self.rescuers, self.authorizations = snapshot
