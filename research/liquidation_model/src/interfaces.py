"""Interfaces of the collaborators the liquidation engine calls into"""
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable
from .state.collateral import CollateralTypeData, CollateralTypeRisk
from .state.position import Position

@dataclass(frozen=True)
class RescueOutcome:
    """What a rescuer reports back from `save_position`"""
    ok: bool
    collateral_added_or_debt_repaid: int
    liquidator_reward: int

class PositionLedger(Protocol):
    def read_collateral_type_params(self, collateral_type: str) -> CollateralTypeRisk: ...

    def read_collateral_type_data(self, collateral_type: str) -> CollateralTypeData: ...

    def read_position(self, collateral_type: str, owner: str) -> Position: ...

    def confiscate(self, collateral_type: str, owner: str, collateral_dst: str,
                   debt_dst: str, delta_collateral: int, delta_debt: int) -> None:
        """Move collateral to `collateral_dst` and debt to `debt_dst`; deltas are negative"""
        ...

    def approve_modification(self, account: str, delegate: str) -> None: ...

    def deny_modification(self, account: str, delegate: str) -> None: ...

    def is_authorized_to_modify(self, account: str, caller: str) -> bool: ...

class AccountingSubsystem(Protocol):
    address: str

    def queue_debt(self, amount: int) -> None: ...

class AuctionHouse(Protocol):
    address: str

    def start_auction(self, leftover_receiver: str, proceeds_receiver: str,
                      amount_to_raise: int, collateral_to_sell: int) -> int: ...

class Rescuer(Protocol):
    address: str

    def save_position(self, liquidator: str, collateral_type: str, owner: str) -> RescueOutcome: ...

@runtime_checkable
class Transactional(Protocol):
    """Collaborators that can be rolled back when a liquidation fails midway"""

    def snapshot(self) -> Any: ...

    def restore(self, snapshot: Any) -> None: ...

def is_live(reference: Any, entry_point: str) -> bool:
    """A reference is live if it has an address and the entry point the engine calls"""
    if reference is None:
        return False
    address = getattr(reference, "address", None)
    return bool(address) and callable(getattr(reference, entry_point, None))
