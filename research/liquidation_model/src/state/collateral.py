"""Collateral type records: engine parameters and ledger-side risk data"""
from dataclasses import dataclass
from typing import Any
from ..constants import (
    DEFAULT_LIQUIDATION_PENALTY,
    DEFAULT_LIQUIDATION_QUANTITY_CAP,
)

@dataclass
class CollateralTypeConfig:
    """Liquidation parameters the engine keeps for one collateral type"""
    auction_house_reference: Any  # AuctionHouse
    liquidation_penalty: int = DEFAULT_LIQUIDATION_PENALTY  # WAD, >= 1 WAD
    liquidation_quantity_cap: int = DEFAULT_LIQUIDATION_QUANTITY_CAP  # RAD

    @property
    def auction_house_address(self) -> str:
        return self.auction_house_reference.address

@dataclass(frozen=True)
class CollateralTypeRisk:
    """Risk parameters owned by the position ledger"""
    debt_floor: int  # RAD

@dataclass(frozen=True)
class CollateralTypeData:
    """Per collateral type accumulators owned by the position ledger"""
    accumulated_rate: int  # RAY
    liquidation_price: int  # RAY
