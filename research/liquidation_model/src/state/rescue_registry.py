"""Approved rescuers and the rescuer each position owner has chosen"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple
from ..constants import ZERO_ADDRESS

@dataclass
class RescueRegistry:
    approved: Dict[str, Any] = field(default_factory=dict)  # address -> Rescuer
    chosen: Dict[Tuple[str, str], str] = field(default_factory=dict)  # (type, owner) -> address

    def is_approved(self, address: str) -> bool:
        return address in self.approved

    def approve(self, rescuer) -> None:
        self.approved[rescuer.address] = rescuer

    def revoke(self, address: str) -> None:
        self.approved.pop(address, None)

    def choose(self, collateral_type: str, owner: str, address: str) -> None:
        if address == ZERO_ADDRESS:
            self.chosen.pop((collateral_type, owner), None)
        else:
            self.chosen[(collateral_type, owner)] = address

    def chosen_address(self, collateral_type: str, owner: str) -> str:
        return self.chosen.get((collateral_type, owner), ZERO_ADDRESS)

    def active_rescuer(self, collateral_type: str, owner: str) -> Optional[Any]:
        """The chosen rescuer, or None if there is none or it was revoked"""
        return self.approved.get(self.chosen_address(collateral_type, owner))
