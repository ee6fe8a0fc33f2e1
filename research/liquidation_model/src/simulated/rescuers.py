"""Sample rescuers that cure positions out of their own reserves"""
import logging
from ..interfaces import RescueOutcome
from ..constants import MAX_UINT256, PROBE_COLLATERAL_TYPE, PROBE_OWNER

logger = logging.getLogger(__name__)

NOT_SAVED = RescueOutcome(ok=False, collateral_added_or_debt_repaid=0, liquidator_reward=0)

class BaseRescuer:
    """Answers the capability probe and delegates real calls to `rescue`"""

    def __init__(self, address: str, ledger):
        self.address = address
        self.ledger = ledger

    def save_position(self, liquidator: str, collateral_type: str, owner: str) -> RescueOutcome:
        if collateral_type == PROBE_COLLATERAL_TYPE and owner == PROBE_OWNER:
            return RescueOutcome(True, MAX_UINT256, MAX_UINT256)
        return self.rescue(liquidator, collateral_type, owner)

    def rescue(self, liquidator: str, collateral_type: str, owner: str) -> RescueOutcome:
        raise NotImplementedError

class CollateralTopUpRescuer(BaseRescuer):
    """Locks just enough of its free collateral to make the position safe"""

    def fund(self, collateral_type: str, amount: int) -> None:
        self.ledger.mint_collateral(collateral_type, self.address, amount)

    def rescue(self, liquidator: str, collateral_type: str, owner: str) -> RescueOutcome:
        data = self.ledger.read_collateral_type_data(collateral_type)
        position = self.ledger.read_position(collateral_type, owner)
        if data.liquidation_price == 0:
            return NOT_SAVED

        debt_value = position.debt_value(data.accumulated_rate)
        required = -(-debt_value // data.liquidation_price)  # round up
        missing = required - position.locked_collateral
        reserve = self.ledger.collateral_balance(collateral_type, self.address)
        if missing <= 0 or reserve < missing:
            return NOT_SAVED

        self.ledger.modify_position(collateral_type, owner, missing, 0, caller=self.address)
        logger.debug("Topped up %s/%s with %s collateral", collateral_type, owner, missing)
        return RescueOutcome(True, missing, 0)

class DebtRepayRescuer(BaseRescuer):
    """Repays the whole debt of the position with its own coins"""

    def rescue(self, liquidator: str, collateral_type: str, owner: str) -> RescueOutcome:
        data = self.ledger.read_collateral_type_data(collateral_type)
        position = self.ledger.read_position(collateral_type, owner)
        coins_needed = position.debt_value(data.accumulated_rate)
        if position.generated_debt == 0 or self.ledger.coin_balance(self.address) < coins_needed:
            return NOT_SAVED

        self.ledger.modify_position(collateral_type, owner, 0, -position.generated_debt, caller=self.address)
        logger.debug("Repaid %s debt of %s/%s", position.generated_debt, collateral_type, owner)
        return RescueOutcome(True, position.generated_debt, 0)
