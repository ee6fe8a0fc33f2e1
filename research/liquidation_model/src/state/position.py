"""Position state as reported by the position ledger"""
from dataclasses import dataclass
from ..fixed_point import checked_mul

@dataclass(frozen=True)
class Position:
    """Collateral locked and debt generated by one owner in one collateral type"""
    locked_collateral: int  # WAD
    generated_debt: int  # WAD, normalized by the accumulated rate

    def is_unsafe(self, accumulated_rate: int, liquidation_price: int) -> bool:
        """Check if the position can be liquidated.

        A zero liquidation price means the feed is missing or frozen, which
        makes the position ineligible rather than infinitely unsafe.
        """
        if liquidation_price == 0:
            return False
        # collateral_value = locked * price, debt_value = debt * rate, both RAD
        return (
            checked_mul(self.locked_collateral, liquidation_price)
            < checked_mul(self.generated_debt, accumulated_rate)
        )

    def debt_value(self, accumulated_rate: int) -> int:
        """Debt including accrued interest, in RAD"""
        return checked_mul(self.generated_debt, accumulated_rate)

    def is_worse_than(self, before: "Position") -> bool:
        """True if collateral went down or debt went up compared to `before`"""
        return (
            self.locked_collateral < before.locked_collateral
            or self.generated_debt > before.generated_debt
        )
