"""In-memory position ledger for tests and simulations"""
import copy
from dataclasses import dataclass, field
from typing import Dict, Set, Tuple
from ..state.collateral import CollateralTypeData, CollateralTypeRisk
from ..state.position import Position
from ..gas_meter import charge_gas
from ..fixed_point import checked_add, checked_mul, checked_sub
from ..errors import InvalidPositionError, NotAuthorized
from ..constants import RAY, READ_GAS_COST, WRITE_GAS_COST

@dataclass
class LedgerCollateralType:
    """Ledger side record of a collateral type"""
    debt_floor: int = 0  # RAD
    accumulated_rate: int = RAY  # RAY
    liquidation_price: int = 0  # RAY
    total_debt: int = 0  # WAD

@dataclass
class LedgerBook:
    collateral_types: Dict[str, LedgerCollateralType] = field(default_factory=dict)
    positions: Dict[Tuple[str, str], Position] = field(default_factory=dict)
    collateral_balances: Dict[Tuple[str, str], int] = field(default_factory=dict)  # free collateral, WAD
    coin_balances: Dict[str, int] = field(default_factory=dict)  # RAD
    unbacked_debt: Dict[str, int] = field(default_factory=dict)  # RAD
    approvals: Set[Tuple[str, str]] = field(default_factory=set)  # (account, delegate)
    global_debt: int = 0  # RAD
    global_unbacked_debt: int = 0  # RAD

class InMemoryPositionLedger:
    """Holds positions, free balances and modification approvals.

    Every read and write charges gas against the active meter so that rescuers
    running under a budget pay for the ledger work they do.
    """

    def __init__(self):
        self.book = LedgerBook()

    # --- Transactional

    def snapshot(self) -> LedgerBook:
        return copy.deepcopy(self.book)

    def restore(self, snapshot: LedgerBook) -> None:
        self.book = snapshot

    # --- Setup

    def init_collateral_type(self, collateral_type: str, debt_floor: int = 0,
                             accumulated_rate: int = RAY, liquidation_price: int = 0) -> None:
        self.book.collateral_types[collateral_type] = LedgerCollateralType(
            debt_floor=debt_floor,
            accumulated_rate=accumulated_rate,
            liquidation_price=liquidation_price,
        )

    def update_liquidation_price(self, collateral_type: str, liquidation_price: int) -> None:
        """Price subsystem hook"""
        self._collateral_type(collateral_type).liquidation_price = liquidation_price

    def update_accumulated_rate(self, collateral_type: str, accumulated_rate: int) -> None:
        """Tax collector hook"""
        self._collateral_type(collateral_type).accumulated_rate = accumulated_rate

    def mint_collateral(self, collateral_type: str, account: str, amount: int) -> None:
        key = (collateral_type, account)
        self.book.collateral_balances[key] = self.book.collateral_balances.get(key, 0) + amount

    def mint_coins(self, account: str, amount: int) -> None:
        """Credit system coins (RAD) out of thin air, for funding test accounts"""
        self.book.coin_balances[account] = self.book.coin_balances.get(account, 0) + amount

    def open_position(self, collateral_type: str, owner: str, collateral: int, debt: int) -> None:
        """Mint the collateral to the owner and lock it against `debt`"""
        self.mint_collateral(collateral_type, owner, collateral)
        self.modify_position(collateral_type, owner, collateral, debt, caller=owner)

    # --- Reads

    def read_collateral_type_params(self, collateral_type: str) -> CollateralTypeRisk:
        charge_gas(READ_GAS_COST)
        return CollateralTypeRisk(debt_floor=self._collateral_type(collateral_type).debt_floor)

    def read_collateral_type_data(self, collateral_type: str) -> CollateralTypeData:
        charge_gas(READ_GAS_COST)
        record = self._collateral_type(collateral_type)
        return CollateralTypeData(
            accumulated_rate=record.accumulated_rate,
            liquidation_price=record.liquidation_price,
        )

    def read_position(self, collateral_type: str, owner: str) -> Position:
        charge_gas(READ_GAS_COST)
        return self.book.positions.get((collateral_type, owner), Position(0, 0))

    def collateral_balance(self, collateral_type: str, account: str) -> int:
        return self.book.collateral_balances.get((collateral_type, account), 0)

    def coin_balance(self, account: str) -> int:
        return self.book.coin_balances.get(account, 0)

    def debt_balance(self, account: str) -> int:
        return self.book.unbacked_debt.get(account, 0)

    @property
    def global_debt(self) -> int:
        return self.book.global_debt

    # --- Approvals

    def approve_modification(self, account: str, delegate: str) -> None:
        charge_gas(WRITE_GAS_COST)
        self.book.approvals.add((account, delegate))

    def deny_modification(self, account: str, delegate: str) -> None:
        charge_gas(WRITE_GAS_COST)
        self.book.approvals.discard((account, delegate))

    def is_authorized_to_modify(self, account: str, caller: str) -> bool:
        charge_gas(READ_GAS_COST)
        return account == caller or (account, caller) in self.book.approvals

    # --- Writes

    def modify_position(self, collateral_type: str, owner: str, delta_collateral: int,
                        delta_debt: int, caller: str) -> None:
        """Lock/free collateral and generate/repay debt.

        Locking collateral draws from the caller's free balance, generating debt
        credits coins to the caller, and repaying debt burns the caller's coins.
        """
        if not self.is_authorized_to_modify(owner, caller):
            raise NotAuthorized(f"{caller!r} cannot modify position of {owner!r}")
        charge_gas(WRITE_GAS_COST)
        record = self._collateral_type(collateral_type)
        position = self.read_position(collateral_type, owner)

        locked = position.locked_collateral + delta_collateral
        debt = position.generated_debt + delta_debt
        if locked < 0 or debt < 0:
            raise InvalidPositionError("Position cannot go negative")
        debt_value = checked_mul(debt, record.accumulated_rate)
        if debt > 0 and debt_value < record.debt_floor:
            raise InvalidPositionError(f"Debt {debt_value} below debt floor {record.debt_floor}")

        free_key = (collateral_type, caller)
        free = self.book.collateral_balances.get(free_key, 0) - delta_collateral
        if free < 0:
            raise InvalidPositionError("Insufficient free collateral")
        delta_coins = delta_debt * record.accumulated_rate
        coins = self.book.coin_balances.get(caller, 0) + delta_coins
        if coins < 0:
            raise InvalidPositionError("Insufficient coins to repay debt")

        self.book.collateral_balances[free_key] = free
        self.book.coin_balances[caller] = coins
        self.book.positions[(collateral_type, owner)] = Position(locked, debt)
        record.total_debt += delta_debt
        self.book.global_debt += delta_coins

    def confiscate(self, collateral_type: str, owner: str, collateral_dst: str,
                   debt_dst: str, delta_collateral: int, delta_debt: int) -> None:
        charge_gas(WRITE_GAS_COST)
        record = self._collateral_type(collateral_type)
        position = self.read_position(collateral_type, owner)

        locked = position.locked_collateral + delta_collateral
        debt = position.generated_debt + delta_debt
        if locked < 0 or debt < 0:
            raise InvalidPositionError("Confiscation exceeds position")
        delta_debt_value = delta_debt * record.accumulated_rate  # RAD, negative

        self.book.positions[(collateral_type, owner)] = Position(locked, debt)
        record.total_debt += delta_debt
        dst_key = (collateral_type, collateral_dst)
        self.book.collateral_balances[dst_key] = checked_sub(
            self.book.collateral_balances.get(dst_key, 0), delta_collateral
        )
        self.book.unbacked_debt[debt_dst] = checked_sub(
            self.book.unbacked_debt.get(debt_dst, 0), delta_debt_value
        )
        self.book.global_unbacked_debt = checked_sub(self.book.global_unbacked_debt, delta_debt_value)

    def transfer_collateral(self, collateral_type: str, src: str, dst: str, amount: int, caller: str) -> None:
        if not self.is_authorized_to_modify(src, caller):
            raise NotAuthorized(f"{caller!r} cannot move collateral of {src!r}")
        charge_gas(WRITE_GAS_COST)
        src_key, dst_key = (collateral_type, src), (collateral_type, dst)
        self.book.collateral_balances[src_key] = checked_sub(self.book.collateral_balances.get(src_key, 0), amount)
        self.book.collateral_balances[dst_key] = checked_add(self.book.collateral_balances.get(dst_key, 0), amount)

    def _collateral_type(self, collateral_type: str) -> LedgerCollateralType:
        try:
            return self.book.collateral_types[collateral_type]
        except KeyError:
            raise InvalidPositionError(f"Unknown collateral type {collateral_type!r}") from None
