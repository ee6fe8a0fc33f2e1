"""In-memory accounting subsystem: queues bad debt handed over by liquidations"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Tuple
from ..fixed_point import checked_add, checked_sub

logger = logging.getLogger(__name__)

@dataclass
class DebtQueue:
    queued: Dict[int, int] = field(default_factory=dict)  # timestamp -> RAD
    total_queued_debt: int = 0  # RAD
    total_popped_debt: int = 0  # RAD

class AccountingEngine:
    def __init__(self, address: str = "accounting_engine", pop_debt_delay: int = 0):
        self.address = address
        self.pop_debt_delay = pop_debt_delay
        self.now = 0
        self.queue = DebtQueue()

    def snapshot(self) -> Tuple[int, DebtQueue]:
        return self.now, DebtQueue(dict(self.queue.queued), self.queue.total_queued_debt,
                                   self.queue.total_popped_debt)

    def restore(self, snapshot: Tuple[int, DebtQueue]) -> None:
        self.now, self.queue = snapshot

    def queue_debt(self, amount: int) -> None:
        self.queue.queued[self.now] = checked_add(self.queue.queued.get(self.now, 0), amount)
        self.queue.total_queued_debt = checked_add(self.queue.total_queued_debt, amount)
        logger.debug("Queued %s debt at %s", amount, self.now)

    def pop_debt_from_queue(self, timestamp: int) -> int:
        """Release debt queued at `timestamp` once the delay has passed"""
        if self.now < timestamp + self.pop_debt_delay:
            raise ValueError(f"Debt queued at {timestamp} is still locked")
        amount = self.queue.queued.pop(timestamp, 0)
        self.queue.total_queued_debt = checked_sub(self.queue.total_queued_debt, amount)
        self.queue.total_popped_debt = checked_add(self.queue.total_popped_debt, amount)
        return amount
