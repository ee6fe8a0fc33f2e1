"""Collateral auction house that only keeps the books.

Price discovery is out of scope: `settle` is told how much collateral was
sold and hands the rest back to the position owner.
"""
import logging
from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple
from ..errors import AuctionNotFound

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class AuctionRecord:
    auction_id: int
    leftover_receiver: str
    proceeds_receiver: str
    amount_to_raise: int  # RAD
    collateral_to_sell: int  # WAD
    settled: bool = False

class RecordingAuctionHouse:
    def __init__(self, address: str, collateral_type: str, ledger):
        self.address = address
        self.collateral_type = collateral_type
        self.ledger = ledger
        self.liquidation_engine = None
        self.auctions: Dict[int, AuctionRecord] = {}
        self.auctions_started = 0

    def connect(self, liquidation_engine) -> None:
        self.liquidation_engine = liquidation_engine

    def snapshot(self) -> Tuple[Dict[int, AuctionRecord], int]:
        return dict(self.auctions), self.auctions_started

    def restore(self, snapshot: Tuple[Dict[int, AuctionRecord], int]) -> None:
        self.auctions, self.auctions_started = snapshot

    def start_auction(self, leftover_receiver: str, proceeds_receiver: str,
                      amount_to_raise: int, collateral_to_sell: int) -> int:
        self.auctions_started += 1
        auction_id = self.auctions_started
        self.auctions[auction_id] = AuctionRecord(
            auction_id, leftover_receiver, proceeds_receiver, amount_to_raise, collateral_to_sell
        )
        logger.debug("Started auction %s on %s", auction_id, self.address)
        return auction_id

    def open_auctions(self) -> Dict[int, AuctionRecord]:
        return {i: a for i, a in self.auctions.items() if not a.settled}

    def settle(self, auction_id: int, collateral_sold: Optional[int] = None) -> AuctionRecord:
        """Close an auction: sold collateral leaves the engine, leftovers go to the owner"""
        record = self.auctions.get(auction_id)
        if record is None or record.settled:
            raise AuctionNotFound(f"Auction {auction_id} is not open on {self.address}")
        sold = record.collateral_to_sell if collateral_sold is None else collateral_sold
        leftover = record.collateral_to_sell - sold
        engine_address = self.liquidation_engine.address

        self.ledger.transfer_collateral(self.collateral_type, engine_address, self.address, sold,
                                        caller=self.address)
        if leftover > 0:
            self.ledger.transfer_collateral(self.collateral_type, engine_address,
                                            record.leftover_receiver, leftover, caller=self.address)
        self.liquidation_engine.remove_coins_from_auction(record.amount_to_raise, caller=self.address)

        record = replace(record, settled=True)
        self.auctions[auction_id] = record
        logger.info("Settled auction %s: sold %s, returned %s to %s",
                    auction_id, sold, leftover, record.leftover_receiver)
        return record
