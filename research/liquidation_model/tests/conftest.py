"""Shared fixtures: an isolated engine wired to in-memory collaborators"""
import pytest

from liquidation_model.src.engine import LiquidationEngine
from liquidation_model.src.constants import RAY, WAD
from liquidation_model.src.fixed_point import to_wad
from liquidation_model.src.simulated.ledger import InMemoryPositionLedger
from liquidation_model.src.simulated.accounting import AccountingEngine
from liquidation_model.src.simulated.auction_house import RecordingAuctionHouse
from liquidation_model.tests.principals import ETH, GOV, KEEPER

class Environment:
    """Engine plus collaborators, built fresh for every test"""

    def __init__(self, debt_floor=0, liquidation_penalty=to_wad("1.1"), **collateral_params):
        self.ledger = InMemoryPositionLedger()
        self.ledger.init_collateral_type(ETH, debt_floor=debt_floor, accumulated_rate=RAY,
                                         liquidation_price=RAY)
        self.accounting = AccountingEngine()
        self.auction_house = RecordingAuctionHouse("eth_auction_house", ETH, self.ledger)
        self.engine = LiquidationEngine(self.ledger, self.accounting, deployer=GOV)
        self.auction_house.connect(self.engine)
        self.engine.init_collateral_type(ETH, self.auction_house, caller=GOV,
                                         liquidation_penalty=liquidation_penalty, **collateral_params)
        self.engine.add_authorization(self.auction_house.address, GOV)

    def open(self, owner, collateral, debt):
        """Open a position with amounts given in whole units"""
        self.ledger.open_position(ETH, owner, collateral * WAD, debt * WAD)

    def position(self, owner):
        return self.ledger.read_position(ETH, owner)

    def liquidate(self, owner):
        return self.engine.liquidate(ETH, owner, caller=KEEPER)

@pytest.fixture
def make_env():
    return Environment

@pytest.fixture
def env():
    return Environment()
