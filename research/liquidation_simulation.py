import logging
import numpy as np
import matplotlib.pyplot as plt
from dataclasses import dataclass
from typing import Dict, List, Optional
import pandas as pd
from pathlib import Path
from datetime import datetime

from liquidation_model.src.engine import LiquidationEngine
from liquidation_model.src.errors import EconomicPreconditionError
from liquidation_model.src.constants import RAD
from liquidation_model.src.fixed_point import to_rad, to_ray, to_wad
from liquidation_model.src.simulated.ledger import InMemoryPositionLedger
from liquidation_model.src.simulated.accounting import AccountingEngine
from liquidation_model.src.simulated.auction_house import RecordingAuctionHouse
from liquidation_model.src.simulated.rescuers import CollateralTopUpRescuer
from liquidation_model.src import analytics

logger = logging.getLogger(__name__)

COLLATERAL_TYPE = "ETH-A"
GOVERNANCE = "governance"
KEEPER = "keeper"

@dataclass
class SimulationParams:
    initial_price: float = 2000.0
    price_volatility: float = 0.01     # per step
    price_drift: float = -0.0005       # per step
    steps: int = 500
    n_positions: int = 200
    min_collateral_ratio: float = 1.5
    max_collateral_ratio: float = 3.0
    liquidation_ratio: float = 1.5     # liquidation price = price / ratio
    debt_floor: float = 100.0
    liquidation_penalty: float = 1.13
    liquidation_quantity_cap: float = 50_000.0
    on_auction_limit: float = 500_000.0
    auction_duration_steps: int = 12
    protected_share: float = 0.2       # share of owners with a top-up rescuer
    rescuer_reserve: float = 50.0      # collateral per protected owner
    random_seed: Optional[int] = None
    experiment_name: str = "default"

class LiquidationSimulation:
    def __init__(self, params: SimulationParams):
        self.params = params
        self.rng = np.random.default_rng(params.random_seed)
        self.ledger = InMemoryPositionLedger()
        self.accounting = AccountingEngine()
        self.auction_house = RecordingAuctionHouse("eth_a_auction_house", COLLATERAL_TYPE, self.ledger)
        self.engine = LiquidationEngine(self.ledger, self.accounting, deployer=GOVERNANCE)
        self.auction_house.connect(self.engine)
        self.rescuer = CollateralTopUpRescuer("topup_rescuer", self.ledger)
        self.owners: List[str] = []
        self.auction_starts: Dict[int, int] = {}
        self.history: List[dict] = []
        self._setup()

    def _setup(self):
        p = self.params
        self.ledger.init_collateral_type(
            COLLATERAL_TYPE,
            debt_floor=to_rad(p.debt_floor),
            liquidation_price=self._liquidation_price(p.initial_price),
        )
        self.engine.init_collateral_type(
            COLLATERAL_TYPE,
            self.auction_house,
            caller=GOVERNANCE,
            liquidation_penalty=to_wad(p.liquidation_penalty),
            liquidation_quantity_cap=to_rad(p.liquidation_quantity_cap),
        )
        self.engine.modify_parameters("on_auction_system_coin_limit", to_rad(p.on_auction_limit), GOVERNANCE)
        self.engine.add_authorization(self.auction_house.address, GOVERNANCE)
        self.engine.approve_rescuer(self.rescuer, GOVERNANCE)

        ratios = self.rng.uniform(p.min_collateral_ratio, p.max_collateral_ratio, p.n_positions)
        debts = self.rng.lognormal(mean=np.log(5_000), sigma=1.0, size=p.n_positions)
        debts = np.maximum(debts, p.debt_floor * 1.5)
        protected = self.rng.random(p.n_positions) < p.protected_share

        for i in range(p.n_positions):
            owner = f"owner-{i}"
            collateral = debts[i] * ratios[i] / p.initial_price
            self.ledger.open_position(COLLATERAL_TYPE, owner, to_wad(round(collateral, 12)),
                                      to_wad(round(debts[i], 6)))
            if protected[i]:
                self.ledger.approve_modification(owner, self.rescuer.address)
                self.engine.choose_rescuer(COLLATERAL_TYPE, owner, self.rescuer.address, caller=owner)
            self.owners.append(owner)
        self.rescuer.fund(COLLATERAL_TYPE, to_wad(p.rescuer_reserve * protected.sum()))

    def _liquidation_price(self, price: float) -> int:
        return to_ray(round(price / self.params.liquidation_ratio, 9))

    def simulate(self) -> pd.DataFrame:
        p = self.params
        price = p.initial_price
        shocks = self.rng.normal(p.price_drift, p.price_volatility, p.steps)

        for step in range(p.steps):
            price *= (1 + shocks[step])
            self.ledger.update_liquidation_price(COLLATERAL_TYPE, self._liquidation_price(price))
            self.accounting.now = step

            self._settle_expired_auctions(step)
            liquidated, skipped = self._keeper_round(step)

            self.history.append({
                "step": step,
                "price": price,
                "on_auction": self.engine.current_on_auction_system_coins / RAD,
                "liquidations": liquidated,
                "limit_hits": skipped,
                "queued_debt": self.accounting.queue.total_queued_debt / RAD,
            })
        return pd.DataFrame(self.history)

    def _keeper_round(self, step: int):
        liquidated = skipped = 0
        data = self.ledger.read_collateral_type_data(COLLATERAL_TYPE)
        for owner in self.owners:
            position = self.ledger.read_position(COLLATERAL_TYPE, owner)
            if not position.is_unsafe(data.accumulated_rate, data.liquidation_price):
                continue
            try:
                auction_id = self.engine.liquidate(COLLATERAL_TYPE, owner, caller=KEEPER)
            except EconomicPreconditionError as exc:
                logger.debug("Skipped %s at step %s: %s", owner, step, exc)
                skipped += 1
                continue
            if auction_id is not None:
                self.auction_starts[auction_id] = step
                liquidated += 1
        return liquidated, skipped

    def _settle_expired_auctions(self, step: int):
        for auction_id in list(self.auction_house.open_auctions()):
            if step - self.auction_starts[auction_id] >= self.params.auction_duration_steps:
                self.auction_house.settle(auction_id)

    def plot_results(self, results: pd.DataFrame):
        output_dir = Path('research/results') / self.params.experiment_name
        output_dir.mkdir(parents=True, exist_ok=True)

        fig, (ax1, ax2, ax3) = plt.subplots(3, 1, figsize=(12, 10), sharex=True)

        # Collateral price
        ax1.plot(results["step"], results["price"], label='Collateral Price')
        ax1.set_ylabel('Price')
        ax1.set_title('Collateral Price')
        ax1.legend()
        ax1.grid(True, alpha=0.3)

        # On auction counter against the global limit
        ax2.plot(results["step"], results["on_auction"], label='On Auction', color='orange')
        ax2.axhline(y=self.params.on_auction_limit, color='r', linestyle='--', alpha=0.5, label='Limit')
        ax2.set_ylabel('System Coins')
        ax2.set_title('Coins On Auction')
        ax2.legend()
        ax2.grid(True, alpha=0.3)

        ax3.bar(results["step"], results["liquidations"], label='Liquidations')
        ax3.plot(results["step"], np.cumsum(results["limit_hits"]), label='Limit Hits (cumulative)', color='purple')
        ax3.set_xlabel('Step')
        ax3.legend()
        ax3.grid(True, alpha=0.3)

        seed_text = f"Random Seed: {self.params.random_seed}" if self.params.random_seed is not None else "No Seed"
        fig.text(0.02, 0.02, seed_text, fontsize=8, alpha=0.7)
        plt.tight_layout()

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        plt.savefig(output_dir / f"liquidations_{timestamp}.png", bbox_inches='tight', dpi=150)
        plt.close()
        return output_dir

def summarize(sim: LiquidationSimulation) -> pd.DataFrame:
    frame = analytics.events_to_frame(sim.engine.events)
    print("\nRescues:")
    print(analytics.rescue_counts(frame).to_string())
    summary = analytics.liquidation_summary(frame)
    print("\nLiquidations by collateral type:")
    print(summary.to_string())
    return summary

def main():
    logging.basicConfig(level=logging.WARNING, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    params = SimulationParams(
        experiment_name="liquidation_cascade",
        random_seed=57,
        steps=300,
        price_drift=-0.002,
    )
    sim = LiquidationSimulation(params)
    results = sim.simulate()
    summarize(sim)
    output_dir = sim.plot_results(results)
    results.to_csv(output_dir / "history.csv", index=False)
    print(f"\nResults written to {output_dir}")

if __name__ == "__main__":
    main()
