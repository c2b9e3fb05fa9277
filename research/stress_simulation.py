import numpy as np
import matplotlib.pyplot as plt
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import pandas as pd
from pathlib import Path
from datetime import datetime

from dsc_model.src.chain import Chain
from dsc_model.src.config import DeploymentConfig, load_config
from dsc_model.src.constants import NATIVE_COLLATERAL, WAD
from dsc_model.src.deploy import Deployment, deploy_protocol
from dsc_model.src.errors import ProtocolError
from dsc_model.src.logging_setup import configure_logging
from dsc_model.src.state.collateral import Collateral

LIQUIDATOR = "liquidator"
# WBTC the liquidator locks to mint its DEUR war chest
LIQUIDATOR_WBTC = 1_000

@dataclass
class PriceParams:
    initial_price: float = 3000.0  # ETH in USD
    volatility: float = 0.01       # per step
    drift: float = -0.0005         # per step, slightly bearish to force liquidations

@dataclass
class SimulationParams:
    simulation_days: int = 30
    steps_per_day: int = 24  # hourly steps
    num_borrowers: int = 25
    deposit_range: Tuple[float, float] = (0.5, 5.0)  # ETH per borrower
    random_seed: Optional[int] = None
    experiment_name: str = "default"
    price_params: PriceParams = field(default_factory=PriceParams)

class StressSimulation:
    """Drive the engine through an ETH price path and watch solvency.

    Borrowers open ETH positions at the maximum issuable credit; a single
    liquidator covers the full debt of any position that drops below the
    minimum health factor.
    """

    def __init__(self, params: SimulationParams, config: Optional[DeploymentConfig] = None):
        self.params = params
        self.config = config if config is not None else DeploymentConfig()
        self.deployment: Deployment = deploy_protocol(Chain(), self.config)
        self.borrowers: List[str] = []
        self.records: List[dict] = []
        self.liquidated = set()

        if params.random_seed is not None:
            np.random.seed(params.random_seed)

    def _set_eth_price(self, price: float) -> None:
        answer = int(round(price * 10 ** self.config.eth.feed_decimals))
        self.deployment.eth_feed.update_answer(answer)
        self.deployment.weth_feed.update_answer(answer)

    def open_positions(self) -> None:
        d = self.deployment
        self._set_eth_price(self.params.price_params.initial_price)

        low, high = self.params.deposit_range
        deposits = np.random.uniform(low, high, self.params.num_borrowers)
        for i, deposit in enumerate(deposits):
            borrower = f"borrower-{i}"
            amount = int(deposit * WAD)
            d.chain.fund(borrower, amount)
            d.engine.deposit_and_mint(borrower, NATIVE_COLLATERAL, amount, value=amount)
            self.borrowers.append(borrower)

        wbtc_amount = LIQUIDATOR_WBTC * 10 ** d.wbtc.decimals()
        d.wbtc.faucet(LIQUIDATOR, wbtc_amount)
        d.wbtc.approve(LIQUIDATOR, d.engine.address, wbtc_amount)
        d.engine.deposit_and_mint(LIQUIDATOR, d.wbtc.address, wbtc_amount)
        d.dsc.approve(LIQUIDATOR, d.engine.address, d.dsc.balance_of(LIQUIDATOR))

    def _liquidate_unhealthy(self) -> Tuple[int, int, int]:
        """Returns (liquidatable, liquidated, failed) counts for this step"""
        engine = self.deployment.engine
        liquidatable = liquidated = failed = 0
        for borrower in self.borrowers:
            debt = engine.get_debt(borrower)
            if debt == 0 or engine.get_health_factor(borrower) >= engine.min_health_factor:
                continue
            liquidatable += 1
            try:
                engine.liquidate(LIQUIDATOR, borrower, debt, NATIVE_COLLATERAL)
            except ProtocolError:
                failed += 1
            else:
                liquidated += 1
                self.liquidated.add(borrower)
        return liquidatable, liquidated, failed

    def _engine_state(self) -> dict:
        d = self.deployment
        engine = d.engine
        held = {
            Collateral.WETH: d.weth.balance_of(engine.address),
            Collateral.ETH: d.chain.balance_of(engine.address),
            Collateral.WBTC: d.wbtc.balance_of(engine.address),
        }
        collateral_value = sum(
            engine.get_collateral_value_in_peg(c, amount) for c, amount in held.items() if amount
        )
        bad_debt = 0
        for borrower in self.borrowers:
            debt, value = engine.get_account_information(borrower)
            bad_debt += max(debt - value, 0)
        supply = d.dsc.total_supply
        return {
            "total_supply": supply / WAD,
            "collateral_value": collateral_value / WAD,
            "collateral_ratio": collateral_value / supply if supply else np.inf,
            "solvent": collateral_value * 100 >= supply * engine.threshold,
            "bad_debt": bad_debt / WAD,
        }

    def simulate(self) -> pd.DataFrame:
        if not self.borrowers:
            self.open_positions()

        pp = self.params.price_params
        current_price = pp.initial_price
        total_steps = self.params.simulation_days * self.params.steps_per_day

        for step in range(total_steps):
            # Geometric Brownian motion
            shock = np.random.normal(0, pp.volatility)
            current_price *= np.exp(pp.drift - 0.5 * pp.volatility ** 2 + shock)
            self._set_eth_price(current_price)

            liquidatable, liquidated, failed = self._liquidate_unhealthy()

            record = {
                "time": step / self.params.steps_per_day,
                "eth_price": current_price,
                "liquidatable": liquidatable,
                "liquidations": liquidated,
                "failed_liquidations": failed,
            }
            record.update(self._engine_state())
            self.records.append(record)

        return self.results()

    def results(self) -> pd.DataFrame:
        return pd.DataFrame(self.records)

    def summary(self) -> dict:
        df = self.results()
        return {
            "steps": len(df),
            "final_eth_price": float(df["eth_price"].iloc[-1]),
            "positions_liquidated": len(self.liquidated),
            "failed_liquidations": int(df["failed_liquidations"].sum()),
            "always_solvent": bool(df["solvent"].all()),
            "max_bad_debt": float(df["bad_debt"].max()),
        }

    def plot_results(self) -> Path:
        output_dir = Path('research/results') / self.params.experiment_name
        output_dir.mkdir(parents=True, exist_ok=True)
        df = self.results()

        fig, (ax1, ax2, ax3) = plt.subplots(3, 1, figsize=(12, 10), sharex=True)

        ax1.plot(df["time"], df["eth_price"], label='ETH Price')
        ax1.set_ylabel('Price (USD)')
        ax1.set_title('Collateral Price Over Time')
        ax1.legend()
        ax1.grid(True, alpha=0.3)

        ax2.plot(df["time"], df["collateral_ratio"] * 100, label='System Collateral Ratio', color='orange')
        ax2.axhline(y=self.deployment.engine.threshold, color='r', linestyle='--', alpha=0.3)
        ax2.set_ylabel('Collateral / Supply (%)')
        ax2.legend()
        ax2.grid(True, alpha=0.3)

        ax3.plot(df["time"], df["liquidations"].cumsum(), label='Liquidations')
        ax3.plot(df["time"], df["failed_liquidations"].cumsum(), label='Failed Liquidations', color='red')
        ax3.set_ylabel('Count (cumulative)')
        ax3.set_xlabel('Time (days)')
        ax3.legend()
        ax3.grid(True, alpha=0.3)

        seed_text = f"Random Seed: {self.params.random_seed}" if self.params.random_seed is not None else "No Seed"
        fig.text(0.02, 0.02, seed_text, fontsize=8, alpha=0.7)

        plt.tight_layout()

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        path = output_dir / f"stress_vol_{self.params.price_params.volatility}_{timestamp}.png"
        plt.savefig(path, dpi=150)
        plt.close()
        return path

def main():
    configure_logging("WARNING")
    params = SimulationParams(
        experiment_name="eth_drawdown",
        random_seed=57,
        simulation_days=60,
    )
    sim = StressSimulation(params, load_config())
    sim.simulate()
    print(sim.summary())
    print(f"Plot written to {sim.plot_results()}")

if __name__ == "__main__":
    main()
