"""Short stress simulation runs"""
from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from stress_simulation import PriceParams, SimulationParams, StressSimulation


def test_results_frame():
    params = SimulationParams(simulation_days=1, num_borrowers=5, random_seed=7)
    sim = StressSimulation(params)
    df = sim.simulate()

    assert isinstance(df, pd.DataFrame)
    assert len(df) == 24
    for column in ("eth_price", "total_supply", "collateral_value", "solvent", "bad_debt"):
        assert column in df.columns
    assert sim.summary()["steps"] == 24


def test_crash_liquidates_every_borrower():
    params = SimulationParams(
        simulation_days=1,
        num_borrowers=5,
        random_seed=3,
        price_params=PriceParams(volatility=0.001, drift=-0.02),
    )
    sim = StressSimulation(params)
    sim.simulate()
    summary = sim.summary()

    assert summary["positions_liquidated"] == 5
    assert summary["failed_liquidations"] == 0
    assert summary["always_solvent"]
    assert summary["max_bad_debt"] == 0


def test_same_seed_same_path():
    first = StressSimulation(SimulationParams(simulation_days=1, num_borrowers=3, random_seed=11)).simulate()
    second = StressSimulation(SimulationParams(simulation_days=1, num_borrowers=3, random_seed=11)).simulate()
    pd.testing.assert_frame_equal(first, second)


def test_plot_written(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    sim = StressSimulation(SimulationParams(simulation_days=1, num_borrowers=2, random_seed=1, experiment_name="unit"))
    sim.simulate()
    path = sim.plot_results()
    assert path.exists()
    assert path.parent == Path("research/results/unit")
