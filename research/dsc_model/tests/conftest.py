"""Shared fixtures: a fresh local deployment per test."""
from __future__ import annotations

import pytest

from dsc_model.src.chain import Chain
from dsc_model.src.config import DeploymentConfig
from dsc_model.src.constants import NATIVE_COLLATERAL, WAD
from dsc_model.src.deploy import Deployment, deploy_protocol

USER = "alice"
LIQUIDATOR = "liquidator"

ONE_ETH = WAD
# deposit_and_mint of 1 ETH at 3000 USD/ETH and 1.16 USD/EUR
MINTED_FOR_ONE_ETH = 1_724_137_931_034_482_758_620


@pytest.fixture()
def config() -> DeploymentConfig:
    return DeploymentConfig()


@pytest.fixture()
def deployment(config: DeploymentConfig) -> Deployment:
    return deploy_protocol(Chain(), config)


@pytest.fixture()
def engine(deployment: Deployment):
    return deployment.engine


@pytest.fixture()
def funded_weth(deployment: Deployment):
    """Give an account WETH and approve the engine to pull it."""

    def _fund(account: str, amount: int) -> None:
        deployment.weth.faucet(account, amount)
        deployment.weth.approve(account, deployment.engine.address, amount)

    return _fund


@pytest.fixture()
def eth_position(deployment: Deployment) -> Deployment:
    """USER holds 1 ETH of collateral and the maximum DEUR mintable against it."""
    deployment.chain.fund(USER, 10 * ONE_ETH)
    deployment.engine.deposit_and_mint(USER, NATIVE_COLLATERAL, ONE_ETH, value=ONE_ETH)
    deployment.dsc.approve(USER, deployment.engine.address, MINTED_FOR_ONE_ETH)
    return deployment


@pytest.fixture()
def liquidator(deployment: Deployment, funded_weth) -> str:
    """LIQUIDATOR holds DEUR minted against 10 WETH and has approved the engine."""
    amount = 10 * WAD
    funded_weth(LIQUIDATOR, amount)
    minted = deployment.engine.deposit_and_mint(LIQUIDATOR, deployment.weth.address, amount)
    deployment.dsc.approve(LIQUIDATOR, deployment.engine.address, minted)
    return LIQUIDATOR


def set_price(feed, price: str) -> None:
    """Push a USD price, given as a decimal string, to an 8 decimal feed."""
    whole, _, frac = price.partition(".")
    frac = (frac + "0" * 8)[:8]
    feed.update_answer(int(whole) * 10**8 + int(frac))
