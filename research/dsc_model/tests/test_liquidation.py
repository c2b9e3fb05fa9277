"""Liquidation of undercollateralized positions"""
from __future__ import annotations

import pytest

from conftest import LIQUIDATOR, MINTED_FOR_ONE_ETH, ONE_ETH, USER, set_price
from dsc_model.src.constants import MAX_UINT256, NATIVE_COLLATERAL, WAD
from dsc_model.src.errors import (
    HealthFactorTooLowError,
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidCollateralError,
    NotLiquidatableError,
    RedeemAmountTooSmallError,
)
from dsc_model.src.state.collateral import Collateral
from dsc_model.src.valuation import liquidation_collateral_out


@pytest.fixture()
def underwater(eth_position, liquidator):
    """USER's 1 ETH position after ETH fell from 3000 to 2400 USD."""
    set_price(eth_position.eth_feed, "2400")
    return eth_position


def _state(d):
    return (
        d.engine.get_debt(USER),
        d.engine.get_collateral_for_user(USER),
        d.dsc.balance_of(LIQUIDATOR),
        d.dsc.total_supply,
        d.chain.balance_of(LIQUIDATOR),
        d.chain.balance_of(d.engine.address),
    )


class TestLiquidate:
    def test_price_drop_breaks_health(self, underwater) -> None:
        assert underwater.engine.get_health_factor(USER) < WAD

    def test_full_liquidation(self, underwater) -> None:
        engine = underwater.engine
        liquidator_dsc = underwater.dsc.balance_of(LIQUIDATOR)
        expected = liquidation_collateral_out(
            MINTED_FOR_ONE_ETH, 116 * WAD // 100, 2400 * WAD, 18, 10, 100
        )

        seized = engine.liquidate(LIQUIDATOR, USER, MINTED_FOR_ONE_ETH, NATIVE_COLLATERAL)

        assert seized == expected
        assert underwater.chain.balance_of(LIQUIDATOR) == expected
        assert engine.get_debt(USER) == 0
        assert engine.get_collateral_for_user(USER) == (0, ONE_ETH - expected, 0)
        assert engine.get_health_factor(USER) == MAX_UINT256
        assert underwater.dsc.balance_of(LIQUIDATOR) == liquidator_dsc - MINTED_FOR_ONE_ETH
        # borrower keeps the DEUR they minted
        assert underwater.dsc.balance_of(USER) == MINTED_FOR_ONE_ETH

    def test_bonus_paid_on_spot_equivalent(self, underwater) -> None:
        engine = underwater.engine
        seized = engine.liquidate(LIQUIDATOR, USER, MINTED_FOR_ONE_ETH, NATIVE_COLLATERAL)
        spot = engine.get_token_amount_from_peg(Collateral.ETH, MINTED_FOR_ONE_ETH)
        assert spot + spot // 10 <= seized <= spot + spot // 10 + 2

    def test_partial_liquidation_improves_health(self, underwater) -> None:
        engine = underwater.engine
        before = engine.get_health_factor(USER)
        engine.liquidate(LIQUIDATOR, USER, 1500 * WAD, NATIVE_COLLATERAL)
        after = engine.get_health_factor(USER)
        assert after >= before
        assert after >= WAD
        assert engine.get_debt(USER) == MINTED_FOR_ONE_ETH - 1500 * WAD

    def test_liquidation_leaving_borrower_unhealthy_fails(self, underwater) -> None:
        before = _state(underwater)
        with pytest.raises(HealthFactorTooLowError) as exc:
            underwater.engine.liquidate(LIQUIDATOR, USER, 100 * WAD, NATIVE_COLLATERAL)
        assert exc.value.account == USER
        assert _state(underwater) == before

    def test_healthy_borrower(self, eth_position, liquidator) -> None:
        before = _state(eth_position)
        with pytest.raises(NotLiquidatableError) as exc:
            eth_position.engine.liquidate(LIQUIDATOR, USER, WAD, NATIVE_COLLATERAL)
        assert exc.value.health_factor >= WAD
        assert _state(eth_position) == before

    def test_account_without_debt(self, deployment, liquidator) -> None:
        with pytest.raises(NotLiquidatableError) as exc:
            deployment.engine.liquidate(LIQUIDATOR, "nobody", WAD, NATIVE_COLLATERAL)
        assert exc.value.health_factor == MAX_UINT256

    def test_zero_debt_to_cover(self, underwater) -> None:
        with pytest.raises(InvalidAmountError):
            underwater.engine.liquidate(LIQUIDATOR, USER, 0, NATIVE_COLLATERAL)

    def test_invalid_collateral(self, underwater) -> None:
        with pytest.raises(InvalidCollateralError):
            underwater.engine.liquidate(LIQUIDATOR, USER, WAD, "token:DOGE")

    def test_collateral_borrower_does_not_hold(self, underwater) -> None:
        before = _state(underwater)
        with pytest.raises(InsufficientBalanceError):
            underwater.engine.liquidate(
                LIQUIDATOR, USER, MINTED_FOR_ONE_ETH, underwater.weth.address
            )
        assert _state(underwater) == before

    def test_cover_more_than_debt(self, underwater) -> None:
        with pytest.raises(InsufficientBalanceError) as exc:
            underwater.engine.liquidate(LIQUIDATOR, USER, MINTED_FOR_ONE_ETH + 1, NATIVE_COLLATERAL)
        assert exc.value.kind == "debt"

    def test_liquidator_without_funds(self, underwater) -> None:
        underwater.dsc.approve("pauper", underwater.engine.address, MINTED_FOR_ONE_ETH)
        with pytest.raises(InsufficientBalanceError):
            underwater.engine.liquidate("pauper", USER, MINTED_FOR_ONE_ETH, NATIVE_COLLATERAL)
        assert underwater.engine.get_debt(USER) == MINTED_FOR_ONE_ETH

    def test_dust_on_eight_decimal_collateral(self, deployment, liquidator) -> None:
        deployment.wbtc.faucet(USER, 10**8)
        deployment.wbtc.approve(USER, deployment.engine.address, 10**8)
        deployment.engine.deposit_and_mint(USER, deployment.wbtc.address, 10**8)
        set_price(deployment.wbtc_feed, "50000")

        with pytest.raises(RedeemAmountTooSmallError):
            deployment.engine.liquidate(LIQUIDATOR, USER, 1, deployment.wbtc.address)
