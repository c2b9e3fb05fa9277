"""Call frames, native transfers and the reentrancy guard"""
from __future__ import annotations

import pytest

from conftest import ONE_ETH, USER
from dsc_model.src.chain import Chain
from dsc_model.src.constants import NATIVE_COLLATERAL
from dsc_model.src.errors import (
    InsufficientBalanceError,
    ProtocolError,
    ReentrancyError,
    TransferFailedError,
)

ATTACKER = "attacker"


class TestAtomic:
    def test_failed_frame_restores_balances(self) -> None:
        chain = Chain()
        chain.fund("a", 10)
        with pytest.raises(InsufficientBalanceError):
            with chain.atomic():
                chain.pay("a", "b", 4)
                chain.pay("a", "b", 7)
        assert chain.balance_of("a") == 10
        assert chain.balance_of("b") == 0

    def test_inner_frame_rolls_back_alone(self) -> None:
        chain = Chain()
        chain.fund("a", 10)
        with chain.atomic():
            chain.pay("a", "b", 4)
            with pytest.raises(ProtocolError):
                with chain.atomic():
                    chain.pay("a", "c", 1)
                    raise ProtocolError("inner")
        assert chain.balance_of("a") == 6
        assert chain.balance_of("b") == 4
        assert chain.balance_of("c") == 0

    def test_any_exception_rolls_back(self) -> None:
        chain = Chain()
        chain.fund("a", 10)
        with pytest.raises(KeyError):
            with chain.atomic():
                chain.pay("a", "b", 4)
                raise KeyError("boom")
        assert chain.depth == 0
        assert chain.balance_of("a") == 10
        assert chain.balance_of("b") == 0


class TestSendNative:
    def test_hook_runs_on_receive(self) -> None:
        chain = Chain()
        chain.fund("a", 5)
        received = []
        chain.set_receive_hook("b", lambda sender, amount: received.append((sender, amount)))
        assert chain.send_native("a", "b", 5)
        assert received == [("a", 5)]
        assert chain.balance_of("b") == 5

    def test_failing_hook_reverts_transfer(self) -> None:
        chain = Chain()
        chain.fund("a", 5)

        def reject(sender, amount):
            raise ProtocolError("no thanks")

        chain.set_receive_hook("b", reject)
        assert not chain.send_native("a", "b", 5)
        assert chain.balance_of("a") == 5
        assert chain.balance_of("b") == 0

    def test_insufficient_balance_returns_false(self) -> None:
        chain = Chain()
        assert not chain.send_native("a", "b", 1)

    def test_crashing_hook_reverts_transfer(self) -> None:
        chain = Chain()
        chain.fund("a", 5)

        def crash(sender, amount):
            raise RuntimeError("receiver crashed")

        chain.set_receive_hook("b", crash)
        assert not chain.send_native("a", "b", 5)
        assert chain.balance_of("a") == 5
        assert chain.balance_of("b") == 0


class TestReentrancy:
    def test_reentrant_redeem_is_blocked(self, deployment) -> None:
        engine = deployment.engine
        attempts = []

        def reenter(sender, amount):
            attempts.append(amount)
            engine.redeem_collateral(ATTACKER, NATIVE_COLLATERAL, amount)

        deployment.chain.fund(ATTACKER, 2 * ONE_ETH)
        engine.deposit_collateral(ATTACKER, NATIVE_COLLATERAL, 2 * ONE_ETH, value=2 * ONE_ETH)
        deployment.chain.set_receive_hook(ATTACKER, reenter)

        with pytest.raises(TransferFailedError) as exc:
            engine.redeem_collateral(ATTACKER, NATIVE_COLLATERAL, ONE_ETH)

        assert exc.value.to == ATTACKER
        assert attempts == [ONE_ETH]
        assert engine.get_collateral_for_user(ATTACKER) == (0, 2 * ONE_ETH, 0)
        assert deployment.chain.balance_of(ATTACKER) == 0
        assert deployment.chain.balance_of(engine.address) == 2 * ONE_ETH

    def test_guard_released_after_failure(self, deployment) -> None:
        engine = deployment.engine
        deployment.chain.fund(USER, ONE_ETH)
        with pytest.raises(ProtocolError):
            engine.mint(USER, 0)
        engine.deposit_collateral(USER, NATIVE_COLLATERAL, ONE_ETH, value=ONE_ETH)
        assert engine.get_collateral_for_user(USER) == (0, ONE_ETH, 0)

    def test_direct_reentry_raises(self, deployment) -> None:
        engine = deployment.engine
        engine._entered = True
        with pytest.raises(ReentrancyError):
            engine.mint(USER, 1)
        engine._entered = False

    def test_passive_receiver_gets_paid(self, deployment) -> None:
        engine = deployment.engine
        seen = []
        deployment.chain.fund(USER, ONE_ETH)
        engine.deposit_collateral(USER, NATIVE_COLLATERAL, ONE_ETH, value=ONE_ETH)
        deployment.chain.set_receive_hook(USER, lambda sender, amount: seen.append(engine.get_collateral_for_user(USER)))

        engine.redeem_collateral(USER, NATIVE_COLLATERAL, ONE_ETH)

        # ledger already debited when the transfer callback runs
        assert seen == [(0, 0, 0)]
        assert deployment.chain.balance_of(USER) == ONE_ETH


class TestEngineRollback:
    def test_crashing_receiver_keeps_collateral_locked(self, eth_position) -> None:
        engine = eth_position.engine
        debt = engine.get_debt(USER)
        balance = eth_position.chain.balance_of(USER)

        def crash(sender, amount):
            raise RuntimeError("receiver crashed")

        eth_position.chain.set_receive_hook(USER, crash)
        with pytest.raises(TransferFailedError):
            engine.redeem_collateral(USER, NATIVE_COLLATERAL, ONE_ETH)

        assert engine.get_collateral_for_user(USER) == (0, ONE_ETH, 0)
        assert engine.get_debt(USER) == debt
        assert eth_position.chain.balance_of(USER) == balance
        assert eth_position.chain.balance_of(engine.address) == ONE_ETH
        assert engine.get_health_factor(USER) >= engine.min_health_factor

    def test_unexpected_error_rolls_back_entry_point(self, deployment, monkeypatch) -> None:
        engine = deployment.engine
        deployment.chain.fund(USER, ONE_ETH)

        def broken_mint(sender, to, amount):
            raise RuntimeError("token bug")

        monkeypatch.setattr(deployment.dsc, "mint", broken_mint)
        with pytest.raises(RuntimeError):
            engine.deposit_and_mint(USER, NATIVE_COLLATERAL, ONE_ETH, value=ONE_ETH)

        assert engine.get_collateral_for_user(USER) == (0, 0, 0)
        assert engine.get_debt(USER) == 0
        assert deployment.chain.balance_of(USER) == ONE_ETH
        assert not engine._entered
