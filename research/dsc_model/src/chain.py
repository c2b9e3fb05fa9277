"""In-memory execution substrate

Stands in for the runtime the engine is deployed on: native currency
balances, all-or-nothing call frames and push transfers that may call back
into the recipient.
"""
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Protocol

from .errors import InsufficientBalanceError

logger = logging.getLogger(__name__)


class Stateful(Protocol):
    """Participant whose state is rolled back with a failed frame"""

    def snapshot(self) -> Any: ...

    def restore(self, state: Any) -> None: ...


class Chain:
    """Serializing, all-or-nothing call substrate"""

    def __init__(self) -> None:
        self.native_balances: Dict[str, int] = {}
        self.participants: List[Stateful] = [self]
        self.receive_hooks: Dict[str, Callable[[str, int], None]] = {}
        self.depth = 0

    def register(self, participant: Stateful) -> None:
        """Include a participant's state in every frame snapshot"""
        self.participants.append(participant)

    def snapshot(self) -> Dict[str, int]:
        return dict(self.native_balances)

    def restore(self, state: Dict[str, int]) -> None:
        self.native_balances = dict(state)

    @contextmanager
    def atomic(self):
        """Run a frame: every participant is restored if any exception escapes"""
        saved = [(p, p.snapshot()) for p in self.participants]
        self.depth += 1
        try:
            yield self
        except Exception as e:
            for participant, state in saved:
                participant.restore(state)
            logger.debug("Frame at depth %d reverted: %s", self.depth, e)
            raise
        finally:
            self.depth -= 1

    def fund(self, account: str, amount: int) -> None:
        """Credit native currency out of thin air (test faucet)"""
        self.native_balances[account] = self.native_balances.get(account, 0) + amount

    def balance_of(self, account: str) -> int:
        return self.native_balances.get(account, 0)

    def set_receive_hook(self, account: str, hook: Callable[[str, int], None]) -> None:
        """Register code run whenever `account` receives native currency"""
        self.receive_hooks[account] = hook

    def _move(self, sender: str, to: str, amount: int) -> None:
        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientBalanceError(sender, balance, amount, kind="native balance")
        self.native_balances[sender] = balance - amount
        self.native_balances[to] = self.balance_of(to) + amount

    def pay(self, sender: str, to: str, amount: int) -> None:
        """Attach native value to a call (no callback into the recipient)"""
        if amount:
            self._move(sender, to, amount)

    def send_native(self, sender: str, to: str, amount: int) -> bool:
        """Push native currency to `to`, running its receive hook.

        Returns False, with the sub-call rolled back, when the transfer or
        the hook fails.
        """
        try:
            with self.atomic():
                self._move(sender, to, amount)
                hook = self.receive_hooks.get(to)
                if hook is not None:
                    hook(sender, amount)
        except Exception as e:
            logger.warning("Native transfer of %d from %s to %s failed: %s", amount, sender, to, e)
            return False
        return True
