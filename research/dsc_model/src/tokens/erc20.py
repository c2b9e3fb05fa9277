"""In-memory fungible token"""
import logging
from typing import Dict, Tuple

from ..chain import Chain
from ..errors import (
    InsufficientAllowanceError,
    InsufficientBalanceError,
    InvalidRecipientError,
)
from ..constants import ZERO_ADDRESS

logger = logging.getLogger(__name__)


class ERC20Token:
    """Balances, allowances and total supply of one token"""

    def __init__(self, chain: Chain, address: str, name: str, symbol: str, decimals: int = 18):
        self.address = address
        self.name = name
        self.symbol = symbol
        self._decimals = decimals
        self.balances: Dict[str, int] = {}
        self.allowances: Dict[Tuple[str, str], int] = {}
        self.total_supply = 0
        chain.register(self)

    def snapshot(self):
        return dict(self.balances), dict(self.allowances), self.total_supply

    def restore(self, state) -> None:
        balances, allowances, total_supply = state
        self.balances = dict(balances)
        self.allowances = dict(allowances)
        self.total_supply = total_supply

    def decimals(self) -> int:
        return self._decimals

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self.allowances.get((owner, spender), 0)

    def approve(self, sender: str, spender: str, amount: int) -> bool:
        self.allowances[(sender, spender)] = amount
        return True

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        self._transfer(sender, to, amount)
        return True

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        allowance = self.allowance(owner, spender)
        if allowance < amount:
            raise InsufficientAllowanceError(owner, spender, allowance, amount)
        self.allowances[(owner, spender)] = allowance - amount
        self._transfer(owner, to, amount)
        return True

    def _transfer(self, sender: str, to: str, amount: int) -> None:
        if to == ZERO_ADDRESS:
            raise InvalidRecipientError(to)
        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientBalanceError(sender, balance, amount, kind=f"{self.symbol} balance")
        self.balances[sender] = balance - amount
        self.balances[to] = self.balance_of(to) + amount

    def _mint(self, to: str, amount: int) -> None:
        self.balances[to] = self.balance_of(to) + amount
        self.total_supply += amount

    def _burn(self, account: str, amount: int) -> None:
        balance = self.balance_of(account)
        if balance < amount:
            raise InsufficientBalanceError(account, balance, amount, kind=f"{self.symbol} balance")
        self.balances[account] = balance - amount
        self.total_supply -= amount

    def faucet(self, to: str, amount: int) -> None:
        """Faucet mint, open to anyone (collateral test tokens)"""
        self._mint(to, amount)
        logger.debug("Minted %d %s to %s", amount, self.symbol, to)

    def __repr__(self):
        return f"ERC20Token({self.symbol}, decimals={self._decimals}, supply={self.total_supply})"
