"""Per-account collateral ledger record"""
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from ..errors import InsufficientBalanceError
from ..valuation import checked_add, checked_sub


class Collateral(Enum):
    """Closed set of accepted collateral"""
    WETH = "weth"
    ETH = "eth"      # native currency
    WBTC = "wbtc"


@dataclass
class CollateralRecord:
    """Amounts deposited by one account, one field per collateral"""
    weth: int = 0
    eth: int = 0
    wbtc: int = 0

    def get(self, collateral: Collateral) -> int:
        return getattr(self, collateral.value)

    def update(self, collateral: Collateral, amount_change: int) -> None:
        """Adjust one balance; a decrease below zero fails without mutation"""
        current = self.get(collateral)
        if amount_change < 0 and current < abs(amount_change):
            raise InsufficientBalanceError(
                collateral.name, current, abs(amount_change), kind="collateral"
            )
        if amount_change < 0:
            updated = checked_sub(current, -amount_change)
        else:
            updated = checked_add(current, amount_change)
        setattr(self, collateral.value, updated)

    def as_tuple(self) -> Tuple[int, int, int]:
        """(weth, eth, wbtc)"""
        return self.weth, self.eth, self.wbtc
