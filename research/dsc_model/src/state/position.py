"""Position state management"""
from dataclasses import dataclass, field

from ..errors import InsufficientBalanceError
from ..valuation import checked_add, checked_sub
from .collateral import Collateral, CollateralRecord


@dataclass
class Position:
    """Collateral and outstanding credit of one account"""
    user: str
    collateral: CollateralRecord = field(default_factory=CollateralRecord)
    debt_amount: int = 0  # WAD, credit token units

    def update_collateral(self, collateral: Collateral, amount_change: int) -> None:
        """Update position collateral"""
        try:
            self.collateral.update(collateral, amount_change)
        except InsufficientBalanceError as e:
            raise InsufficientBalanceError(
                self.user, e.balance, e.requested, kind=f"{collateral.name} collateral"
            ) from e

    def update_debt(self, amount_change: int) -> None:
        """Update position debt"""
        if amount_change > 0:
            self.debt_amount = checked_add(self.debt_amount, amount_change)
        else:
            if self.debt_amount < abs(amount_change):
                raise InsufficientBalanceError(
                    self.user, self.debt_amount, abs(amount_change), kind="debt"
                )
            self.debt_amount = checked_sub(self.debt_amount, abs(amount_change))
