"""Token protocols for collateral tokens and the credit token."""
from typing import Protocol


class CollateralToken(Protocol):
    """Standard fungible token the engine holds as collateral."""

    address: str

    def decimals(self) -> int: ...

    def balance_of(self, account: str) -> int: ...

    def transfer(self, sender: str, to: str, amount: int) -> bool: ...

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool: ...


class CreditToken(CollateralToken, Protocol):
    """Token whose mint/burn authority belongs to a single owner."""

    def owner(self) -> str: ...

    def mint(self, sender: str, to: str, amount: int) -> bool: ...

    def burn(self, sender: str, amount: int) -> None: ...
