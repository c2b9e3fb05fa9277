"""Credit token: EUR-pegged, mint/burn restricted to a single owner"""
import logging

from ..chain import Chain
from ..errors import (
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidRecipientError,
    NotOwnerError,
)
from ..constants import (
    STABLECOIN_DECIMALS,
    STABLECOIN_NAME,
    STABLECOIN_SYMBOL,
    ZERO_ADDRESS,
)
from .erc20 import ERC20Token

logger = logging.getLogger(__name__)


class DecentralizedStableCoin(ERC20Token):
    """ERC20 credit token with an owner-only mint/burn capability.

    The owner is the deployer until ownership is handed to the engine.
    """

    def __init__(self, chain: Chain, address: str, owner: str):
        super().__init__(chain, address, STABLECOIN_NAME, STABLECOIN_SYMBOL, STABLECOIN_DECIMALS)
        self._owner = owner

    def snapshot(self):
        return super().snapshot(), self._owner

    def restore(self, state) -> None:
        token_state, self._owner = state
        super().restore(token_state)

    def owner(self) -> str:
        return self._owner

    def _only_owner(self, sender: str) -> None:
        if sender != self._owner:
            raise NotOwnerError(sender, self._owner)

    def transfer_ownership(self, sender: str, new_owner: str) -> None:
        self._only_owner(sender)
        if new_owner == ZERO_ADDRESS:
            raise InvalidRecipientError(new_owner)
        logger.info("%s ownership transferred from %s to %s", self.symbol, self._owner, new_owner)
        self._owner = new_owner

    def mint(self, sender: str, to: str, amount: int) -> bool:
        self._only_owner(sender)
        if to == ZERO_ADDRESS:
            raise InvalidRecipientError(to)
        if amount <= 0:
            raise InvalidAmountError(amount)
        self._mint(to, amount)
        return True

    def burn(self, sender: str, amount: int) -> None:
        """Burn from the owner's own balance"""
        self._only_owner(sender)
        if amount <= 0:
            raise InvalidAmountError(amount)
        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientBalanceError(sender, balance, amount, kind=f"{self.symbol} balance")
        self._burn(sender, amount)
