"""Collateral and debt accounting engine for the DEUR credit token"""
import copy
import functools
import logging
from typing import Dict, Mapping, Tuple

from .chain import Chain
from .constants import NATIVE_DECIMALS
from .errors import (
    HealthFactorTooLowError,
    InsufficientBalanceError,
    InsufficientCollateralError,
    InvalidAmountError,
    MintFailedError,
    NotLiquidatableError,
    ProtocolError,
    RedeemAmountTooSmallError,
    ReentrancyError,
    TransferFailedError,
)
from .interfaces.price_feed import PriceFeed
from .interfaces.token import CollateralToken, CreditToken
from .oracles.oracle_lib import read_price_wad
from .state.collateral import Collateral
from .state.engine_config import EngineConfig
from .state.position import Position
from .valuation import (
    collateral_amount_from_peg,
    collateral_out_for_redeem,
    collateral_value_in_peg,
    credit_issuable_from_collateral,
    health_factor,
    liquidation_collateral_out,
)

logger = logging.getLogger(__name__)


def non_reentrant(method):
    """Guard a mutating entry point: no re-entry, all-or-nothing effects"""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        if self._entered:
            raise ReentrancyError(f"Reentrant call to {method.__name__}")
        self._entered = True
        try:
            with self.chain.atomic():
                return method(self, *args, **kwargs)
        except ProtocolError as e:
            logger.warning("%s rejected: %s", method.__name__, e)
            raise
        finally:
            self._entered = False

    return wrapper


class DSCEngine:
    """Owns the collateral and debt ledgers and is the sole DEUR minter.

    Every mutating call takes an explicit `sender` (the caller's address);
    native currency sent along with a deposit is passed as `value`.
    """

    def __init__(
        self,
        chain: Chain,
        address: str,
        config: EngineConfig,
        dsc: CreditToken,
        weth: CollateralToken,
        wbtc: CollateralToken,
        price_feeds: Mapping[str, PriceFeed],
    ):
        if weth.address != config.weth or wbtc.address != config.wbtc:
            raise ValueError("Collateral tokens do not match the engine config")
        for collateral in Collateral:
            if config.price_feed_of(collateral) not in price_feeds:
                raise ValueError(f"No price feed for {collateral.name}")
        if config.peg_price_feed not in price_feeds:
            raise ValueError("No price feed for the peg currency")

        self.chain = chain
        self.address = address
        self.config = config
        self.dsc = dsc
        self.tokens: Dict[Collateral, CollateralToken] = {
            Collateral.WETH: weth,
            Collateral.WBTC: wbtc,
        }
        self.price_feeds = dict(price_feeds)
        self.positions: Dict[str, Position] = {}
        self._entered = False
        chain.register(self)

    def snapshot(self):
        return copy.deepcopy(self.positions)

    def restore(self, state) -> None:
        self.positions = copy.deepcopy(state)

    ############################################################################
    # Mutating entry points
    ############################################################################

    @non_reentrant
    def deposit_collateral(self, sender: str, collateral_address: str, amount: int, value: int = 0) -> None:
        collateral = self._validate(collateral_address, amount)
        self._deposit(sender, collateral, amount, value)

    @non_reentrant
    def deposit_and_mint(self, sender: str, collateral_address: str, amount: int, value: int = 0) -> int:
        """Deposit, then mint the maximum issuable against this deposit only.

        Returns the amount minted.
        """
        collateral = self._validate(collateral_address, amount)
        self._deposit(sender, collateral, amount, value)
        amount_dsc = credit_issuable_from_collateral(
            amount,
            self._peg_price(),
            self._price(collateral),
            self.get_collateral_decimals(collateral),
            self.config.threshold,
        )
        self._position(sender).update_debt(amount_dsc)
        self._issue(sender, amount_dsc)
        return amount_dsc

    @non_reentrant
    def mint(self, sender: str, amount: int) -> None:
        if amount <= 0:
            raise InvalidAmountError(amount)
        position = self._position(sender)
        requested_debt = position.debt_amount + amount

        issuable = self._issuable_credit(position)
        if requested_debt > issuable:
            raise InsufficientCollateralError(sender, requested_debt, issuable)

        resulting = health_factor(
            self._collateral_value(position), requested_debt, self.config.threshold
        )
        if resulting < self.config.min_health_factor:
            raise HealthFactorTooLowError(sender, resulting)

        position.update_debt(amount)
        self._issue(sender, amount)

    @non_reentrant
    def burn(self, sender: str, amount: int) -> None:
        if amount <= 0:
            raise InvalidAmountError(amount)
        self._require_dsc_balance(sender, amount)
        debt = self.get_debt(sender)
        if debt < amount:
            raise InsufficientBalanceError(sender, debt, amount, kind="debt")
        self._burn_dsc(amount, on_behalf_of=sender, dsc_from=sender)

    @non_reentrant
    def redeem_collateral(self, sender: str, collateral_address: str, amount: int) -> None:
        collateral = self._validate(collateral_address, amount)
        self._redeem(collateral, amount, from_=sender, to=sender)
        self._revert_if_health_factor_is_broken(sender)

    @non_reentrant
    def redeem_collateral_for_debt(self, sender: str, amount_dsc: int, collateral_address: str) -> int:
        """Burn `amount_dsc` and release collateral at the threshold rate.

        A healthy account may not be pushed below the minimum health factor
        by rounding; an unhealthy one may always deleverage. Returns the
        collateral amount released.
        """
        collateral = self._validate(collateral_address, amount_dsc)
        self._require_dsc_balance(sender, amount_dsc)
        was_healthy = self._health_factor(sender) >= self.config.min_health_factor
        amount_out = collateral_out_for_redeem(
            amount_dsc,
            self._peg_price(),
            self._price(collateral),
            self.get_collateral_decimals(collateral),
            self.config.threshold,
        )
        if amount_out == 0:
            raise RedeemAmountTooSmallError(amount_dsc, collateral.name)
        self._redeem(collateral, amount_out, from_=sender, to=sender)
        self._burn_dsc(amount_dsc, on_behalf_of=sender, dsc_from=sender)
        if was_healthy:
            self._revert_if_health_factor_is_broken(sender)
        return amount_out

    @non_reentrant
    def liquidate(self, sender: str, borrower: str, debt_to_cover: int, collateral_address: str) -> int:
        """Repay `debt_to_cover` of an unhealthy borrower for their collateral plus a bonus.

        The liquidator pays with their own DEUR. The borrower must end up
        healthy, otherwise nothing happens. Returns the collateral seized.
        """
        collateral = self._validate(collateral_address, debt_to_cover)
        starting_health_factor = self._health_factor(borrower)
        if starting_health_factor >= self.config.min_health_factor:
            raise NotLiquidatableError(borrower, starting_health_factor)

        amount_out = liquidation_collateral_out(
            debt_to_cover,
            self._peg_price(),
            self._price(collateral),
            self.get_collateral_decimals(collateral),
            self.config.liquidation_bonus,
            self.config.liquidation_precision,
        )
        if amount_out == 0:
            raise RedeemAmountTooSmallError(debt_to_cover, collateral.name)

        self._burn_dsc(debt_to_cover, on_behalf_of=borrower, dsc_from=sender)
        self._redeem(collateral, amount_out, from_=borrower, to=sender)

        ending_health_factor = self._health_factor(borrower)
        if ending_health_factor < self.config.min_health_factor:
            raise HealthFactorTooLowError(borrower, ending_health_factor)

        logger.info(
            "Liquidated %s: %d DEUR covered by %s for %d %s (health factor %d -> %d)",
            borrower, debt_to_cover, sender, amount_out, collateral.name,
            starting_health_factor, ending_health_factor,
        )
        return amount_out

    ############################################################################
    # Internal
    ############################################################################

    def _validate(self, collateral_address: str, amount: int) -> Collateral:
        if amount <= 0:
            raise InvalidAmountError(amount)
        return self.config.resolve_collateral(collateral_address)

    def _position(self, account: str) -> Position:
        position = self.positions.get(account)
        if position is None:
            position = self.positions[account] = Position(user=account)
        return position

    def _deposit(self, sender: str, collateral: Collateral, amount: int, value: int) -> None:
        if collateral is Collateral.ETH:
            if value != amount:
                raise InvalidAmountError(amount, value)
        elif value != 0:
            raise InvalidAmountError(0, value)

        self._position(sender).update_collateral(collateral, amount)
        logger.info("Collateral deposited: %s %d %s", sender, amount, collateral.name)

        if collateral is Collateral.ETH:
            self.chain.pay(sender, self.address, value)
        elif not self.tokens[collateral].transfer_from(self.address, sender, self.address, amount):
            raise TransferFailedError(self.address, amount)

    def _redeem(self, collateral: Collateral, amount: int, from_: str, to: str) -> None:
        self._position(from_).update_collateral(collateral, -amount)
        logger.info("Collateral redeemed: %s -> %s %d %s", from_, to, amount, collateral.name)
        self._send_collateral(collateral, to, amount)

    def _send_collateral(self, collateral: Collateral, to: str, amount: int) -> None:
        if collateral is Collateral.ETH:
            sent = self.chain.send_native(self.address, to, amount)
        else:
            sent = self.tokens[collateral].transfer(self.address, to, amount)
        if not sent:
            raise TransferFailedError(to, amount)

    def _issue(self, to: str, amount: int) -> None:
        if not self.dsc.mint(self.address, to, amount):
            raise MintFailedError(to, amount)
        logger.info("Minted %d DEUR to %s", amount, to)

    def _burn_dsc(self, amount: int, on_behalf_of: str, dsc_from: str) -> None:
        self._position(on_behalf_of).update_debt(-amount)
        if not self.dsc.transfer_from(self.address, dsc_from, self.address, amount):
            raise TransferFailedError(self.address, amount)
        self.dsc.burn(self.address, amount)
        logger.info("Burned %d DEUR from %s against debt of %s", amount, dsc_from, on_behalf_of)

    def _require_dsc_balance(self, account: str, amount: int) -> None:
        balance = self.dsc.balance_of(account)
        if balance < amount:
            raise InsufficientBalanceError(account, balance, amount, kind="DEUR balance")

    def _revert_if_health_factor_is_broken(self, account: str) -> None:
        current = self._health_factor(account)
        if current < self.config.min_health_factor:
            raise HealthFactorTooLowError(account, current)

    def _peg_price(self) -> int:
        return read_price_wad(self.price_feeds[self.config.peg_price_feed])

    def _price(self, collateral: Collateral) -> int:
        return read_price_wad(self.price_feeds[self.config.price_feed_of(collateral)])

    def _collateral_value(self, position: Position) -> int:
        total = 0
        for collateral in Collateral:
            amount = position.collateral.get(collateral)
            if amount:
                total += self.get_collateral_value_in_peg(collateral, amount)
        return total

    def _issuable_credit(self, position: Position) -> int:
        """Sum of the per-collateral issuance ceilings"""
        total = 0
        for collateral in Collateral:
            amount = position.collateral.get(collateral)
            if amount:
                total += credit_issuable_from_collateral(
                    amount,
                    self._peg_price(),
                    self._price(collateral),
                    self.get_collateral_decimals(collateral),
                    self.config.threshold,
                )
        return total

    def _health_factor(self, account: str) -> int:
        total_debt, collateral_value = self.get_account_information(account)
        result = health_factor(collateral_value, total_debt, self.config.threshold)
        logger.debug("Health factor of %s: %d", account, result)
        return result

    ############################################################################
    # Views
    ############################################################################

    def get_health_factor(self, account: str) -> int:
        return self._health_factor(account)

    def calculate_health_factor(self, total_debt: int, collateral_value: int) -> int:
        return health_factor(collateral_value, total_debt, self.config.threshold)

    def get_collateral_for_user(self, account: str) -> Tuple[int, int, int]:
        """(weth, eth, wbtc) deposited by `account`"""
        position = self.positions.get(account)
        if position is None:
            return 0, 0, 0
        return position.collateral.as_tuple()

    def get_debt(self, account: str) -> int:
        position = self.positions.get(account)
        return position.debt_amount if position is not None else 0

    def get_account_collateral_value(self, account: str) -> int:
        position = self.positions.get(account)
        return self._collateral_value(position) if position is not None else 0

    def get_account_information(self, account: str) -> Tuple[int, int]:
        """(total_debt, collateral_value_in_peg)"""
        return self.get_debt(account), self.get_account_collateral_value(account)

    def get_collateral_value_in_peg(self, collateral: Collateral, amount: int) -> int:
        return collateral_value_in_peg(
            amount,
            self._peg_price(),
            self._price(collateral),
            self.get_collateral_decimals(collateral),
        )

    def get_token_amount_from_peg(self, collateral: Collateral, amount_dsc: int) -> int:
        """Spot collateral amount worth `amount_dsc`, without the threshold or bonus"""
        return collateral_amount_from_peg(
            amount_dsc,
            self._peg_price(),
            self._price(collateral),
            self.get_collateral_decimals(collateral),
        )

    def get_collateral_decimals(self, collateral: Collateral) -> int:
        if collateral is Collateral.ETH:
            return NATIVE_DECIMALS
        return self.tokens[collateral].decimals()

    def get_collateral_tokens(self) -> Tuple[str, str, str]:
        return tuple(self.config.address_of(c) for c in Collateral)

    def get_price_feed(self, collateral: Collateral) -> str:
        return self.config.price_feed_of(collateral)

    @property
    def threshold(self) -> int:
        return self.config.threshold

    @property
    def liquidation_bonus(self) -> int:
        return self.config.liquidation_bonus

    @property
    def liquidation_precision(self) -> int:
        return self.config.liquidation_precision

    @property
    def min_health_factor(self) -> int:
        return self.config.min_health_factor
