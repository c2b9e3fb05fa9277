"""Engine configuration fixed at construction"""
from dataclasses import dataclass

from ..constants import (
    LIQUIDATION_BONUS,
    LIQUIDATION_PRECISION,
    MIN_HEALTH_FACTOR,
    NATIVE_COLLATERAL,
    THRESHOLD,
)
from ..errors import InvalidCollateralError
from .collateral import Collateral


@dataclass(frozen=True)
class EngineConfig:
    """Collateral addresses, their feeds, and the collateralization parameters"""
    weth: str
    wbtc: str
    weth_price_feed: str
    eth_price_feed: str
    wbtc_price_feed: str
    peg_price_feed: str  # EUR/USD
    threshold: int = THRESHOLD
    liquidation_bonus: int = LIQUIDATION_BONUS
    liquidation_precision: int = LIQUIDATION_PRECISION
    min_health_factor: int = MIN_HEALTH_FACTOR

    def resolve_collateral(self, address: str) -> Collateral:
        """Map a collateral address to its identity; anything else is rejected"""
        if address == NATIVE_COLLATERAL:
            return Collateral.ETH
        if address == self.weth:
            return Collateral.WETH
        if address == self.wbtc:
            return Collateral.WBTC
        raise InvalidCollateralError(address)

    def address_of(self, collateral: Collateral) -> str:
        if collateral is Collateral.WETH:
            return self.weth
        if collateral is Collateral.WBTC:
            return self.wbtc
        return NATIVE_COLLATERAL

    def price_feed_of(self, collateral: Collateral) -> str:
        if collateral is Collateral.WETH:
            return self.weth_price_feed
        if collateral is Collateral.WBTC:
            return self.wbtc_price_feed
        return self.eth_price_feed
