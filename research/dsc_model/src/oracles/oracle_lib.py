"""Oracle reads normalized to 18 decimals"""
import logging

from ..constants import WAD
from ..errors import InvalidPriceError
from ..interfaces.price_feed import PriceFeed

logger = logging.getLogger(__name__)


def read_price_wad(feed: PriceFeed) -> int:
    """Latest feed answer as a WAD price.

    The round's update time is not checked: feeds are trusted as they answer.
    """
    _, answer, _, _, _ = feed.latest_round_data()
    if answer <= 0:
        raise InvalidPriceError(feed.address, answer)
    price = answer * WAD // 10 ** feed.decimals()
    logger.debug("Price from %s: %d (%d decimals) -> %d", feed.address, answer, feed.decimals(), price)
    return price
