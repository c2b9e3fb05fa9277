"""Local deployment: mock feeds and tokens, the credit token and the engine"""
import logging
from dataclasses import dataclass

from .chain import Chain
from .config import AssetConfig, DeploymentConfig
from .engine import DSCEngine
from .oracles.mock_aggregator import MockV3Aggregator
from .state.engine_config import EngineConfig
from .tokens.erc20 import ERC20Token
from .tokens.stablecoin import DecentralizedStableCoin

logger = logging.getLogger(__name__)


@dataclass
class Deployment:
    chain: Chain
    engine: DSCEngine
    dsc: DecentralizedStableCoin
    weth: ERC20Token
    wbtc: ERC20Token
    peg_feed: MockV3Aggregator
    weth_feed: MockV3Aggregator
    eth_feed: MockV3Aggregator
    wbtc_feed: MockV3Aggregator


def _feed(chain: Chain, asset: AssetConfig) -> MockV3Aggregator:
    return MockV3Aggregator(
        chain,
        f"feed:{asset.symbol}/USD",
        asset.feed_decimals,
        asset.initial_answer(),
    )


def deploy_protocol(chain: Chain, config: DeploymentConfig) -> Deployment:
    """Deploy everything and hand credit-token ownership to the engine"""
    peg_feed = _feed(chain, config.peg)
    weth_feed = _feed(chain, config.weth)
    eth_feed = _feed(chain, config.eth)
    wbtc_feed = _feed(chain, config.wbtc)

    weth = ERC20Token(chain, "token:WETH", "Wrapped Ether", config.weth.symbol, config.weth.decimals)
    wbtc = ERC20Token(chain, "token:WBTC", "Wrapped Bitcoin", config.wbtc.symbol, config.wbtc.decimals)
    dsc = DecentralizedStableCoin(chain, "token:DEUR", owner=config.deployer)

    engine_config = EngineConfig(
        weth=weth.address,
        wbtc=wbtc.address,
        weth_price_feed=weth_feed.address,
        eth_price_feed=eth_feed.address,
        wbtc_price_feed=wbtc_feed.address,
        peg_price_feed=peg_feed.address,
        threshold=config.engine.threshold,
        liquidation_bonus=config.engine.liquidation_bonus,
        liquidation_precision=config.engine.liquidation_precision,
    )
    feeds = {feed.address: feed for feed in (peg_feed, weth_feed, eth_feed, wbtc_feed)}
    engine = DSCEngine(chain, "engine:DSCEngine", engine_config, dsc, weth, wbtc, feeds)
    dsc.transfer_ownership(config.deployer, engine.address)

    logger.info("Deployed %s with threshold %d%%", engine.address, engine_config.threshold)
    return Deployment(
        chain=chain,
        engine=engine,
        dsc=dsc,
        weth=weth,
        wbtc=wbtc,
        peg_feed=peg_feed,
        weth_feed=weth_feed,
        eth_feed=eth_feed,
        wbtc_feed=wbtc_feed,
    )
