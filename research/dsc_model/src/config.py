"""Configuration loader: reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .constants import (
    DEFAULT_FEED_DECIMALS,
    LIQUIDATION_BONUS,
    LIQUIDATION_PRECISION,
    THRESHOLD,
    THRESHOLD_PRECISION,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EngineParams:
    threshold: int = THRESHOLD
    liquidation_bonus: int = LIQUIDATION_BONUS
    liquidation_precision: int = LIQUIDATION_PRECISION


@dataclass(frozen=True)
class AssetConfig:
    """A priced asset: token decimals, feed decimals and the feed's first answer in USD."""

    symbol: str = ""
    decimals: int = 18
    feed_decimals: int = DEFAULT_FEED_DECIMALS
    initial_price: str = "0"

    def initial_answer(self) -> int:
        """Initial price as a raw feed answer with `feed_decimals` decimals."""
        whole, _, frac = self.initial_price.partition(".")
        frac = (frac + "0" * self.feed_decimals)[: self.feed_decimals]
        return int(whole or "0") * 10**self.feed_decimals + int(frac or "0")


@dataclass(frozen=True)
class DeploymentConfig:
    deployer: str = "deployer"
    peg: AssetConfig = field(
        default_factory=lambda: AssetConfig(symbol="EUR", initial_price="1.16")
    )
    weth: AssetConfig = field(
        default_factory=lambda: AssetConfig(symbol="WETH", initial_price="3000")
    )
    eth: AssetConfig = field(
        default_factory=lambda: AssetConfig(symbol="ETH", initial_price="3000")
    )
    wbtc: AssetConfig = field(
        default_factory=lambda: AssetConfig(symbol="WBTC", decimals=8, initial_price="60000")
    )
    engine: EngineParams = field(default_factory=EngineParams)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_asset(raw: dict[str, Any], default: AssetConfig) -> AssetConfig:
    return AssetConfig(
        symbol=str(raw.get("symbol", default.symbol)),
        decimals=int(raw.get("decimals", default.decimals)),
        feed_decimals=int(raw.get("feed_decimals", default.feed_decimals)),
        initial_price=str(raw.get("initial_price", default.initial_price)),
    )


def _build_engine(raw: dict[str, Any]) -> EngineParams:
    return EngineParams(
        threshold=int(raw.get("threshold", THRESHOLD)),
        liquidation_bonus=int(raw.get("liquidation_bonus", LIQUIDATION_BONUS)),
        liquidation_precision=int(raw.get("liquidation_precision", LIQUIDATION_PRECISION)),
    )


def build_config(raw: dict[str, Any]) -> DeploymentConfig:
    """Build and validate a DeploymentConfig from an already parsed mapping."""
    defaults = DeploymentConfig()
    assets = raw.get("assets", {})
    cfg = DeploymentConfig(
        deployer=str(raw.get("deployer", defaults.deployer)),
        peg=_build_asset(assets.get("peg", {}), defaults.peg),
        weth=_build_asset(assets.get("weth", {}), defaults.weth),
        eth=_build_asset(assets.get("eth", {}), defaults.eth),
        wbtc=_build_asset(assets.get("wbtc", {}), defaults.wbtc),
        engine=_build_engine(raw.get("engine", {})),
    )
    _validate(cfg)
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> DeploymentConfig:
    """Load and validate the deployment configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` next to
            the ``src`` package.
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    cfg = build_config(_interpolate_env(raw))
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: DeploymentConfig) -> None:
    """Raise on invalid configuration."""
    params = cfg.engine
    if params.threshold <= THRESHOLD_PRECISION:
        raise ValueError(
            f"Threshold must be above {THRESHOLD_PRECISION}, got {params.threshold}"
        )
    if params.liquidation_precision <= 0:
        raise ValueError("Liquidation precision must be positive")
    if not 0 <= params.liquidation_bonus < params.liquidation_precision:
        raise ValueError(
            f"Liquidation bonus {params.liquidation_bonus} must be below "
            f"precision {params.liquidation_precision}"
        )
    if cfg.eth.decimals != 18:
        raise ValueError("Native currency has 18 decimals")

    for asset in (cfg.peg, cfg.weth, cfg.eth, cfg.wbtc):
        if not 0 <= asset.decimals <= 36 or not 0 <= asset.feed_decimals <= 36:
            raise ValueError(f"Asset '{asset.symbol}' has decimals outside 0..36")
        try:
            answer = asset.initial_answer()
        except ValueError:
            raise ValueError(
                f"Asset '{asset.symbol}' has a malformed price '{asset.initial_price}'"
            ) from None
        if answer <= 0:
            raise ValueError(f"Asset '{asset.symbol}' needs a positive initial price")
