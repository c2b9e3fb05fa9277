# Fixed point scale factors
WAD = 1_000_000_000_000_000_000  # 1e18, internal unit for values and debt
WAD_DECIMALS = 18
MAX_UINT256 = 2**256 - 1

# Collateralization constants
THRESHOLD = 150                  # 150% minimum collateralization
THRESHOLD_PRECISION = 100
LIQUIDATION_BONUS = 10           # 10% paid to the liquidator
LIQUIDATION_PRECISION = 100
MIN_HEALTH_FACTOR = WAD          # 1.0 in fixed point

# Native currency
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
NATIVE_COLLATERAL = ZERO_ADDRESS  # sentinel identity for ETH
NATIVE_DECIMALS = 18

# Oracle defaults
DEFAULT_FEED_DECIMALS = 8

# Credit token metadata
STABLECOIN_NAME = "Decentralized Euro"
STABLECOIN_SYMBOL = "DEUR"
STABLECOIN_DECIMALS = 18
