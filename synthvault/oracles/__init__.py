"""Price oracle adapters and feeds."""
from .adapter import PRICE_DECIMALS, OracleAdapter
from .feeds import StaticPriceFeed
from .pyth import PythOracle

__all__ = ["PRICE_DECIMALS", "OracleAdapter", "PythOracle", "StaticPriceFeed"]
