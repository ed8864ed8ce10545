"""Protocol interfaces for the engine's external collaborators."""
from .checkpoint import Checkpointable
from .price_feed import PriceFeed
from .price_oracle import PriceOracle
from .token import CollateralToken, DebtToken

__all__ = [
    "Checkpointable",
    "CollateralToken",
    "DebtToken",
    "PriceFeed",
    "PriceOracle",
]
