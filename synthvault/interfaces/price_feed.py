"""Price feed protocol: per-asset synchronous price source."""
from typing import Protocol

from ..models import PricePoint


class PriceFeed(Protocol):
    """Abstract interface for reading the latest price of one asset."""

    def latest_price(self) -> PricePoint: ...
