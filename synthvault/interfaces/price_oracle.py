"""Price oracle protocol: bulk price snapshot source."""
from typing import Protocol

from ..models import PricePoint


class PriceOracle(Protocol):
    """Abstract interface for fetching current prices of many assets at once."""

    async def fetch_price_points(
        self, symbols: list[str] | None = None
    ) -> dict[str, PricePoint]: ...
