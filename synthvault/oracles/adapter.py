"""Oracle adapter: validates feed answers and rescales them to 18 decimals."""
from __future__ import annotations

import logging
import time
from typing import Callable

from ..errors import OracleUnavailable
from ..interfaces.price_feed import PriceFeed
from ..models import PricePoint

logger = logging.getLogger(__name__)

PRICE_DECIMALS = 18


def rescale(value: int, from_decimals: int, to_decimals: int) -> int:
    """Move ``value`` between fixed-point scales, truncating toward zero."""
    if from_decimals <= to_decimals:
        return value * 10 ** (to_decimals - from_decimals)
    return value // 10 ** (from_decimals - to_decimals)


class OracleAdapter:
    """Wrap one asset's price feed.

    Every call re-reads the feed. A feed exception, a non-positive price or
    (when ``stale_after`` is set) an answer older than ``stale_after`` seconds
    raises :class:`OracleUnavailable`.
    """

    def __init__(
        self,
        asset: str,
        feed: PriceFeed,
        stale_after: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.asset = asset
        self.feed = feed
        self._stale_after = stale_after
        self._clock = clock

    def latest(self) -> PricePoint:
        """Return the feed's current answer after validation."""
        try:
            point = self.feed.latest_price()
        except OracleUnavailable:
            raise
        except Exception as e:
            logger.error("Price feed for %s failed: %s", self.asset, e)
            raise OracleUnavailable(self.asset, str(e)) from e

        if point.price <= 0:
            logger.error("Price feed for %s returned %d", self.asset, point.price)
            raise OracleUnavailable(self.asset, f"non-positive price {point.price}")

        if self._stale_after is not None:
            age = self._clock() - point.updated_at
            if age > self._stale_after:
                logger.error("Price for %s is stale (%.0fs old)", self.asset, age)
                raise OracleUnavailable(self.asset, f"stale price ({age:.0f}s old)")

        return point

    def price(self) -> int:
        """Current price in units of account, scaled to 18 decimals."""
        point = self.latest()
        return rescale(point.price, point.decimals, PRICE_DECIMALS)
