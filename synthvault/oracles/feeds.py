"""Settable in-process price feed."""
from __future__ import annotations

import time
from typing import Callable

from ..models import PricePoint


class StaticPriceFeed:
    """Price feed holding a single answer until updated.

    Used for scenarios, snapshots of live prices and tests. ``fail_with``
    makes the next reads raise, to simulate an unavailable oracle.
    """

    def __init__(
        self,
        price: int,
        decimals: int = 8,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._clock = clock
        self._decimals = decimals
        self._error: Exception | None = None
        self._point = PricePoint(price=price, decimals=decimals, updated_at=clock())

    @classmethod
    def from_point(cls, point: PricePoint) -> StaticPriceFeed:
        feed = cls(point.price, point.decimals)
        feed._point = point
        return feed

    @property
    def decimals(self) -> int:
        return self._decimals

    def update_price(self, price: int) -> None:
        self._point = PricePoint(
            price=price, decimals=self._decimals, updated_at=self._clock()
        )
        self._error = None

    def fail_with(self, error: Exception | None) -> None:
        self._error = error

    def latest_price(self) -> PricePoint:
        if self._error is not None:
            raise self._error
        return self._point
