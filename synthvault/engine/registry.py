"""System registry: the fixed, ordered set of accepted collateral assets."""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Iterator, Sequence

from ..errors import ConfigurationMismatch, TokenNotAllowed
from ..interfaces.price_feed import PriceFeed
from ..interfaces.token import CollateralToken
from ..oracles.adapter import OracleAdapter


@dataclass(frozen=True)
class Asset:
    """One accepted collateral kind."""

    symbol: str
    token: CollateralToken
    oracle: OracleAdapter
    decimals: int = 18


class SystemRegistry:
    """Ordered, immutable collection of :class:`Asset` keyed by symbol.

    Insertion order is kept so that aggregations over the registry are
    deterministic.
    """

    def __init__(self, assets: Sequence[Asset]) -> None:
        by_symbol: dict[str, Asset] = {}
        for asset in assets:
            if asset.symbol in by_symbol:
                raise ValueError(f"Asset '{asset.symbol}' registered twice")
            by_symbol[asset.symbol] = asset
        self._assets = tuple(assets)
        self._by_symbol = by_symbol

    @classmethod
    def from_sequences(
        cls,
        tokens: Sequence[CollateralToken],
        feeds: Sequence[PriceFeed],
        stale_after: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> SystemRegistry:
        """Pair ``tokens[i]`` with ``feeds[i]``; both lists must be the same length."""
        if len(tokens) != len(feeds):
            raise ConfigurationMismatch(len(tokens), len(feeds))
        return cls(
            [
                Asset(
                    symbol=token.symbol,
                    token=token,
                    oracle=OracleAdapter(token.symbol, feed, stale_after, clock),
                    decimals=token.decimals,
                )
                for token, feed in zip(tokens, feeds)
            ]
        )

    @property
    def symbols(self) -> tuple[str, ...]:
        return tuple(a.symbol for a in self._assets)

    def get(self, symbol: str) -> Asset:
        """Return the asset for ``symbol`` or raise :class:`TokenNotAllowed`."""
        try:
            return self._by_symbol[symbol]
        except KeyError:
            raise TokenNotAllowed(symbol) from None

    def oracle_of(self, symbol: str) -> OracleAdapter:
        return self.get(symbol).oracle

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._by_symbol

    def __iter__(self) -> Iterator[Asset]:
        return iter(self._assets)

    def __len__(self) -> int:
        return len(self._assets)
