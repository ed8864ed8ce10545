"""Pyth Network price oracle: snapshots of live prices for configured assets."""
from __future__ import annotations

import logging
import ssl
from typing import Any

import aiohttp
import certifi

from ..config import PythConfig
from ..models import PricePoint

logger = logging.getLogger(__name__)

_TIMEOUT = aiohttp.ClientTimeout(total=15)


def parse_price_item(item: dict[str, Any]) -> PricePoint | None:
    """Turn one Hermes ``parsed`` entry into a :class:`PricePoint`.

    Hermes reports ``price * 10**expo``; a negative exponent becomes the
    point's decimals, a positive one is folded into the integer price.
    Entries without a usable price yield ``None``.
    """
    body = item.get("price") or {}
    try:
        raw = int(body.get("price", 0))
        expo = int(body.get("expo", 0))
    except (TypeError, ValueError):
        return None
    if raw <= 0:
        return None
    if expo > 0:
        raw *= 10**expo
    return PricePoint(
        price=raw,
        decimals=max(-expo, 0),
        updated_at=float(body.get("publish_time", 0)),
    )


class PythOracle:
    """Read-only client for the Hermes ``latest price`` endpoint."""

    def __init__(self, config: PythConfig) -> None:
        self.hermes_url = config.hermes_url
        self.feed_ids = dict(config.feeds)

    def _select(self, symbols: list[str] | None) -> dict[str, str]:
        if symbols is None:
            return dict(self.feed_ids)
        return {s: fid for s, fid in self.feed_ids.items() if s in symbols}

    def _url(self, feed_ids: list[str]) -> str:
        query = "&".join(f"ids[]={fid}" for fid in feed_ids)
        return f"{self.hermes_url}?{query}"

    async def _get_parsed(self, url: str) -> list[dict[str, Any]] | None:
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)
        async with aiohttp.ClientSession(connector=connector, timeout=_TIMEOUT) as session:
            async with session.get(url) as response:
                if response.status != 200:
                    logger.error("Pyth Hermes returned HTTP %s", response.status)
                    return None
                payload = await response.json()
        return payload.get("parsed", [])

    async def fetch_price_points(
        self, symbols: list[str] | None = None
    ) -> dict[str, PricePoint]:
        """Snapshot the latest price of each requested symbol.

        Args:
            symbols: Symbols to fetch; ``None`` means every configured feed.

        Network and HTTP failures are logged and produce an empty result.
        Symbols Hermes did not answer for are simply absent.
        """
        wanted = self._select(symbols)
        if not wanted:
            return {}

        symbols_by_id: dict[str, list[str]] = {}
        for symbol, feed_id in wanted.items():
            symbols_by_id.setdefault(feed_id, []).append(symbol)

        try:
            parsed = await self._get_parsed(self._url(sorted(symbols_by_id)))
        except Exception as e:
            logger.error("Pyth price request failed: %s", e)
            return {}
        if parsed is None:
            return {}

        points: dict[str, PricePoint] = {}
        for item in parsed:
            owners = symbols_by_id.get(item.get("id", ""))
            if not owners:
                continue
            point = parse_price_item(item)
            if point is None:
                logger.warning("Ignoring unusable Pyth price for %s", ", ".join(owners))
                continue
            for symbol in owners:
                points[symbol] = point

        for symbol, point in sorted(points.items()):
            logger.info("Pyth %s: %s", symbol, point.price / 10**point.decimals)
        return points
