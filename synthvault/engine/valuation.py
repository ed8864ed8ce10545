"""Valuation engine: converts between asset quantities and units of account."""
from __future__ import annotations

from ..oracles.adapter import PRICE_DECIMALS, rescale
from .registry import SystemRegistry

# Unit-of-account values carry the same 18 decimals as rescaled prices.
UNIT_DECIMALS = PRICE_DECIMALS
_UNIT = 10**UNIT_DECIMALS


class ValuationEngine:
    """Price-backed conversions. Every call re-reads the asset's oracle."""

    def __init__(self, registry: SystemRegistry) -> None:
        self._registry = registry

    def value_of(self, asset: str, amount: int) -> int:
        """Unit-of-account value of ``amount`` base units of ``asset``, rounded down."""
        entry = self._registry.get(asset)
        if amount == 0:
            return 0
        price = entry.oracle.price()
        return price * rescale(amount, entry.decimals, UNIT_DECIMALS) // _UNIT

    def amount_from_value(self, asset: str, value: int) -> int:
        """Quantity of ``asset`` worth ``value`` units of account, rounded down."""
        entry = self._registry.get(asset)
        price = entry.oracle.price()
        amount = value * _UNIT // price
        return rescale(amount, UNIT_DECIMALS, entry.decimals)
