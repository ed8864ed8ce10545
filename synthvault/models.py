"""Data models: all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PricePoint:
    """Latest answer of a price feed: ``price / 10**decimals`` units of account."""

    price: int
    decimals: int
    updated_at: float = 0.0


@dataclass(frozen=True)
class AccountInformation:
    """Debt and total collateral value (18 decimals) of one participant."""

    total_debt: int
    collateral_value: int


# ---------------------------------------------------------------------------
# Engine events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CollateralDeposited:
    user: str
    asset: str
    amount: int


@dataclass(frozen=True)
class CollateralRedeemed:
    redeemed_from: str
    redeemed_to: str
    asset: str
    amount: int


@dataclass(frozen=True)
class Liquidation:
    liquidator: str
    debtor: str
    asset: str
    debt_covered: int
    collateral_seized: int


EngineEvent = CollateralDeposited | CollateralRedeemed | Liquidation
