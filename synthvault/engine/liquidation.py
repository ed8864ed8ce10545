"""Liquidation engine: third-party repayment of unhealthy positions."""
from __future__ import annotations

import logging
from typing import Callable

from ..errors import HealthFactorNotImproved, HealthFactorOk
from ..models import EngineEvent, Liquidation
from .health import HealthFactorEvaluator
from .registry import Asset
from .valuation import ValuationEngine

logger = logging.getLogger(__name__)

_PCT = 100

DebitCollateral = Callable[[str, int, str, str], Asset]
SendCollateral = Callable[[Asset, str, int], None]
SettleDebt = Callable[[int, str, str], None]


class LiquidationEngine:
    """Sequence ledger and token primitives across debtor and liquidator.

    The primitives are supplied by the owning position engine, and
    :meth:`liquidate` must run inside its atomic block; nothing here
    commits or rolls back on its own.

    Args:
        health: evaluator shared with the position engine.
        valuation: price conversions for the seized collateral.
        bonus_pct: extra collateral paid to the liquidator, in percent.
        debit_collateral: ``(asset, amount, from, to) -> Asset``; moves
            collateral out of a position and records the redemption.
        send_collateral: ``(asset, recipient, amount)``; releases custody.
        settle_debt: ``(amount, on_behalf_of, funded_by)``; burns debt.
        record: appends an engine event.
    """

    def __init__(
        self,
        health: HealthFactorEvaluator,
        valuation: ValuationEngine,
        bonus_pct: int,
        debit_collateral: DebitCollateral,
        send_collateral: SendCollateral,
        settle_debt: SettleDebt,
        record: Callable[[EngineEvent], None],
    ) -> None:
        self._health = health
        self._valuation = valuation
        self._bonus_pct = bonus_pct
        self._debit_collateral = debit_collateral
        self._send_collateral = send_collateral
        self._settle_debt = settle_debt
        self._record = record

    def seizure_for(self, collateral_asset: str, debt_to_cover: int) -> tuple[int, int]:
        """Collateral worth ``debt_to_cover`` and the bonus on top of it."""
        base = self._valuation.amount_from_value(collateral_asset, debt_to_cover)
        return base, base * self._bonus_pct // _PCT

    def liquidate(
        self, liquidator: str, collateral_asset: str, debtor: str, debt_to_cover: int
    ) -> Liquidation:
        health = self._health

        starting = health.health_factor(debtor)
        if starting >= health.min_health_factor:
            raise HealthFactorOk(starting)

        base, bonus = self.seizure_for(collateral_asset, debt_to_cover)
        seized = base + bonus
        logger.debug(
            "Liquidating %s: %d debt -> %d + %d bonus %s",
            debtor, debt_to_cover, base, bonus, collateral_asset,
        )

        entry = self._debit_collateral(collateral_asset, seized, debtor, liquidator)
        self._send_collateral(entry, liquidator, seized)
        self._settle_debt(debt_to_cover, debtor, liquidator)

        ending = health.health_factor(debtor)
        if ending <= starting:
            raise HealthFactorNotImproved(ending)

        health.assert_healthy(liquidator)

        record = Liquidation(
            liquidator=liquidator,
            debtor=debtor,
            asset=collateral_asset,
            debt_covered=debt_to_cover,
            collateral_seized=seized,
        )
        self._record(record)
        return record
