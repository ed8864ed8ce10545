"""Health-factor evaluator: the solvency ratio behind every engine check."""
from __future__ import annotations

import logging

from ..errors import HealthFactorBroken
from .ledgers import CollateralLedger, DebtLedger
from .registry import SystemRegistry
from .valuation import ValuationEngine

logger = logging.getLogger(__name__)

# Returned for participants without debt: they can never be liquidated.
MAX_HEALTH_FACTOR = 2**256 - 1

_PCT = 100


class HealthFactorEvaluator:
    """Combine ledgers and valuation into a fixed-point health factor.

    ``health_factor = collateral_value * threshold_pct / 100 * precision / debt``;
    a value of at least ``min_health_factor`` is solvent.
    """

    def __init__(
        self,
        registry: SystemRegistry,
        valuation: ValuationEngine,
        collateral: CollateralLedger,
        debt: DebtLedger,
        threshold_pct: int,
        precision: int,
        min_health_factor: int,
    ) -> None:
        self._registry = registry
        self._valuation = valuation
        self._collateral = collateral
        self._debt = debt
        self.threshold_pct = threshold_pct
        self.precision = precision
        self.min_health_factor = min_health_factor

    def collateral_value(self, participant: str) -> int:
        """Sum of the participant's deposits over the whole registry, in order."""
        total = 0
        for asset in self._registry:
            amount = self._collateral.balance_of(participant, asset.symbol)
            total += self._valuation.value_of(asset.symbol, amount)
        return total

    def calculate_health_factor(self, total_debt: int, collateral_value: int) -> int:
        if total_debt == 0:
            return MAX_HEALTH_FACTOR
        adjusted = collateral_value * self.threshold_pct // _PCT
        return adjusted * self.precision // total_debt

    def health_factor(self, participant: str) -> int:
        debt = self._debt.debt_of(participant)
        if debt == 0:
            return MAX_HEALTH_FACTOR
        return self.calculate_health_factor(debt, self.collateral_value(participant))

    def assert_healthy(self, participant: str) -> None:
        health_factor = self.health_factor(participant)
        if health_factor < self.min_health_factor:
            logger.debug("Health factor of %s is %d", participant, health_factor)
            raise HealthFactorBroken(health_factor)
