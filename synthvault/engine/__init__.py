"""Collateral/debt accounting engine."""
from .health import MAX_HEALTH_FACTOR, HealthFactorEvaluator
from .ledgers import CollateralLedger, DebtLedger
from .liquidation import LiquidationEngine
from .positions import PositionEngine
from .registry import Asset, SystemRegistry
from .valuation import UNIT_DECIMALS, ValuationEngine

__all__ = [
    "MAX_HEALTH_FACTOR",
    "UNIT_DECIMALS",
    "Asset",
    "CollateralLedger",
    "DebtLedger",
    "HealthFactorEvaluator",
    "LiquidationEngine",
    "PositionEngine",
    "SystemRegistry",
    "ValuationEngine",
]
