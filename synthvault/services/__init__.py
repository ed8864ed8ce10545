"""Service modules"""
from .scenario import (
    ScenarioResult,
    ScenarioRunner,
    StepResult,
    System,
    build_system,
    fetch_live_prices,
    load_scenario,
)

__all__ = [
    "ScenarioResult",
    "ScenarioRunner",
    "StepResult",
    "System",
    "build_system",
    "fetch_live_prices",
    "load_scenario",
]
