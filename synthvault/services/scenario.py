"""Scenario runner: assembles an engine from config and replays scripted steps."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from ..config import AppConfig
from ..engine import MAX_HEALTH_FACTOR, UNIT_DECIMALS, PositionEngine, SystemRegistry
from ..errors import EngineError, TokenError
from ..interfaces.price_oracle import PriceOracle
from ..models import PricePoint
from ..oracles import PythOracle, StaticPriceFeed
from ..tokens import StableToken, TokenLedger

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Amount helpers
# ---------------------------------------------------------------------------


def to_base_units(value: Any, decimals: int) -> int:
    """Convert a human amount such as ``"10.5"`` to integer base units (truncated)."""
    return int(Decimal(str(value)).scaleb(decimals))


def format_units(value: int, decimals: int) -> str:
    """Render base units as a plain decimal string."""
    text = format(Decimal(value).scaleb(-decimals), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_health_factor(health_factor: int, precision: int) -> str:
    if health_factor == MAX_HEALTH_FACTOR:
        return "∞"
    return f"{Decimal(health_factor) / Decimal(precision):.4f}"


# ---------------------------------------------------------------------------
# System assembly
# ---------------------------------------------------------------------------


@dataclass
class System:
    """An engine together with the in-memory collaborators it was built from."""

    engine: PositionEngine
    debt_token: StableToken
    tokens: dict[str, TokenLedger]
    feeds: dict[str, StaticPriceFeed]
    config: AppConfig


def build_system(
    config: AppConfig, prices: dict[str, PricePoint] | None = None
) -> System:
    """Create tokens, price feeds, registry and engine from configuration.

    ``prices`` (e.g. a live Pyth snapshot) takes precedence over the static
    prices in the config.
    """
    prices = prices or {}
    tokens: dict[str, TokenLedger] = {}
    feeds: dict[str, StaticPriceFeed] = {}

    for asset in config.assets:
        tokens[asset.symbol] = TokenLedger(asset.symbol, asset.decimals)
        point = prices.get(asset.symbol)
        if point is not None:
            feeds[asset.symbol] = StaticPriceFeed.from_point(point)
        elif asset.price:
            feeds[asset.symbol] = StaticPriceFeed(
                to_base_units(asset.price, asset.feed_decimals), asset.feed_decimals
            )
        else:
            raise ValueError(f"No price available for asset '{asset.symbol}'")

    registry = SystemRegistry.from_sequences(
        list(tokens.values()),
        list(feeds.values()),
        stale_after=config.engine.oracle_stale_after_seconds,
    )
    debt_token = StableToken(
        owner=config.engine.custody,
        symbol=config.debt_token.symbol,
        decimals=config.debt_token.decimals,
    )
    engine = PositionEngine(registry, debt_token, config.engine)
    logger.info(
        "Engine ready: collateral %s, debt token %s",
        ", ".join(registry.symbols), debt_token.symbol,
    )
    return System(engine, debt_token, tokens, feeds, config)


async def fetch_live_prices(
    config: AppConfig, oracle: PriceOracle | None = None
) -> dict[str, PricePoint]:
    """Snapshot live prices for every configured asset; missing ones are an error."""
    oracle = oracle or PythOracle(config.price_oracle.pyth)
    symbols = [a.symbol for a in config.assets]
    points = await oracle.fetch_price_points(symbols)
    missing = [s for s in symbols if s not in points]
    if missing:
        raise ValueError(f"No live price for: {', '.join(missing)}")
    return points


# ---------------------------------------------------------------------------
# Scenario replay
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StepResult:
    index: int
    op: str
    ok: bool
    error: str = ""
    message: str = ""
    expected: str | None = None

    @property
    def matched(self) -> bool:
        """True when the step ended the way the scenario said it would."""
        if self.expected is None:
            return True
        outcome = "ok" if self.ok else self.error
        return outcome == self.expected


@dataclass
class ScenarioResult:
    steps: list[StepResult] = field(default_factory=list)

    @property
    def all_matched(self) -> bool:
        return all(s.matched for s in self.steps)


def load_scenario(path: str | Path) -> dict[str, Any]:
    """Read a scenario YAML file (``balances`` and ``steps``)."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Scenario file not found: {path}")
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw.get("steps", []), list):
        raise ValueError("Scenario 'steps' must be a list")
    return raw


class ScenarioRunner:
    """Replay scenario steps against a :class:`System`, one engine call each."""

    def __init__(self, system: System) -> None:
        self._system = system
        self._engine = system.engine

    # ------------------------------------------------------------------
    # Unit conversion
    # ------------------------------------------------------------------

    def _collateral_units(self, asset: str, value: Any) -> int:
        token = self._system.tokens.get(asset)
        decimals = token.decimals if token is not None else 18
        return to_base_units(value, decimals)

    def _debt_units(self, value: Any) -> int:
        return to_base_units(value, self._system.debt_token.decimals)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def fund(self, balances: dict[str, dict[str, Any]]) -> None:
        """Give participants wallet balances of collateral tokens."""
        for participant, holdings in balances.items():
            for asset, amount in holdings.items():
                token = self._system.tokens.get(asset)
                if token is None:
                    raise ValueError(f"Unknown token '{asset}' in balances")
                token.mint_to(participant, to_base_units(amount, token.decimals))

    def _apply(self, step: dict[str, Any]) -> None:
        op = step.get("op", "")
        engine = self._engine

        if op == "deposit":
            engine.deposit_collateral(
                step["participant"], step["asset"],
                self._collateral_units(step["asset"], step["amount"]),
            )
        elif op == "mint":
            engine.mint(step["participant"], self._debt_units(step["amount"]))
        elif op == "deposit_and_mint":
            engine.deposit_collateral_and_mint(
                step["participant"], step["asset"],
                self._collateral_units(step["asset"], step["collateral"]),
                self._debt_units(step["debt"]),
            )
        elif op == "burn":
            engine.burn(step["participant"], self._debt_units(step["amount"]))
        elif op == "redeem":
            engine.redeem_collateral(
                step["participant"], step["asset"],
                self._collateral_units(step["asset"], step["amount"]),
            )
        elif op == "redeem_for_burn":
            engine.redeem_collateral_for_debt(
                step["participant"], step["asset"],
                self._collateral_units(step["asset"], step["collateral"]),
                self._debt_units(step["debt"]),
            )
        elif op == "liquidate":
            engine.liquidate(
                step["liquidator"], step["asset"], step["debtor"],
                self._debt_units(step["debt"]),
            )
        elif op == "set_price":
            feed = self._system.feeds.get(step["asset"])
            if feed is None:
                raise ValueError(f"Unknown price feed '{step['asset']}'")
            feed.update_price(to_base_units(step["price"], feed.decimals))
            logger.info("Price of %s set to %s", step["asset"], step["price"])
        elif op == "fund":
            self.fund({step["participant"]: {step["asset"]: step["amount"]}})
        else:
            raise ValueError(f"Unknown scenario op '{op}'")

    def run(self, scenario: dict[str, Any]) -> ScenarioResult:
        """Fund balances, then apply every step; engine failures are recorded, not raised."""
        self.fund(scenario.get("balances", {}))

        result = ScenarioResult()
        for index, step in enumerate(scenario.get("steps", [])):
            op = step.get("op", "")
            expected = step.get("expect")
            try:
                self._apply(step)
            except (EngineError, TokenError) as e:
                logger.warning("Step %d (%s) failed: %s", index, op, e)
                outcome = StepResult(
                    index, op, ok=False, error=type(e).__name__,
                    message=str(e), expected=expected,
                )
            else:
                outcome = StepResult(index, op, ok=True, expected=expected)
            if not outcome.matched:
                logger.error(
                    "Step %d (%s) expected %s, got %s",
                    index, op, expected, "ok" if outcome.ok else outcome.error,
                )
            result.steps.append(outcome)
        return result

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def participants(self) -> list[str]:
        """Everyone that ever appears in the engine's event log or token books."""
        seen: dict[str, None] = {}
        custody = self._engine.custody
        for token in [*self._system.tokens.values(), self._system.debt_token]:
            for holder in token.holders():
                if holder != custody:
                    seen.setdefault(holder, None)
        return list(seen)

    def account_report(self, participants: list[str] | None = None) -> str:
        engine = self._engine
        debt_decimals = self._system.debt_token.decimals
        lines: list[str] = []

        for participant in participants or self.participants():
            info = engine.account_information(participant)
            hf = format_health_factor(
                engine.health_factor(participant), engine.precision
            )
            lines.append(f"━━ {participant} ━━")
            for asset in engine.collateral_assets():
                amount = engine.collateral_balance_of(participant, asset)
                if amount:
                    decimals = self._system.tokens[asset].decimals
                    lines.append(f"  {asset}: {format_units(amount, decimals)}")
            lines.append(
                f"  Collateral value: {format_units(info.collateral_value, UNIT_DECIMALS)}"
            )
            lines.append(
                f"  Debt: {format_units(info.total_debt, debt_decimals)} "
                f"{self._system.debt_token.symbol}"
            )
            lines.append(f"  Health factor: {hf}")

        return "\n".join(lines) if lines else "No participants."
