"""Configuration loader: reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EngineConfig:
    """Risk parameters of the position engine."""

    liquidation_threshold_pct: int = 50
    liquidation_bonus_pct: int = 10
    precision: int = 10**18
    # On the ``precision`` scale; unset means a health factor of exactly 1.0.
    min_health_factor: int | None = None
    recheck_after_redeem: bool = True
    oracle_stale_after_seconds: float | None = 3 * 60 * 60
    custody: str = "engine"

    def __post_init__(self) -> None:
        if self.min_health_factor is None:
            object.__setattr__(self, "min_health_factor", self.precision)


@dataclass(frozen=True)
class AssetConfig:
    symbol: str = ""
    decimals: int = 18
    feed_decimals: int = 8
    price: str = ""
    pyth_feed_id: str = ""


@dataclass(frozen=True)
class DebtTokenConfig:
    symbol: str = "DSC"
    decimals: int = 18


@dataclass(frozen=True)
class PythConfig:
    hermes_url: str = "https://hermes.pyth.network/v2/updates/price/latest"
    feeds: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PriceOracleConfig:
    provider: str = "static"
    pyth: PythConfig = field(default_factory=PythConfig)


@dataclass(frozen=True)
class AppConfig:
    engine: EngineConfig = field(default_factory=EngineConfig)
    debt_token: DebtTokenConfig = field(default_factory=DebtTokenConfig)
    assets: tuple[AssetConfig, ...] = ()
    price_oracle: PriceOracleConfig = field(default_factory=PriceOracleConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


_TRUE_WORDS = {"true", "yes", "on", "1"}
_FALSE_WORDS = {"false", "no", "off", "0"}


def _as_bool(value: Any) -> bool:
    """Read a YAML boolean that may arrive as text after env interpolation."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    text = str(value).strip().lower()
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise ValueError(f"Expected a boolean, got {value!r}")


def _build_engine(raw: dict[str, Any]) -> EngineConfig:
    min_hf = raw.get("min_health_factor")
    if min_hf == "":
        min_hf = None
    stale_after = raw.get(
        "oracle_stale_after_seconds", EngineConfig.oracle_stale_after_seconds
    )
    return EngineConfig(
        liquidation_threshold_pct=int(raw.get("liquidation_threshold_pct", 50)),
        liquidation_bonus_pct=int(raw.get("liquidation_bonus_pct", 10)),
        precision=int(raw.get("precision", 10**18)),
        min_health_factor=None if min_hf is None else int(min_hf),
        recheck_after_redeem=_as_bool(raw.get("recheck_after_redeem", True)),
        oracle_stale_after_seconds=None if stale_after is None else float(stale_after),
        custody=str(raw.get("custody", "engine")),
    )


def _build_debt_token(raw: dict[str, Any]) -> DebtTokenConfig:
    return DebtTokenConfig(
        symbol=raw.get("symbol", "DSC"),
        decimals=int(raw.get("decimals", 18)),
    )


def _build_assets(raw: list[dict[str, Any]]) -> tuple[AssetConfig, ...]:
    assets: list[AssetConfig] = []
    for a in raw:
        assets.append(
            AssetConfig(
                symbol=a.get("symbol", ""),
                decimals=int(a.get("decimals", 18)),
                feed_decimals=int(a.get("feed_decimals", 8)),
                price=str(a.get("price", "")),
                pyth_feed_id=a.get("pyth_feed_id", ""),
            )
        )
    return tuple(assets)


def _build_price_oracle(
    raw: dict[str, Any], assets: tuple[AssetConfig, ...]
) -> PriceOracleConfig:
    pyth_raw = raw.get("pyth", {})
    feeds = dict(pyth_raw.get("feeds", {}))
    # Per-asset feed ids fill in anything not listed explicitly
    for asset in assets:
        if asset.pyth_feed_id and asset.symbol not in feeds:
            feeds[asset.symbol] = asset.pyth_feed_id
    return PriceOracleConfig(
        provider=raw.get("provider", "static"),
        pyth=PythConfig(
            hermes_url=pyth_raw.get("hermes_url") or PythConfig.hermes_url,
            feeds=feeds,
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    assets = _build_assets(raw.get("assets", []))
    cfg = AppConfig(
        engine=_build_engine(raw.get("engine", {})),
        debt_token=_build_debt_token(raw.get("debt_token", {})),
        assets=assets,
        price_oracle=_build_price_oracle(raw.get("price_oracle", {}), assets),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def validate_engine(engine: EngineConfig) -> None:
    """Raise on risk parameters the engine cannot work with.

    ``min_health_factor`` is compared with health factors scaled by
    ``precision``, so a custom value must be expressed on that scale.
    """
    if not 0 < engine.liquidation_threshold_pct <= 100:
        raise ValueError(
            "liquidation_threshold_pct must be in 1..100, "
            f"got {engine.liquidation_threshold_pct}"
        )
    if engine.liquidation_bonus_pct < 0:
        raise ValueError(
            f"liquidation_bonus_pct must not be negative, got {engine.liquidation_bonus_pct}"
        )
    if engine.precision <= 0:
        raise ValueError(f"precision must be positive, got {engine.precision}")
    if engine.min_health_factor <= 0:
        raise ValueError(
            f"min_health_factor must be positive, got {engine.min_health_factor}"
        )
    if not engine.custody:
        raise ValueError("custody identity must not be empty")


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    validate_engine(cfg.engine)

    if not cfg.assets:
        raise ValueError("At least one collateral asset must be configured")

    seen: set[str] = set()
    for asset in cfg.assets:
        if not asset.symbol:
            raise ValueError("Collateral asset has no symbol")
        if asset.symbol in seen:
            raise ValueError(f"Collateral asset '{asset.symbol}' configured twice")
        if asset.symbol == cfg.debt_token.symbol:
            raise ValueError(
                f"Collateral asset '{asset.symbol}' clashes with the debt token"
            )
        seen.add(asset.symbol)
        if asset.decimals < 0 or asset.feed_decimals < 0:
            raise ValueError(f"Asset '{asset.symbol}' has negative decimals")
        if cfg.price_oracle.provider == "static" and not asset.price:
            raise ValueError(
                f"Asset '{asset.symbol}' needs a static price (provider is 'static')"
            )
        if cfg.price_oracle.provider == "pyth" and asset.symbol not in cfg.price_oracle.pyth.feeds:
            raise ValueError(f"Asset '{asset.symbol}' has no Pyth feed id")

    if cfg.price_oracle.provider not in ("static", "pyth"):
        raise ValueError(f"Unknown price oracle provider '{cfg.price_oracle.provider}'")
