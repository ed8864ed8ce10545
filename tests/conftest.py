"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from synthvault.config import (
    AppConfig,
    AssetConfig,
    DebtTokenConfig,
    EngineConfig,
    PriceOracleConfig,
    PythConfig,
)
from synthvault.engine import PositionEngine, SystemRegistry
from synthvault.oracles import StaticPriceFeed
from synthvault.tokens import StableToken, TokenLedger

ETHER = 10**18

USER = "user"
LIQUIDATOR = "liquidator"
CUSTODY = "engine"

ETH_USD_PRICE = 2000 * 10**8
BTC_USD_PRICE = 1000 * 10**8

AMOUNT_COLLATERAL = 10 * ETHER
AMOUNT_TO_MINT = 100 * ETHER
STARTING_BALANCE = 10 * ETHER


class FakeClock:
    """Settable replacement for ``time.time``."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def engine_config() -> EngineConfig:
    return EngineConfig(custody=CUSTODY)


@pytest.fixture()
def weth() -> TokenLedger:
    token = TokenLedger("WETH", 18)
    token.mint_to(USER, STARTING_BALANCE)
    return token


@pytest.fixture()
def wbtc() -> TokenLedger:
    token = TokenLedger("WBTC", 18)
    token.mint_to(USER, STARTING_BALANCE)
    return token


@pytest.fixture()
def eth_usd(clock: FakeClock) -> StaticPriceFeed:
    return StaticPriceFeed(ETH_USD_PRICE, 8, clock=clock)


@pytest.fixture()
def btc_usd(clock: FakeClock) -> StaticPriceFeed:
    return StaticPriceFeed(BTC_USD_PRICE, 8, clock=clock)


@pytest.fixture()
def dsc() -> StableToken:
    return StableToken(owner=CUSTODY)


@pytest.fixture()
def registry(
    weth: TokenLedger,
    wbtc: TokenLedger,
    eth_usd: StaticPriceFeed,
    btc_usd: StaticPriceFeed,
    clock: FakeClock,
    engine_config: EngineConfig,
) -> SystemRegistry:
    return SystemRegistry.from_sequences(
        [weth, wbtc],
        [eth_usd, btc_usd],
        stale_after=engine_config.oracle_stale_after_seconds,
        clock=clock,
    )


@pytest.fixture()
def engine(
    registry: SystemRegistry, dsc: StableToken, engine_config: EngineConfig
) -> PositionEngine:
    return PositionEngine(registry, dsc, engine_config)


@pytest.fixture()
def deposited(engine: PositionEngine) -> PositionEngine:
    engine.deposit_collateral(USER, "WETH", AMOUNT_COLLATERAL)
    return engine


@pytest.fixture()
def deposited_and_minted(engine: PositionEngine) -> PositionEngine:
    engine.deposit_collateral_and_mint(USER, "WETH", AMOUNT_COLLATERAL, AMOUNT_TO_MINT)
    return engine


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_app_config() -> AppConfig:
    return AppConfig(
        engine=EngineConfig(custody=CUSTODY),
        debt_token=DebtTokenConfig(symbol="DSC", decimals=18),
        assets=(
            AssetConfig(symbol="WETH", decimals=18, feed_decimals=8, price="2000"),
            AssetConfig(symbol="WBTC", decimals=8, feed_decimals=8, price="1000"),
        ),
        price_oracle=PriceOracleConfig(
            provider="static",
            pyth=PythConfig(
                hermes_url="https://hermes.example.com",
                feeds={"WETH": "aaa111", "WBTC": "bbb222"},
            ),
        ),
    )


SAMPLE_YAML = textwrap.dedent("""\
    engine:
      liquidation_threshold_pct: 50
      liquidation_bonus_pct: 10
      recheck_after_redeem: true
      oracle_stale_after_seconds: 3600
      custody: vault
    debt_token:
      symbol: DSC
      decimals: 18
    assets:
      - symbol: WETH
        decimals: 18
        feed_decimals: 8
        price: "2000"
        pyth_feed_id: "aaa111"
      - symbol: WBTC
        decimals: 8
        price: "1000"
    price_oracle:
      provider: static
      pyth:
        hermes_url: "https://hermes.example.com"
        feeds: {WBTC: "bbb222"}
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
