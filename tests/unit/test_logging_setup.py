"""Unit tests for logging configuration and engine log output."""
from __future__ import annotations

import logging

import pytest

from synthvault.engine import PositionEngine
from synthvault.errors import HealthFactorBroken
from synthvault.logging_setup import configure_logging
from tests.conftest import AMOUNT_COLLATERAL, USER


class TestConfigureLogging:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [("DEBUG", logging.DEBUG), ("warning", logging.WARNING), ("bogus", logging.INFO)],
    )
    def test_root_level(self, name: str, expected: int) -> None:
        configure_logging(name)
        assert logging.getLogger().level == expected

    def test_quiets_http_and_event_loop(self) -> None:
        configure_logging("DEBUG")
        assert logging.getLogger("aiohttp").level == logging.WARNING
        assert logging.getLogger("asyncio").level == logging.WARNING

    def test_repeated_calls_keep_one_handler(self) -> None:
        configure_logging("INFO")
        count = len(logging.getLogger().handlers)
        configure_logging("DEBUG")
        assert len(logging.getLogger().handlers) == count


class TestEngineLogging:
    def test_success_logged_at_info(
        self, engine: PositionEngine, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="synthvault.engine.positions"):
            engine.deposit_collateral(USER, "WETH", AMOUNT_COLLATERAL)
        assert f"{USER} deposited {AMOUNT_COLLATERAL} WETH" in caplog.text

    def test_rollback_logged_at_warning(
        self, engine: PositionEngine, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="synthvault.engine.positions"):
            with pytest.raises(HealthFactorBroken):
                engine.mint(USER, 1)
        assert any(
            r.levelno == logging.WARNING and "mint rolled back" in r.getMessage()
            for r in caplog.records
        )
