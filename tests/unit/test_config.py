"""Unit tests for config loading, env interpolation, and validation."""
from __future__ import annotations

from pathlib import Path

import pytest

from synthvault.config import (
    AppConfig,
    AssetConfig,
    EngineConfig,
    PythConfig,
    _interpolate_env,
    load_config,
    validate_engine,
)


class TestInterpolateEnv:
    def test_simple_substitution(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MY_VAR", "hello")
        assert _interpolate_env("${MY_VAR}") == "hello"

    def test_missing_var_becomes_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NONEXISTENT_VAR_XYZ", raising=False)
        assert _interpolate_env("${NONEXISTENT_VAR_XYZ}") == ""

    def test_nested_dict(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TOK", "secret")
        result = _interpolate_env({"key": "${TOK}", "plain": "text"})
        assert result == {"key": "secret", "plain": "text"}

    def test_nested_list(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("A", "x")
        assert _interpolate_env(["${A}", "y"]) == ["x", "y"]

    def test_non_string_passthrough(self) -> None:
        assert _interpolate_env(42) == 42
        assert _interpolate_env(True) is True


class TestLoadConfig:
    def test_loads_valid_yaml(self, sample_yaml_path: Path) -> None:
        cfg = load_config(sample_yaml_path)
        assert isinstance(cfg, AppConfig)
        assert cfg.engine.liquidation_threshold_pct == 50
        assert cfg.engine.oracle_stale_after_seconds == 3600.0
        assert cfg.engine.custody == "vault"
        assert [a.symbol for a in cfg.assets] == ["WETH", "WBTC"]
        assert cfg.assets[1].decimals == 8
        assert cfg.assets[1].feed_decimals == 8

    def test_asset_feed_ids_merge_into_pyth_feeds(self, sample_yaml_path: Path) -> None:
        cfg = load_config(sample_yaml_path)
        assert cfg.price_oracle.pyth.feeds == {"WBTC": "bbb222", "WETH": "aaa111"}

    def test_engine_defaults(self, tmp_path: Path) -> None:
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text('assets:\n  - {symbol: WETH, price: "2000"}\n')
        cfg = load_config(cfg_file)
        assert cfg.engine == EngineConfig()
        assert cfg.debt_token.symbol == "DSC"
        assert cfg.price_oracle.provider == "static"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nonexistent.yaml")

    def test_env_interpolation_in_yaml(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TEST_HERMES", "https://hermes.test.com")
        yaml_content = """\
assets:
  - symbol: WETH
    price: "2000"
price_oracle:
  pyth:
    hermes_url: "${TEST_HERMES}"
"""
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text(yaml_content)
        cfg = load_config(cfg_file)
        assert cfg.price_oracle.pyth.hermes_url == "https://hermes.test.com"

    def test_unset_hermes_url_falls_back_to_default(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("UNSET_HERMES_XYZ", raising=False)
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text(
            'assets: [{symbol: WETH, price: "1"}]\n'
            'price_oracle: {pyth: {hermes_url: "${UNSET_HERMES_XYZ}"}}\n'
        )
        cfg = load_config(cfg_file)
        assert cfg.price_oracle.pyth.hermes_url == PythConfig.hermes_url


class TestEngineSection:
    def _load(self, tmp_path: Path, engine_yaml: str) -> EngineConfig:
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text(
            f"engine: {engine_yaml}\nassets:\n  - {{symbol: WETH, price: \"1\"}}\n"
        )
        return load_config(cfg_file).engine

    def test_min_health_factor_defaults_to_precision(self, tmp_path: Path) -> None:
        engine = self._load(tmp_path, "{precision: 1000000}")
        assert engine.precision == 10**6
        assert engine.min_health_factor == 10**6

    def test_explicit_min_health_factor_kept(self, tmp_path: Path) -> None:
        engine = self._load(tmp_path, "{precision: 1000000, min_health_factor: 1500000}")
        assert engine.min_health_factor == 1_500_000

    def test_dataclass_default_tracks_precision(self) -> None:
        assert EngineConfig().min_health_factor == 10**18
        assert EngineConfig(precision=100).min_health_factor == 100
        assert EngineConfig(precision=100, min_health_factor=150).min_health_factor == 150

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("false", False),
            ("False", False),
            ("no", False),
            ("0", False),
            ("true", True),
            ("on", True),
        ],
    )
    def test_recheck_flag_from_env(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, text: str, expected: bool
    ) -> None:
        monkeypatch.setenv("SV_RECHECK", text)
        engine = self._load(tmp_path, "{recheck_after_redeem: \"${SV_RECHECK}\"}")
        assert engine.recheck_after_redeem is expected

    def test_recheck_flag_yaml_bool(self, tmp_path: Path) -> None:
        assert self._load(tmp_path, "{recheck_after_redeem: false}").recheck_after_redeem is False

    def test_unreadable_flag_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Expected a boolean"):
            self._load(tmp_path, "{recheck_after_redeem: maybe}")


class TestValidation:
    def _write(self, tmp_path: Path, content: str) -> Path:
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text(content)
        return cfg_file

    def test_no_assets_raises(self, tmp_path: Path) -> None:
        cfg_file = self._write(tmp_path, "assets: []\n")
        with pytest.raises(ValueError, match="At least one collateral asset"):
            load_config(cfg_file)

    def test_duplicate_asset_raises(self, tmp_path: Path) -> None:
        cfg_file = self._write(
            tmp_path,
            'assets:\n  - {symbol: WETH, price: "1"}\n  - {symbol: WETH, price: "2"}\n',
        )
        with pytest.raises(ValueError, match="configured twice"):
            load_config(cfg_file)

    def test_asset_named_like_debt_token_raises(self, tmp_path: Path) -> None:
        cfg_file = self._write(tmp_path, 'assets:\n  - {symbol: DSC, price: "1"}\n')
        with pytest.raises(ValueError, match="clashes with the debt token"):
            load_config(cfg_file)

    def test_static_provider_needs_price(self, tmp_path: Path) -> None:
        cfg_file = self._write(tmp_path, "assets:\n  - {symbol: WETH}\n")
        with pytest.raises(ValueError, match="needs a static price"):
            load_config(cfg_file)

    def test_pyth_provider_needs_feed_id(self, tmp_path: Path) -> None:
        cfg_file = self._write(
            tmp_path,
            "assets:\n  - {symbol: WETH}\nprice_oracle:\n  provider: pyth\n",
        )
        with pytest.raises(ValueError, match="no Pyth feed id"):
            load_config(cfg_file)

    def test_unknown_provider_raises(self, tmp_path: Path) -> None:
        cfg_file = self._write(
            tmp_path,
            'assets:\n  - {symbol: WETH, price: "1"}\nprice_oracle:\n  provider: chainlink\n',
        )
        with pytest.raises(ValueError, match="Unknown price oracle provider"):
            load_config(cfg_file)

    def test_threshold_out_of_range_raises(self, tmp_path: Path) -> None:
        cfg_file = self._write(
            tmp_path,
            'engine: {liquidation_threshold_pct: 0}\nassets:\n  - {symbol: WETH, price: "1"}\n',
        )
        with pytest.raises(ValueError, match="liquidation_threshold_pct"):
            load_config(cfg_file)

    def test_negative_bonus_raises(self) -> None:
        with pytest.raises(ValueError, match="liquidation_bonus_pct"):
            validate_engine(EngineConfig(liquidation_bonus_pct=-1))

    def test_zero_precision_raises(self) -> None:
        with pytest.raises(ValueError, match="precision"):
            validate_engine(EngineConfig(precision=0))

    def test_empty_custody_raises(self) -> None:
        with pytest.raises(ValueError, match="custody"):
            validate_engine(EngineConfig(custody=""))


class TestFrozenConfigs:
    def test_engine_config_immutable(self) -> None:
        e = EngineConfig()
        with pytest.raises(AttributeError):
            e.liquidation_bonus_pct = 50  # type: ignore[misc]

    def test_asset_config_immutable(self) -> None:
        a = AssetConfig(symbol="WETH")
        with pytest.raises(AttributeError):
            a.symbol = "WBTC"  # type: ignore[misc]
