"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from collateral_service.config import AppConfig, DatasetConfig, RuleConfig, ServerConfig
from collateral_service.models import (
    AccountPosition,
    AssetPrice,
    EligibilityRule,
    Position,
)


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_account_positions() -> list[AccountPosition]:
    return [
        AccountPosition(
            "E1",
            (Position("S1", 100), Position("S3", 100), Position("S4", 100)),
        ),
        AccountPosition("E2", (Position("S1", 200), Position("S2", 150))),
    ]


@pytest.fixture()
def sample_rules() -> list[EligibilityRule]:
    return [
        EligibilityRule(
            eligible=True,
            asset_ids=frozenset({"S1", "S2", "S3"}),
            account_ids=frozenset({"E1", "E2"}),
            discount=0.9,
        ),
        EligibilityRule(
            eligible=False,
            asset_ids=frozenset({"S4", "S5"}),
            account_ids=frozenset({"E1", "E2"}),
            discount=0.0,
        ),
    ]


@pytest.fixture()
def sample_prices() -> list[AssetPrice]:
    return [
        AssetPrice("S1", 50.5),
        AssetPrice("S2", 20.2),
        AssetPrice("S3", 10.4),
        AssetPrice("S4", 15.5),
    ]


# ---------------------------------------------------------------------------
# Source mocks
# ---------------------------------------------------------------------------


@pytest.fixture()
def position_source(sample_account_positions: list[AccountPosition]) -> MagicMock:
    source = MagicMock()
    source.get_positions.return_value = sample_account_positions
    return source


@pytest.fixture()
def eligibility_source(sample_rules: list[EligibilityRule]) -> MagicMock:
    source = MagicMock()
    source.get_eligibility.return_value = sample_rules
    return source


@pytest.fixture()
def price_source(sample_prices: list[AssetPrice]) -> MagicMock:
    source = MagicMock()
    source.get_prices.return_value = sample_prices
    return source


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_dataset() -> DatasetConfig:
    return DatasetConfig(
        positions=(
            AccountPosition("E1", (Position("S1", 100), Position("S4", 100))),
            AccountPosition("E3", ()),
        ),
        rules=(
            RuleConfig(eligible=True, assets=("S1",), accounts=("E1",), discount=0.5),
            RuleConfig(eligible=False, assets=("S4",), discount=0.0),
        ),
        prices=(AssetPrice("S1", 10.0), AssetPrice("S4", 2.0)),
    )


@pytest.fixture()
def sample_app_config(sample_dataset: DatasetConfig) -> AppConfig:
    return AppConfig(
        server=ServerConfig(
            host="127.0.0.1",
            port=9090,
            cors_origins=("http://localhost:3000",),
        ),
        dataset=sample_dataset,
    )


SAMPLE_YAML = textwrap.dedent("""\
    server:
      host: 0.0.0.0
      port: 9000
      cors_origins: ["http://app.example.com"]
    dataset:
      positions:
        - account: A1
          holdings:
            - {asset: X1, quantity: 10}
            - {asset: X2, quantity: 5}
      rules:
        - eligible: true
          assets: [X1]
          accounts: [A1]
          discount: 0.8
        - eligible: false
          assets: [X2]
      prices:
        - {asset: X1, price: 12.5}
        - {asset: X2, price: 3.0}
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
