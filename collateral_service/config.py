"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .models import AccountPosition, AssetPrice, Position

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 8080
    cors_origins: tuple[str, ...] = (
        "http://localhost:3000",
        "http://localhost:8080",
    )


@dataclass(frozen=True)
class RuleConfig:
    """Configured eligibility rule.

    ``accounts=None`` binds the rule to whichever accounts are requested.
    """

    eligible: bool = False
    assets: tuple[str, ...] = ()
    accounts: tuple[str, ...] | None = None
    discount: float = 0.0


def _reference_positions() -> tuple[AccountPosition, ...]:
    return (
        AccountPosition(
            "E1",
            (Position("S1", 100), Position("S3", 100), Position("S4", 100)),
        ),
        AccountPosition(
            "E2",
            (Position("S1", 200), Position("S2", 150), Position("S5", 50)),
        ),
    )


def _reference_rules() -> tuple[RuleConfig, ...]:
    return (
        RuleConfig(eligible=True, assets=("S1", "S2", "S3"), discount=0.9),
        RuleConfig(eligible=False, assets=("S4", "S5"), discount=0.0),
    )


def _reference_prices() -> tuple[AssetPrice, ...]:
    return (
        AssetPrice("S1", 50.5),
        AssetPrice("S2", 20.2),
        AssetPrice("S3", 10.4),
        AssetPrice("S4", 15.5),
        AssetPrice("S5", 25.0),
    )


@dataclass(frozen=True)
class DatasetConfig:
    """In-memory data served by the static sources."""

    positions: tuple[AccountPosition, ...] = field(default_factory=_reference_positions)
    rules: tuple[RuleConfig, ...] = field(default_factory=_reference_rules)
    prices: tuple[AssetPrice, ...] = field(default_factory=_reference_prices)


@dataclass(frozen=True)
class AppConfig:
    server: ServerConfig = field(default_factory=ServerConfig)
    dataset: DatasetConfig = field(default_factory=DatasetConfig)


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


_TRUE_STRINGS = frozenset({"true", "yes", "on", "1"})
_FALSE_STRINGS = frozenset({"false", "no", "off", "0", ""})


def _parse_bool(value: Any, name: str) -> bool:
    """Read a YAML flag that may arrive as a string after env interpolation."""
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        raise ValueError(f"{name} must be a boolean, got {value!r}")
    return bool(value)


def _build_server(raw: dict[str, Any]) -> ServerConfig:
    return ServerConfig(
        host=str(raw.get("host", ServerConfig.host)),
        port=int(raw.get("port", ServerConfig.port)),
        cors_origins=tuple(
            raw.get("cors_origins", ServerConfig().cors_origins)
        ),
    )


def _build_positions(raw: list[dict[str, Any]]) -> tuple[AccountPosition, ...]:
    accounts: list[AccountPosition] = []
    for entry in raw:
        holdings = tuple(
            Position(
                asset_id=str(h.get("asset", "")),
                quantity=int(h.get("quantity", 0)),
            )
            for h in entry.get("holdings", [])
        )
        accounts.append(
            AccountPosition(account_id=str(entry.get("account", "")), positions=holdings)
        )
    return tuple(accounts)


def _build_rules(raw: list[dict[str, Any]]) -> tuple[RuleConfig, ...]:
    rules: list[RuleConfig] = []
    for r in raw:
        accounts = r.get("accounts")
        rules.append(
            RuleConfig(
                eligible=_parse_bool(r.get("eligible", False), "Rule eligible"),
                assets=tuple(str(a) for a in r.get("assets", [])),
                accounts=None if accounts is None else tuple(str(a) for a in accounts),
                discount=float(r.get("discount", 0.0)),
            )
        )
    return tuple(rules)


def _build_prices(raw: list[dict[str, Any]]) -> tuple[AssetPrice, ...]:
    return tuple(
        AssetPrice(asset_id=str(p.get("asset", "")), price=float(p.get("price", 0.0)))
        for p in raw
    )


def _build_dataset(raw: dict[str, Any] | None) -> DatasetConfig:
    if raw is None:
        return DatasetConfig()
    return DatasetConfig(
        positions=_build_positions(raw.get("positions", [])),
        rules=_build_rules(raw.get("rules", [])),
        prices=_build_prices(raw.get("prices", [])),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root; when that default file is absent the built-in
            reference configuration is used. An explicit path must exist.
    """
    load_dotenv()

    if config_path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            logger.info("No config.yaml found, using built-in defaults")
            return AppConfig()
        config_path = DEFAULT_CONFIG_PATH
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        server=_build_server(raw.get("server") or {}),
        dataset=_build_dataset(raw.get("dataset")),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not 0 < cfg.server.port < 65536:
        raise ValueError(f"Server port {cfg.server.port} out of range")

    seen_accounts: set[str] = set()
    for account in cfg.dataset.positions:
        if not account.account_id:
            raise ValueError("Position entry has no account id")
        if account.account_id in seen_accounts:
            raise ValueError(f"Duplicate positions for account '{account.account_id}'")
        seen_accounts.add(account.account_id)
        for position in account.positions:
            if not position.asset_id:
                raise ValueError(
                    f"Account '{account.account_id}' has a holding with no asset id"
                )
            if position.quantity < 0:
                raise ValueError(
                    f"Account '{account.account_id}' has negative quantity "
                    f"for '{position.asset_id}'"
                )

    for i, rule in enumerate(cfg.dataset.rules):
        if not rule.assets:
            raise ValueError(f"Eligibility rule #{i} covers no assets")

    for price in cfg.dataset.prices:
        if not price.asset_id:
            raise ValueError("Price entry has no asset id")
        if price.price < 0:
            raise ValueError(f"Negative price for asset '{price.asset_id}'")
