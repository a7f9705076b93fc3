"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class Position:
    """Quantity of one asset held by an account."""

    asset_id: str
    quantity: int


@dataclass(frozen=True)
class AccountPosition:
    """All holdings of a single account."""

    account_id: str
    positions: tuple[Position, ...] = ()


@dataclass(frozen=True)
class EligibilityRule:
    """Grouped eligibility statement over accounts x assets.

    Applies to every (account, asset) pair with ``account in account_ids``
    and ``asset in asset_ids``.
    """

    eligible: bool
    asset_ids: frozenset[str] = field(default_factory=frozenset)
    account_ids: frozenset[str] = field(default_factory=frozenset)
    discount: float = 0.0


@dataclass(frozen=True)
class AssetPrice:
    """Unit price of an asset."""

    asset_id: str
    price: float


@dataclass(frozen=True)
class EligibilityInfo:
    """Resolved eligibility for one (account, asset) pair."""

    eligible: bool
    discount: float


@dataclass(frozen=True)
class PositionValuation:
    """Collateral contribution of a single position (unrounded)."""

    asset_id: str
    quantity: int
    price: float
    eligible: bool
    discount: float
    value: Decimal


@dataclass(frozen=True)
class AccountValuation:
    """Per-account total with its line items."""

    account_id: str
    total: Decimal
    positions: tuple[PositionValuation, ...] = ()


@dataclass(frozen=True)
class CollateralResult:
    """Rounded collateral value of an account."""

    account_id: str
    collateral_value: Decimal
