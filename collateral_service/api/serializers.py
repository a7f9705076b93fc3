"""JSON payload parsing and rendering for the HTTP API, no I/O.

Field names follow the upstream services' camelCase wire format.
"""
from __future__ import annotations

from typing import Any

from ..models import AccountPosition, AssetPrice, CollateralResult, EligibilityRule


def parse_id_list(payload: Any, name: str, allow_empty: bool = False) -> list[str]:
    """Validate a JSON array of identifier strings.

    Raises:
        ValueError: payload is null, not an array, empty (unless allowed),
            or holds anything other than non-empty strings.
    """
    if payload is None:
        raise ValueError(f"{name} must not be null")
    if not isinstance(payload, list):
        raise ValueError(f"{name} must be a JSON array")
    if not payload and not allow_empty:
        raise ValueError(f"{name} must not be empty")
    for item in payload:
        if not isinstance(item, str) or not item:
            raise ValueError(f"{name} must contain only non-empty strings")
    return list(payload)


def parse_eligibility_request(payload: Any) -> tuple[list[str], list[str]]:
    """Parse ``{"accountIds": [...], "assetIds": [...]}``."""
    if not isinstance(payload, dict):
        raise ValueError("Eligibility request must be a JSON object")
    account_ids = parse_id_list(payload.get("accountIds", []), "accountIds", allow_empty=True)
    asset_ids = parse_id_list(payload.get("assetIds", []), "assetIds", allow_empty=True)
    return account_ids, asset_ids


def result_to_dict(result: CollateralResult) -> dict[str, Any]:
    return {
        "accountId": result.account_id,
        "collateralValue": float(result.collateral_value),
    }


def account_position_to_dict(account: AccountPosition) -> dict[str, Any]:
    return {
        "accountId": account.account_id,
        "positions": [
            {"assetId": p.asset_id, "quantity": p.quantity} for p in account.positions
        ],
    }


def rule_to_dict(rule: EligibilityRule) -> dict[str, Any]:
    return {
        "eligible": rule.eligible,
        "assetIDs": sorted(rule.asset_ids),
        "accountIDs": sorted(rule.account_ids),
        "discount": rule.discount,
    }


def price_to_dict(price: AssetPrice) -> dict[str, Any]:
    return {"assetId": price.asset_id, "price": price.price}
