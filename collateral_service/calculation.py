"""Pure collateral calculation functions — no I/O.

Arithmetic runs in local decimal contexts sized to the operands, so
products and sums are exact whatever their magnitude.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, Inexact, localcontext
from typing import Iterable, Sequence

from .models import AccountPosition, AssetPrice, EligibilityInfo, EligibilityRule

CENT = Decimal("0.01")

# Pairs not covered by any rule never count as collateral.
NOT_ELIGIBLE = EligibilityInfo(eligible=False, discount=0.0)


def to_decimal(value: int | float | Decimal) -> Decimal:
    """Convert a number to Decimal through its shortest string form.

    Floats go through ``str`` so that 50.5 becomes ``Decimal("50.5")``
    rather than the exact binary expansion of the float.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    return Decimal(str(value))


def exact_product(*factors: Decimal) -> Decimal:
    """Multiply without rounding.

    A product never has more digits than its factors combined, so that
    sum is used as precision. ``Inexact`` is trapped regardless.
    """
    prec = max(sum(len(f.as_tuple().digits) for f in factors), 1)
    with localcontext() as ctx:
        ctx.prec = prec
        ctx.traps[Inexact] = True
        result = Decimal(1)
        for factor in factors:
            result *= factor
    return result


def exact_sum(values: Iterable[Decimal]) -> Decimal:
    """Add without rounding, however far apart the magnitudes are."""
    values = list(values)
    if not values:
        return Decimal(0)
    # One spare digit per addend covers every carry.
    top = max(v.adjusted() for v in values) + 1 + len(values)
    # the Decimal(0) start value pins the exponent at or below zero
    bottom = min(min(v.as_tuple().exponent for v in values), 0)
    with localcontext() as ctx:
        ctx.prec = max(top - bottom, 1)
        ctx.traps[Inexact] = True
        total = sum(values, Decimal(0))
    return total


def build_price_index(prices: Iterable[AssetPrice]) -> dict[str, float]:
    """Map asset id to unit price. The first entry for an asset wins."""
    index: dict[str, float] = {}
    for entry in prices:
        if entry.asset_id not in index:
            index[entry.asset_id] = entry.price
    return index


def resolve_eligibility(
    rules: Sequence[EligibilityRule], account_id: str, asset_id: str
) -> EligibilityInfo:
    """Return eligibility and discount of the first rule covering the pair.

    Rules are scanned in the given order, so an earlier rule overrides any
    later rule that covers the same (account, asset) pair.
    """
    for rule in rules:
        if account_id in rule.account_ids and asset_id in rule.asset_ids:
            return EligibilityInfo(eligible=rule.eligible, discount=rule.discount)
    return NOT_ELIGIBLE


def value_position(
    quantity: int,
    price: float | Decimal,
    eligible: bool,
    discount: float | Decimal,
) -> Decimal:
    """Collateral contribution of one position: quantity * price * discount.

    Ineligible positions are worth exactly zero whatever the other inputs.
    The product is exact; rounding happens once per account total.
    """
    if not eligible:
        return Decimal(0)
    return exact_product(to_decimal(quantity), to_decimal(price), to_decimal(discount))


def collect_asset_ids(account_positions: Iterable[AccountPosition]) -> list[str]:
    """Distinct asset ids referenced by the positions, in first-seen order."""
    seen: dict[str, None] = {}
    for account in account_positions:
        for position in account.positions:
            seen.setdefault(position.asset_id, None)
    return list(seen)


def round_currency(amount: Decimal) -> Decimal:
    """Round to cents, half away from zero (0.125 -> 0.13)."""
    with localcontext() as ctx:
        # integer digits, two decimals and a possible rounding carry
        ctx.prec = max(amount.adjusted() + 4, 1)
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
