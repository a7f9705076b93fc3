"""Collateral aggregation over positions, eligibility rules and prices."""
from __future__ import annotations

import logging
from typing import Sequence

from .. import calculation
from ..config import DatasetConfig
from ..interfaces import EligibilitySource, PositionSource, PriceSource
from ..models import AccountValuation, CollateralResult, PositionValuation
from ..sources import StaticEligibilitySource, StaticPositionSource, StaticPriceSource

logger = logging.getLogger(__name__)


class CollateralCalculator:
    """Compute per-account collateral values from three data sources."""

    def __init__(
        self,
        position_source: PositionSource,
        eligibility_source: EligibilitySource,
        price_source: PriceSource,
    ) -> None:
        self._positions = position_source
        self._eligibility = eligibility_source
        self._prices = price_source

    @property
    def position_source(self) -> PositionSource:
        return self._positions

    @property
    def eligibility_source(self) -> EligibilitySource:
        return self._eligibility

    @property
    def price_source(self) -> PriceSource:
        return self._prices

    def evaluate(self, account_ids: Sequence[str]) -> list[AccountValuation]:
        """Value every position of the requested accounts.

        Each source is called exactly once. Errors raised by a source
        propagate and abort the whole calculation. An empty request is the
        one exception: it yields no valuations and no source is called.
        """
        account_ids = list(account_ids)
        if not account_ids:
            return []

        account_positions = self._positions.get_positions(account_ids)
        asset_ids = calculation.collect_asset_ids(account_positions)
        rules = self._eligibility.get_eligibility(account_ids, asset_ids)
        price_index = calculation.build_price_index(self._prices.get_prices(asset_ids))

        logger.info(
            "Valuing %d accounts over %d assets (%d rules, %d prices)",
            len(account_positions), len(asset_ids), len(rules), len(price_index),
        )

        valuations: list[AccountValuation] = []
        for account in account_positions:
            lines: list[PositionValuation] = []

            for position in account.positions:
                info = calculation.resolve_eligibility(
                    rules, account.account_id, position.asset_id
                )
                price = price_index.get(position.asset_id, 0.0)
                value = calculation.value_position(
                    position.quantity, price, info.eligible, info.discount
                )
                if position.asset_id not in price_index:
                    logger.debug(
                        "No price for %s held by %s", position.asset_id, account.account_id
                    )
                logger.debug(
                    "  %s/%s: %d x %s x %s (%s) = %s",
                    account.account_id,
                    position.asset_id,
                    position.quantity,
                    price,
                    info.discount,
                    "eligible" if info.eligible else "ineligible",
                    value,
                )
                lines.append(
                    PositionValuation(
                        asset_id=position.asset_id,
                        quantity=position.quantity,
                        price=price,
                        eligible=info.eligible,
                        discount=info.discount,
                        value=value,
                    )
                )

            rounded = calculation.round_currency(
                calculation.exact_sum(line.value for line in lines)
            )
            logger.info("Account %s collateral: %s", account.account_id, rounded)
            valuations.append(
                AccountValuation(
                    account_id=account.account_id,
                    total=rounded,
                    positions=tuple(lines),
                )
            )

        return valuations

    def calculate_collateral(self, account_ids: Sequence[str]) -> list[CollateralResult]:
        """Return the rounded collateral total of each account the position source knows."""
        return [
            CollateralResult(account_id=v.account_id, collateral_value=v.total)
            for v in self.evaluate(account_ids)
        ]


def build_calculator(dataset: DatasetConfig) -> CollateralCalculator:
    """Wire a calculator to the in-memory sources of ``dataset``."""
    return CollateralCalculator(
        StaticPositionSource(dataset),
        StaticEligibilitySource(dataset),
        StaticPriceSource(dataset),
    )
