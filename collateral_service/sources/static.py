"""In-memory data sources backed by the configured dataset."""
from __future__ import annotations

import logging
from typing import Sequence

from ..config import DatasetConfig
from ..models import AccountPosition, AssetPrice, EligibilityRule

logger = logging.getLogger(__name__)


class StaticPositionSource:
    """Serve account holdings from the dataset."""

    def __init__(self, dataset: DatasetConfig) -> None:
        self._accounts = {a.account_id: a for a in dataset.positions}

    def get_positions(self, account_ids: Sequence[str]) -> list[AccountPosition]:
        """Return holdings of the known accounts, in request order."""
        found: list[AccountPosition] = []
        seen: set[str] = set()
        for account_id in account_ids:
            if account_id in seen:
                continue
            seen.add(account_id)
            account = self._accounts.get(account_id)
            if account is None:
                logger.debug("No positions for account %s", account_id)
                continue
            found.append(account)
        logger.info(
            "Position source returned %d of %d requested accounts",
            len(found), len(seen),
        )
        return found


class StaticEligibilitySource:
    """Serve eligibility rules from the dataset, preserving their order."""

    def __init__(self, dataset: DatasetConfig) -> None:
        self._rules = dataset.rules

    def get_eligibility(
        self, account_ids: Sequence[str], asset_ids: Sequence[str]
    ) -> list[EligibilityRule]:
        """Return every configured rule.

        Rules configured without accounts are bound to ``account_ids``.
        """
        requested = frozenset(account_ids)
        rules = [
            EligibilityRule(
                eligible=r.eligible,
                asset_ids=frozenset(r.assets),
                account_ids=requested if r.accounts is None else frozenset(r.accounts),
                discount=r.discount,
            )
            for r in self._rules
        ]
        logger.info("Eligibility source returned %d rules", len(rules))
        return rules


class StaticPriceSource:
    """Serve asset prices from the dataset."""

    def __init__(self, dataset: DatasetConfig) -> None:
        self._prices = dataset.prices

    def get_prices(self, asset_ids: Sequence[str]) -> list[AssetPrice]:
        """Return configured prices for the requested assets."""
        wanted = set(asset_ids)
        prices = [p for p in self._prices if p.asset_id in wanted]
        logger.info(
            "Price source returned %d prices for %d assets", len(prices), len(wanted)
        )
        return prices
