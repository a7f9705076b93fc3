"""Eligibility source protocol — grouped eligibility rules provider."""
from typing import Protocol, Sequence

from ..models import EligibilityRule


class EligibilitySource(Protocol):
    """Abstract interface for fetching eligibility rules.

    Rule order is significant: the first rule covering a pair wins.
    """

    def get_eligibility(
        self, account_ids: Sequence[str], asset_ids: Sequence[str]
    ) -> list[EligibilityRule]: ...
