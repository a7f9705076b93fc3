"""Price source protocol — asset price feed abstraction."""
from typing import Protocol, Sequence

from ..models import AssetPrice


class PriceSource(Protocol):
    """Abstract interface for fetching asset prices. Omitted assets are unpriced."""

    def get_prices(self, asset_ids: Sequence[str]) -> list[AssetPrice]: ...
