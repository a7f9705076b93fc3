"""Protocol interfaces for the collateral service's data sources."""
from .eligibility_source import EligibilitySource
from .position_source import PositionSource
from .price_source import PriceSource

__all__ = ["EligibilitySource", "PositionSource", "PriceSource"]
