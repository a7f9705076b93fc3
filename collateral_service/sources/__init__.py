"""Data source implementations."""
from .static import StaticEligibilitySource, StaticPositionSource, StaticPriceSource

__all__ = ["StaticEligibilitySource", "StaticPositionSource", "StaticPriceSource"]
