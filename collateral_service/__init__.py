"""Per-account collateral valuation service."""

__version__ = "0.1.0"
