"""Service modules"""
from .calculator import CollateralCalculator, build_calculator

__all__ = ["CollateralCalculator", "build_calculator"]
