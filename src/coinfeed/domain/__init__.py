"""
Coinfeed Domain Layer.

This package contains domain primitives that provide semantic meaning
and display behavior to market data values. Models store plain floats;
primitives wrap them on demand for formatting and unit conversion.
"""

from src.coinfeed.domain.primitives import Percentage, Price, UsdAmount

__all__ = [
    "Percentage",
    "Price",
    "UsdAmount",
]
