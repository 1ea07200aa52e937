"""
Product catalog entries and ranked recommendations.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ProductInfo:
    name: str
    category: str


@dataclass(frozen=True)
class Recommendation:
    """A scored product for one customer, enriched with catalog metadata."""

    product_id: int
    score: float
    name: str
    category: str
