"""
Top-K extraction from a product score distribution.
"""

from collections.abc import Mapping, Sequence

import numpy as np

from config.config import RankingConfig
from models.product import ProductInfo, Recommendation


def _describe(
    product_id: int,
    product_catalog: Mapping[int, ProductInfo | Mapping] | None,
    config: RankingConfig,
) -> tuple[str, str]:
    entry = product_catalog.get(product_id) if product_catalog else None
    if isinstance(entry, ProductInfo):
        return entry.name, entry.category
    if isinstance(entry, Mapping):
        return (
            entry.get("name") or config.placeholder_name.format(product_id=product_id),
            entry.get("category") or config.placeholder_category,
        )
    return config.placeholder_name.format(product_id=product_id), config.placeholder_category


def top_k(
    distribution: Sequence[float] | np.ndarray,
    k: int = 3,
    product_catalog: Mapping[int, ProductInfo | Mapping] | None = None,
    config: RankingConfig | None = None,
) -> list[Recommendation]:
    """
    Return the ``k`` highest-scoring products, best first.

    Output index ``i`` of the distribution scores product id ``i + 1``. Equal
    scores are ordered by ascending product id. Products missing from the
    catalog get a placeholder name and category. ``k <= 0`` gives ``[]`` and
    the result never holds more entries than the distribution has.
    """
    config = config or RankingConfig()
    scores = np.asarray(distribution, dtype=np.float64).ravel()
    if k <= 0 or scores.size == 0:
        return []
    product_ids = np.arange(1, scores.size + 1)
    # lexsort sorts by the last key first: descending score, then ascending id
    order = np.lexsort((product_ids, -scores))[:k]
    recommendations = []
    for index in order:
        product_id = int(product_ids[index])
        name, category = _describe(product_id, product_catalog, config)
        recommendations.append(
            Recommendation(product_id=product_id, score=float(scores[index]), name=name, category=category)
        )
    return recommendations
