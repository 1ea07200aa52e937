"""
Customer segmentation with k-means over normalized purchase features.

Clustering is seeded through ``SegmentationConfig.random_state`` so the same
feature matrix and cluster count always produce the same assignments.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

import numpy as np
import pandas as pd
from sklearn.cluster import KMeans

from config.config import SegmentationConfig
from models.customer import CustomerProfile, SegmentAssignment
from models.enums import LabelPolicy
from utils.logger import get_logger

from .aggregation import TransactionLike, aggregate, build_category_vocabulary, parse_transactions
from .exceptions import ConfigurationError
from .features import build_features, normalize

logger = get_logger(__name__)


@dataclass
class ClusterFit:
    """Raw k-means output plus the label chosen for every cluster index."""

    n_clusters: int
    assignments: dict[int, int] = field(default_factory=dict)
    cluster_labels: dict[int, str] = field(default_factory=dict)
    centroids: np.ndarray | None = None
    inertia: float = 0.0
    n_iter: int = 0

    def label_for(self, customer_id: int) -> str:
        return self.cluster_labels[self.assignments[customer_id]]


def _resolve_k(k: int, n_customers: int, config: SegmentationConfig) -> int:
    if k <= 0:
        raise ConfigurationError(f"Number of clusters must be positive, got {k}.")
    if k > len(config.labels):
        raise ConfigurationError(
            f"Number of clusters ({k}) exceeds the {len(config.labels)} available segment labels."
        )
    if n_customers and k > n_customers:
        if not config.cap_clusters:
            raise ConfigurationError(
                f"Number of clusters ({k}) exceeds the number of customers ({n_customers})."
            )
        logger.warning(f"Capping clusters from {k} to {n_customers} (one per customer)")
        return n_customers
    return k


def _assign_labels(
    normalized: pd.DataFrame, cluster_ids: np.ndarray, k: int, config: SegmentationConfig
) -> dict[int, str]:
    if config.label_policy == LabelPolicy.POSITIONAL:
        return {c: config.labels[c] for c in range(k)}
    # Min-max scaling is monotone, so ranking by normalized mean spend equals ranking by raw spend.
    mean_spend = normalized["total_spent"].groupby(cluster_ids).mean()
    ranked = sorted(range(k), key=lambda c: (-mean_spend.get(c, -np.inf), c))
    return {cluster: config.labels[rank] for rank, cluster in enumerate(ranked)}


def fit_clusters(
    normalized: pd.DataFrame, k: int | None = None, config: SegmentationConfig | None = None
) -> ClusterFit:
    """
    Partition normalized feature vectors into ``k`` clusters.

    Args:
        normalized: Output of ``normalize``; rows indexed by customer id.
        k: Number of clusters; defaults to ``config.n_clusters``.
        config: Clustering parameters and label policy.

    Returns:
        ClusterFit: Empty (no assignments) for an empty matrix.

    Raises:
        ConfigurationError: If ``k <= 0``, ``k`` exceeds the label set, or ``k``
            exceeds the customer count while ``cap_clusters`` is off.
    """
    config = config or SegmentationConfig()
    k = config.n_clusters if k is None else k
    k = _resolve_k(k, len(normalized), config)
    if normalized.empty:
        return ClusterFit(n_clusters=k)

    kmeans = KMeans(
        n_clusters=k,
        init="k-means++",
        n_init=config.n_init,
        max_iter=config.max_iter,
        tol=config.tol,
        random_state=config.random_state,
    )
    cluster_ids = kmeans.fit_predict(normalized.to_numpy(dtype=float))
    fit = ClusterFit(
        n_clusters=k,
        assignments={int(cid): int(c) for cid, c in zip(normalized.index, cluster_ids)},
        cluster_labels=_assign_labels(normalized, cluster_ids, k, config),
        centroids=kmeans.cluster_centers_,
        inertia=float(kmeans.inertia_),
        n_iter=int(kmeans.n_iter_),
    )
    logger.info(
        f"Clustered {len(normalized)} customers into {k} segments "
        f"(inertia={fit.inertia:.4f}, iterations={fit.n_iter}, policy={config.label_policy.value})"
    )
    return fit


def segment(
    normalized: pd.DataFrame, k: int | None = None, config: SegmentationConfig | None = None
) -> dict[int, str]:
    """Map each customer id to its segment label. Empty input gives ``{}``."""
    fit = fit_clusters(normalized, k, config)
    return {customer_id: fit.label_for(customer_id) for customer_id in fit.assignments}


def segment_customers(
    transactions: Iterable[TransactionLike],
    config: SegmentationConfig | None = None,
    profiles: Mapping[int, CustomerProfile] | None = None,
) -> list[SegmentAssignment]:
    """
    Run the full segmentation path on a transaction batch.

    aggregate -> category vocabulary -> features -> normalize -> k-means -> labels.
    ``profiles`` may be passed when the caller already aggregated the batch.
    """
    records = parse_transactions(transactions)
    if profiles is None:
        profiles = aggregate(records)
    vocabulary = build_category_vocabulary(records)
    normalized = normalize(build_features(profiles, vocabulary))
    fit = fit_clusters(normalized, config=config)
    return [
        SegmentAssignment(
            customer_id=customer_id,
            segment=fit.label_for(customer_id),
            cluster=fit.assignments[customer_id],
            most_used_category=profile.most_used_category,
            favorite_product=profile.favorite_product,
            avg_spent=profile.avg_spent,
        )
        for customer_id, profile in profiles.items()
    ]
