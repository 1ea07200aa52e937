import pandas as pd
import pytest

from analytics.aggregation import aggregate, build_category_vocabulary
from analytics.exceptions import ConfigurationError
from analytics.features import build_features, normalize
from analytics.segmentation import fit_clusters, segment, segment_customers
from config.config import DEFAULT_SEGMENT_LABELS, SegmentationConfig
from models.enums import LabelPolicy

# --- Fixtures --- #


@pytest.fixture
def normalized(batch) -> pd.DataFrame:
    return normalize(build_features(aggregate(batch), build_category_vocabulary(batch)))


@pytest.fixture
def seg_config() -> SegmentationConfig:
    return SegmentationConfig(n_clusters=4, random_state=7)


# --- Clustering --- #


def test_segment_assigns_every_customer(normalized, seg_config):
    labels = segment(normalized, config=seg_config)
    assert set(labels) == set(normalized.index)
    assert set(labels.values()) <= set(DEFAULT_SEGMENT_LABELS)


def test_clustering_is_deterministic(normalized, seg_config):
    first = fit_clusters(normalized, config=seg_config)
    second = fit_clusters(normalized, config=seg_config)
    assert first.assignments == second.assignments
    assert segment(normalized, config=seg_config) == segment(normalized, config=seg_config)


def test_identical_customers_share_a_cluster(normalized, seg_config):
    fit = fit_clusters(normalized, config=seg_config)
    for a, b in [(0, 1), (2, 3), (4, 5), (6, 7)]:
        assert fit.assignments[a] == fit.assignments[b]
    assert len(set(fit.assignments.values())) == 4


def test_positional_labels_follow_cluster_index(normalized, seg_config):
    fit = fit_clusters(normalized, config=seg_config)
    assert fit.cluster_labels == dict(enumerate(DEFAULT_SEGMENT_LABELS))
    for customer_id, cluster in fit.assignments.items():
        assert fit.label_for(customer_id) == DEFAULT_SEGMENT_LABELS[cluster]


def test_spend_rank_labels_follow_mean_spend(normalized):
    config = SegmentationConfig(label_policy=LabelPolicy.SPEND_RANK, random_state=7)
    labels = segment(normalized, config=config)
    assert labels[0] == labels[1] == "Luxury Buyers"
    assert labels[6] == labels[7] == "Discount Shoppers"
    assert labels[2] == labels[3] == "Frequent Buyers"
    assert labels[4] == labels[5] == "Category Specialists"


def test_fit_reports_centroids(normalized, seg_config):
    fit = fit_clusters(normalized, k=2, config=seg_config)
    assert fit.n_clusters == 2
    assert fit.centroids.shape == (2, normalized.shape[1])
    assert fit.inertia >= 0.0


# --- Edge cases --- #


def test_segment_empty_input(seg_config):
    empty = pd.DataFrame(columns=["total_spent", "frequency"], dtype=float)
    assert segment(empty, config=seg_config) == {}


@pytest.mark.parametrize("k", [0, -1])
def test_non_positive_k_rejected(normalized, seg_config, k):
    with pytest.raises(ConfigurationError, match="must be positive"):
        segment(normalized, k=k, config=seg_config)


def test_k_beyond_label_set_rejected(normalized, seg_config):
    with pytest.raises(ConfigurationError, match="segment labels"):
        segment(normalized, k=5, config=seg_config)


def test_k_above_customer_count_is_capped(normalized, seg_config):
    few = normalized.loc[[0, 2, 4]]
    fit = fit_clusters(few, k=4, config=seg_config)
    assert fit.n_clusters == 3
    assert len(set(fit.assignments.values())) == 3


def test_k_above_customer_count_rejected_without_capping(normalized):
    config = SegmentationConfig(cap_clusters=False)
    with pytest.raises(ConfigurationError, match="exceeds the number of customers"):
        segment(normalized.loc[[0, 2]], k=4, config=config)


# --- Full path --- #


def test_segment_customers(batch, seg_config):
    assignments = segment_customers(batch, seg_config)
    assert [a.customer_id for a in assignments] == list(range(8))
    by_id = {a.customer_id: a for a in assignments}
    assert by_id[2].most_used_category == "Books"
    assert by_id[2].favorite_product == "Novel"
    assert float(by_id[0].avg_spent) == pytest.approx(900.0)
    assert by_id[0].segment == DEFAULT_SEGMENT_LABELS[by_id[0].cluster]


def test_segment_customers_empty():
    assert segment_customers([]) == []
