from unittest.mock import patch

import pytest

from config.config import (
    DEFAULT_SEGMENT_LABELS,
    AnalysisConfig,
    RankingConfig,
    RecommendationModelConfig,
    SegmentationConfig,
    SummaryConfig,
)
from models.enums import LabelPolicy


def test_segmentation_config_defaults():
    """Test SegmentationConfig initializes with correct default values."""
    config = SegmentationConfig()
    assert config.n_clusters == 4
    assert config.max_iter == 300
    assert config.random_state == 42
    assert config.cap_clusters is True
    assert config.label_policy == LabelPolicy.POSITIONAL
    assert config.labels == [
        "Luxury Buyers",
        "Discount Shoppers",
        "Frequent Buyers",
        "Category Specialists",
    ]


def test_segmentation_config_default_factory():
    """Test that the default_factory creates separate label lists."""
    config1 = SegmentationConfig()
    config2 = SegmentationConfig()
    assert config1.labels is not config2.labels
    config1.labels.append("Dormant")
    assert config2.labels == list(DEFAULT_SEGMENT_LABELS)


def test_recommendation_model_config_defaults():
    config = RecommendationModelConfig()
    assert config.hidden_units == (128, 64)
    assert config.epochs == 10
    assert config.batch_size == 32
    assert config.deterministic_ops is True


def test_ranking_and_summary_defaults():
    assert RankingConfig().top_k == 3
    assert RankingConfig().placeholder_category == "Unknown"
    summary = SummaryConfig()
    assert summary.premium_min_spent == 1000.0
    assert summary.premium_min_categories == 3
    assert summary.regular_min_spent == 500.0
    assert summary.regular_min_purchases == 5


def test_analysis_config_custom():
    config = AnalysisConfig(segmentation=SegmentationConfig(n_clusters=3))
    assert config.segmentation.n_clusters == 3
    # Check a default value is still correct
    assert config.recommendation.epochs == 10


# --- from_env --- #


def test_from_env_overrides():
    env = {
        "ANALYTICS_N_CLUSTERS": "3",
        "ANALYTICS_RANDOM_STATE": "7",
        "ANALYTICS_EPOCHS": "5",
        "ANALYTICS_BATCH_SIZE": "16",
        "ANALYTICS_TOP_K": "5",
        "ANALYTICS_LABEL_POLICY": "SPEND_RANK",
    }
    config = AnalysisConfig.from_env(env)
    assert config.segmentation.n_clusters == 3
    assert config.segmentation.random_state == 7
    assert config.segmentation.label_policy == LabelPolicy.SPEND_RANK
    assert config.recommendation.epochs == 5
    assert config.recommendation.batch_size == 16
    assert config.recommendation.seed == 7
    assert config.ranking.top_k == 5


def test_from_env_empty_mapping_keeps_defaults():
    config = AnalysisConfig.from_env({})
    assert config == AnalysisConfig()


def test_from_env_invalid_values():
    with pytest.raises(ValueError, match="ANALYTICS_EPOCHS"):
        AnalysisConfig.from_env({"ANALYTICS_EPOCHS": "ten"})
    with pytest.raises(ValueError, match="ANALYTICS_LABEL_POLICY"):
        AnalysisConfig.from_env({"ANALYTICS_LABEL_POLICY": "alphabetical"})


@patch("config.config.load_project_dotenv")
def test_from_env_reads_process_environment(mock_load_dotenv, monkeypatch):
    monkeypatch.setenv("ANALYTICS_TOP_K", "8")
    config = AnalysisConfig.from_env()
    mock_load_dotenv.assert_called_once()
    assert config.ranking.top_k == 8
