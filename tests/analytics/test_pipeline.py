from decimal import Decimal
from unittest.mock import patch

import pytest

from analytics.exceptions import OutOfRangeError
from analytics.pipeline import AnalysisResult, run_analysis
from config.config import AnalysisConfig, RecommendationModelConfig, SegmentationConfig
from models.enums import AnalysisStatus
from tests.sample_data import raw_row

# --- Fixtures --- #


@pytest.fixture
def fast_analysis_config() -> AnalysisConfig:
    return AnalysisConfig(
        recommendation=RecommendationModelConfig(hidden_units=(16, 8), epochs=2, batch_size=8)
    )


# --- Successful runs --- #


def test_run_analysis_ok(batch, fast_analysis_config):
    result = run_analysis(batch, fast_analysis_config)
    assert result.ok
    assert result.status == AnalysisStatus.OK
    assert len(result.profiles) == 8
    assert len(result.segments) == 8
    assert result.summary.total_customers == 8
    assert sum(stats.count for stats in result.summary.segments.values()) == 8
    assert result.product_catalog[1].name == "Laptop"
    assert result.session is not None and result.session.is_trained
    assert result.error_kind is None


def test_run_analysis_recommendations_use_catalog(batch, fast_analysis_config):
    result = run_analysis(batch, fast_analysis_config)
    assert len(result.recommend(2)) == 3
    # Output width is max product id + 1, so id 4 is scored but absent from the catalog
    recs = result.recommend(2, k=10)
    assert {r.name for r in recs} == {"Laptop", "Novel", "T-Shirt", "Product 4"}
    assert len(result.recommend(2, k=1)) == 1


def test_customer_insight(batch, fast_analysis_config):
    result = run_analysis(batch, fast_analysis_config)
    insight = result.customer_insight(2)
    assert insight.customer_id == 2
    assert len(insight.history) == 8
    assert insight.total_spent == Decimal("96")
    assert len(insight.recommendations) == 3
    with pytest.raises(OutOfRangeError):
        result.customer_insight(99)


def test_recommend_out_of_range_propagates(batch, fast_analysis_config):
    result = run_analysis(batch, fast_analysis_config)
    with pytest.raises(OutOfRangeError):
        result.recommend(99)


def test_run_analysis_without_recommender(batch):
    with patch("analytics.pipeline.RecommendationSession.fit") as mock_fit:
        result = run_analysis(batch, train_recommender=False)
    mock_fit.assert_not_called()
    assert result.ok
    assert result.session is None
    assert result.recommend(0) == []


# --- Sentinel results --- #


def test_run_analysis_no_data():
    result = run_analysis([])
    assert result.status == AnalysisStatus.NO_DATA
    assert result.segments == []
    assert result.recommend(0) == []
    assert result.error_kind is None


def test_run_analysis_data_quality_failure():
    result = run_analysis([raw_row(), raw_row(purchaseAmount="twelve")])
    assert result.status == AnalysisStatus.FAILED
    assert result.error_kind == "DataQualityError"
    assert "Row 1" in result.error_message
    assert result.segments == []
    assert result.session is None


def test_run_analysis_configuration_failure(batch):
    config = AnalysisConfig(segmentation=SegmentationConfig(n_clusters=0))
    result = run_analysis(batch, config, train_recommender=False)
    assert result.status == AnalysisStatus.FAILED
    assert result.error_kind == "ConfigurationError"
    assert result.profiles == {}


def test_run_analysis_fails_when_no_pair_is_encodable(fast_analysis_config):
    # Ten distinct customers, so only ids 0..9 fit the one-hot encoding
    rows = [raw_row(customerId=str(customer_id)) for customer_id in range(1001, 1011)]
    result = run_analysis(rows, fast_analysis_config)
    assert result.status == AnalysisStatus.FAILED
    assert result.error_kind == "EmptyInputError"
    assert "All 10 purchase pairs" in result.error_message
    assert result.session is None


def test_run_analysis_rejects_amount_that_overflows_float(fast_analysis_config):
    rows = [raw_row(), raw_row(customerId="2", purchaseAmount="1e400")]
    result = run_analysis(rows, fast_analysis_config, train_recommender=False)
    assert result.status == AnalysisStatus.FAILED
    assert result.error_kind == "DataQualityError"
    assert "purchaseAmount" in result.error_message


def test_failed_result_factory():
    from analytics.exceptions import EmptyInputError

    result = AnalysisResult.failed(EmptyInputError("nothing to train"))
    assert not result.ok
    assert result.error_kind == "EmptyInputError"
    assert result.error_message == "nothing to train"
