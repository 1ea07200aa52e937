"""Customer segmentation and recommendation engine for retail purchase logs"""

from .aggregation import (
    aggregate,
    build_category_vocabulary,
    build_product_catalog,
    parse_transactions,
    purchase_pairs,
)
from .exceptions import (
    AnalyticsError,
    ConfigurationError,
    DataQualityError,
    EmptyInputError,
    OutOfRangeError,
)
from .features import build_features, normalization_params, normalize
from .pipeline import AnalysisResult, run_analysis
from .ranking import top_k
from .recommendation import (
    EncodedPurchases,
    RecommendationSession,
    TrainingUniverse,
    encode,
    predict,
    train,
    train_session_async,
)
from .segmentation import ClusterFit, fit_clusters, segment, segment_customers
from .summary import category_sales_table, customer_history, summarize


__all__ = [
    # Aggregation
    "aggregate",
    "build_category_vocabulary",
    "build_product_catalog",
    "parse_transactions",
    "purchase_pairs",
    # Errors
    "AnalyticsError",
    "ConfigurationError",
    "DataQualityError",
    "EmptyInputError",
    "OutOfRangeError",
    # Features
    "build_features",
    "normalization_params",
    "normalize",
    # Segmentation
    "ClusterFit",
    "fit_clusters",
    "segment",
    "segment_customers",
    # Recommendation
    "EncodedPurchases",
    "RecommendationSession",
    "TrainingUniverse",
    "encode",
    "predict",
    "train",
    "train_session_async",
    "top_k",
    # Summary / pipeline
    "summarize",
    "category_sales_table",
    "customer_history",
    "AnalysisResult",
    "run_analysis",
]
