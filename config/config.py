"""
Configuration classes for the retail customer analytics engine.
Defines clustering, training, ranking and summary parameters in a type-safe, extensible way.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field

from models.enums import LabelPolicy
from utils.env import env_int, env_str, load_project_dotenv

DEFAULT_SEGMENT_LABELS = (
    "Luxury Buyers",  # High spending across multiple categories
    "Discount Shoppers",  # Low spending, scattered purchases across categories
    "Frequent Buyers",  # Many small purchases, often in similar categories
    "Category Specialists",  # Majority of spending in one product category
)


@dataclass
class SegmentationConfig:
    n_clusters: int = 4
    max_iter: int = 300
    n_init: int = 10
    tol: float = 1e-4
    random_state: int = 42
    # Cap n_clusters at the number of customers instead of raising ConfigurationError
    cap_clusters: bool = True
    label_policy: LabelPolicy = LabelPolicy.POSITIONAL
    labels: list[str] = field(default_factory=lambda: list(DEFAULT_SEGMENT_LABELS))


@dataclass
class RecommendationModelConfig:
    hidden_units: tuple[int, ...] = (128, 64)
    epochs: int = 10
    batch_size: int = 32
    learning_rate: float = 0.001
    seed: int = 42
    deterministic_ops: bool = True
    shuffle: bool = True
    verbose: int = 0  # Keras fit verbosity


@dataclass
class RankingConfig:
    top_k: int = 3
    placeholder_name: str = "Product {product_id}"
    placeholder_category: str = "Unknown"


@dataclass
class SummaryConfig:
    premium_min_spent: float = 1000.0
    premium_min_categories: int = 3
    regular_min_spent: float = 500.0
    regular_min_purchases: int = 5


@dataclass
class AnalysisConfig:
    segmentation: SegmentationConfig = field(default_factory=SegmentationConfig)
    recommendation: RecommendationModelConfig = field(default_factory=RecommendationModelConfig)
    ranking: RankingConfig = field(default_factory=RankingConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AnalysisConfig":
        """
        Build a config from defaults overridden by ``ANALYTICS_*`` environment variables.
        The project-level `.env` is loaded first when reading the real environment.
        """
        if environ is None:
            load_project_dotenv()
        env = dict(environ) if environ is not None else None
        config = cls()
        seg = config.segmentation
        seg.n_clusters = env_int("ANALYTICS_N_CLUSTERS", seg.n_clusters, env)
        seg.random_state = env_int("ANALYTICS_RANDOM_STATE", seg.random_state, env)
        policy = env_str("ANALYTICS_LABEL_POLICY", None, env)
        if policy is not None:
            try:
                seg.label_policy = LabelPolicy(policy.lower())
            except ValueError as e:
                raise ValueError(
                    f"ANALYTICS_LABEL_POLICY must be one of {[p.value for p in LabelPolicy]}, got {policy!r}"
                ) from e
        rec = config.recommendation
        rec.epochs = env_int("ANALYTICS_EPOCHS", rec.epochs, env)
        rec.batch_size = env_int("ANALYTICS_BATCH_SIZE", rec.batch_size, env)
        rec.seed = env_int("ANALYTICS_RANDOM_STATE", rec.seed, env)
        config.ranking.top_k = env_int("ANALYTICS_TOP_K", config.ranking.top_k, env)
        return config


# Example usage:
# config = AnalysisConfig(segmentation=SegmentationConfig(label_policy=LabelPolicy.SPEND_RANK))
# result = run_analysis(transactions, config)
