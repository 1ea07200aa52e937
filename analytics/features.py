"""
Feature construction and min-max normalization for customer segmentation.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

import pandas as pd
from sklearn.preprocessing import MinMaxScaler

from models.customer import CustomerProfile
from utils.logger import get_logger

from .exceptions import ConfigurationError

logger = get_logger(__name__)

BASE_FEATURES = ["total_spent", "frequency"]
CATEGORY_PREFIX = "count:"


def category_column(category: str) -> str:
    return f"{CATEGORY_PREFIX}{category}"


def feature_columns(category_vocabulary: Sequence[str]) -> list[str]:
    return BASE_FEATURES + [category_column(c) for c in category_vocabulary]


def build_features(
    profiles: Mapping[int, CustomerProfile], category_vocabulary: Sequence[str]
) -> pd.DataFrame:
    """
    Convert customer profiles into fixed-width feature vectors.

    Each row is ``[total_spent, frequency, count_in_category_1 .. count_in_category_K]``
    with categories in vocabulary order; categories a customer never bought are 0.

    Args:
        profiles: Customer id -> profile, as returned by ``aggregate``.
        category_vocabulary: Ordered, duplicate-free categories of the batch.

    Returns:
        pd.DataFrame: One float row per customer, indexed by ``customer_id``.

    Raises:
        ConfigurationError: If the vocabulary is empty (or has duplicates) while
            profiles are present, or a profile holds a category outside it.
    """
    vocabulary = list(category_vocabulary)
    if len(set(vocabulary)) != len(vocabulary):
        raise ConfigurationError("Category vocabulary contains duplicates.")
    columns = feature_columns(vocabulary)
    index = pd.Index(list(profiles.keys()), name="customer_id")
    if not profiles:
        return pd.DataFrame(columns=columns, index=index, dtype=float)
    if not vocabulary:
        raise ConfigurationError(
            f"Empty category vocabulary for {len(profiles)} customer profiles."
        )

    known = set(vocabulary)
    rows = []
    for customer_id, profile in profiles.items():
        unknown = set(profile.category_breakdown) - known
        if unknown:
            raise ConfigurationError(
                f"Customer {customer_id} has categories outside the vocabulary: {sorted(unknown)}"
            )
        counts = [
            profile.category_breakdown[c].count if c in profile.category_breakdown else 0
            for c in vocabulary
        ]
        rows.append([float(profile.total_spent), float(profile.frequency), *counts])

    features = pd.DataFrame(rows, index=index, columns=columns, dtype=float)
    logger.debug(f"Built feature matrix of shape {features.shape}")
    return features


@dataclass(frozen=True)
class NormalizationParams:
    """Per-column minimum and maximum of one batch."""

    data_min: pd.Series
    data_max: pd.Series

    @property
    def constant_columns(self) -> list[str]:
        return [col for col in self.data_min.index if self.data_max[col] == self.data_min[col]]


def normalization_params(features: pd.DataFrame) -> NormalizationParams:
    if features.empty:
        empty = pd.Series(dtype=float, index=features.columns)
        return NormalizationParams(data_min=empty, data_max=empty.copy())
    return NormalizationParams(data_min=features.min(axis=0), data_max=features.max(axis=0))


def normalize(features: pd.DataFrame) -> pd.DataFrame:
    """
    Min-max scale every column into ``[0, 1]`` using this batch's min and max.

    A constant column (max == min) is defined as 0 for every row.
    """
    if features.empty:
        return features.astype(float)
    scaler = MinMaxScaler(clip=True)
    scaled = scaler.fit_transform(features.to_numpy(dtype=float))
    normalized = pd.DataFrame(scaled, index=features.index, columns=features.columns)

    constant = scaler.data_range_ == 0
    if constant.any():
        normalized.loc[:, normalized.columns[constant]] = 0.0
        logger.debug(f"Constant feature columns set to 0: {list(normalized.columns[constant])}")
    return normalized
