"""
Centralized Enum definitions for the project.
"""

from enum import Enum


class LabelPolicy(str, Enum):
    """How cluster indices are mapped onto the ordered segment label set"""

    POSITIONAL = "positional"  # cluster i -> labels[i]
    SPEND_RANK = "spend_rank"  # i-th highest mean total spend -> labels[i]


class AnalysisStatus(str, Enum):
    """Outcome of a full analysis run"""

    OK = "ok"
    NO_DATA = "no_data"  # Empty batch, nothing to analyze yet
    FAILED = "failed"  # A typed error aborted the run


class SpendTier(str, Enum):
    """Rule-based spending tiers shown in the summary report"""

    PREMIUM = "premium"
    REGULAR = "regular"
    OCCASIONAL = "occasional"
