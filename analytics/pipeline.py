"""
End-to-end analysis of one transaction batch: profiles, segments, summary
statistics and a trained recommendation session.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from config.config import AnalysisConfig
from models.customer import CustomerProfile, SegmentAssignment
from models.enums import AnalysisStatus
from models.product import ProductInfo, Recommendation
from models.summary import CustomerInsight, SummaryReport
from models.transaction import Transaction
from utils.logger import get_logger

from .aggregation import (
    TransactionLike,
    aggregate,
    build_product_catalog,
    parse_transactions,
    purchase_pairs,
)
from .exceptions import AnalyticsError
from .recommendation import RecommendationSession
from .segmentation import segment_customers
from .summary import customer_history, summarize

logger = get_logger(__name__)


@dataclass
class AnalysisResult:
    """
    Everything presentation code needs from one run.

    ``status`` separates "no data yet" (``NO_DATA``) from "processing failed"
    (``FAILED``); a failed run carries empty outputs plus ``error_kind`` and
    ``error_message``.
    """

    status: AnalysisStatus
    transactions: list[Transaction] = field(default_factory=list)
    profiles: dict[int, CustomerProfile] = field(default_factory=dict)
    segments: list[SegmentAssignment] = field(default_factory=list)
    summary: SummaryReport = field(default_factory=SummaryReport)
    product_catalog: dict[int, ProductInfo] = field(default_factory=dict)
    session: RecommendationSession | None = None
    error_kind: str | None = None
    error_message: str | None = None

    @classmethod
    def failed(cls, error: AnalyticsError) -> "AnalysisResult":
        return cls(status=AnalysisStatus.FAILED, error_kind=error.kind, error_message=str(error))

    @property
    def ok(self) -> bool:
        return self.status == AnalysisStatus.OK

    def recommend(self, customer_id: int, k: int | None = None) -> list[Recommendation]:
        """
        Ranked recommendations for one customer; ``[]`` when no session was built.

        Raises:
            OutOfRangeError: If the customer is outside the trained universe.
        """
        if self.session is None:
            return []
        return self.session.recommend(customer_id, k, self.product_catalog)

    def customer_insight(self, customer_id: int, k: int | None = None) -> CustomerInsight:
        """
        Purchase history and recommendations for one customer.

        Raises:
            OutOfRangeError: If the customer is outside the trained universe.
        """
        return CustomerInsight(
            customer_id=customer_id,
            history=customer_history(self.transactions, customer_id),
            recommendations=self.recommend(customer_id, k),
        )


def run_analysis(
    transactions: Iterable[TransactionLike],
    config: AnalysisConfig | None = None,
    train_recommender: bool = True,
) -> AnalysisResult:
    """
    Analyze a complete batch.

    Typed analytics errors are converted into a ``FAILED`` result rather than
    raised; any other exception propagates.
    """
    config = config or AnalysisConfig()
    try:
        records = parse_transactions(transactions)
        if not records:
            logger.info("No transactions supplied, returning empty analysis")
            return AnalysisResult(status=AnalysisStatus.NO_DATA)

        profiles = aggregate(records)
        segments = segment_customers(records, config.segmentation, profiles=profiles)
        summary = summarize(records, segments, config.summary)
        catalog = build_product_catalog(records)
        session = None
        if train_recommender:
            session = RecommendationSession.fit(
                purchase_pairs(records), config.recommendation, config.ranking
            )
    except AnalyticsError as e:
        logger.error(f"Analysis failed with {e.kind}: {e}")
        return AnalysisResult.failed(e)

    logger.info(f"Analysis complete: {len(profiles)} customers, {len(segments)} segment assignments")
    return AnalysisResult(
        status=AnalysisStatus.OK,
        transactions=records,
        profiles=profiles,
        segments=segments,
        summary=summary,
        product_catalog=catalog,
        session=session,
    )
