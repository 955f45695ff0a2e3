"""Mock result synthesis for dashboard queries.

There is no data backend: every query is answered from the same quarterly
dataset so results are reproducible.  Only the insight sentence depends on
the query text.
"""
import logging
from typing import Optional, Sequence, Tuple

from insight_dashboard.components.errors import SynthesisFault
from insight_dashboard.components.insights import InsightGenerator, calculate_growth_rate
from insight_dashboard.components.models import AnalyticsResult, DataPoint, SummaryStats

logger = logging.getLogger(__name__)

BASE_DATA: Tuple[DataPoint, ...] = (
    DataPoint("Q1 2023", revenue=450000, customer_count=1200, product_count=50),
    DataPoint("Q2 2023", revenue=520000, customer_count=1350, product_count=55),
    DataPoint("Q3 2023", revenue=610000, customer_count=1500, product_count=60),
    DataPoint("Q4 2023", revenue=680000, customer_count=1650, product_count=65),
)


class MockResultSynthesizer:
    """Builds an AnalyticsResult for a query from a fixed dataset"""

    def __init__(
        self,
        base_rows: Optional[Sequence[DataPoint]] = None,
        insight_generator: Optional[InsightGenerator] = None,
    ):
        self.base_rows = tuple(base_rows) if base_rows is not None else BASE_DATA
        self.insight_generator = insight_generator or InsightGenerator()

    def summarize(self, rows: Sequence[DataPoint]) -> SummaryStats:
        return SummaryStats(
            total_revenue=sum(row.revenue for row in rows),
            total_customers=sum(row.customer_count for row in rows),
            growth_rate_percent=calculate_growth_rate(rows),
        )

    def synthesize(self, user_query: str) -> AnalyticsResult:
        """Compute rows, summary and insight for ``user_query``.

        Raises SynthesisFault on any unexpected internal error.
        """
        try:
            rows = self.base_rows
            summary = self.summarize(rows)
            insight = self.insight_generator.generate_insight(user_query, summary)
        except Exception as e:
            raise SynthesisFault(f"{type(e).__name__}: {e}") from e

        logger.debug(
            "Synthesized result: rows=%d total_revenue=%s growth=%s",
            len(rows), summary.total_revenue, summary.growth_rate_percent,
        )
        return AnalyticsResult(rows=rows, summary=summary, insights=(insight,))
