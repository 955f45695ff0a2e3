"""Growth-rate calculation and rule-based insight generation"""
import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from insight_dashboard.components.errors import GrowthRateFault
from insight_dashboard.components.models import DataPoint, SummaryStats

logger = logging.getLogger(__name__)

NOT_ENOUGH_DATA = "N/A"
GROWTH_UNAVAILABLE = GrowthRateFault.user_message

# Customer totals above this count as "strong" growth
STRONG_CUSTOMER_BASE = 1500

FALLBACK_INSIGHT = "General performance remains stable"


def _growth_percent(rows: Sequence[DataPoint]) -> float:
    """Raw percentage change between first and last revenue."""
    try:
        first_value = float(rows[0].revenue)
        last_value = float(rows[-1].revenue)
        growth = (last_value - first_value) / first_value * 100
    except (ZeroDivisionError, AttributeError, TypeError, ValueError, IndexError) as e:
        raise GrowthRateFault(f"{type(e).__name__}: {e}") from e
    if not math.isfinite(growth):
        raise GrowthRateFault(f"non-finite growth: {growth}")
    return growth


def calculate_growth_rate(rows: Optional[Sequence[DataPoint]]) -> str:
    """Revenue growth from the first to the last row, as a two-decimal string.

    Returns ``"N/A"`` for fewer than two rows and ``"Unavailable"`` when the
    computation faults (zero first revenue, malformed rows).
    """
    if not rows or len(rows) < 2:
        return NOT_ENOUGH_DATA
    try:
        return f"{_growth_percent(rows):.2f}"
    except GrowthRateFault as e:
        logger.warning("Growth rate calculation error: %s", e.detail)
        return GROWTH_UNAVAILABLE


def _parse_growth(growth_rate_percent: str) -> Optional[float]:
    try:
        return float(growth_rate_percent)
    except (TypeError, ValueError):
        return None


def _format_percent(value: float) -> str:
    """Shortest form of a two-decimal value: 25.00 -> "25", 50.10 -> "50.1"."""
    return f"{value:.2f}".rstrip("0").rstrip(".")


def _revenue_insight(summary: SummaryStats) -> str:
    growth = _parse_growth(summary.growth_rate_percent)
    if growth is None:
        return "Revenue change is unavailable"
    direction = "increased" if growth > 0 else "decreased"
    return f"Revenue {direction} by {_format_percent(abs(growth))}%"


def _customer_insight(summary: SummaryStats) -> str:
    strength = "strong" if summary.total_customers > STRONG_CUSTOMER_BASE else "moderate"
    return f"Customer base shows {strength} growth"


def _product_insight(summary: SummaryStats) -> str:
    return "Product portfolio demonstrates consistent performance"


@dataclass(frozen=True)
class InsightRule:
    """Emits ``build(summary)`` when ``keyword`` occurs in the query"""

    keyword: str
    build: Callable[[SummaryStats], str]

    def matches(self, query_lower: str) -> bool:
        return self.keyword in query_lower


# Order matters: the first matching rule wins
INSIGHT_RULES: List[InsightRule] = [
    InsightRule("revenue", _revenue_insight),
    InsightRule("customer", _customer_insight),
    InsightRule("product", _product_insight),
]


class InsightGenerator:
    """Picks a single insight sentence for a query via ordered rule matching"""

    def __init__(self, rules: Optional[List[InsightRule]] = None):
        self.rules = list(rules) if rules is not None else list(INSIGHT_RULES)

    def generate_insight(self, user_query: str, summary: SummaryStats) -> str:
        query_lower = (user_query or "").lower()
        for rule in self.rules:
            if rule.matches(query_lower):
                logger.debug("Insight rule matched: keyword=%s", rule.keyword)
                return rule.build(summary)
        return FALLBACK_INSIGHT
