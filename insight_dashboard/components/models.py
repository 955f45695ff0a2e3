"""Result and history records shared by the dashboard components"""
from typing import Tuple, Union
from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class DataPoint:
    """One row of the analytics dataset"""

    label: str
    revenue: float
    customer_count: int
    product_count: int


@dataclass(frozen=True)
class SummaryStats:
    """Aggregates derived from a dataset.

    ``growth_rate_percent`` is a two-decimal string such as ``"51.11"``, or
    one of the sentinels ``"N/A"`` / ``"Unavailable"``.
    """

    total_revenue: float
    total_customers: int
    growth_rate_percent: str


@dataclass(frozen=True)
class AnalyticsResult:
    """Rows, summary and insight sentences produced for a query"""

    rows: Tuple[DataPoint, ...]
    summary: SummaryStats
    insights: Tuple[str, ...] = ()


@dataclass(frozen=True)
class QueryRecord:
    """A successfully answered query, as kept in the session history"""

    query_text: str
    result: AnalyticsResult
    submitted_at: datetime = field(default_factory=datetime.now)

    def format_timestamp(self) -> str:
        """Locale-style timestamp, e.g. ``10/19/2026, 2:05:09 PM``."""
        ts = self.submitted_at
        hour = ts.hour % 12 or 12
        suffix = "AM" if ts.hour < 12 else "PM"
        return f"{ts.month}/{ts.day}/{ts.year}, {hour}:{ts:%M:%S} {suffix}"


# A suggestion is either a free-text phrase or a (command token, description) pair
CommandSuggestion = Tuple[str, str]
SuggestionCandidate = Union[str, CommandSuggestion]
