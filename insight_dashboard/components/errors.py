"""Categorized errors raised while answering dashboard queries.

Every error carries a short machine-readable ``category`` plus the
``user_message`` shown in the dashboard.  Callers catch these at the
boundary of the operation that produced them and turn them into session
state (``last_error``) or a sentinel value, so none of them ever reaches
the UI as an unhandled exception.
"""


class DashboardError(Exception):
    """Base class for recoverable dashboard errors."""

    category = "unknown"
    user_message = "Something went wrong. Please try again."

    def __init__(self, detail: str = ""):
        super().__init__(detail or self.user_message)
        self.detail = detail


class EmptyQueryError(DashboardError):
    """Submit was called with blank or whitespace-only query text."""

    category = "empty_query"
    user_message = "Query cannot be empty"


class SynthesisFault(DashboardError):
    """Unexpected fault while computing mock results."""

    category = "synthesis_fault"
    user_message = "Unable to process query. Please try again."


class GrowthRateFault(DashboardError):
    """Division or format fault inside the growth-rate computation.

    Never surfaced to the user: the growth rate degrades to ``"Unavailable"``.
    """

    category = "growth_rate_fault"
    user_message = "Unavailable"
