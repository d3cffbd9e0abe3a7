"""Filtering and aggregation over loaded payments."""

from payment_tracker.queries.filters import distinct_projects, filter_payments, matches
from payment_tracker.queries.summary import AMOUNT_FIELDS, summarize

__all__ = [
    "AMOUNT_FIELDS",
    "distinct_projects",
    "filter_payments",
    "matches",
    "summarize",
]
