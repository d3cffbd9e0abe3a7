"""
Payment Filtering

A stable filter over the loaded payments: relative order is preserved and
every non-empty criterion narrows the result (AND across dimensions).
"""

from typing import Iterable, Optional, Union

from payment_tracker.models.payment import FilterCriteria, PaymentRecord


def _contains(haystack: str, needle: str) -> bool:
    return bool(haystack) and needle in haystack.lower()


def matches(payment: PaymentRecord, criteria: FilterCriteria) -> bool:
    """Check a single payment against the criteria."""
    if criteria.project and payment.project_name != criteria.project:
        return False
    if criteria.currency and payment.currency != criteria.currency:
        return False
    if criteria.invoice_status and payment.invoice_status != criteria.invoice_status:
        return False
    if criteria.search:
        needle = criteria.search.lower()
        if not (
            _contains(payment.item_name, needle)
            or _contains(payment.company_name, needle)
        ):
            return False
    return True


def filter_payments(
    payments: Iterable[PaymentRecord],
    criteria: Optional[Union[FilterCriteria, dict]] = None,
) -> list[PaymentRecord]:
    """
    Return the payments matching the criteria, in their original order.

    - project, currency, invoice_status: exact match
    - search: case-insensitive substring of item name OR company name

    Empty or missing criteria return every payment.
    """
    if criteria is None:
        criteria = FilterCriteria()
    elif isinstance(criteria, dict):
        criteria = FilterCriteria.model_validate(criteria)

    return [payment for payment in payments if matches(payment, criteria)]


def distinct_projects(payments: Iterable[PaymentRecord]) -> list[str]:
    """Project names in first-seen order, for building the project filter."""
    seen: dict[str, None] = {}
    for payment in payments:
        if payment.project_name:
            seen.setdefault(payment.project_name, None)
    return list(seen)
