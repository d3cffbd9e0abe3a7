"""
Data Models Package

This package contains all Pydantic models used in the Payment Tracker.
Everything read from or written to the payments document conforms to these schemas.
"""

from payment_tracker.models.payment import (
    ANCHOR_CURRENCY,
    CURRENCY_ALIASES,
    Currency,
    CurrencyTotals,
    DocumentMetadata,
    FilterCriteria,
    FormValidationResult,
    InvoiceStatus,
    PaymentFields,
    PaymentRecord,
    PaymentsDocument,
    Summary,
    ValidationIssue,
    is_known_currency,
    normalize_currency,
    normalize_rate_table,
    utc_now,
)
from payment_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Payment models
    "ANCHOR_CURRENCY",
    "CURRENCY_ALIASES",
    "Currency",
    "CurrencyTotals",
    "DocumentMetadata",
    "FilterCriteria",
    "FormValidationResult",
    "InvoiceStatus",
    "PaymentFields",
    "PaymentRecord",
    "PaymentsDocument",
    "Summary",
    "ValidationIssue",
    "is_known_currency",
    "normalize_currency",
    "normalize_rate_table",
    "utc_now",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
