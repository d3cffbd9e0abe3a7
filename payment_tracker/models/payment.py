"""
Core Data Models for Payment Tracker

These models define the schemas for everything read from and written to the
payments document. They are designed to:
1. Normalize legacy currency codes at the ingestion boundary
2. Keep the persisted camelCase JSON shape while exposing snake_case attributes
3. Be serializable back to exactly the document shape we loaded

DESIGN DECISION: PaymentRecord is a closed schema. Fields the UI does not know
about are dropped on load, but the surrounding document keeps unknown keys so
a round trip does not destroy data written by other tools.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Currency(str, Enum):
    """
    Supported currencies.

    Rates are anchored on TRY: a rate table holds how many lira one unit of
    each currency is worth.
    """
    TRY = "TRY"
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"


# Legacy codes found in older documents
CURRENCY_ALIASES: dict[str, Currency] = {
    "TL": Currency.TRY,
}

ANCHOR_CURRENCY = Currency.TRY


class InvoiceStatus(str, Enum):
    """Whether an invoice has been issued for the payment."""
    INVOICED = "FATURALI"
    NOT_INVOICED = "FATURASIZ"

    @property
    def label(self) -> str:
        return "invoiced" if self is InvoiceStatus.INVOICED else "not invoiced"


def normalize_currency(value: Any) -> Currency:
    """
    Map a currency code (or legacy alias) to its canonical Currency.

    This is the ONLY place aliases are resolved. Everything that compares or
    aggregates currencies goes through here first.
    """
    if isinstance(value, Currency):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Currency must be a string code, got {value!r}")

    code = value.strip().upper()
    if code in CURRENCY_ALIASES:
        return CURRENCY_ALIASES[code]
    try:
        return Currency(code)
    except ValueError:
        raise ValueError(f"Unsupported currency: {value!r}") from None


def is_known_currency(value: Any) -> bool:
    """Check whether a code normalizes to a supported currency."""
    try:
        normalize_currency(value)
    except ValueError:
        return False
    return True


def normalize_rate_table(rates: Mapping[Any, Any]) -> dict[Currency, float]:
    """Normalize the keys of a rate table, dropping currencies we don't track."""
    return {
        normalize_currency(code): float(rate)
        for code, rate in rates.items()
        if is_known_currency(code)
    }


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _zero_if_missing(value: Any) -> Any:
    return 0.0 if value is None or value == "" else value


# =============================================================================
# PAYMENT RECORD
# =============================================================================

class PaymentRecord(BaseModel):
    """
    A single payment line: what is owed to a company for an item, how much
    has been paid, and what is left.

    NOTE: total_debt and remaining are computed by whoever writes the record.
    They are stored as given and never re-derived on read, so a caller that
    changes previous_debt/current_debt/paid without recomputing them gets a
    stale (but accepted) record.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    id: int = Field(
        ...,
        ge=1,
        description="Unique, immutable record ID"
    )

    item_name: str = Field(default="", alias="itemName")
    company_name: str = Field(default="", alias="companyName")
    service_type: str = Field(default="", alias="serviceType")
    project_name: str = Field(default="", alias="projectName")

    currency: Currency = Field(
        default=Currency.TRY,
        description="Currency all amounts on this record are expressed in"
    )

    # Amounts (absent means zero)
    previous_debt: float = Field(default=0.0, ge=0, alias="previousDebt")
    current_debt: float = Field(default=0.0, ge=0, alias="currentDebt")
    paid: float = Field(default=0.0, ge=0)

    # Derived at write time
    total_debt: float = Field(default=0.0, alias="totalDebt")
    remaining: float = Field(
        default=0.0,
        description="total_debt - paid; negative means overpaid"
    )

    invoice_status: InvoiceStatus = Field(
        default=InvoiceStatus.NOT_INVOICED,
        alias="invoiceStatus"
    )

    # Document metadata
    document_uploaded: bool = Field(default=False, alias="documentUploaded")
    document_url: str = Field(default="", alias="documentURL")

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency_code(cls, v: Any) -> Currency:
        return normalize_currency(v)

    @field_validator(
        "previous_debt", "current_debt", "paid", "total_debt", "remaining",
        mode="before",
    )
    @classmethod
    def default_missing_amounts(cls, v: Any) -> Any:
        return _zero_if_missing(v)

    def to_document_dict(self) -> dict:
        """Serialize to the camelCase shape used in the payments document."""
        return self.model_dump(mode="json", by_alias=True)


class PaymentFields(BaseModel):
    """
    Input for creating or updating a payment.

    Every field is optional. For updates, only fields that were explicitly set
    are merged into the stored record (shallow overwrite).
    """
    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    item_name: Optional[str] = Field(default=None, alias="itemName")
    company_name: Optional[str] = Field(default=None, alias="companyName")
    service_type: Optional[str] = Field(default=None, alias="serviceType")
    project_name: Optional[str] = Field(default=None, alias="projectName")
    currency: Optional[Currency] = None
    previous_debt: Optional[float] = Field(default=None, ge=0, alias="previousDebt")
    current_debt: Optional[float] = Field(default=None, ge=0, alias="currentDebt")
    paid: Optional[float] = Field(default=None, ge=0)
    total_debt: Optional[float] = Field(default=None, alias="totalDebt")
    remaining: Optional[float] = None
    invoice_status: Optional[InvoiceStatus] = Field(default=None, alias="invoiceStatus")
    document_uploaded: Optional[bool] = Field(default=None, alias="documentUploaded")
    document_url: Optional[str] = Field(default=None, alias="documentURL")

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency_code(cls, v: Any) -> Optional[Currency]:
        if v is None:
            return None
        return normalize_currency(v)

    def to_update_dict(self) -> dict[str, Any]:
        """Fields explicitly provided by the caller, keyed by attribute name."""
        return self.model_dump(exclude_unset=True)

    def with_derived_totals(self) -> "PaymentFields":
        """
        Return a copy with total_debt and remaining computed from the amounts.

        total_debt = previous_debt + current_debt
        remaining  = total_debt - paid
        """
        previous_debt = self.previous_debt or 0.0
        current_debt = self.current_debt or 0.0
        paid = self.paid or 0.0
        total_debt = previous_debt + current_debt

        data = self.to_update_dict()
        data.update(
            previous_debt=previous_debt,
            current_debt=current_debt,
            paid=paid,
            total_debt=total_debt,
            remaining=total_debt - paid,
        )
        return PaymentFields(**data)


# =============================================================================
# FILTERING
# =============================================================================

class FilterCriteria(BaseModel):
    """
    Dashboard filter. Every dimension is optional; empty means no constraint.

    search is matched as typed, surrounding spaces included.
    """
    model_config = ConfigDict(populate_by_name=True)

    project: Optional[str] = None
    currency: Optional[Currency] = None
    invoice_status: Optional[InvoiceStatus] = Field(default=None, alias="invoiceStatus")
    search: Optional[str] = None

    @field_validator("project", "invoice_status", mode="before")
    @classmethod
    def strip_selection(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip() or None
        return v

    @field_validator("search", mode="before")
    @classmethod
    def blank_search_is_unset(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency_code(cls, v: Any) -> Optional[Currency]:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return normalize_currency(v)


# =============================================================================
# SUMMARY
# =============================================================================

class CurrencyTotals(BaseModel):
    """Sums of the five amount fields."""
    model_config = ConfigDict(populate_by_name=True)

    previous_debt: float = Field(default=0.0, alias="previousDebt")
    current_debt: float = Field(default=0.0, alias="currentDebt")
    total_debt: float = Field(default=0.0, alias="totalDebt")
    paid: float = 0.0
    remaining: float = 0.0


class Summary(BaseModel):
    """
    Aggregated view of all payments.

    by_currency holds native sums per currency. total_in_reporting_currency
    converts every record to the reporting currency before summing.
    """
    model_config = ConfigDict(populate_by_name=True)

    by_currency: dict[Currency, CurrencyTotals] = Field(
        default_factory=dict,
        alias="byCurrency"
    )
    total_in_reporting_currency: CurrencyTotals = Field(
        default_factory=CurrencyTotals,
        alias="totalInReportingCurrency"
    )
    reporting_currency: Currency = Field(
        default=Currency.EUR,
        alias="reportingCurrency"
    )

    @field_validator("by_currency", mode="before")
    @classmethod
    def normalize_keys(cls, v: Any) -> Any:
        if isinstance(v, Mapping):
            return {
                normalize_currency(code): totals
                for code, totals in v.items()
                if is_known_currency(code)
            }
        return v


# =============================================================================
# PERSISTED DOCUMENT
# =============================================================================

class DocumentMetadata(BaseModel):
    """Rate table and freshness stamp written alongside the payments."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    currency: dict[Currency, float] = Field(
        default_factory=dict,
        description="Rate table used for the stored summary (TRY per unit)"
    )
    last_update: Optional[datetime] = Field(default=None, alias="lastUpdate")

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_rates(cls, v: Any) -> Any:
        if isinstance(v, Mapping):
            return normalize_rate_table(v)
        return v


class PaymentsDocument(BaseModel):
    """
    The whole JSON blob, read and written as one unit:
    { payments: [...], summary: {...}, metadata: { currency, lastUpdate } }
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    payments: list[PaymentRecord] = Field(default_factory=list)
    summary: Optional[Summary] = None
    metadata: DocumentMetadata = Field(default_factory=DocumentMetadata)

    def to_document_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# FORM VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in a submitted payment form."""

    field: str = Field(
        ...,
        description="Form field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_number', 'negative')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning)$",
        description="Issue severity"
    )


class FormValidationResult(BaseModel):
    """Result of validating a payment form."""

    payment_fields: Optional[PaymentFields] = Field(
        default=None,
        description="Parsed fields with derived totals, present only when valid"
    )
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.payment_fields is not None and not self.has_errors

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_messages(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "error"]
