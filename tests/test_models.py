"""
Tests for Payment Tracker

Test strategy:
1. Unit tests for individual components (models, conversion, queries)
2. Integration tests for the record store and dashboard (with in-memory stores)
3. No real API calls in tests (use fakes)
"""

import pytest
from datetime import datetime, timezone
from uuid import uuid4

from pydantic import ValidationError

from payment_tracker.models.payment import (
    Currency,
    DocumentMetadata,
    FilterCriteria,
    FormValidationResult,
    InvoiceStatus,
    PaymentFields,
    PaymentRecord,
    PaymentsDocument,
    Summary,
    ValidationIssue,
    normalize_currency,
    normalize_rate_table,
)
from payment_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestCurrency:
    """Tests for currency codes and normalization."""

    def test_canonical_codes(self):
        """Test canonical codes map to themselves."""
        for code in ("TRY", "USD", "EUR", "GBP"):
            assert normalize_currency(code) == Currency(code)

    def test_legacy_alias(self):
        """Test the legacy TL code is treated as TRY."""
        assert normalize_currency("TL") == Currency.TRY
        assert normalize_currency(" tl ") == Currency.TRY

    def test_unknown_currency_rejected(self):
        """Test unsupported codes raise."""
        with pytest.raises(ValueError):
            normalize_currency("JPY")

    def test_rate_table_normalization(self):
        """Test rate tables are re-keyed and unknown codes dropped."""
        table = normalize_rate_table({"TL": 1, "EUR": "50.5", "JPY": 0.3})
        assert table == {Currency.TRY: 1.0, Currency.EUR: 50.5}


class TestPaymentRecord:
    """Tests for the persisted payment shape."""

    def test_parse_camel_case(self):
        """Test a document record parses into snake_case attributes."""
        record = PaymentRecord.model_validate({
            "id": 3,
            "itemName": "Hosting",
            "companyName": "Acme",
            "currency": "TL",
            "currentDebt": 150,
            "totalDebt": 150,
            "remaining": 150,
            "invoiceStatus": "FATURALI",
        })
        assert record.item_name == "Hosting"
        assert record.currency == Currency.TRY
        assert record.invoice_status == InvoiceStatus.INVOICED
        assert record.paid == 0.0

    def test_missing_amounts_default_to_zero(self):
        """Test null and empty amounts are zero."""
        record = PaymentRecord.model_validate({"id": 1, "paid": None, "previousDebt": ""})
        assert record.paid == 0.0
        assert record.previous_debt == 0.0

    def test_negative_amount_rejected(self):
        """Test amounts must be non-negative."""
        with pytest.raises(ValidationError):
            PaymentRecord(id=1, paid=-5)

    def test_negative_remaining_allowed(self):
        """Test an overpaid record (negative remaining) is valid."""
        record = PaymentRecord(id=1, total_debt=100, paid=120, remaining=-20)
        assert record.remaining == -20

    def test_serializes_to_document_shape(self):
        """Test serialization uses the camelCase document keys."""
        data = PaymentRecord(id=1, item_name="Hosting").to_document_dict()
        assert data["itemName"] == "Hosting"
        assert data["documentURL"] == ""
        assert data["currency"] == "TRY"
        assert data["invoiceStatus"] == "FATURASIZ"

    def test_unknown_keys_dropped(self):
        """Test unknown record keys are ignored."""
        record = PaymentRecord.model_validate({"id": 1, "legacyField": "x"})
        assert "legacyField" not in record.to_document_dict()


class TestPaymentFields:
    """Tests for create/update input."""

    def test_only_set_fields_in_update_dict(self):
        """Test that unset fields are not part of an update."""
        fields = PaymentFields(paid=50)
        assert fields.to_update_dict() == {"paid": 50.0}

    def test_accepts_aliases(self):
        """Test camelCase input is accepted."""
        fields = PaymentFields.model_validate({"itemName": "Hosting", "currency": "TL"})
        assert fields.item_name == "Hosting"
        assert fields.currency == Currency.TRY

    def test_with_derived_totals(self):
        """Test total_debt and remaining are computed."""
        fields = PaymentFields(previous_debt=50, current_debt=100, paid=30).with_derived_totals()
        assert fields.total_debt == 150
        assert fields.remaining == 120

    def test_derived_totals_treat_missing_as_zero(self):
        """Test missing amounts count as zero when deriving totals."""
        fields = PaymentFields(item_name="X", current_debt=10).with_derived_totals()
        assert fields.total_debt == 10
        assert fields.remaining == 10
        assert fields.item_name == "X"


class TestFilterCriteria:
    """Tests for the dashboard filter model."""

    def test_empty_strings_mean_no_constraint(self):
        """Test blank UI inputs are treated as unset."""
        criteria = FilterCriteria(project="", currency="", search="  ", invoice_status="")
        assert criteria.project is None
        assert criteria.currency is None
        assert criteria.search is None
        assert criteria.invoice_status is None

    def test_currency_normalized(self):
        """Test the legacy code is accepted in filters."""
        assert FilterCriteria(currency="TL").currency == Currency.TRY

    def test_search_not_trimmed(self):
        """Test search keeps its spaces while selections are trimmed."""
        criteria = FilterCriteria(project=" Alpha ", search=" corp", invoice_status=" FATURALI ")
        assert criteria.project == "Alpha"
        assert criteria.search == " corp"
        assert criteria.invoice_status == InvoiceStatus.INVOICED


class TestPaymentsDocument:
    """Tests for the whole document."""

    def test_keeps_unknown_top_level_keys(self):
        """Test keys written by other tools survive a round trip."""
        document = PaymentsDocument.model_validate({
            "payments": [],
            "notes": "keep me",
            "metadata": {"currency": {"TL": 1}, "lastUpdate": None, "source": "manual"},
        })
        data = document.to_document_dict()
        assert data["notes"] == "keep me"
        assert data["metadata"]["source"] == "manual"
        assert data["metadata"]["currency"] == {"TRY": 1.0}

    def test_empty_summary_is_accepted(self):
        """Test an empty stored summary parses."""
        document = PaymentsDocument.model_validate({"payments": [], "summary": {}})
        assert isinstance(document.summary, Summary)

    def test_invalid_payments_rejected(self):
        """Test a malformed payments list is a validation error."""
        with pytest.raises(ValidationError):
            PaymentsDocument.model_validate({"payments": "nope"})

    def test_metadata_timestamp(self):
        """Test lastUpdate round trips as ISO text."""
        stamp = datetime(2026, 1, 15, 9, 0, tzinfo=timezone.utc)
        data = PaymentsDocument(metadata=DocumentMetadata(last_update=stamp)).to_document_dict()
        assert data["metadata"]["lastUpdate"].startswith("2026-01-15T09:00:00")


class TestFormValidationResult:
    """Tests for FormValidationResult."""

    def test_valid_result(self):
        """Test a result with fields and no errors."""
        result = FormValidationResult(payment_fields=PaymentFields(item_name="X"))
        assert result.is_valid
        assert not result.has_errors

    def test_warning_only_is_valid(self):
        """Test warnings don't make a result invalid."""
        result = FormValidationResult(
            payment_fields=PaymentFields(item_name="X"),
            issues=[ValidationIssue(
                field="companyName",
                issue_type="missing",
                message="Company name is empty",
                severity="warning",
            )],
        )
        assert result.is_valid
        assert result.error_messages == []

    def test_error_result(self):
        """Test an error-level issue makes the result invalid."""
        result = FormValidationResult(issues=[ValidationIssue(
            field="itemName",
            issue_type="missing",
            message="Item name is required",
            severity="error",
        )])
        assert not result.is_valid
        assert result.error_messages == ["Item name is required"]

    def test_severity_pattern(self):
        """Test severity must be error or warning."""
        with pytest.raises(ValidationError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="fatal")


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.PAYMENT_CREATED,
            description="Payment created",
        )
        assert event.event_id is not None
        assert event.timestamp is not None
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test AuditEvent conversion to log dict."""
        correlation_id = uuid4()
        event = AuditEventBuilder.payment_created(7, "Hosting", correlation_id)
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "payment_created"
        assert log_dict["entity_id"] == "7"
        assert log_dict["correlation_id"] == str(correlation_id)
        assert log_dict["is_user_action"] is True

    def test_save_failed_is_error(self):
        """Test save failures are logged at error severity."""
        event = AuditEventBuilder.save_failed("payments.json", "conflict")
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "conflict"

    def test_deleted_absent_payment(self):
        """Test the delete event records whether anything was removed."""
        event = AuditEventBuilder.payment_deleted(9, existed=False)
        assert event.details == {"existed": False}
        assert "not found" in event.description
