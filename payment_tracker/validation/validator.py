"""
Payment Form Validation

Turns the raw add/edit form into PaymentFields ready for the record store.

IMPORTANT: The record store does not recompute totalDebt/remaining on update.
This is the place they get computed: every successfully parsed form carries
  totalDebt = previousDebt + currentDebt
  remaining = totalDebt - paid

Validation NEVER silently fixes bad input. Problems are reported as issues;
blank amounts are the only thing defaulted (to zero).
"""

import math
from typing import Any, Mapping, Optional

from payment_tracker.models.payment import (
    FormValidationResult,
    InvoiceStatus,
    PaymentFields,
    ValidationIssue,
    normalize_currency,
)


# Form names (camelCase, as posted by the UI) → PaymentFields attributes
TEXT_FIELDS = {
    "itemName": "item_name",
    "companyName": "company_name",
    "serviceType": "service_type",
    "projectName": "project_name",
}
AMOUNT_FIELDS = {
    "previousDebt": "previous_debt",
    "currentDebt": "current_debt",
    "paid": "paid",
}


def _lookup(form: Mapping[str, Any], name: str, attribute: str) -> Any:
    if name in form:
        return form[name]
    return form.get(attribute)


def parse_amount(value: Any) -> Optional[float]:
    """
    Parse a form amount. Blank means zero; returns None if not a finite number.

    A lone comma is accepted as the decimal separator ("12,5").
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return 0.0
        if "," in text and "." not in text and text.count(",") == 1:
            text = text.replace(",", ".")
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


class PaymentFormValidator:
    """Validates a submitted payment form."""

    def parse(self, form: Mapping[str, Any]) -> FormValidationResult:
        """
        Validate a form and build PaymentFields with derived totals.

        Returns a result with payment_fields=None if any error-level issue was found.
        """
        issues: list[ValidationIssue] = []
        data: dict[str, Any] = {}

        for name, attribute in TEXT_FIELDS.items():
            value = _lookup(form, name, attribute)
            data[attribute] = str(value).strip() if value is not None else ""

        if not data["item_name"]:
            issues.append(ValidationIssue(
                field="itemName",
                issue_type="missing",
                message="Item name is required",
                severity="error",
            ))
        if not data["company_name"]:
            issues.append(ValidationIssue(
                field="companyName",
                issue_type="missing",
                message="Company name is empty",
                severity="warning",
            ))

        for name, attribute in AMOUNT_FIELDS.items():
            amount = parse_amount(_lookup(form, name, attribute))
            if amount is None:
                issues.append(ValidationIssue(
                    field=name,
                    issue_type="invalid_number",
                    message=f"{name} must be a number",
                    severity="error",
                ))
            elif amount < 0:
                issues.append(ValidationIssue(
                    field=name,
                    issue_type="negative",
                    message=f"{name} cannot be negative",
                    severity="error",
                ))
            else:
                data[attribute] = amount

        currency = _lookup(form, "currency", "currency")
        if currency is None or not str(currency).strip():
            issues.append(ValidationIssue(
                field="currency",
                issue_type="missing",
                message="Currency is required",
                severity="error",
            ))
        else:
            try:
                data["currency"] = normalize_currency(str(currency))
            except ValueError as e:
                issues.append(ValidationIssue(
                    field="currency",
                    issue_type="invalid_value",
                    message=str(e),
                    severity="error",
                ))

        status = _lookup(form, "invoiceStatus", "invoice_status")
        if status is None or not str(status).strip():
            data["invoice_status"] = InvoiceStatus.NOT_INVOICED
        else:
            try:
                data["invoice_status"] = InvoiceStatus(str(status).strip().upper())
            except ValueError:
                issues.append(ValidationIssue(
                    field="invoiceStatus",
                    issue_type="invalid_value",
                    message=f"Unknown invoice status: {status}",
                    severity="error",
                ))

        if any(issue.severity == "error" for issue in issues):
            return FormValidationResult(issues=issues)

        fields = PaymentFields(**data).with_derived_totals()
        return FormValidationResult(payment_fields=fields, issues=issues)
