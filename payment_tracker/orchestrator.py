"""
Main Orchestrator for Payment Tracker

This module ties together all the components and defines the flows the
dashboard needs:
1. Start-up (rates → load payments, remote or local)
2. View (filter + fresh summary)
3. Form submission (validate → create or update → save)
4. Delete and CSV export

DESIGN DECISION: The orchestrator is the only place that knows the UI's
vocabulary (forms, views). The record store stays a plain owned object, and
every user-triggered mutation goes through here one at a time.
"""

from datetime import date
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, Field

from payment_tracker.audit import AuditLogger, create_correlation_id
from payment_tracker.auth import Authenticator
from payment_tracker.config import Settings, get_settings
from payment_tracker.currency import FrankfurterRateSource, RateProvider
from payment_tracker.export import export_filename, export_payments_csv
from payment_tracker.ledger import DataSource, RecordStore
from payment_tracker.models.payment import (
    Currency,
    FilterCriteria,
    FormValidationResult,
    InvoiceStatus,
    PaymentRecord,
    Summary,
)
from payment_tracker.queries import distinct_projects
from payment_tracker.services.storage import (
    GitHubContentsClient,
    GitHubContentsStore,
    LocalFileSource,
)
from payment_tracker.validation import PaymentFormValidator


class DashboardView(BaseModel):
    """Everything the dashboard renders for one set of filters."""

    payments: list[PaymentRecord] = Field(default_factory=list)
    summary: Summary
    uninvoiced_count: int = 0
    projects: list[str] = Field(default_factory=list)
    rates: dict[Currency, float] = Field(default_factory=dict)
    source: Optional[DataSource] = None


class FormSubmission(BaseModel):
    """Outcome of submitting the add/edit form."""

    validation: FormValidationResult
    payment: Optional[PaymentRecord] = None

    @property
    def saved(self) -> bool:
        return self.payment is not None


class PaymentDashboard:
    """
    Orchestrates the dashboard flows over one record store.

    Save failures (SaveFailedError) are NOT caught here; the UI shows them.
    """

    def __init__(
        self,
        store: RecordStore,
        rate_provider: RateProvider,
        validator: Optional[PaymentFormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._rate_provider = rate_provider
        self._validator = validator or PaymentFormValidator()
        self._audit_logger = audit_logger

    @property
    def store(self) -> RecordStore:
        return self._store

    async def start(self) -> dict[Currency, float]:
        """
        Warm the rate cache and load the payments.

        Returns the rate table for the currency ticker.

        Raises:
            DataUnavailableError: If neither remote nor local data can be read
        """
        rates = await self._rate_provider.get_rates()
        await self._store.load()
        return rates

    async def view(
        self,
        criteria: Optional[Union[FilterCriteria, dict]] = None,
    ) -> DashboardView:
        """Filtered payments plus a summary of ALL payments."""
        payments = self._store.payments
        rates = await self._rate_provider.get_rates()
        return DashboardView(
            payments=self._store.filter(criteria),
            summary=await self._store.summary(),
            uninvoiced_count=sum(
                1 for p in payments if p.invoice_status == InvoiceStatus.NOT_INVOICED
            ),
            projects=distinct_projects(payments),
            rates=rates,
            source=self._store.source,
        )

    async def submit_form(
        self,
        form: Mapping[str, Any],
        payment_id: Optional[int] = None,
    ) -> FormSubmission:
        """
        Validate a form, then create (no payment_id) or update a payment.

        Invalid forms are returned with their issues and nothing is saved.

        Raises:
            NotFoundError: If payment_id is unknown
            SaveFailedError: If the save is rejected
        """
        validation = self._validator.parse(form)
        if not validation.is_valid:
            return FormSubmission(validation=validation)

        correlation_id = create_correlation_id()
        if payment_id is None:
            payment = await self._store.create(validation.payment_fields, correlation_id)
        else:
            payment = await self._store.update(payment_id, validation.payment_fields, correlation_id)
        return FormSubmission(validation=validation, payment=payment)

    async def remove(self, payment_id: int) -> None:
        """
        Delete a payment.

        Raises:
            SaveFailedError: If the save is rejected
        """
        await self._store.delete(payment_id, create_correlation_id())

    def build_export(
        self,
        payments: list[PaymentRecord],
        today: Optional[date] = None,
    ) -> tuple[str, str]:
        """
        Render payments as CSV without recording anything.

        Returns:
            (filename, csv_text)
        """
        return export_filename(today or date.today()), export_payments_csv(payments)

    async def record_export(self, filename: str, row_count: int) -> None:
        """Audit a download the user actually took."""
        if self._audit_logger:
            await self._audit_logger.log_export_generated(row_count, filename)

    async def export_csv(
        self,
        criteria: Optional[Union[FilterCriteria, dict]] = None,
        today: Optional[date] = None,
    ) -> tuple[str, str]:
        """
        Export the filtered payments and audit the export.

        Returns:
            (filename, csv_text)
        """
        payments = self._store.filter(criteria)
        filename, csv_text = self.build_export(payments, today)
        await self.record_export(filename, len(payments))
        return filename, csv_text


def create_app_components(
    settings: Optional[Settings] = None,
) -> tuple[PaymentDashboard, Authenticator, AuditLogger]:
    """
    Factory function to create all application components from settings.

    Returns:
        (dashboard, authenticator, audit_logger)
    """
    settings = settings or get_settings()
    github = settings.github
    currency = settings.currency
    app = settings.app

    audit_logger = AuditLogger()

    rate_provider = RateProvider(
        source=FrankfurterRateSource(
            api_url=currency.api_url,
            timeout=app.request_timeout_seconds,
        ),
        cache_duration=currency.cache_duration,
        audit_logger=audit_logger,
    )

    store = RecordStore(
        remote=GitHubContentsStore(
            GitHubContentsClient(settings=github, timeout=app.request_timeout_seconds)
        ),
        local=LocalFileSource(Path(app.local_data_dir)),
        rate_provider=rate_provider,
        path=github.file_path,
        local_path=Path(github.file_path).name,
        reporting_currency=currency.reporting_currency,
        audit_logger=audit_logger,
    )

    dashboard = PaymentDashboard(
        store=store,
        rate_provider=rate_provider,
        audit_logger=audit_logger,
    )
    authenticator = Authenticator(settings.auth, audit_logger=audit_logger)
    return dashboard, authenticator, audit_logger
