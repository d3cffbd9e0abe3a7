"""
Record Store

Owns the in-memory payments document and the version token needed to save it.

SAVE PROTOCOL (optimistic concurrency):
1. Apply the mutation in memory
2. Recompute the summary, attach the rate table, stamp lastUpdate
3. Write the whole document, conditional on the token we hold
4. On success keep the new token; on failure raise SaveFailedError

IMPORTANT: A failed save is NOT rolled back and NOT retried. The in-memory
copy stays ahead of the remote one and the caller is told so. Re-running the
operation retries the write with whatever token is currently held.

The store has no internal locking. Mutations must not run concurrently;
the UI serializes them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Union
from uuid import UUID

from pydantic import ValidationError

from payment_tracker.audit import AuditLogger
from payment_tracker.currency.provider import RateProvider
from payment_tracker.models.payment import (
    Currency,
    FilterCriteria,
    PaymentFields,
    PaymentRecord,
    PaymentsDocument,
    Summary,
    utc_now,
)
from payment_tracker.queries import filter_payments, summarize
from payment_tracker.services.storage import (
    LocalFallbackSource,
    RemoteJSONStore,
    StorageError,
)


# Token used after a fallback load; the remote store will reject it on save
LOCAL_VERSION_TOKEN = "local-sha-placeholder"


class DataSource(str, Enum):
    """Where the loaded document came from."""
    REMOTE = "remote"
    LOCAL = "local"


class RecordStoreError(Exception):
    """Base exception for record store operations."""
    pass


class NotFoundError(RecordStoreError):
    """No payment with the requested ID."""

    def __init__(self, payment_id: int):
        self.payment_id = payment_id
        super().__init__(f"Payment not found: {payment_id}")


class DataUnavailableError(RecordStoreError):
    """Neither the remote store nor the local copy could be read."""
    pass


class InvalidDocumentError(RecordStoreError):
    """The remote document was read but does not match the payments schema."""
    pass


class SaveFailedError(RecordStoreError):
    """The remote store rejected the save or could not be reached."""
    pass


def _provided_fields(fields: Union[PaymentFields, Mapping[str, Any]]) -> dict[str, Any]:
    """Explicitly provided, non-null fields keyed by attribute name. Never includes id."""
    if not isinstance(fields, PaymentFields):
        fields = PaymentFields.model_validate(dict(fields))
    return {k: v for k, v in fields.to_update_dict().items() if v is not None}


class RecordStore:
    """
    In-memory collection of payments backed by a remote JSON document.

    One instance owns one document; it is passed explicitly to whoever needs it.
    """

    def __init__(
        self,
        remote: RemoteJSONStore,
        local: LocalFallbackSource,
        rate_provider: RateProvider,
        path: str = "payments.json",
        local_path: Optional[str] = None,
        reporting_currency: Currency = Currency.EUR,
        audit_logger: Optional[AuditLogger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._remote = remote
        self._local = local
        self._rate_provider = rate_provider
        self._path = path
        self._local_path = local_path or path
        self._reporting_currency = reporting_currency
        self._audit_logger = audit_logger
        self._clock = clock or utc_now

        self._document: Optional[PaymentsDocument] = None
        self._version_token: Optional[str] = None
        self._source: Optional[DataSource] = None

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def is_loaded(self) -> bool:
        return self._document is not None

    @property
    def document(self) -> Optional[PaymentsDocument]:
        return self._document

    @property
    def version_token(self) -> Optional[str]:
        return self._version_token

    @property
    def source(self) -> Optional[DataSource]:
        return self._source

    @property
    def reporting_currency(self) -> Currency:
        return self._reporting_currency

    @property
    def payments(self) -> list[PaymentRecord]:
        """Copies of the loaded payments, in insertion order."""
        if self._document is None:
            return []
        return [payment.model_copy() for payment in self._document.payments]

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def load(self) -> PaymentsDocument:
        """
        Load the document from the remote store, falling back to the local copy.

        After a fallback load the version token is a placeholder, so later
        saves are expected to fail.

        Only transport failures fall back. A remote document that does not
        match the schema is reported, never replaced by the local copy.

        Raises:
            InvalidDocumentError: If the remote document fails validation
            DataUnavailableError: If both sources fail
        """
        try:
            stored = await self._remote.fetch(self._path)
        except StorageError as remote_error:
            return await self._load_local(remote_error)

        try:
            document = PaymentsDocument.model_validate(stored.content)
        except ValidationError as e:
            if self._audit_logger:
                await self._audit_logger.log_data_load_failed(self._path, str(e))
            raise InvalidDocumentError(
                f"Remote document {self._path} is invalid: {e.error_count()} problem(s)"
            ) from e

        self._document = document
        self._version_token = stored.version_token
        self._source = DataSource.REMOTE

        if self._audit_logger:
            await self._audit_logger.log_data_loaded(self._path, len(document.payments))
        return document

    async def _load_local(self, remote_error: Exception) -> PaymentsDocument:
        try:
            content = await self._local.read_local(self._local_path)
            document = PaymentsDocument.model_validate(content)
        except (StorageError, ValidationError) as local_error:
            if self._audit_logger:
                await self._audit_logger.log_data_load_failed(
                    self._path,
                    f"remote: {remote_error}; local: {local_error}",
                )
            raise DataUnavailableError(
                f"Payments unavailable (remote: {remote_error}; local: {local_error})"
            ) from remote_error

        self._document = document
        self._version_token = LOCAL_VERSION_TOKEN
        self._source = DataSource.LOCAL

        if self._audit_logger:
            await self._audit_logger.log_data_fallback_loaded(
                self._local_path,
                len(document.payments),
                str(remote_error),
            )
        return document

    async def _ensure_loaded(self) -> PaymentsDocument:
        if self._document is None:
            await self.load()
        return self._document

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, payment_id: int) -> PaymentRecord:
        """
        Look up a payment by ID.

        Raises:
            NotFoundError: If no payment has that ID
        """
        return self._document.payments[self._index_of(payment_id)].model_copy()

    def _index_of(self, payment_id: int) -> int:
        if self._document is not None:
            for index, payment in enumerate(self._document.payments):
                if payment.id == payment_id:
                    return index
        raise NotFoundError(payment_id)

    def filter(
        self,
        criteria: Optional[Union[FilterCriteria, dict]] = None,
    ) -> list[PaymentRecord]:
        """Payments matching the criteria, in insertion order."""
        return filter_payments(self.payments, criteria)

    async def summary(self, reporting_currency: Optional[Currency] = None) -> Summary:
        """A fresh summary of all loaded payments using current rates."""
        rates = await self._rate_provider.get_rates()
        return summarize(
            self.payments,
            rates,
            reporting_currency or self._reporting_currency,
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def _next_id(self) -> int:
        ids = [payment.id for payment in self._document.payments]
        return max(ids) + 1 if ids else 1

    async def create(
        self,
        fields: Union[PaymentFields, Mapping[str, Any]],
        correlation_id: Optional[UUID] = None,
    ) -> PaymentRecord:
        """
        Append a new payment and save.

        The new ID is one more than the highest existing ID (1 when empty).
        The record stays in memory even if the save fails.

        Raises:
            SaveFailedError: If the remote store rejects the save
        """
        document = await self._ensure_loaded()
        data = _provided_fields(fields)
        data.update(document_uploaded=False, document_url="")

        payment = PaymentRecord(id=self._next_id(), **data)
        document.payments.append(payment)

        if self._audit_logger:
            await self._audit_logger.log_payment_created(
                payment.id, payment.item_name, correlation_id
            )
        await self._persist()
        return payment.model_copy()

    async def update(
        self,
        payment_id: int,
        fields: Union[PaymentFields, Mapping[str, Any]],
        correlation_id: Optional[UUID] = None,
    ) -> PaymentRecord:
        """
        Merge the given fields into a payment and save.

        Only fields present in the update are overwritten. total_debt and
        remaining are NOT recomputed here; callers changing amounts must send
        them already computed (see PaymentFields.with_derived_totals).

        Raises:
            NotFoundError: If no payment has that ID
            SaveFailedError: If the remote store rejects the save
        """
        document = await self._ensure_loaded()
        index = self._index_of(payment_id)
        changes = _provided_fields(fields)

        current = document.payments[index]
        updated = PaymentRecord.model_validate(
            {**current.model_dump(), **changes, "id": current.id}
        )
        document.payments[index] = updated

        if self._audit_logger:
            await self._audit_logger.log_payment_updated(
                payment_id, sorted(changes), correlation_id
            )
        await self._persist()
        return updated.model_copy()

    async def delete(
        self,
        payment_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """
        Remove a payment (no-op if absent) and save.

        Raises:
            SaveFailedError: If the remote store rejects the save
        """
        document = await self._ensure_loaded()
        before = len(document.payments)
        document.payments = [p for p in document.payments if p.id != payment_id]

        if self._audit_logger:
            await self._audit_logger.log_payment_deleted(
                payment_id, len(document.payments) < before, correlation_id
            )
        await self._persist()

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    async def _persist(self) -> None:
        """
        Attach a fresh summary and timestamp, then write conditionally.

        Raises:
            SaveFailedError: On token conflict, auth failure or transport error
        """
        document = self._document
        rates = await self._rate_provider.get_rates()

        document.summary = summarize(document.payments, rates, self._reporting_currency)
        document.metadata.currency = dict(rates)
        document.metadata.last_update = self._clock()

        try:
            self._version_token = await self._remote.write(
                self._path,
                document.to_document_dict(),
                self._version_token,
            )
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_save_failed(self._path, str(e))
            raise SaveFailedError(f"Save failed: {e}") from e

        if self._audit_logger:
            await self._audit_logger.log_data_saved(self._path, len(document.payments))
