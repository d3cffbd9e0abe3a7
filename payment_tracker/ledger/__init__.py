"""The payments ledger: loading, mutating and saving the document."""

from payment_tracker.ledger.store import (
    LOCAL_VERSION_TOKEN,
    DataSource,
    DataUnavailableError,
    InvalidDocumentError,
    NotFoundError,
    RecordStore,
    RecordStoreError,
    SaveFailedError,
)

__all__ = [
    "LOCAL_VERSION_TOKEN",
    "DataSource",
    "DataUnavailableError",
    "InvalidDocumentError",
    "NotFoundError",
    "RecordStore",
    "RecordStoreError",
    "SaveFailedError",
]
