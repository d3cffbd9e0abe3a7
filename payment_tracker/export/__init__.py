"""Export package."""

from payment_tracker.export.csv_export import (
    CSV_HEADERS,
    export_filename,
    export_payments_csv,
    format_currency,
)

__all__ = [
    "CSV_HEADERS",
    "export_filename",
    "export_payments_csv",
    "format_currency",
]
