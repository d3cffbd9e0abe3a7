"""
Tests for CSV export and amount formatting.
"""

import csv
import io
from datetime import date

from payment_tracker.export import CSV_HEADERS, export_filename, export_payments_csv, format_currency
from payment_tracker.models.payment import Currency, PaymentRecord

from tests.conftest import payment_dict


class TestExportPaymentsCsv:
    """Tests for export_payments_csv()."""

    def test_starts_with_bom_and_headers(self):
        """Test the export starts with a BOM and the Turkish headers."""
        text = export_payments_csv([])
        assert text.startswith("\ufeff")
        assert text[1:].splitlines()[0] == ",".join(CSV_HEADERS)

    def test_rows(self):
        """Test each payment becomes one row."""
        payments = [
            PaymentRecord.model_validate(payment_dict(
                1, itemName="Kira, ofis", currency="TL", totalDebt=1500, remaining=1200.5,
                invoiceStatus="FATURALI",
            )),
            PaymentRecord.model_validate(payment_dict(2, currency="EUR")),
        ]
        rows = list(csv.reader(io.StringIO(export_payments_csv(payments)[1:])))

        assert len(rows) == 3
        assert rows[1] == [
            "1", "Kira, ofis", "Acme Ltd", "Consulting", "Alpha", "TRY",
            "1500.00", "1200.50", "FATURALI",
        ]
        assert rows[2][5] == "EUR"
        assert rows[2][8] == "FATURASIZ"

    def test_filename(self):
        """Test the export file name carries the date."""
        assert export_filename(date(2026, 3, 7)) == "odeme_listesi_2026-03-07.csv"


class TestFormatCurrency:
    """Tests for format_currency()."""

    def test_grouping(self):
        """Test Turkish digit grouping."""
        assert format_currency(1234.5, Currency.EUR) == "€ 1.234,50"
        assert format_currency(1234567.891, "TRY") == "₺ 1.234.567,89"

    def test_legacy_code(self):
        """Test TL formats as lira."""
        assert format_currency(5, "TL") == "₺ 5,00"

    def test_negative(self):
        """Test negative amounts keep their sign."""
        assert format_currency(-20, "USD") == "$ -20,00"

    def test_unknown_code(self):
        """Test unknown codes fall back to the code itself."""
        assert format_currency(1, "JPY") == "JPY 1,00"
