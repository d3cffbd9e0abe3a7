"""
CSV Export

Exports the currently filtered payments for spreadsheet use. Headers are in
Turkish to match the rest of the business's paperwork, and the output starts
with a UTF-8 BOM so Excel picks up the encoding.
"""

import csv
import io
from datetime import date
from typing import Iterable

from payment_tracker.models.payment import Currency, PaymentRecord, normalize_currency


CSV_HEADERS = [
    "ID",
    "Kalem",
    "Firma",
    "Hizmet",
    "Proje",
    "Para Birimi",
    "Borç",
    "Kalan",
    "Durum",
]

UTF8_BOM = "\ufeff"

CURRENCY_SYMBOLS = {
    Currency.TRY: "₺",
    Currency.USD: "$",
    Currency.EUR: "€",
    Currency.GBP: "£",
}


def _amount(value: float) -> str:
    return f"{value:.2f}"


def export_payments_csv(payments: Iterable[PaymentRecord]) -> str:
    """Render payments as CSV text (BOM-prefixed)."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for payment in payments:
        writer.writerow([
            payment.id,
            payment.item_name,
            payment.company_name,
            payment.service_type,
            payment.project_name,
            payment.currency.value,
            _amount(payment.total_debt),
            _amount(payment.remaining),
            payment.invoice_status.value,
        ])
    return UTF8_BOM + buffer.getvalue()


def export_filename(today: date) -> str:
    return f"odeme_listesi_{today.isoformat()}.csv"


def format_currency(amount: float, currency=Currency.TRY) -> str:
    """
    Format an amount with its symbol and Turkish digit grouping.

    format_currency(1234.5, "EUR") -> "€ 1.234,50"
    """
    try:
        code = normalize_currency(currency)
        symbol = CURRENCY_SYMBOLS[code]
    except ValueError:
        symbol = str(currency)
    grouped = f"{float(amount):,.2f}"
    # 1,234.50 -> 1.234,50
    localized = grouped.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{symbol} {localized}"
