"""
Summary Aggregation

Totals are computed two ways:
- by_currency: native sums per currency, no conversion involved
- total_in_reporting_currency: every record converted first, then summed

Summaries are always computed fresh. The only stored copy is the snapshot the
record store writes into the document on save.
"""

from typing import Iterable

from payment_tracker.currency.conversion import RateTable, convert
from payment_tracker.models.payment import (
    Currency,
    CurrencyTotals,
    PaymentRecord,
    Summary,
)


AMOUNT_FIELDS = ("previous_debt", "current_debt", "total_debt", "paid", "remaining")


def summarize(
    payments: Iterable[PaymentRecord],
    rates: RateTable,
    reporting_currency: Currency = Currency.EUR,
) -> Summary:
    """
    Aggregate payments per currency and in the reporting currency.

    Zero amounts are skipped before conversion, so a record whose amounts
    are all zero never needs a rate.

    Raises:
        MissingRateError: If a non-zero amount's currency has no rate
    """
    native = {currency: dict.fromkeys(AMOUNT_FIELDS, 0.0) for currency in Currency}
    reporting = dict.fromkeys(AMOUNT_FIELDS, 0.0)

    for payment in payments:
        bucket = native[payment.currency]
        for field in AMOUNT_FIELDS:
            amount = getattr(payment, field)
            if amount == 0:
                continue
            bucket[field] += amount
            reporting[field] += convert(
                amount, payment.currency, reporting_currency, rates
            )

    return Summary(
        by_currency={
            currency: CurrencyTotals(**totals) for currency, totals in native.items()
        },
        total_in_reporting_currency=CurrencyTotals(**reporting),
        reporting_currency=reporting_currency,
    )
