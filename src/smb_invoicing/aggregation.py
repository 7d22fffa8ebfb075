# SMB Invoicing - Invoicing & CRM client for SMBs
# Copyright (c) 2026 The SMB Invoicing authors
# Licensed under the MIT License. See LICENSE file for details.

"""
Report aggregation for SMB Invoicing.

This module derives the display-ready figures of the report dashboard from
the full invoice collection of the current user:

- per-currency paid and unpaid totals, each for the period selected on its
  own report card,
- a 12-month (Jan..Dec) series of paid amounts used for the chart,
- the formatted amounts shown on the Paid / Unpaid / Proforma cards.

Aggregation rules
-----------------
1) Only invoices of type "Standard" are counted. Proforma (or any other
   type) never contributes to the paid or unpaid totals.

2) Paid totals sum ``paid_amount``; unpaid totals sum ``total`` (the full
   amount owed). This asymmetry is deliberate and must be preserved.

3) The monthly series buckets the ``paid_amount`` of paid invoices falling
   in the Paid card's period by calendar month. With a currency selected
   only that currency is counted; without one, all currencies are summed
   together (no conversion is applied).

4) Without a selected currency both totals show the placeholder "00.00".
   A selected currency that cannot be found among the known currencies
   formats as an empty string.

5) The Proforma card is not computed: it always shows "00.00 €".

Every call recomputes everything from the full invoice DataFrame and the
current ReportSelection. ReportSelection and AggregationResult are frozen;
changing a period or the currency returns a new selection.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional, Union

import pandas as pd

from .io import Currency
from .periods import Period, date_range_for, filter_by_period, period_label

logger = logging.getLogger(__name__)

PAID = "Paid"
UNPAID = "Unpaid"
STANDARD = "Standard"

NO_CURRENCY_PLACEHOLDER = "00.00"
PROFORMA_PLACEHOLDER = "00.00 €"

MONTH_LABELS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)

CARD_TITLES = {
    "paid": "Paid Invoice",
    "unpaid": "Unpaid Invoice",
    "proforma": "Facture Proforma",
}


@dataclass(frozen=True)
class ReportSelection:
    """
    User selections driving the report.

    Each card keeps its own period; ``currency_id`` is shared by the whole
    dashboard. None for a period means "all" (resolved like this year).
    """

    paid_period: Optional[str] = "thisYear"
    unpaid_period: Optional[str] = "thisYear"
    proforma_period: Optional[str] = "thisYear"
    currency_id: Optional[str] = None

    def period_for(self, card: str) -> Optional[str]:
        if card not in CARD_TITLES:
            raise ValueError(f"Unknown report card: {card!r}")
        return getattr(self, f"{card}_period")

    def with_period(self, card: str, period: Optional[str]) -> "ReportSelection":
        """Return a copy with ``card``'s period replaced."""
        if card not in CARD_TITLES:
            raise ValueError(f"Unknown report card: {card!r}")
        return replace(self, **{f"{card}_period": period})

    def with_currency(self, currency_id: Optional[str]) -> "ReportSelection":
        return replace(self, currency_id=currency_id)


@dataclass(frozen=True)
class ReportCard:
    key: str
    title: str
    period: Optional[str]
    period_label: str
    amount: str


@dataclass(frozen=True)
class AggregationResult:
    """
    Display-ready output of one report recomputation.

    Attributes
    ----------
    monthly_series :
        Twelve paid amounts, January first.
    total_paid / total_unpaid :
        Formatted totals for the selected currency.
    cards :
        The Paid, Unpaid and Proforma cards, in display order.
    paid_range / unpaid_range :
        The resolved date ranges used for each total.
    currency :
        The selected currency, if it was found.
    """

    monthly_series: tuple[float, ...]
    total_paid: str
    total_unpaid: str
    cards: tuple[ReportCard, ...]
    paid_range: Period
    unpaid_range: Period
    currency: Optional[Currency] = None


def amount_field_for_status(status: str) -> str:
    """Return the invoice column summed for a payment status."""
    if status == PAID:
        return "paid_amount"
    if status == UNPAID:
        return "total"
    raise ValueError(f"Unsupported payment status: {status!r}")


def filter_invoices(
    invoices: pd.DataFrame,
    status: str,
    period: Period,
    invoice_type: str = STANDARD,
) -> pd.DataFrame:
    """
    Keep invoices with the given payment status and type, dated in ``period``.

    Parameters
    ----------
    invoices:
        Invoice DataFrame as produced by ``io.invoices_to_dataframe``.
    status:
        "Paid" or "Unpaid".
    period:
        Inclusive date range.
    invoice_type:
        Invoice type to keep ("Standard" by default).
    """
    mask = (invoices["payment_status"] == status) & (invoices["type"] == invoice_type)
    return filter_by_period(invoices.loc[mask], period)


def sum_by_currency(invoices: pd.DataFrame, amount_field: str) -> dict[str, float]:
    """
    Group invoices by currency id and sum ``amount_field``.

    Invoices without a currency are ignored. An empty input yields an empty
    mapping.
    """
    if invoices.empty:
        return {}

    with_currency = invoices[invoices["currency_id"].notna()]
    grouped = with_currency.groupby("currency_id", sort=True)[amount_field].sum()
    return {str(cid): float(total) for cid, total in grouped.items()}


def monthly_series(
    invoices: pd.DataFrame,
    currency_id: Optional[str],
    period: Period,
) -> tuple[float, ...]:
    """
    Bucket ``paid_amount`` by calendar month (index 0 = January).

    Only invoices dated within ``period`` are counted, and only those in
    ``currency_id`` when one is given. Without a currency filter, amounts of
    all currencies are added together.
    """
    series = [0.0] * 12

    subset = filter_by_period(invoices, period)
    if currency_id is not None:
        subset = subset[subset["currency_id"] == currency_id]
    if subset.empty:
        return tuple(series)

    by_month = subset.groupby(subset["date"].dt.month)["paid_amount"].sum()
    for month, amount in by_month.items():
        series[int(month) - 1] = float(amount)
    return tuple(series)


def format_amount(currency: Optional[Currency], amount: float) -> str:
    """
    Format ``amount`` with the currency symbol on the configured side.

    >>> format_amount(Currency("1", "Euro", "€", "after", True), 12.5)
    '12.50€'
    >>> format_amount(Currency("2", "Dollar", "$", "before", True), 12.5)
    '$12.50'

    An unrecognized symbol position renders the symbol alone; no currency
    renders the "00.00" placeholder.
    """
    if currency is None:
        return NO_CURRENCY_PLACEHOLDER
    if currency.symbol_position == "after":
        return f"{amount:.2f}{currency.symbol}"
    if currency.symbol_position == "before":
        return f"{currency.symbol}{amount:.2f}"
    return currency.symbol


def find_currency(
    currencies: Sequence[Currency],
    currency_id: Optional[str],
) -> Optional[Currency]:
    if currency_id is None:
        return None
    return next((c for c in currencies if c.id == currency_id), None)


def resolve_currency(currencies: Sequence[Currency], name_or_id: str) -> Optional[Currency]:
    """Look a currency up by id, then by name (case-insensitive)."""
    found = find_currency(currencies, name_or_id)
    if found is not None:
        return found
    wanted = name_or_id.strip().lower()
    return next((c for c in currencies if c.name.lower() == wanted), None)


def compute_report(
    invoices: pd.DataFrame,
    currencies: Sequence[Currency],
    selection: ReportSelection,
    reference: Union[date, datetime, None] = None,
) -> AggregationResult:
    """
    Recompute every figure of the report dashboard.

    Parameters
    ----------
    invoices:
        The full invoice DataFrame of the current user.
    currencies:
        Known (active) currencies, used to format the totals.
    selection:
        Per-card periods and the selected currency.
    reference:
        Day the named periods are resolved against (today by default).

    Returns
    -------
    AggregationResult
    """
    paid_range = date_range_for(selection.paid_period, reference)
    unpaid_range = date_range_for(selection.unpaid_period, reference)

    paid = filter_invoices(invoices, PAID, paid_range)
    unpaid = filter_invoices(invoices, UNPAID, unpaid_range)

    paid_totals = sum_by_currency(paid, amount_field_for_status(PAID))
    unpaid_totals = sum_by_currency(unpaid, amount_field_for_status(UNPAID))

    currency = find_currency(currencies, selection.currency_id)
    if selection.currency_id is None:
        total_paid = NO_CURRENCY_PLACEHOLDER
        total_unpaid = NO_CURRENCY_PLACEHOLDER
    elif currency is None:
        logger.warning("Selected currency %s is not among the known currencies.",
                       selection.currency_id)
        total_paid = ""
        total_unpaid = ""
    else:
        total_paid = format_amount(currency, paid_totals.get(currency.id, 0.0))
        total_unpaid = format_amount(currency, unpaid_totals.get(currency.id, 0.0))

    series = monthly_series(paid, selection.currency_id, paid_range)

    logger.debug(
        "Report recomputed: %d paid and %d unpaid standard invoices in range.",
        len(paid),
        len(unpaid),
    )

    amounts = {
        "paid": total_paid,
        "unpaid": total_unpaid,
        "proforma": PROFORMA_PLACEHOLDER,
    }
    cards = tuple(
        ReportCard(
            key=key,
            title=title,
            period=selection.period_for(key),
            period_label=period_label(selection.period_for(key)),
            amount=amounts[key],
        )
        for key, title in CARD_TITLES.items()
    )

    return AggregationResult(
        monthly_series=series,
        total_paid=total_paid,
        total_unpaid=total_unpaid,
        cards=cards,
        paid_range=paid_range,
        unpaid_range=unpaid_range,
        currency=currency,
    )
