from datetime import date

import pytest

from smb_invoicing.aggregation import (
    NO_CURRENCY_PLACEHOLDER,
    PROFORMA_PLACEHOLDER,
    ReportSelection,
    amount_field_for_status,
    compute_report,
    filter_invoices,
    format_amount,
    monthly_series,
    resolve_currency,
    sum_by_currency,
)
from smb_invoicing.io import Currency, invoices_to_dataframe
from smb_invoicing.periods import date_range_for

TODAY = date(2024, 3, 15)

EURO = Currency("cur-a", "Euro", "€", "after", True)
DOLLAR = Currency("cur-b", "Dollar", "$", "before", True)
CURRENCIES = (EURO, DOLLAR)


def _invoice(iid, when, status, amount_paid, total, currency="cur-a", kind="Standard"):
    return {
        "_id": iid,
        "date": when,
        "paymentStatus": status,
        "type": kind,
        "currency": {"_id": currency},
        "paidAmount": amount_paid,
        "total": total,
        "createdBy": "user-1",
    }


@pytest.fixture
def example_invoices():
    """The two paid invoices of the reference example: Jan 5 in A, Feb 10 in B."""
    return invoices_to_dataframe(
        [
            _invoice("i1", "2024-01-05", "Paid", 100, 100, currency="cur-a"),
            _invoice("i2", "2024-02-10", "Paid", 50, 50, currency="cur-b"),
        ]
    )


@pytest.fixture
def mixed_invoices():
    return invoices_to_dataframe(
        [
            _invoice("p1", "2024-01-05", "Paid", 100, 120),
            _invoice("p2", "2024-03-02", "Paid", 40, 40),
            _invoice("p3", "2024-03-03", "Paid", 10, 10, currency="cur-b"),
            _invoice("u1", "2024-02-10", "Unpaid", 5, 200),
            _invoice("u2", "2024-02-11", "Unpaid", 0, 75, currency="cur-b"),
            # Proforma invoices never count, whatever their status.
            _invoice("f1", "2024-01-20", "Paid", 999, 999, kind="Proforma"),
            _invoice("f2", "2024-01-21", "Unpaid", 999, 999, kind="Proforma"),
            # Last year.
            _invoice("old", "2023-06-01", "Paid", 500, 500),
        ]
    )


def test_reference_example_with_currency_filter(example_invoices) -> None:
    selection = ReportSelection(currency_id="cur-a")

    result = compute_report(example_invoices, CURRENCIES, selection, TODAY)

    assert result.monthly_series == (100.0,) + (0.0,) * 11
    assert result.total_paid == "100.00€"
    assert result.currency == EURO


def test_without_currency_totals_show_placeholder_and_series_mixes_currencies(
    example_invoices,
) -> None:
    result = compute_report(example_invoices, CURRENCIES, ReportSelection(), TODAY)

    assert result.total_paid == NO_CURRENCY_PLACEHOLDER
    assert result.total_unpaid == NO_CURRENCY_PLACEHOLDER
    assert result.monthly_series[:2] == (100.0, 50.0)
    assert sum(result.monthly_series) == 150.0


def test_paid_sums_paid_amount_and_unpaid_sums_total(mixed_invoices) -> None:
    result = compute_report(
        mixed_invoices, CURRENCIES, ReportSelection(currency_id="cur-a"), TODAY
    )

    assert result.total_paid == "140.00€"
    assert result.total_unpaid == "200.00€"


def test_non_standard_invoices_never_contribute(mixed_invoices) -> None:
    period = date_range_for("thisYear", TODAY)

    for status in ("Paid", "Unpaid"):
        kept = filter_invoices(mixed_invoices, status, period)
        assert set(kept["type"]) == {"Standard"}
        assert not kept["id"].isin(["f1", "f2"]).any()


def test_each_card_uses_its_own_period(mixed_invoices) -> None:
    selection = ReportSelection(
        paid_period="lastYear", unpaid_period="thisYear", currency_id="cur-a"
    )

    result = compute_report(mixed_invoices, CURRENCIES, selection, TODAY)

    assert result.total_paid == "500.00€"
    assert result.total_unpaid == "200.00€"
    # The chart follows the paid card's period.
    assert result.monthly_series[5] == 500.0
    assert sum(result.monthly_series) == 500.0


def test_last_month_excludes_current_month(mixed_invoices) -> None:
    selection = ReportSelection(paid_period="lastMonth", currency_id="cur-a")

    result = compute_report(mixed_invoices, CURRENCIES, selection, TODAY)

    # p2 (March 2nd) is in the current month, p1 is in January.
    assert result.total_paid == "0.00€"
    assert result.monthly_series == (0.0,) * 12


def test_sum_by_currency(mixed_invoices) -> None:
    period = date_range_for("thisYear", TODAY)
    paid = filter_invoices(mixed_invoices, "Paid", period)
    unpaid = filter_invoices(mixed_invoices, "Unpaid", period)

    assert sum_by_currency(paid, amount_field_for_status("Paid")) == {
        "cur-a": 140.0,
        "cur-b": 10.0,
    }
    assert sum_by_currency(unpaid, amount_field_for_status("Unpaid")) == {
        "cur-a": 200.0,
        "cur-b": 75.0,
    }


def test_sum_by_currency_of_empty_set_is_empty() -> None:
    empty = invoices_to_dataframe([])
    assert sum_by_currency(empty, "paid_amount") == {}
    assert sum_by_currency(empty, "total") == {}


def test_sums_are_non_negative_for_non_negative_amounts(mixed_invoices) -> None:
    totals = sum_by_currency(mixed_invoices, "paid_amount")
    assert all(v >= 0 for v in totals.values())


def test_amount_field_for_unknown_status() -> None:
    with pytest.raises(ValueError):
        amount_field_for_status("Partially paid")


def test_monthly_series_filters_currency_and_range(mixed_invoices) -> None:
    period = date_range_for("thisYear", TODAY)
    paid = filter_invoices(mixed_invoices, "Paid", period)

    assert monthly_series(paid, "cur-b", period)[2] == 10.0
    assert monthly_series(paid, "cur-a", period)[:3] == (100.0, 0.0, 40.0)
    assert monthly_series(paid, None, period)[2] == 50.0
    assert len(monthly_series(invoices_to_dataframe([]), None, period)) == 12


@pytest.mark.parametrize(
    "currency, amount, expected",
    [
        (Currency("e", "Euro", "€", "after", True), 12.5, "12.50€"),
        (Currency("d", "Dollar", "$", "before", True), 12.5, "$12.50"),
        (Currency("x", "Odd", "¤", "middle", True), 12.5, "¤"),
        (None, 12.5, "00.00"),
    ],
)
def test_format_amount(currency, amount, expected) -> None:
    assert format_amount(currency, amount) == expected


def test_unknown_selected_currency_formats_as_empty(example_invoices) -> None:
    selection = ReportSelection(currency_id="cur-zzz")

    result = compute_report(example_invoices, CURRENCIES, selection, TODAY)

    assert result.total_paid == ""
    assert result.total_unpaid == ""
    assert result.currency is None


def test_proforma_card_is_a_static_placeholder(mixed_invoices) -> None:
    result = compute_report(
        mixed_invoices, CURRENCIES, ReportSelection(currency_id="cur-a"), TODAY
    )

    cards = {card.key: card for card in result.cards}
    assert [c.title for c in result.cards] == [
        "Paid Invoice",
        "Unpaid Invoice",
        "Facture Proforma",
    ]
    assert cards["proforma"].amount == PROFORMA_PLACEHOLDER
    assert cards["paid"].amount == result.total_paid


def test_recomputing_the_same_selection_is_idempotent(mixed_invoices) -> None:
    selection = ReportSelection(currency_id="cur-a").with_period("paid", "lastYear")
    again = selection.with_period("paid", "lastYear")

    first = compute_report(mixed_invoices, CURRENCIES, selection, TODAY)
    second = compute_report(mixed_invoices, CURRENCIES, again, TODAY)

    assert again == selection
    assert first == second


def test_selection_updates_return_new_objects() -> None:
    base = ReportSelection()
    changed = base.with_period("unpaid", "lastWeek").with_currency("cur-b")

    assert base.unpaid_period == "thisYear"
    assert base.currency_id is None
    assert changed.unpaid_period == "lastWeek"
    assert changed.currency_id == "cur-b"

    with pytest.raises(ValueError):
        base.with_period("overdue", "lastWeek")


def test_card_labels_reflect_selected_periods(mixed_invoices) -> None:
    selection = ReportSelection(paid_period=None, unpaid_period="yesterday")

    result = compute_report(mixed_invoices, CURRENCIES, selection, TODAY)

    labels = {card.key: card.period_label for card in result.cards}
    assert labels == {"paid": "All Time", "unpaid": "Yesterday", "proforma": "This Year"}


def test_resolve_currency_by_id_or_name() -> None:
    assert resolve_currency(CURRENCIES, "cur-b") == DOLLAR
    assert resolve_currency(CURRENCIES, "euro") == EURO
    assert resolve_currency(CURRENCIES, "Yen") is None
