from datetime import date

import pytest

from smb_invoicing.aggregation import ReportSelection, compute_report
from smb_invoicing.io import Category, Company, Currency, Person, Product, invoices_to_dataframe
from smb_invoicing.views import (
    monthly_series_to_dataframe,
    paginate,
    people_to_dataframe,
    products_to_dataframe,
    report_cards_to_dataframe,
)


@pytest.mark.parametrize(
    "page, expected_number, expected_items",
    [
        (1, 1, [1, 2, 3]),
        (2, 2, [4, 5, 6]),
        (3, 3, [7]),
        (0, 1, [1, 2, 3]),
        (99, 3, [7]),
    ],
)
def test_paginate_clamps_page_numbers(page, expected_number, expected_items) -> None:
    result = paginate(list(range(1, 8)), page, 3)

    assert result.number == expected_number
    assert result.items == expected_items
    assert result.total_pages == 3
    assert result.total_items == 7


def test_paginate_empty_list() -> None:
    result = paginate([], 4, 5)

    assert result.items == []
    assert result.number == 1
    assert result.total_pages == 0
    assert not result.has_previous
    assert not result.has_next


def test_paginate_navigation_flags() -> None:
    middle = paginate(list(range(10)), 2, 3)
    assert middle.has_previous
    assert middle.has_next

    last = paginate(list(range(10)), 4, 3)
    assert last.has_previous
    assert not last.has_next


def test_paginate_rejects_non_positive_page_size() -> None:
    with pytest.raises(ValueError):
        paginate([1, 2], 1, 0)


def test_people_table_resolves_company_names() -> None:
    people = [
        Person("p1", "Marie", "Curie", "c1", "France", "0612345678", "m@example.com"),
        Person("p2", "Ada", "Lovelace", "gone", None, "0700", "a@example.com"),
    ]

    df = people_to_dataframe(people, [Company("c1", "Radium Labs")])

    assert df["company"].tolist() == ["Radium Labs", "-"]
    assert df["country"].tolist() == ["France", ""]


def test_products_table_uses_category_names() -> None:
    products = [Product("pr1", "Widget", "cat1", "EUR", 12.3456, "", "W-1")]

    df = products_to_dataframe(products, [Category("cat1", "Hardware")])

    assert df.iloc[0]["category"] == "Hardware"
    assert df.iloc[0]["price"] == 12.35


def test_report_tables() -> None:
    invoices = invoices_to_dataframe(
        [
            {
                "_id": "i1",
                "date": "2024-01-05",
                "paymentStatus": "Paid",
                "type": "Standard",
                "currency": "cur-a",
                "paidAmount": 100,
                "total": 100,
            }
        ]
    )
    euro = Currency("cur-a", "Euro", "€", "after", True)
    result = compute_report(
        invoices,
        (euro,),
        ReportSelection(unpaid_period="lastMonth", currency_id="cur-a"),
        date(2024, 3, 15),
    )

    cards = report_cards_to_dataframe(result)
    assert cards.to_dict("records") == [
        {"card": "Paid Invoice", "period": "This Year", "amount": "100.00€"},
        {"card": "Unpaid Invoice", "period": "Last Month", "amount": "0.00€"},
        {"card": "Facture Proforma", "period": "This Year", "amount": "00.00 €"},
    ]

    series = monthly_series_to_dataframe(result)
    assert len(series) == 12
    assert series.iloc[0].to_dict() == {"month": "Jan", "paid": 100.0}
