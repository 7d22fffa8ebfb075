# SMB Invoicing - Invoicing & CRM client for SMBs
# Copyright (c) 2026 The SMB Invoicing authors
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for SMB Invoicing.

This module turns domain objects (people, products, currencies, report
results) into pandas DataFrames ready to be printed as console tables or
exported as CSV files by the CLI, and provides the pagination helper used
by the contacts list.

The helpers here do not fetch data nor apply business rules; they only
shape data that has already been computed elsewhere.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

import pandas as pd

from .aggregation import MONTH_LABELS, AggregationResult
from .io import Category, Company, Currency, Person, Product
from .people import company_name

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a list, with 1-based numbering."""

    items: list[T]
    number: int
    per_page: int
    total_items: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self.per_page)

    @property
    def has_previous(self) -> bool:
        return self.number > 1

    @property
    def has_next(self) -> bool:
        return self.number < self.total_pages


def paginate(items: Sequence[T], page: int, per_page: int) -> Page[T]:
    """
    Return page ``page`` of ``items``.

    Pages are 1-based. A page number outside [1, total_pages] is clamped to
    the nearest valid page; an empty list yields an empty page 1 with zero
    total pages.
    """
    if per_page < 1:
        raise ValueError("per_page must be at least 1.")

    total_pages = math.ceil(len(items) / per_page)
    number = min(max(page, 1), max(total_pages, 1))
    first = (number - 1) * per_page
    return Page(
        items=list(items[first:first + per_page]),
        number=number,
        per_page=per_page,
        total_items=len(items),
    )


def people_to_dataframe(
    people: Sequence[Person], companies: Sequence[Company]
) -> pd.DataFrame:
    """Contacts table: one row per person, company resolved to its name."""
    columns = ["id", "first_name", "last_name", "company", "country", "telephone", "email"]
    rows = [
        {
            "id": p.id,
            "first_name": p.first_name,
            "last_name": p.last_name,
            "company": company_name(companies, p.company_id),
            "country": p.country or "",
            "telephone": p.telephone,
            "email": p.email,
        }
        for p in people
    ]
    return pd.DataFrame(rows, columns=columns)


def companies_to_dataframe(companies: Sequence[Company]) -> pd.DataFrame:
    return pd.DataFrame(
        [{"id": c.id, "name": c.name} for c in companies], columns=["id", "name"]
    )


def categories_to_dataframe(categories: Sequence[Category]) -> pd.DataFrame:
    return pd.DataFrame(
        [{"id": c.id, "name": c.name} for c in categories], columns=["id", "name"]
    )


def currencies_to_dataframe(currencies: Sequence[Currency]) -> pd.DataFrame:
    columns = ["id", "name", "symbol", "symbol_position"]
    rows = [
        {
            "id": c.id,
            "name": c.name,
            "symbol": c.symbol,
            "symbol_position": c.symbol_position,
        }
        for c in currencies
    ]
    return pd.DataFrame(rows, columns=columns)


def products_to_dataframe(
    products: Sequence[Product], categories: Sequence[Category], decimals: int = 2
) -> pd.DataFrame:
    names = {c.id: c.name for c in categories}
    columns = ["id", "name", "category", "currency", "price", "reference"]
    rows = [
        {
            "id": p.id,
            "name": p.name,
            "category": names.get(p.category_id or "", ""),
            "currency": p.currency,
            "price": round(p.price, decimals),
            "reference": p.reference,
        }
        for p in products
    ]
    return pd.DataFrame(rows, columns=columns)


def report_cards_to_dataframe(result: AggregationResult) -> pd.DataFrame:
    """The three report cards: title, period label and formatted amount."""
    rows = [
        {"card": card.title, "period": card.period_label, "amount": card.amount}
        for card in result.cards
    ]
    return pd.DataFrame(rows, columns=["card", "period", "amount"])


def monthly_series_to_dataframe(
    result: AggregationResult, decimals: int = 2
) -> pd.DataFrame:
    """Chart data as a table: one row per month, January first."""
    return pd.DataFrame(
        {
            "month": list(MONTH_LABELS),
            "paid": [round(v, decimals) for v in result.monthly_series],
        }
    )
