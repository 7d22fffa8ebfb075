# SMB Invoicing - Invoicing & CRM client for SMBs
# Copyright (c) 2026 The SMB Invoicing authors
# Licensed under the MIT License. See LICENSE file for details.

"""
Report dashboard view model.

A ReportState bundles everything the dashboard shows: the fetched invoices
and active currencies, the user's selections and the AggregationResult
computed from them. States are immutable; every user action (loading data,
picking a period on a card, picking a currency) returns a new state whose
result is recomputed from scratch by ``aggregation.compute_report``.

Fetch failures are logged and leave the previously loaded invoices and
currencies in place (possibly empty). There is no retry.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Optional, Union

import pandas as pd

from .aggregation import AggregationResult, ReportSelection, compute_report
from .api import ApiClient, ApiError
from .io import Currency, currency_from_api, invoices_to_dataframe

logger = logging.getLogger(__name__)

Reference = Union[date, datetime, None]


@dataclass(frozen=True, eq=False)
class ReportState:
    invoices: pd.DataFrame
    currencies: tuple[Currency, ...]
    selection: ReportSelection
    result: AggregationResult
    tz: Optional[str] = field(default=None)


def _recompute(state: ReportState, reference: Reference) -> ReportState:
    result = compute_report(state.invoices, state.currencies, state.selection, reference)
    return replace(state, result=result)


def initial_state(
    selection: Optional[ReportSelection] = None,
    tz: Optional[str] = None,
    reference: Reference = None,
) -> ReportState:
    """Empty dashboard: no invoices, no currencies, placeholder amounts."""
    selection = selection or ReportSelection()
    invoices = invoices_to_dataframe([])
    return ReportState(
        invoices=invoices,
        currencies=(),
        selection=selection,
        result=compute_report(invoices, (), selection, reference),
        tz=tz,
    )


def fetch_currencies(
    client: ApiClient,
    user_id: Optional[str],
    previous: tuple[Currency, ...] = (),
) -> tuple[Currency, ...]:
    """Return the active currencies of ``user_id``."""
    try:
        raw = client.list_currencies(user_id)
    except ApiError as exc:
        logger.error("Error fetching currencies: %s", exc)
        return previous
    return tuple(c for c in map(currency_from_api, raw) if c.active)


def fetch_invoices(
    client: ApiClient,
    user_id: Optional[str],
    previous: pd.DataFrame,
    tz: Optional[str] = None,
) -> pd.DataFrame:
    try:
        raw = client.list_invoices(user_id)
    except ApiError as exc:
        logger.error("Error fetching invoices: %s", exc)
        return previous
    return invoices_to_dataframe(raw, tz)


def load_report(
    client: ApiClient,
    user_id: Optional[str],
    state: ReportState,
    reference: Reference = None,
) -> ReportState:
    """
    Fetch currencies and invoices for ``user_id`` and recompute the report.

    Only active currencies are kept. Each fetch is independent: if one
    fails, its previous data is kept and the other is still refreshed.
    """
    currencies = fetch_currencies(client, user_id, state.currencies)
    invoices = fetch_invoices(client, user_id, state.invoices, state.tz)

    logger.info("Loaded %d invoices and %d active currencies.", len(invoices), len(currencies))
    return _recompute(replace(state, invoices=invoices, currencies=currencies), reference)


def select_period(
    state: ReportState,
    card: str,
    period: Optional[str],
    reference: Reference = None,
) -> ReportState:
    """Change the period of one card ("paid", "unpaid" or "proforma")."""
    selection = state.selection.with_period(card, period)
    return _recompute(replace(state, selection=selection), reference)


def select_currency(
    state: ReportState,
    currency_id: Optional[str],
    reference: Reference = None,
) -> ReportState:
    """Change (or clear, with None) the currency shown on the dashboard."""
    selection = state.selection.with_currency(currency_id)
    return _recompute(replace(state, selection=selection), reference)
