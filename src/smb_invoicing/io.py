# SMB Invoicing - Invoicing & CRM client for SMBs
# Copyright (c) 2026 The SMB Invoicing authors
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for SMB Invoicing.

This module turns the JSON collections returned by the REST API into
simple, consistent structures used by the rest of the application:

- typed, immutable dataclasses for people, companies, categories,
  currencies and products,
- a normalized pandas DataFrame for invoices, suitable for filtering and
  aggregation by ``aggregation.py``.

Identifiers
-----------
The API exposes record identifiers as ``_id``; ``id`` is accepted as a
fallback. Identifiers are always handled as strings on the client side.

Invoice output schema
---------------------
``invoices_to_dataframe`` returns a DataFrame with these columns:

    - ``id``             (str)
    - ``date``           (datetime64[ns], naive, local time)
    - ``payment_status`` (str, e.g. "Paid" / "Unpaid")
    - ``type``           (str, e.g. "Standard" / "Proforma")
    - ``currency_id``    (str or None)
    - ``paid_amount``    (float)
    - ``total``          (float)
    - ``created_by``     (str or None)

Timezone-aware invoice dates (e.g. ``2024-03-14T10:00:00Z``) are converted
to the configured timezone (the system local timezone by default) and made
naive, so that they compare directly with the day-bounded ranges built by
``periods.py``. Naive dates are kept as-is.

Invoices with a malformed date or amount are logged and skipped.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Optional

import pandas as pd

logger = logging.getLogger(__name__)

INVOICE_COLUMNS = [
    "id",
    "date",
    "payment_status",
    "type",
    "currency_id",
    "paid_amount",
    "total",
    "created_by",
]


@dataclass(frozen=True)
class Currency:
    """A currency as configured by the user (used for lookup and formatting)."""

    id: str
    name: str
    symbol: str
    symbol_position: str
    active: bool
    created_by: Optional[str] = None


@dataclass(frozen=True)
class Company:
    id: str
    name: str
    created_by: Optional[str] = None


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    created_by: Optional[str] = None


@dataclass(frozen=True)
class Person:
    """
    A contact person.

    The API uses French field names (prenom, nom, entreprise, pays,
    telephone); they are exposed here under English attribute names and
    mapped back by ``to_api_payload``.
    """

    id: str
    first_name: str
    last_name: str
    company_id: Optional[str]
    country: Optional[str]
    telephone: str
    email: str
    created_by: Optional[str] = None

    def to_api_payload(self) -> dict[str, Any]:
        return {
            "prenom": self.first_name,
            "nom": self.last_name,
            "entreprise": self.company_id,
            "pays": self.country,
            "telephone": self.telephone,
            "email": self.email,
        }


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    category_id: Optional[str]
    currency: str
    price: float
    description: str
    reference: str
    created_by: Optional[str] = None


def record_id(raw: Any) -> Optional[str]:
    """
    Return the identifier of a record or of a reference to a record.

    ``raw`` may be an embedded object (``{"_id": ...}``), a bare identifier,
    or None.
    """
    if raw is None:
        return None
    if isinstance(raw, Mapping):
        value = raw.get("_id", raw.get("id"))
        return None if value is None else str(value)
    return str(raw)


def _text(raw: Mapping[str, Any], key: str) -> str:
    value = raw.get(key)
    return "" if value is None else str(value)


def _to_float(value: Any, field: str, owner: Optional[str]) -> float:
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Invalid numeric value for '{field}' in record {owner!r}: {value!r}"
        ) from exc


def _to_local(ts: pd.Timestamp) -> pd.Timestamp:
    # astimezone() applies the local offset in force on that date (DST aware).
    return pd.Timestamp(ts.to_pydatetime().astimezone().replace(tzinfo=None))


def parse_api_date(raw: Any, tz: Optional[str] = None) -> pd.Timestamp:
    """
    Parse an API date into a naive timestamp.

    Aware values are converted to ``tz`` (an IANA name), or to the system
    local time of that date when ``tz`` is None, before dropping the timezone
    information.

    Raises
    ------
    ValueError
        If the value cannot be parsed as a date.
    """
    if raw is None or raw == "":
        raise ValueError("Missing date value.")
    try:
        ts = pd.Timestamp(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid date value: {raw!r}") from exc
    if ts is pd.NaT:
        raise ValueError(f"Invalid date value: {raw!r}")

    if ts.tzinfo is None:
        return ts
    if tz:
        return ts.tz_convert(tz).tz_localize(None)
    return _to_local(ts)


def currency_from_api(raw: Mapping[str, Any]) -> Currency:
    return Currency(
        id=record_id(raw) or "",
        name=_text(raw, "name"),
        symbol=_text(raw, "symbol"),
        symbol_position=_text(raw, "symbolPosition"),
        active=bool(raw.get("active", False)),
        created_by=record_id(raw.get("createdBy")),
    )


def company_from_api(raw: Mapping[str, Any]) -> Company:
    return Company(
        id=record_id(raw) or "",
        name=_text(raw, "nom"),
        created_by=record_id(raw.get("createdBy")),
    )


def category_from_api(raw: Mapping[str, Any]) -> Category:
    return Category(
        id=record_id(raw) or "",
        name=_text(raw, "name"),
        created_by=record_id(raw.get("createdBy")),
    )


def person_from_api(raw: Mapping[str, Any]) -> Person:
    country = raw.get("pays")
    return Person(
        id=record_id(raw) or "",
        first_name=_text(raw, "prenom"),
        last_name=_text(raw, "nom"),
        company_id=record_id(raw.get("entreprise")),
        country=None if country in (None, "") else str(country),
        telephone=_text(raw, "telephone"),
        email=_text(raw, "email"),
        created_by=record_id(raw.get("createdBy")),
    )


def product_from_api(raw: Mapping[str, Any]) -> Product:
    pid = record_id(raw) or ""
    currency = raw.get("currency")
    if isinstance(currency, Mapping):
        currency = currency.get("name") or record_id(currency)
    return Product(
        id=pid,
        name=_text(raw, "name"),
        category_id=record_id(raw.get("productCategory")),
        currency="" if currency is None else str(currency),
        price=_to_float(raw.get("price"), "price", pid),
        description=_text(raw, "description"),
        reference=_text(raw, "reference"),
        created_by=record_id(raw.get("createdBy")),
    )


def invoices_to_dataframe(
    records: Iterable[Mapping[str, Any]],
    tz: Optional[str] = None,
) -> pd.DataFrame:
    """
    Normalize raw invoice records into a DataFrame.

    Parameters
    ----------
    records:
        Invoice objects as returned by ``GET /api/invoices``.
    tz:
        Timezone used to interpret timezone-aware dates (see module doc).

    Returns
    -------
    pandas.DataFrame
        A DataFrame with exactly the columns listed in INVOICE_COLUMNS,
        empty (but well-formed) when there are no records.

    Invoices whose date or amounts cannot be parsed are logged and left
    out, so one malformed record never hides the others.
    """
    rows: list[dict[str, Any]] = []
    for raw in records:
        iid = record_id(raw)
        try:
            row = {
                "id": iid,
                "date": parse_api_date(raw.get("date"), tz),
                "payment_status": _text(raw, "paymentStatus"),
                "type": _text(raw, "type"),
                "currency_id": record_id(raw.get("currency")),
                "paid_amount": _to_float(raw.get("paidAmount"), "paidAmount", iid),
                "total": _to_float(raw.get("total"), "total", iid),
                "created_by": record_id(raw.get("createdBy")),
            }
        except ValueError as exc:
            logger.warning("Skipping invoice %r: %s", iid, exc)
            continue
        rows.append(row)

    if not rows:
        empty = pd.DataFrame({col: pd.Series(dtype="object") for col in INVOICE_COLUMNS})
        empty["date"] = pd.to_datetime(empty["date"])
        empty["paid_amount"] = empty["paid_amount"].astype(float)
        empty["total"] = empty["total"].astype(float)
        return empty

    df = pd.DataFrame(rows, columns=INVOICE_COLUMNS)
    df["date"] = pd.to_datetime(df["date"])
    return df
