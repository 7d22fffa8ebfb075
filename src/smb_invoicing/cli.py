# SMB Invoicing - Invoicing & CRM client for SMBs
# Copyright (c) 2026 The SMB Invoicing authors
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for SMB Invoicing.

This module wires together the main building blocks of SMB Invoicing:

- global configuration (API location, token, report defaults, display),
- untrusted token claims (the current user id),
- the REST API client,
- the report aggregation and its view model,
- the contacts and products services,
- view helpers (pagination and tabular rendering).

The CLI is intentionally thin: it does not implement business logic
itself. It orchestrates the underlying modules based on command-line
arguments and configuration files.


Configuration and overrides
---------------------------

By default, the CLI reads ``smb_invoicing_config.toml`` in the current
working directory when it exists, and falls back to built-in defaults
otherwise. Override the path with ``--config PATH``.

``--base-url`` and ``--token`` override the API location and the bearer
token for the current run only.


Commands
--------

report
    Show the Paid / Unpaid / Proforma cards and the monthly paid series.

        python -m smb_invoicing.cli report --paid-period lastMonth --currency EUR
        python -m smb_invoicing.cli report --unpaid-period all --display-mode both

    Each card has its own period (yesterday, lastWeek, lastMonth, lastYear,
    thisYear or all; dashed spellings such as ``last-month`` are accepted).
    Without a currency, totals show "00.00" and the series sums all
    currencies.

people list | edit ID | delete ID
    Contacts of the current user, with ``--search`` and ``--page``.

        python -m smb_invoicing.cli people list --search dupont --page 2
        python -m smb_invoicing.cli people edit 64ab... --telephone "+33 6 12 34 56 78"

companies list | currencies list | categories list

products list | add
        python -m smb_invoicing.cli products add --name Widget \\
            --category 64cd... --currency EUR --price 12.5


Display modes and output
------------------------

``display.mode`` in the configuration (overridden by ``--display-mode``):

- ``table``: print tables to stdout,
- ``csv``:   write CSV files only (``--output DIR``, default data/output),
- ``both``:  do both.

CSV files are named after their content with a timestamp suffix, e.g.
``report_cards_YYYY-MM-DD-HH-MM-SS.csv``.


Errors
------

API failures while *reading* are logged and the command continues with
the data it has (possibly none). Failures while *writing* and validation
errors are logged and the command exits with status 1.
"""

import argparse
import logging
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from . import __version__
from .aggregation import ReportSelection, resolve_currency
from .api import ApiClient, ApiError
from .claims import current_user_id
from .config import DEFAULT_CONFIG_FILE, AppConfig, default_app_config, load_app_config
from .people import (
    PersonChanges,
    delete_person,
    edit_person,
    fetch_companies,
    fetch_people,
    search_people,
)
from .periods import PERIOD_KEYS, normalize_period
from .products import NewProduct, add_product, fetch_categories, fetch_products
from .report import fetch_currencies, initial_state, load_report, select_currency
from .views import (
    categories_to_dataframe,
    companies_to_dataframe,
    currencies_to_dataframe,
    monthly_series_to_dataframe,
    paginate,
    people_to_dataframe,
    products_to_dataframe,
    report_cards_to_dataframe,
)

logger = logging.getLogger(__name__)

_PERIOD_CHOICES = list(PERIOD_KEYS) + ["last-week", "last-month", "last-year", "this-year"]


def _period_arg(value: str) -> str:
    if normalize_period(value) not in PERIOD_KEYS:
        raise argparse.ArgumentTypeError(
            f"invalid period {value!r} (choose from {', '.join(_PERIOD_CHOICES)})"
        )
    return value


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m smb_invoicing.cli",
        description=(
            "SMB Invoicing - Invoicing & CRM client for SMBs. "
            "Lists and edits contacts and products, and reports paid and "
            "unpaid invoice totals by currency and period."
        ),
    )

    # Generic options
    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of smb_invoicing and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the main TOML configuration file. If omitted, "
            f"'{DEFAULT_CONFIG_FILE}' in the current directory is used when present."
        ),
    )
    ap.add_argument(
        "--base-url",
        dest="base_url",
        help="Override the API base URL from the configuration.",
    )
    ap.add_argument(
        "--token",
        help="Bearer token to use instead of the configured one.",
    )
    ap.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=["table", "csv", "both"],
        help="Override the display.mode setting from the configuration file.",
    )
    ap.add_argument(
        "--output",
        dest="output_dir",
        help="Directory for CSV files when display mode includes 'csv' "
        "(default: data/output).",
    )

    subparsers = ap.add_subparsers(dest="command", metavar="command")

    # ------------------------------------------------------------------
    # report
    # ------------------------------------------------------------------
    report = subparsers.add_parser(
        "report", help="Paid/unpaid totals and monthly paid series."
    )
    for card in ("paid", "unpaid", "proforma"):
        report.add_argument(
            f"--{card}-period",
            dest=f"{card}_period",
            type=_period_arg,
            metavar="PERIOD",
            help=f"Period of the {card} card ({', '.join(PERIOD_KEYS)}).",
        )
    report.add_argument(
        "--currency",
        help="Currency to report in (name or id). Overrides report.currency.",
    )

    # ------------------------------------------------------------------
    # people
    # ------------------------------------------------------------------
    people = subparsers.add_parser("people", help="Manage contacts.")
    people_sub = people.add_subparsers(dest="people_command", metavar="people-command")

    people_list = people_sub.add_parser("list", help="List your contacts.")
    people_list.add_argument("--search", default="", help="Case-insensitive search.")
    people_list.add_argument("--page", type=int, default=1, help="Page number (1-based).")

    people_edit = people_sub.add_parser("edit", help="Edit a contact.")
    people_edit.add_argument("person_id", help="Id of the person to edit.")
    people_edit.add_argument("--first-name", dest="first_name")
    people_edit.add_argument("--last-name", dest="last_name")
    people_edit.add_argument("--company", help="Company id or name.")
    people_edit.add_argument("--country", help="Country name or ISO code.")
    people_edit.add_argument("--telephone")
    people_edit.add_argument("--email")

    people_delete = people_sub.add_parser("delete", help="Delete a contact.")
    people_delete.add_argument("person_id", help="Id of the person to delete.")

    # ------------------------------------------------------------------
    # companies / currencies / categories
    # ------------------------------------------------------------------
    for name, help_text in (
        ("companies", "List companies."),
        ("currencies", "List your active currencies."),
        ("categories", "List your product categories."),
    ):
        parser = subparsers.add_parser(name, help=help_text)
        sub = parser.add_subparsers(dest=f"{name}_command", metavar=f"{name}-command")
        sub.add_parser("list", help=help_text)

    # ------------------------------------------------------------------
    # products
    # ------------------------------------------------------------------
    products = subparsers.add_parser("products", help="List and add products.")
    products_sub = products.add_subparsers(
        dest="products_command", metavar="products-command"
    )
    products_sub.add_parser("list", help="List products.")
    products_add = products_sub.add_parser("add", help="Add a product.")
    products_add.add_argument("--name", required=True)
    products_add.add_argument("--category", required=True, help="Category id.")
    products_add.add_argument("--currency", required=True, help="e.g. USD")
    products_add.add_argument("--price", type=float, required=True)
    products_add.add_argument("--description", default="")
    products_add.add_argument("--reference", default="")

    return ap


def _make_client(config: AppConfig) -> ApiClient:
    """Build the API client (isolated so tests can swap the transport)."""
    return ApiClient(
        config.api.base_url,
        token=config.api.token,
        timeout=config.api.timeout,
    )


def _render(
    frames: dict[str, pd.DataFrame],
    display_mode: str,
    output_dir: Optional[str],
) -> None:
    """Print and/or export named DataFrames according to the display mode."""
    if display_mode in {"table", "both"}:
        for title, df in frames.items():
            print()
            print(f"=== {title.replace('_', ' ').capitalize()} ===")
            print(df.to_string(index=False))

    if display_mode in {"csv", "both"}:
        out = Path(output_dir) if output_dir else Path("data/output")
        out.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
        for title, df in frames.items():
            path = out / f"{title}_{timestamp}.csv"
            df.to_csv(path, index=False)
            print(f"Wrote {path} ({len(df)} rows)")


# ----------------------------------------------------------------------
# Command handlers
# ----------------------------------------------------------------------


def _handle_report(args, config: AppConfig, client: ApiClient, user_id, display_mode):
    """
    Handle the 'report' command.

    Card periods come from the CLI when given, otherwise from the
    configuration. The currency is resolved by id or name against the
    active currencies once they are loaded.
    """

    def _card_period(cli_value: Optional[str], default: Optional[str]) -> Optional[str]:
        if cli_value is None:
            return default
        key = normalize_period(cli_value)
        return None if key == "all" else key

    selection = ReportSelection(
        paid_period=_card_period(args.paid_period, config.report.paid_period),
        unpaid_period=_card_period(args.unpaid_period, config.report.unpaid_period),
        proforma_period=_card_period(args.proforma_period, config.report.proforma_period),
    )

    state = initial_state(selection, tz=config.report.timezone)
    state = load_report(client, user_id, state)

    wanted = args.currency or config.report.currency
    if wanted:
        currency = resolve_currency(state.currencies, wanted)
        if currency is None:
            print(f"Warning: unknown or inactive currency {wanted!r}; showing all currencies.")
        else:
            state = select_currency(state, currency.id)

    result = state.result
    label = result.currency.name if result.currency is not None else "Select Currency"
    print(f"Currency: {label}")
    print(
        f"Paid period: {result.paid_range.label} "
        f"({result.paid_range.start.date().isoformat()} → "
        f"{result.paid_range.end.date().isoformat()})"
    )

    _render(
        {
            "report_cards": report_cards_to_dataframe(result),
            "monthly_paid": monthly_series_to_dataframe(result, config.decimals),
        },
        display_mode,
        args.output_dir,
    )


def _handle_people(args, config: AppConfig, client: ApiClient, user_id, display_mode):
    subcmd = getattr(args, "people_command", None)

    if subcmd == "list":
        people = fetch_people(client, user_id)
        companies = fetch_companies(client)
        matches = search_people(people, companies, args.search)
        page = paginate(matches, args.page, config.page_size)
        if not page.items:
            print("No matching records found")
            return
        _render(
            {"people": people_to_dataframe(page.items, companies)},
            display_mode,
            args.output_dir,
        )
        print(f"Page {page.number} of {page.total_pages} ({page.total_items} contacts)")

    elif subcmd == "edit":
        people = fetch_people(client, user_id)
        person = next((p for p in people if p.id == args.person_id), None)
        if person is None:
            raise ValueError(f"Person with id {args.person_id} not found.")

        company_id = args.company
        if company_id:
            companies = fetch_companies(client, user_id)
            match = next(
                (c for c in companies if company_id in (c.id, c.name)), None
            )
            if match is None:
                raise ValueError(f"Company {company_id!r} not found among your companies.")
            company_id = match.id

        changes = PersonChanges(
            first_name=args.first_name,
            last_name=args.last_name,
            company_id=company_id,
            country=args.country,
            telephone=args.telephone,
            email=args.email,
        )
        edit_person(client, person, changes, user_id)
        print("Person updated successfully")

    elif subcmd == "delete":
        delete_person(client, args.person_id)
        print("Person deleted successfully")

    else:
        print(
            "No people subcommand specified. "
            "Available subcommands are: 'list', 'edit', 'delete'."
        )


def _handle_products(args, config: AppConfig, client: ApiClient, user_id, display_mode):
    subcmd = getattr(args, "products_command", None)

    if subcmd == "list":
        products = fetch_products(client)
        categories = fetch_categories(client, user_id)
        _render(
            {"products": products_to_dataframe(products, categories, config.decimals)},
            display_mode,
            args.output_dir,
        )

    elif subcmd == "add":
        new_product = NewProduct(
            name=args.name,
            category_id=args.category,
            currency=args.currency,
            price=args.price,
            description=args.description,
            reference=args.reference,
        )
        add_product(client, new_product, user_id)
        print("Product added successfully")

    else:
        print(
            "No products subcommand specified. "
            "Available subcommands are: 'list', 'add'."
        )


def _handle_listing(args, config: AppConfig, client: ApiClient, user_id, display_mode):
    """Handle 'companies list', 'currencies list' and 'categories list'."""
    command = args.command
    if getattr(args, f"{command}_command", None) != "list":
        print(f"No {command} subcommand specified. Available subcommands are: 'list'.")
        return

    if command == "companies":
        df = companies_to_dataframe(fetch_companies(client, user_id))
    elif command == "currencies":
        df = currencies_to_dataframe(fetch_currencies(client, user_id))
    else:
        df = categories_to_dataframe(fetch_categories(client, user_id))

    _render({command: df}, display_mode, args.output_dir)


_HANDLERS = {
    "report": _handle_report,
    "people": _handle_people,
    "products": _handle_products,
    "companies": _handle_listing,
    "currencies": _handle_listing,
    "categories": _handle_listing,
}


def _load_config(args, parser: argparse.ArgumentParser) -> AppConfig:
    try:
        if args.config_path:
            return load_app_config(args.config_path)
        if Path(DEFAULT_CONFIG_FILE).is_file():
            return load_app_config()
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))
    return default_app_config()


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the SMB Invoicing CLI.

    This function parses command-line arguments, loads the configuration,
    extracts the (unverified) user id from the bearer token, opens the API
    client and dispatches to the selected command handler.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"smb_invoicing version {__version__}")
        return

    if not args.command:
        parser.print_help()
        return

    config = _load_config(args, parser)
    _setup_logging(config.log_level)

    if args.base_url or args.token:
        config = replace(
            config,
            api=replace(
                config.api,
                base_url=args.base_url or config.api.base_url,
                token=args.token or config.api.token,
            ),
        )

    try:
        user_id = current_user_id(config.api.token)
    except ValueError as exc:
        parser.error(str(exc))
    if user_id is None:
        print("Warning: no token configured; requests are not scoped to a user.")

    display_mode = args.display_mode or config.display_mode
    handler = _HANDLERS[args.command]

    try:
        with _make_client(config) as client:
            handler(args, config, client, user_id, display_mode)
    except (ApiError, ValueError) as exc:
        logger.error("%s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
