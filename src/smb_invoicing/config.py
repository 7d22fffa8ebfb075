# SMB Invoicing - Invoicing & CRM client for SMBs
# Copyright (c) 2026 The SMB Invoicing authors
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for SMB Invoicing.

This module is responsible for:
- loading the main application configuration from a TOML file,
- resolving the bearer token (inline or from a token file),
- exposing typed dataclasses used by the rest of the application.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import]

from .claims import read_token_file
from .periods import is_known_period, normalize_period

DEFAULT_CONFIG_FILE = "smb_invoicing_config.toml"

_DISPLAY_MODES = {"table", "csv", "both"}


@dataclass(frozen=True)
class ApiConfig:
    """Where and how to reach the REST API."""

    base_url: str
    timeout: float
    token: Optional[str]


@dataclass(frozen=True)
class ReportConfig:
    """Default selections of the report dashboard."""

    paid_period: Optional[str]
    unpaid_period: Optional[str]
    proforma_period: Optional[str]
    currency: Optional[str]
    timezone: Optional[str]


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for SMB Invoicing.

    This aggregates:
    - the API configuration (base URL, timeout, bearer token),
    - the report defaults (per-card periods, currency, timezone),
    - the contacts list page size,
    - display options for tables and CSV exports,
    - the logging level.
    """

    api: ApiConfig
    report: ReportConfig
    page_size: int
    display_mode: str
    decimals: int
    log_level: str


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, Mapping):
        return {}
    return value


def _parse_period(section: Mapping[str, Any], key: str) -> Optional[str]:
    """
    Read a card period; "all" and an empty value both mean "no period".

    Raises:
        ValueError: if the period name is not recognized.
    """
    raw = section.get(key, "thisYear")
    if raw is None or raw == "":
        return None
    if not is_known_period(str(raw)):
        raise ValueError(f"Invalid period for 'report.{key}' in the configuration: {raw!r}")
    normalized = normalize_period(str(raw))
    return None if normalized == "all" else normalized


def _parse_api(api_section: Mapping[str, Any], auth_section: Mapping[str, Any],
               base_dir: Path) -> ApiConfig:
    base_url = str(api_section.get("base_url") or "http://localhost:5000")

    try:
        timeout = float(api_section.get("timeout", 10.0))
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid value for 'api.timeout' in the configuration. Expected a number."
        ) from exc

    token: Optional[str] = None
    token_raw = auth_section.get("token")
    token_file_raw = auth_section.get("token_file")
    if token_raw:
        token = str(token_raw).strip() or None
    elif token_file_raw:
        token_path = (base_dir / str(token_file_raw)).resolve()
        if not token_path.is_file():
            raise FileNotFoundError(f"Token file not found: {token_path}")
        token = read_token_file(token_path)

    return ApiConfig(base_url=base_url, timeout=timeout, token=token)


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the SMB Invoicing application configuration from a TOML file.

    Expected top-level sections in the TOML file
    --------------------------------------------
    [api]
        ``base_url`` of the REST API (default "http://localhost:5000") and
        request ``timeout`` in seconds (default 10).

    [auth]
        Either an inline ``token`` or a ``token_file`` containing the bearer
        token. The token is only decoded client-side, never validated.

    [report]
        Default ``paid_period``, ``unpaid_period`` and ``proforma_period``
        (yesterday, lastWeek, lastMonth, lastYear, thisYear or all; default
        thisYear), an optional default ``currency`` (name or id) and an
        optional IANA ``timezone`` used to read timezone-aware invoice dates.

    [people]
        ``page_size`` of the contacts list (default 5).

    [display]
        ``mode`` (table, csv or both) and number of ``decimals``.

    [logging]
        ``level`` (DEBUG, INFO, WARNING, ...; default WARNING).

    All file paths in the TOML are resolved relative to the directory of
    the TOML file itself.

    Parameters
    ----------
    config_path : str, optional
        Path to the TOML configuration file. Defaults to
        ``smb_invoicing_config.toml`` in the current directory.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent

    # 1) API and token
    api = _parse_api(_section(raw, "api"), _section(raw, "auth"), base_dir)

    # 2) Report defaults
    report_section = _section(raw, "report")
    currency_raw = report_section.get("currency")
    timezone_raw = report_section.get("timezone")
    report = ReportConfig(
        paid_period=_parse_period(report_section, "paid_period"),
        unpaid_period=_parse_period(report_section, "unpaid_period"),
        proforma_period=_parse_period(report_section, "proforma_period"),
        currency=str(currency_raw) if currency_raw else None,
        timezone=str(timezone_raw) if timezone_raw else None,
    )

    # 3) Contacts list
    people_section = _section(raw, "people")
    try:
        page_size = int(people_section.get("page_size", 5))
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid value for 'people.page_size' in the configuration. "
            "Expected an integer."
        ) from exc
    if page_size < 1:
        raise ValueError("'people.page_size' must be at least 1.")

    # 4) Display options
    display_section = _section(raw, "display")
    display_mode = str(display_section.get("mode", "table"))
    if display_mode not in _DISPLAY_MODES:
        raise ValueError(
            f"Invalid display mode {display_mode!r}, expected one of "
            f"{sorted(_DISPLAY_MODES)}."
        )
    try:
        decimals = int(display_section.get("decimals", 2))
    except (TypeError, ValueError):
        decimals = 2

    # 5) Logging
    logging_section = _section(raw, "logging")
    log_level = str(logging_section.get("level", "WARNING")).upper()

    return AppConfig(
        api=api,
        report=report,
        page_size=page_size,
        display_mode=display_mode,
        decimals=decimals,
        log_level=log_level,
    )


def default_app_config() -> AppConfig:
    """Configuration used when no TOML file is present."""
    return AppConfig(
        api=ApiConfig(base_url="http://localhost:5000", timeout=10.0, token=None),
        report=ReportConfig(
            paid_period="thisYear",
            unpaid_period="thisYear",
            proforma_period="thisYear",
            currency=None,
            timezone=None,
        ),
        page_size=5,
        display_mode="table",
        decimals=2,
        log_level="WARNING",
    )
