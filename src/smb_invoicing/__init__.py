# SMB Invoicing - Invoicing & CRM client for SMBs
# Copyright (c) 2026 The SMB Invoicing authors
# Licensed under the MIT License. See LICENSE file for details.

"""
SMB Invoicing
-------------

A Python client for a small-business invoicing/CRM REST API. Every command
is a thin presentation layer over the remote API: data is fetched, filtered
and aggregated client-side, then rendered as console tables or CSV files.

Main capabilities:
- a reporting dashboard: paid/unpaid invoice totals per currency, each for
  its own period (yesterday, last week, last month, last year, this year),
  and a 12-month series of paid amounts,
- contacts management: search, pagination, edition with phone-number and
  uniqueness validation, deletion,
- products: listing and creation, with their categories,
- companies and currencies listings.

The bearer token is only decoded to read the user id (untrusted claims);
authentication is the API's job.


Version: 0.1.0

Usage:
    python -m smb_invoicing.cli --help
"""

__all__ = [
    "aggregation",
    "api",
    "claims",
    "cli",
    "config",
    "io",
    "people",
    "periods",
    "products",
    "report",
    "views",
]

__version__ = "0.1.0"
