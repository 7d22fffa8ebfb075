# SMB Invoicing - Invoicing & CRM client for SMBs
# Copyright (c) 2026 The SMB Invoicing authors
# Licensed under the MIT License. See LICENSE file for details.

"""
HTTP client for the invoicing REST API.

The API is an external collaborator: this module only issues requests and
returns the decoded JSON payloads. Normalization into typed records happens
in ``io.py``; business rules live in the service modules.

Endpoints used
--------------
    GET    /api/people[?createdBy=<id>]
    PUT    /api/people/<id>
    DELETE /api/people/<id>
    GET    /api/entreprise
    GET    /api/product
    POST   /api/product
    GET    /api/category?createdBy=<id>
    GET    /api/currency?createdBy=<id>
    GET    /api/invoices?createdBy=<id>

All transport errors, timeouts and non-2xx responses are raised as
ApiError. Requests are never retried.
"""

import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


class ApiError(RuntimeError):
    """A request to the REST API failed."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ApiClient:
    """
    Thin synchronous wrapper around ``httpx.Client``.

    Use it as a context manager so the underlying connection pool is closed:

        with ApiClient("http://localhost:5000", token=token) as client:
            invoices = client.list_invoices(user_id)

    ``transport`` can be supplied to plug an ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> Any:
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        try:
            response = self._client.request(method, path, params=params, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise ApiError(f"{method} {path} failed with HTTP {status}", status) from exc
        except httpx.HTTPError as exc:
            raise ApiError(f"{method} {path} failed: {exc}") from exc

        logger.debug("%s %s -> %s", method, path, response.status_code)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(f"{method} {path} returned invalid JSON") from exc

    def _get_list(self, path: str, params: Optional[dict[str, Any]] = None) -> list:
        data = self._request("GET", path, params=params)
        if not isinstance(data, list):
            raise ApiError(f"GET {path} did not return a JSON array")
        return data

    # ------------------------------------------------------------------
    # People
    # ------------------------------------------------------------------

    def list_people(self, created_by: Optional[str] = None) -> list[dict[str, Any]]:
        return self._get_list("/api/people", {"createdBy": created_by})

    def update_person(self, person_id: str, payload: dict[str, Any]) -> Any:
        return self._request("PUT", f"/api/people/{person_id}", json=payload)

    def delete_person(self, person_id: str) -> Any:
        return self._request("DELETE", f"/api/people/{person_id}")

    # ------------------------------------------------------------------
    # Companies, products, categories
    # ------------------------------------------------------------------

    def list_companies(self) -> list[dict[str, Any]]:
        return self._get_list("/api/entreprise")

    def list_products(self) -> list[dict[str, Any]]:
        return self._get_list("/api/product")

    def create_product(self, payload: dict[str, Any]) -> Any:
        return self._request("POST", "/api/product", json=payload)

    def list_categories(self, created_by: Optional[str]) -> list[dict[str, Any]]:
        return self._get_list("/api/category", {"createdBy": created_by})

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def list_currencies(self, created_by: Optional[str]) -> list[dict[str, Any]]:
        return self._get_list("/api/currency", {"createdBy": created_by})

    def list_invoices(self, created_by: Optional[str]) -> list[dict[str, Any]]:
        return self._get_list("/api/invoices", {"createdBy": created_by})
