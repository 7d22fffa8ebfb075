# SMB Invoicing - Invoicing & CRM client for SMBs
# Copyright (c) 2026 The SMB Invoicing authors
# Licensed under the MIT License. See LICENSE file for details.

"""Products and product categories services."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Optional

from .api import ApiClient, ApiError
from .io import Category, Product, category_from_api, product_from_api

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewProduct:
    """Fields entered to create a product (``category_id`` is a category id)."""

    name: str
    category_id: str
    currency: str
    price: float
    description: str = ""
    reference: str = ""

    def to_api_payload(self, user_id: Optional[str]) -> dict[str, Any]:
        return {
            "name": self.name,
            "productCategory": self.category_id,
            "currency": self.currency,
            "price": self.price,
            "description": self.description,
            "reference": self.reference,
            "createdBy": user_id,
        }


def fetch_categories(
    client: ApiClient,
    user_id: Optional[str],
    previous: Sequence[Category] = (),
) -> list[Category]:
    try:
        raw = client.list_categories(user_id)
    except ApiError as exc:
        logger.error("Error fetching categories: %s", exc)
        return list(previous)
    return [category_from_api(r) for r in raw]


def fetch_products(
    client: ApiClient,
    previous: Sequence[Product] = (),
) -> list[Product]:
    try:
        raw = client.list_products()
    except ApiError as exc:
        logger.error("Error fetching products: %s", exc)
        return list(previous)
    return [product_from_api(r) for r in raw]


def add_product(client: ApiClient, product: NewProduct, user_id: Optional[str]) -> Any:
    """
    Create a product owned by ``user_id``.

    Raises
    ------
    ValueError
        If the name is empty or the price is negative.
    ApiError
        If the API rejects the request.
    """
    if not product.name.strip():
        raise ValueError("Product name is required.")
    if product.price < 0:
        raise ValueError("Product price cannot be negative.")

    created = client.create_product(product.to_api_payload(user_id))
    logger.info("Product %r added.", product.name)
    return created
