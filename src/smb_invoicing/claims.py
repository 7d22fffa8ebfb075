# SMB Invoicing - Invoicing & CRM client for SMBs
# Copyright (c) 2026 The SMB Invoicing authors
# Licensed under the MIT License. See LICENSE file for details.

"""
Untrusted claim extraction from the stored bearer token.

The token issued by the API is a JWT. The client only needs the ``AdminID``
claim to scope its requests (``createdBy``).

IMPORTANT: nothing here verifies the token signature. The decoded payload
is a set of *unverified* claims and must never be treated as proof of
identity; the API is responsible for authenticating every request.
"""

from pathlib import Path
from typing import Any, Optional

from jose import JWTError, jwt

USER_ID_CLAIM = "AdminID"


def decode_token(token: str) -> dict[str, Any]:
    """
    Return the claims of ``token`` without verifying its signature.

    Raises
    ------
    ValueError
        If the token is not a well-formed JWT or its payload is not a JSON
        object.
    """
    try:
        claims = jwt.get_unverified_claims(token.strip())
    except JWTError as exc:
        raise ValueError(f"Malformed token: {exc}") from exc
    return dict(claims)


def current_user_id(token: Optional[str]) -> Optional[str]:
    """Return the (unverified) user id carried by ``token``, if any."""
    if not token:
        return None
    value = decode_token(token).get(USER_ID_CLAIM)
    return None if value is None else str(value)


def read_token_file(path: Path) -> Optional[str]:
    """Read a persisted token; an empty file means "no token"."""
    content = path.read_text(encoding="utf-8").strip()
    return content or None
