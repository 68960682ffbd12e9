"""
Decoding of the Static Web Apps client principal.

The platform authenticates the browser session and forwards the user as a
base64-encoded JSON document in the ``x-ms-client-principal`` header::

    {
        "identityProvider": "aad",
        "userId": "...",
        "userDetails": "jdoe_example.com#EXT#@tenant.onmicrosoft.com",
        "userRoles": ["anonymous", "authenticated"],
        "claims": [{"typ": "email", "val": "jdoe@example.com"}]
    }
"""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from src.errors import IdentityResolutionError

CLIENT_PRINCIPAL_HEADER = "x-ms-client-principal"


@dataclass(frozen=True)
class Claim:
    type: str
    value: str


@dataclass(frozen=True)
class PrincipalIdentity:
    raw_value: str
    claims: Optional[Tuple[Claim, ...]] = None
    identity_provider: Optional[str] = None
    user_id: Optional[str] = None
    user_roles: Tuple[str, ...] = field(default_factory=tuple)


def _parse_claims(items) -> Optional[Tuple[Claim, ...]]:
    if not isinstance(items, list):
        return None
    claims = []
    for item in items:
        if not isinstance(item, dict):
            continue
        claim_type = item.get("typ", item.get("type"))
        value = item.get("val", item.get("value"))
        if isinstance(claim_type, str) and isinstance(value, str):
            claims.append(Claim(type=claim_type, value=value))
    return tuple(claims)


def decode_client_principal(header_value: str) -> PrincipalIdentity:
    """
    Decode the ``x-ms-client-principal`` header.

    Args:
        header_value: Base64-encoded JSON principal

    Returns:
        PrincipalIdentity with ``raw_value`` taken from ``userDetails``

    Raises:
        IdentityResolutionError: header is not base64-encoded JSON
    """
    try:
        decoded = base64.b64decode(header_value, validate=False).decode("utf-8")
        data = json.loads(decoded)
    except (binascii.Error, UnicodeDecodeError, ValueError):
        raise IdentityResolutionError("Client principal header is malformed") from None

    if not isinstance(data, dict):
        raise IdentityResolutionError("Client principal header is malformed")

    roles = data.get("userRoles") or []
    return PrincipalIdentity(
        raw_value=str(data.get("userDetails") or ""),
        claims=_parse_claims(data.get("claims")),
        identity_provider=data.get("identityProvider"),
        user_id=data.get("userId"),
        user_roles=tuple(r for r in roles if isinstance(r, str)),
    )


def principal_from_headers(headers: Mapping[str, str]) -> Optional[PrincipalIdentity]:
    """Return the decoded principal, or None when the platform sent none."""
    header_value = headers.get(CLIENT_PRINCIPAL_HEADER)
    if not header_value:
        return None
    return decode_client_principal(header_value)
