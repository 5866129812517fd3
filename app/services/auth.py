"""Caller identity taken from bearer token claims.

The gateway in front of this service verifies token signatures; here we only
read the payload to learn who is calling.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import jwt
from fastapi import HTTPException, Request

ROLE_PREFIX = "ROLE_"


@dataclass(frozen=True)
class Principal:
    owner_id: int | None
    wallet_address: str
    roles: frozenset[str] = field(default_factory=frozenset)


def decode_claims(token: str) -> dict | None:
    """Read the claims of a JWT without checking its signature. None if malformed."""
    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return None


def principal_from_claims(claims: dict) -> Principal | None:
    """Build a Principal from `sub`/`wallet`, `id` and `role` claims."""
    wallet = claims.get("sub") or claims.get("wallet")
    if not wallet:
        return None

    owner_id = None
    if claims.get("id") is not None:
        try:
            owner_id = int(claims["id"])
        except (TypeError, ValueError):
            return None

    roles = set()
    role = claims.get("role")
    if role:
        role = str(role)
        roles.add(role[len(ROLE_PREFIX):] if role.startswith(ROLE_PREFIX) else role)

    return Principal(owner_id=owner_id, wallet_address=str(wallet), roles=frozenset(roles))


def get_current_principal(request: Request) -> Principal:
    """Read the Authorization header and return the Principal or raise 401."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    claims = decode_claims(token.strip())
    principal = principal_from_claims(claims) if claims else None
    if principal is None:
        raise HTTPException(status_code=401, detail="Invalid token claims")
    return principal
