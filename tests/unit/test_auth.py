import base64

import jwt
import pytest
from fastapi import HTTPException
from starlette.requests import Request

from app.services.auth import Principal, decode_claims, get_current_principal, principal_from_claims

GATEWAY_SECRET = "gateway-signing-secret-for-tests-only"


def _token(claims: dict) -> str:
    return jwt.encode(claims, GATEWAY_SECRET, algorithm="HS256")


def _request(headers: dict) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in headers.items()]
    return Request({"type": "http", "headers": raw})


def test_decode_claims_roundtrip():
    assert decode_claims(_token({"sub": "0xabc", "id": 3})) == {"sub": "0xabc", "id": 3}


def test_decode_claims_ignores_signature():
    token = jwt.encode({"sub": "0xabc"}, "some-other-gateway-secret-value-xyz", algorithm="HS256")
    assert decode_claims(token) == {"sub": "0xabc"}


@pytest.mark.parametrize("token", ["", "abc", "a.b", "a.!!!.c", "a.b.c.d"])
def test_decode_claims_malformed(token):
    assert decode_claims(token) is None


def test_decode_claims_non_object_payload():
    header, _, sig = _token({"sub": "x"}).split(".")
    payload = base64.urlsafe_b64encode(b"[1, 2]").rstrip(b"=").decode()
    assert decode_claims(f"{header}.{payload}.{sig}") is None


def test_principal_from_claims():
    p = principal_from_claims({"sub": "0xAbC", "id": "12", "role": "ROLE_OWNER"})
    assert p == Principal(owner_id=12, wallet_address="0xAbC", roles=frozenset({"OWNER"}))


def test_principal_wallet_claim_fallback():
    p = principal_from_claims({"wallet": "0xabc"})
    assert p.wallet_address == "0xabc"
    assert p.owner_id is None
    assert p.roles == frozenset()


def test_principal_requires_wallet():
    assert principal_from_claims({"id": 1}) is None


def test_principal_rejects_non_numeric_id():
    assert principal_from_claims({"sub": "0xabc", "id": "seven"}) is None


def test_get_current_principal_reads_bearer():
    req = _request({"Authorization": f"Bearer {_token({'sub': '0xabc', 'id': 1})}"})
    assert get_current_principal(req).wallet_address == "0xabc"


@pytest.mark.parametrize("header", [None, "Basic abc", "Bearer ", "Bearer not-a-jwt"])
def test_get_current_principal_rejects(header):
    req = _request({"Authorization": header} if header is not None else {})
    with pytest.raises(HTTPException) as info:
        get_current_principal(req)
    assert info.value.status_code == 401
