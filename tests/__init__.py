from datetime import datetime, timezone
from typing import Any, Callable, Optional

import cbor2

from token_status_verifier.bit_array import BitArray
from token_status_verifier.cwt import ALG, KID, TYP
from token_status_verifier.encoding import b64url_encode, dict_to_b64
from token_status_verifier.model import (
    IAT,
    STATUS_LIST,
    SUB,
    StatusList,
)

URI = "https://example.com/statuslists/1"
ISSUED_AT = datetime(2024, 1, 1, tzinfo=timezone.utc)
NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)

KNOWN_ALGS_TO_CWT_ALG = {
    "ES256": -7,
    "ES384": -35,
    "ES512": -36,
    "EdDSA": -8,
}


def trivial_signer(payload: bytes) -> bytes:
    return b"signed"


def trivial_verifier(payload: bytes, signature: bytes) -> bool:
    """Trivial verifier: always says that the signature is valid."""
    return True


def example_list() -> BitArray:
    return BitArray(1, b"\xb9\xa3")


def jwt_claims(
    lst: Optional[BitArray] = None,
    *,
    sub: str = URI,
    iat: datetime = ISSUED_AT,
    exp: Optional[datetime] = None,
    ttl: Optional[int] = None,
) -> dict:
    lst = lst or example_list()
    payload: dict = {
        "iss": "https://example.com",
        "sub": sub,
        "iat": int(iat.timestamp()),
        "status_list": StatusList(lst.bits, lst.compressed()).dump(),
    }
    if exp is not None:
        payload["exp"] = int(exp.timestamp())
    if ttl is not None:
        payload["ttl"] = ttl
    return payload


def issue_jwt(
    payload: dict,
    *,
    signer: Callable[[bytes], bytes] = trivial_signer,
    alg: str = "ES256",
    kid: str = "12",
    typ: Optional[str] = "statuslist+jwt",
) -> str:
    """Sign a JWT payload producing a compact serialized token."""
    headers: dict = {"alg": alg, "kid": kid}
    if typ is not None:
        headers["typ"] = typ
    signed_payload = f"{dict_to_b64(headers).decode()}.{dict_to_b64(payload).decode()}"
    signature = signer(signed_payload.encode())
    return f"{signed_payload}.{b64url_encode(signature).decode()}"


def cwt_claims(
    lst: Optional[BitArray] = None,
    *,
    sub: str = URI,
    iat: datetime = ISSUED_AT,
    embed_status_list: bool = False,
    **extra: Any,
) -> dict:
    lst = lst or example_list()
    status_list: Any = {"bits": lst.bits.value, "lst": lst.compressed()}
    if embed_status_list:
        status_list = cbor2.dumps(status_list)
    return {
        1: "https://example.com",
        SUB: sub,
        IAT: int(iat.timestamp()),
        STATUS_LIST: status_list,
        **extra,
    }


def issue_cwt(
    payload: dict,
    *,
    signer: Callable[[bytes], bytes] = trivial_signer,
    alg: str = "ES256",
    kid: bytes = b"12",
    typ: Optional[Any] = "statuslist+cwt",
    tag: int = 18,
) -> bytes:
    """Sign a CWT payload producing a tagged COSE_Sign1 structure."""
    protected: dict = {ALG: KNOWN_ALGS_TO_CWT_ALG[alg]}
    if typ is not None:
        protected[TYP] = typ
    encoded_protected = cbor2.dumps(protected)
    encoded_payload = cbor2.dumps(payload)
    signature = signer(cbor2.dumps(["Signature1", encoded_protected, b"", encoded_payload]))
    cose_sign1 = [encoded_protected, {KID: kid}, encoded_payload, signature]
    return cbor2.dumps(cbor2.CBORTag(tag, cose_sign1))
