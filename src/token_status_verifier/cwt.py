"""COSE_Sign1 protected header and payload extraction.

A CWT status list token is a CBOR tag 18 wrapping
`[protected: bstr, unprotected: map, payload: bstr, signature: bstr]`. Protected header
and payload are themselves CBOR encoded and are decoded independently.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple, TypeVar

import cbor2

from .errors import MalformedToken, StatusListError

# COSE Headers
ALG = 1
KID = 4
TYP = 16

COSE_SIGN1_TAG = 18

H = TypeVar("H")
P = TypeVar("P")


@dataclass(frozen=True)
class CoseProtectedHeader:
    """The protected header fields needed to accept a Status List Token."""

    alg: Optional[Any] = None
    type: Optional[Any] = None

    @classmethod
    def load(cls, value: Mapping) -> "CoseProtectedHeader":
        """Parse the decoded protected header."""
        if not isinstance(value, Mapping):
            raise MalformedToken("COSE protected header must be a map")

        return cls(alg=value.get(ALG), type=value.get(TYP))


@dataclass(frozen=True)
class CoseSign1:
    """The four elements of a COSE_Sign1 structure."""

    protected: bytes
    unprotected: dict
    payload: bytes
    signature: bytes

    @classmethod
    def loads(cls, data: bytes) -> "CoseSign1":
        """Decode a tagged COSE_Sign1 structure."""
        try:
            obj = cbor2.loads(data)
        except (cbor2.CBORDecodeError, ValueError, TypeError) as err:
            raise MalformedToken(f"Invalid CBOR: {err}") from err

        if not isinstance(obj, cbor2.CBORTag):
            raise MalformedToken("CWT must be a tagged COSE_Sign1 structure")

        if obj.tag != COSE_SIGN1_TAG:
            raise MalformedToken(
                f"Expected COSE_Sign1 tag {COSE_SIGN1_TAG} but found {obj.tag}"
            )

        # cbor2 6 decodes arrays inside tags as tuples and maps as frozendict
        if not isinstance(obj.value, (list, tuple)) or len(obj.value) != 4:
            raise MalformedToken("COSE_Sign1 must be an array of 4 elements")

        protected, unprotected, payload, signature = obj.value
        if not isinstance(protected, bytes):
            raise MalformedToken("COSE_Sign1 protected header must be a byte string")
        if not isinstance(unprotected, Mapping):
            raise MalformedToken("COSE_Sign1 unprotected header must be a map")
        if not isinstance(payload, bytes):
            raise MalformedToken("COSE_Sign1 payload must be a byte string")
        if not isinstance(signature, bytes):
            raise MalformedToken("COSE_Sign1 signature must be a byte string")

        return cls(protected, dict(unprotected), payload, signature)

    def signing_input(self, external_aad: bytes = b"") -> bytes:
        """Return the Sig_structure over which the signature was produced."""
        return cbor2.dumps(["Signature1", self.protected, external_aad, self.payload])


def cose_sign1_signing_input(data: bytes, external_aad: bytes = b"") -> bytes:
    """Return the to-be-signed bytes of an encoded COSE_Sign1 structure."""
    return CoseSign1.loads(data).signing_input(external_aad)


def _decode(value: bytes, what: str) -> Any:
    if not value:
        # An empty protected header is the zero length byte string
        return {}
    try:
        decoded = cbor2.loads(value)
    except (cbor2.CBORDecodeError, ValueError, TypeError) as err:
        raise MalformedToken(f"Invalid CBOR in {what}: {err}") from err
    if isinstance(decoded, Mapping):
        return dict(decoded)
    return decoded


def parse_cwt(
    data: bytes,
    header_loader: Callable[[dict], H],
    payload_loader: Callable[[dict], P],
) -> Tuple[H, P]:
    """Decode protected header and payload of a CWT into caller specified types.

    Args:
        data: REQUIRED. The encoded, tagged COSE_Sign1 structure.

        header_loader: REQUIRED. Maps the decoded protected header to the desired type.

        payload_loader: REQUIRED. Maps the decoded claims set to the desired type.

    Returns:
        Tuple of the loaded protected header and payload.
    """
    if not isinstance(data, (bytes, bytearray)):
        raise MalformedToken("CWT must be bytes")

    cose_sign1 = CoseSign1.loads(bytes(data))
    header = _decode(cose_sign1.protected, "protected header")
    payload = _decode(cose_sign1.payload, "payload")

    try:
        return header_loader(header), payload_loader(payload)
    except MalformedToken:
        raise
    except (StatusListError, ValueError, TypeError, KeyError) as err:
        raise MalformedToken(f"Invalid CWT contents: {err}") from err
