"""Token Status List Verifier.

Python implementation of the relying party side of Token Status List: fetch a Status
List Token (JWT or CWT), verify and validate it, and read the status of a Referenced
Token from its compressed status list.

This implementation is based on the draft found here:
https://datatracker.ietf.org/doc/draft-ietf-oauth-status-list/
"""

from .bit_array import BitArray, position_of, read_status, read_status_byte
from .clock import Clock, FixedClock, SystemClock
from .encoding import b64url_decode, b64url_encode, zlib_compress, zlib_decompress
from .errors import (
    ClaimsValidationError,
    DecodeError,
    DecompressionError,
    Expired,
    FetchFailed,
    InvalidArgument,
    InvalidSignature,
    MalformedToken,
    NotYetValid,
    OutOfRange,
    StatusListError,
    SubjectMismatch,
    WrongMediaType,
)
from .fetch import RequestsTokenFetcher, StatusListTokenFormat, TokenFetcher
from .model import StatusList, StatusListTokenClaims, TimeToLive
from .signature import (
    IGNORE_SIGNATURE,
    CwtSignatureVerifier,
    JwtSignatureVerifier,
    SignatureVerifier,
    TokenVerifier,
)
from .status import (
    INVALID,
    SUSPENDED,
    VALID,
    BitsPerStatus,
    Status,
    StatusIndex,
    StatusReference,
    StatusType,
    is_application_specific,
)
from .token import (
    CwtStatusListTokenAcquirer,
    GetStatusListToken,
    JwtStatusListTokenAcquirer,
)
from .verifier import TokenStatusListVerifier

__all__ = [
    "BitArray",
    "BitsPerStatus",
    "ClaimsValidationError",
    "Clock",
    "CwtSignatureVerifier",
    "CwtStatusListTokenAcquirer",
    "DecodeError",
    "DecompressionError",
    "Expired",
    "FetchFailed",
    "FixedClock",
    "GetStatusListToken",
    "IGNORE_SIGNATURE",
    "INVALID",
    "InvalidArgument",
    "InvalidSignature",
    "JwtSignatureVerifier",
    "JwtStatusListTokenAcquirer",
    "MalformedToken",
    "NotYetValid",
    "OutOfRange",
    "RequestsTokenFetcher",
    "SUSPENDED",
    "SignatureVerifier",
    "Status",
    "StatusIndex",
    "StatusList",
    "StatusListError",
    "StatusListTokenClaims",
    "StatusListTokenFormat",
    "StatusReference",
    "StatusType",
    "SubjectMismatch",
    "SystemClock",
    "TimeToLive",
    "TokenFetcher",
    "TokenStatusListVerifier",
    "TokenVerifier",
    "VALID",
    "WrongMediaType",
    "b64url_decode",
    "b64url_encode",
    "is_application_specific",
    "position_of",
    "read_status",
    "read_status_byte",
    "zlib_compress",
    "zlib_decompress",
]
