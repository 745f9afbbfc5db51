"""Signature verification of Status List Tokens.

The algorithm is supplied by the caller. This module only defines the shape of the
verifying callables and adapters locating the signed bytes inside a JWT or a CWT.
"""

import asyncio
from datetime import datetime
from typing import Protocol, Union

from .cwt import CoseSign1
from .encoding import b64url_decode
from .errors import InvalidSignature, MalformedToken, StatusListError
from .jwt import jwt_parts


class TokenVerifier(Protocol):
    """Protocol defining the verifying callable."""

    def __call__(self, payload: bytes, signature: bytes) -> bool:
        """Verify the signature of the payload. Returns true if the signature is valid."""
        ...


class SignatureVerifier(Protocol):
    """Protocol defining the status list token signature verifier."""

    async def __call__(self, token: Union[str, bytes], at: datetime) -> None:
        """Verify the token signature as of `at`, raising if it is invalid."""
        ...


class IgnoreSignature:
    """Accept every token. Only for tests or when trust is established otherwise."""

    async def __call__(self, token: Union[str, bytes], at: datetime) -> None:
        return None


IGNORE_SIGNATURE = IgnoreSignature()


class JwtSignatureVerifier:
    """Verify a compact JWT by handing its JWS signing input to a TokenVerifier."""

    def __init__(self, verifier: TokenVerifier):
        self.verifier = verifier

    def verify(self, token: Union[str, bytes]) -> bool:
        if isinstance(token, bytes):
            token = token.decode()
        header, payload, signature = jwt_parts(token.strip())
        return self.verifier(f"{header}.{payload}".encode(), b64url_decode(signature))

    async def __call__(self, token: Union[str, bytes], at: datetime) -> None:
        try:
            valid = await asyncio.to_thread(self.verify, token)
        except (StatusListError, ValueError) as err:
            raise InvalidSignature(f"Unable to verify JWT signature: {err}") from err
        if not valid:
            raise InvalidSignature("Invalid JWT signature")


class CwtSignatureVerifier:
    """Verify a COSE_Sign1 by handing its Sig_structure to a TokenVerifier."""

    def __init__(self, verifier: TokenVerifier, external_aad: bytes = b""):
        self.verifier = verifier
        self.external_aad = external_aad

    def verify(self, token: bytes) -> bool:
        if not isinstance(token, bytes):
            raise MalformedToken("CWT must be bytes")
        cose_sign1 = CoseSign1.loads(token)
        return self.verifier(
            cose_sign1.signing_input(self.external_aad), cose_sign1.signature
        )

    async def __call__(self, token: Union[str, bytes], at: datetime) -> None:
        try:
            valid = await asyncio.to_thread(self.verify, token)
        except (StatusListError, ValueError) as err:
            raise InvalidSignature(f"Unable to verify CWT signature: {err}") from err
        if not valid:
            raise InvalidSignature("Invalid CWT signature")
