"""Acquisition and validation of Status List Tokens.

A token is fetched, its signature verified, its envelope parsed, its media type
checked and its claims validated, in that order. The first failure is raised; nothing
is retried here.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
import logging
from typing import Any, ClassVar, Optional, Protocol, Tuple

from .clock import Clock, SystemClock, as_utc
from .cwt import CoseProtectedHeader, parse_cwt
from .errors import (
    ClaimsValidationError,
    FetchFailed,
    InvalidSignature,
    MalformedToken,
    WrongMediaType,
)
from .fetch import RawToken, StatusListTokenFormat, TokenFetcher
from .jwt import JwtHeader, parse_jwt
from .model import StatusListTokenClaims
from .signature import SignatureVerifier
from .validation import NO_SKEW, ensure_clock_skew, ensure_valid

LOGGER = logging.getLogger(__name__)


class GetStatusListToken(Protocol):
    """Protocol defining the status list token retrieving callable."""

    async def __call__(
        self, uri: str, at: Optional[datetime] = None
    ) -> StatusListTokenClaims:
        """Return the validated claims of the Status List Token served at uri."""
        ...


class StatusListTokenAcquirer(ABC):
    """Steps shared by the JWT and CWT variants."""

    token_format: ClassVar[StatusListTokenFormat]

    def __init__(
        self,
        fetcher: TokenFetcher,
        signature_verifier: SignatureVerifier,
        clock: Optional[Clock] = None,
        allowed_clock_skew: timedelta = NO_SKEW,
    ):
        self.fetcher = fetcher
        self.signature_verifier = signature_verifier
        self.clock = clock or SystemClock()
        self.allowed_clock_skew = ensure_clock_skew(allowed_clock_skew)

    async def __call__(
        self, uri: str, at: Optional[datetime] = None
    ) -> StatusListTokenClaims:
        """Return the validated claims of the Status List Token served at uri.

        Args:
            uri: REQUIRED. Location of the Status List Token, which is also the
                subject the token must carry.

            at: OPTIONAL. Time point for which the status is requested. It is sent to
                the status list provider, so omit it for routine checks.
        """
        if at is not None:
            at = as_utc(at)

        token = await self.fetch(uri, at)
        validation_time = at or as_utc(self.clock.now())
        LOGGER.debug(
            "Validating %s from %s at %s", self.token_format.name, uri, validation_time
        )

        await self.verify_signature(uri, token, validation_time)

        header, claims = self.parse(token)
        self.ensure_media_type(header)

        try:
            return ensure_valid(claims, uri, validation_time, self.allowed_clock_skew)
        except ClaimsValidationError as err:
            LOGGER.warning("Rejected status list token from %s: %s", uri, err)
            raise

    async def fetch(self, uri: str, at: Optional[datetime]) -> RawToken:
        try:
            return await self.fetcher(uri, self.token_format, at)
        except FetchFailed:
            raise
        except Exception as err:
            raise FetchFailed(uri, str(err)) from err

    async def verify_signature(self, uri: str, token: RawToken, at: datetime):
        try:
            await self.signature_verifier(token, at)
        except InvalidSignature as err:
            LOGGER.warning("Invalid signature on status list token from %s", uri)
            if err.uri is not None:
                raise
            raise InvalidSignature(str(err), uri) from err.__cause__
        except Exception as err:
            LOGGER.warning("Invalid signature on status list token from %s", uri)
            raise InvalidSignature(
                f"Invalid {self.token_format.name} signature: {err}", uri
            ) from err

    @abstractmethod
    def parse(self, token: RawToken) -> Tuple[Any, StatusListTokenClaims]:
        """Decode the envelope into its header and claims."""

    @abstractmethod
    def ensure_media_type(self, header: Any):
        """Raise WrongMediaType unless the header declares a status list token."""

    def _ensure_type(self, actual: Any):
        expected = self.token_format.media_subtype
        if actual not in (expected, self.token_format.media_type):
            LOGGER.warning("Unexpected status list token type %r", actual)
            raise WrongMediaType(expected, actual)


class JwtStatusListTokenAcquirer(StatusListTokenAcquirer):
    """Acquire Status List Tokens in JWT format."""

    token_format = StatusListTokenFormat.JWT

    def parse(self, token: RawToken) -> Tuple[JwtHeader, StatusListTokenClaims]:
        if isinstance(token, bytes):
            try:
                token = token.decode()
            except UnicodeDecodeError as err:
                raise MalformedToken("JWT must be valid UTF-8") from err
        return parse_jwt(token, JwtHeader.load, StatusListTokenClaims.from_jwt_payload)

    def ensure_media_type(self, header: JwtHeader):
        self._ensure_type(header.typ)


class CwtStatusListTokenAcquirer(StatusListTokenAcquirer):
    """Acquire Status List Tokens in CWT format."""

    token_format = StatusListTokenFormat.CWT

    def parse(self, token: RawToken) -> Tuple[CoseProtectedHeader, StatusListTokenClaims]:
        if isinstance(token, str):
            raise MalformedToken("CWT must be bytes")
        return parse_cwt(
            token, CoseProtectedHeader.load, StatusListTokenClaims.from_cwt_payload
        )

    def ensure_media_type(self, header: CoseProtectedHeader):
        self._ensure_type(header.type)
