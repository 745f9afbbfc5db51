"""Resolve the status of a Referenced Token from its Status Reference."""

from datetime import datetime
import logging
from typing import TYPE_CHECKING, Optional

from .bit_array import read_status
from .encoding import Decompressor, zlib_decompress
from .errors import DecompressionError
from .fetch import RequestsTokenFetcher, StatusListTokenFormat, TokenFetcher
from .signature import SignatureVerifier
from .status import Status, StatusIndex, StatusReference
from .token import (
    CwtStatusListTokenAcquirer,
    GetStatusListToken,
    JwtStatusListTokenAcquirer,
)

if TYPE_CHECKING:
    from .config import VerifierSettings

LOGGER = logging.getLogger(__name__)


class TokenStatusListVerifier:
    """Look up statuses in remotely hosted Status List Tokens.

    Every call fetches, verifies and decompresses the status list again; nothing is
    cached between calls.
    """

    def __init__(
        self,
        get_status_list_token: GetStatusListToken,
        decompress: Decompressor = zlib_decompress,
    ):
        self.get_status_list_token = get_status_list_token
        self.decompress = decompress

    @classmethod
    def from_settings(
        cls,
        settings: "VerifierSettings",
        signature_verifier: SignatureVerifier,
        fetcher: Optional[TokenFetcher] = None,
    ) -> "TokenStatusListVerifier":
        """Assemble a verifier fetching tokens over HTTP."""
        fetcher = fetcher or RequestsTokenFetcher(timeout=settings.http_timeout_seconds)
        if settings.token_format is StatusListTokenFormat.CWT:
            acquirer_class = CwtStatusListTokenAcquirer
        else:
            acquirer_class = JwtStatusListTokenAcquirer

        return cls(
            acquirer_class(
                fetcher,
                signature_verifier,
                allowed_clock_skew=settings.allowed_clock_skew,
            )
        )

    async def status(
        self, reference: StatusReference, at: Optional[datetime] = None
    ) -> Status:
        """Return the status of the referenced token.

        Args:
            reference: REQUIRED. The `status_list` claim of the Referenced Token.

            at: OPTIONAL. Time point to check the status at. Providing it may reveal
                the time point to the status list provider; prefer `current_status`.

        Returns:
            The status found at the reference's index.
        """
        claims = await self.get_status_list_token(reference.uri, at)
        status_list = claims.status_list
        try:
            lst = await status_list.decode_statuses(self.decompress)
        except DecompressionError:
            raise
        except Exception as err:
            raise DecompressionError(f"Unable to decompress status list: {err}") from err
        status = read_status(status_list.bits, lst, reference.index)
        LOGGER.debug("Status of %s[%s] is %r", reference.uri, reference.index, status)
        return status

    async def current_status(self, reference: StatusReference) -> Status:
        """Return the status of the referenced token now."""
        return await self.status(reference, at=None)

    async def status_of(
        self, idx: int, uri: str, at: Optional[datetime] = None
    ) -> Status:
        return await self.status(StatusReference(StatusIndex(idx), uri), at)

    async def is_valid(
        self, reference: StatusReference, at: Optional[datetime] = None
    ) -> bool:
        """Return true only when the status is VALID; failures are raised."""
        return (await self.status(reference, at)).is_valid
