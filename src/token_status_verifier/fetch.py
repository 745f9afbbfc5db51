"""Retrieval of Status List Tokens."""

import asyncio
from datetime import datetime
from enum import Enum
import logging
from typing import Optional, Protocol, Union

import requests as r

from .errors import FetchFailed

LOGGER = logging.getLogger(__name__)

TIME = "time"

MEDIA_SUBTYPE_STATUS_LIST_JWT = "statuslist+jwt"
MEDIA_SUBTYPE_STATUS_LIST_CWT = "statuslist+cwt"
MEDIA_TYPE_STATUS_LIST_JWT = f"application/{MEDIA_SUBTYPE_STATUS_LIST_JWT}"
MEDIA_TYPE_STATUS_LIST_CWT = f"application/{MEDIA_SUBTYPE_STATUS_LIST_CWT}"

RawToken = Union[str, bytes]


class StatusListTokenFormat(Enum):
    """Envelope of a Status List Token."""

    JWT = "jwt"
    CWT = "cwt"

    @property
    def media_type(self) -> str:
        if self is StatusListTokenFormat.JWT:
            return MEDIA_TYPE_STATUS_LIST_JWT
        return MEDIA_TYPE_STATUS_LIST_CWT

    @property
    def media_subtype(self) -> str:
        if self is StatusListTokenFormat.JWT:
            return MEDIA_SUBTYPE_STATUS_LIST_JWT
        return MEDIA_SUBTYPE_STATUS_LIST_CWT


class TokenFetcher(Protocol):
    """Protocol defining the token retrieving callable."""

    async def __call__(
        self,
        uri: str,
        token_format: StatusListTokenFormat,
        at: Optional[datetime] = None,
    ) -> RawToken:
        """Return the raw token served at uri: str for JWT, bytes for CWT."""
        ...


class RequestsTokenFetcher:
    """Fetch Status List Tokens over HTTP using requests.

    Requests are blocking, so they are run in a worker thread.
    """

    def __init__(self, session: Optional[r.Session] = None, timeout: float = 30.0):
        self.session = session if session is not None else r.Session()
        self.timeout = timeout

    def get(
        self,
        uri: str,
        token_format: StatusListTokenFormat,
        at: Optional[datetime] = None,
    ) -> RawToken:
        """Retrieve the token, blocking until the response is read."""
        params = {}
        if at is not None:
            # Sending the time point may disclose it to the status list provider
            params[TIME] = int(at.timestamp())

        LOGGER.debug("Fetching %s status list token from %s", token_format.name, uri)
        try:
            response = self.session.get(
                uri,
                headers={"Accept": token_format.media_type},
                params=params or None,
                timeout=self.timeout,
            )
        except r.RequestException as err:
            raise FetchFailed(uri, str(err)) from err

        if not 200 <= response.status_code < 300:
            raise FetchFailed(
                uri, f"Got status {response.status_code}", response.status_code
            )

        if token_format is StatusListTokenFormat.JWT:
            return response.text.strip()
        return response.content

    async def __call__(
        self,
        uri: str,
        token_format: StatusListTokenFormat,
        at: Optional[datetime] = None,
    ) -> RawToken:
        return await asyncio.to_thread(self.get, uri, token_format, at)
