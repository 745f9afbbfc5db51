"""Base64url and zlib helpers shared by the parsers and the status list."""

import asyncio
import base64
import binascii
import json
from typing import Protocol, Union
import zlib

from .errors import DecodeError, DecompressionError


def b64url_decode(value: Union[str, bytes]) -> bytes:
    """Return the decoded base64 url encoded value, without padding."""
    if isinstance(value, str):
        value = value.encode()

    if b"=" in value:
        raise DecodeError("base64url value must not be padded")

    padding_needed = 4 - (len(value) % 4)
    if padding_needed != 4:
        value += b"=" * padding_needed

    try:
        return base64.b64decode(value, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as err:
        raise DecodeError(f"Invalid base64url value: {err}") from err


def b64url_encode(value: bytes) -> bytes:
    """Return the base64 url encoded value, without padding."""
    return base64.urlsafe_b64encode(value).rstrip(b"=")


def dict_to_b64(value: dict) -> bytes:
    """Transform a dictionary into base64url encoded json dump of dictionary."""
    return b64url_encode(json.dumps(value, separators=(",", ":")).encode())


class Compressor(Protocol):
    """Protocol defining the compressing callable."""

    def __call__(self, data: bytes) -> bytes:
        """Compress data using ZLIB/DEFLATE."""
        ...


class Decompressor(Protocol):
    """Protocol defining the decompressing callable."""

    async def __call__(self, data: bytes) -> bytes:
        """Inflate ZLIB/DEFLATE compressed data."""
        ...


def zlib_compress(data: bytes) -> bytes:
    """Compress using the highest compression level."""
    return zlib.compress(data, level=9)


def inflate(data: bytes) -> bytes:
    """Decompress zlib data, raising DecompressionError on corrupt input."""
    try:
        return zlib.decompress(data)
    except zlib.error as err:
        raise DecompressionError(f"Unable to decompress status list: {err}") from err


async def zlib_decompress(data: bytes) -> bytes:
    """Decompress off the event loop."""
    return await asyncio.to_thread(inflate, data)
