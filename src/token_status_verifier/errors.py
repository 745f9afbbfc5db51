"""Errors raised while resolving the status of a Referenced Token."""

from datetime import datetime, timedelta
from typing import Any, Optional


class StatusListError(Exception):
    """Base class for every failure surfaced by this package."""


class InvalidArgument(StatusListError, ValueError):
    """Raised when a value object is constructed from malformed input."""


class DecodeError(StatusListError):
    """Raised when a base64url value cannot be decoded."""


class DecompressionError(StatusListError):
    """Raised when the compressed status list is not valid zlib/deflate data."""


class OutOfRange(StatusListError, IndexError):
    """Raised when an index points past the end of the decompressed status list."""

    def __init__(self, index: int, size: int):
        self.index = index
        self.size = size
        super().__init__(
            f"Index {index} is out of range for status list of {size} bytes"
        )


class FetchFailed(StatusListError):
    """Raised when the status list token could not be retrieved."""

    def __init__(self, uri: str, message: str, status_code: Optional[int] = None):
        self.uri = uri
        self.status_code = status_code
        super().__init__(f"Unable to fetch status list token from {uri}: {message}")


class InvalidSignature(StatusListError):
    """Raised when the signature of a status list token is rejected."""

    def __init__(
        self,
        message: str = "Invalid signature on status list token",
        uri: Optional[str] = None,
    ):
        self.uri = uri
        super().__init__(message if uri is None else f"{message} ({uri})")


class MalformedToken(StatusListError):
    """Raised when a JWT or CWT envelope, or its claims, cannot be parsed."""


class WrongMediaType(StatusListError):
    """Raised when the token's declared type is not a status list media type."""

    def __init__(self, expected: str, actual: Any):
        self.expected = expected
        self.actual = actual
        if actual is None:
            message = f"Missing token type, expected {expected}"
        else:
            message = f"Wrong token type: expected {expected} but found {actual!r}"
        super().__init__(message)


class ClaimsValidationError(StatusListError):
    """Raised when the claims of a status list token fail validation."""


class SubjectMismatch(ClaimsValidationError):
    """Raised when `sub` does not match the uri the token was fetched from."""

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Wrong `sub` claim. Expected: `{expected}`, actual: `{actual}`"
        )


class NotYetValid(ClaimsValidationError):
    """Raised when a token was issued after the validation time."""

    def __init__(self, issued_at: datetime, validation_time: datetime, skew: timedelta):
        self.issued_at = issued_at
        self.validation_time = validation_time
        self.skew = skew
        super().__init__(
            f"Status list token issued ({issued_at.isoformat()}) after validation "
            f"time {validation_time.isoformat()} (allowed skew {skew})"
        )


class Expired(ClaimsValidationError):
    """Raised when a token expired before the validation time."""

    def __init__(
        self, expiration_time: datetime, validation_time: datetime, skew: timedelta
    ):
        self.expiration_time = expiration_time
        self.validation_time = validation_time
        self.skew = skew
        super().__init__(
            f"Status list token expired ({expiration_time.isoformat()}) for validation "
            f"time {validation_time.isoformat()} (allowed skew {skew})"
        )
