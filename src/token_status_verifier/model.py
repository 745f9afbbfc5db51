"""Status List and Status List Token claims.

Both the JSON (JWT) and CBOR (CWT) representations are supported, following
https://datatracker.ietf.org/doc/draft-ietf-oauth-status-list/
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union

import cbor2

from .bit_array import Index, read_status
from .encoding import (
    Compressor,
    Decompressor,
    b64url_decode,
    b64url_encode,
    zlib_compress,
    zlib_decompress,
)
from .errors import InvalidArgument, MalformedToken, StatusListError
from .status import BitsPerStatus, Status

# Status List keys, identical in JSON and CBOR
BITS = "bits"
LST = "lst"
AGGREGATION_URI = "aggregation_uri"

# JWT Claims
JWT_SUB = "sub"
JWT_IAT = "iat"
JWT_EXP = "exp"
JWT_TTL = "ttl"
JWT_STATUS_LIST = "status_list"

# CWT Claims
SUB = 2
EXP = 4
IAT = 6

# Status List Claims
STATUS_LIST = 65533
TTL = 65534


def from_epoch_seconds(value: Any) -> datetime:
    """Return an aware UTC datetime for a NumericDate."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedToken(f"Invalid NumericDate: {value!r}")
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as err:
        raise MalformedToken(f"NumericDate out of range: {value!r}") from err


def to_epoch_seconds(value: datetime) -> int:
    return int(value.timestamp())


@dataclass(frozen=True)
class StatusList:
    """Compressed status list as carried in the `status_list` claim."""

    bits: BitsPerStatus
    compressed_list: bytes
    aggregation_uri: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "bits", BitsPerStatus.of(self.bits))
        if not isinstance(self.compressed_list, (bytes, bytearray, memoryview)):
            raise InvalidArgument("compressed_list must be bytes")
        object.__setattr__(self, "compressed_list", bytes(self.compressed_list))

    @classmethod
    def from_raw_bytes(
        cls,
        bits: Union[BitsPerStatus, int],
        raw: bytes,
        aggregation_uri: Optional[str] = None,
        compress: Compressor = zlib_compress,
    ) -> "StatusList":
        """Compress an uncompressed, bit packed list."""
        return cls(BitsPerStatus.of(bits), compress(bytes(raw)), aggregation_uri)

    @classmethod
    def from_b64(
        cls,
        bits: Union[BitsPerStatus, int],
        value: str,
        aggregation_uri: Optional[str] = None,
    ) -> "StatusList":
        """Return list from compressed b64url encoded str."""
        return cls(BitsPerStatus.of(bits), b64url_decode(value), aggregation_uri)

    def to_b64(self) -> str:
        """Return list as compressed b64url encoded str."""
        return b64url_encode(self.compressed_list).decode()

    async def decode_statuses(self, decompress: Decompressor = zlib_decompress) -> bytes:
        """Return the decompressed, bit packed list."""
        return await decompress(self.compressed_list)

    async def read(
        self, index: Index, decompress: Decompressor = zlib_decompress
    ) -> Status:
        """Return the status at index."""
        return read_status(self.bits, await self.decode_statuses(decompress), index)

    def dump(self) -> dict:
        """Return json serializable representation of the status list."""
        value: dict = {BITS: self.bits.value, LST: self.to_b64()}
        if self.aggregation_uri is not None:
            value[AGGREGATION_URI] = self.aggregation_uri
        return value

    @classmethod
    def load(cls, value: dict) -> "StatusList":
        """Parse the JSON representation of a status list."""
        if not isinstance(value, dict):
            raise MalformedToken("status_list must be an object")

        bits = value.get(BITS)
        if bits is None:
            raise MalformedToken("bits missing from status list")

        lst = value.get(LST)
        if lst is None:
            raise MalformedToken("lst missing from status list")

        if not isinstance(lst, str):
            raise MalformedToken("lst must be str")

        aggregation_uri = _aggregation_uri(value)
        try:
            return cls.from_b64(BitsPerStatus.of(bits), lst, aggregation_uri)
        except StatusListError as err:
            raise MalformedToken(f"Invalid status list: {err}") from err

    def dump_cbor(self) -> dict:
        """Return the CBOR representation; `lst` stays a byte string."""
        value: dict = {BITS: self.bits.value, LST: self.compressed_list}
        if self.aggregation_uri is not None:
            value[AGGREGATION_URI] = self.aggregation_uri
        return value

    @classmethod
    def load_cbor(cls, value: Union[Mapping, bytes]) -> "StatusList":
        """Parse the CBOR representation of a status list.

        Some issuers embed the status list map as an encoded CBOR byte string rather
        than as a nested map; both are accepted.
        """
        if isinstance(value, bytes):
            try:
                value = cbor2.loads(value)
            except (cbor2.CBORDecodeError, ValueError) as err:
                raise MalformedToken(f"Invalid embedded status list: {err}") from err

        if not isinstance(value, Mapping):
            raise MalformedToken("status_list must be a map")

        bits = value.get(BITS)
        if bits is None:
            raise MalformedToken("bits missing from status list")

        lst = value.get(LST)
        if lst is None:
            raise MalformedToken("lst missing from status list")

        if not isinstance(lst, bytes):
            raise MalformedToken("lst must be a byte string")

        aggregation_uri = _aggregation_uri(value)
        try:
            return cls(BitsPerStatus.of(bits), lst, aggregation_uri)
        except InvalidArgument as err:
            raise MalformedToken(f"Invalid status list: {err}") from err


def _aggregation_uri(value: Mapping) -> Optional[str]:
    aggregation_uri = value.get(AGGREGATION_URI)
    if aggregation_uri is not None and not isinstance(aggregation_uri, str):
        raise MalformedToken("aggregation_uri must be str")
    return aggregation_uri


@dataclass(frozen=True)
class TimeToLive:
    """Maximum time a Status List Token may be cached."""

    value: timedelta

    def __post_init__(self):
        if not isinstance(self.value, timedelta) or self.value <= timedelta(0):
            raise InvalidArgument("Time to live value must be positive")

    @classmethod
    def of_seconds(cls, seconds: Any) -> "TimeToLive":
        if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
            raise InvalidArgument(f"ttl must be a number of seconds, got {seconds!r}")
        return cls(timedelta(seconds=seconds))

    @property
    def seconds(self) -> int:
        return int(self.value.total_seconds())


@dataclass(frozen=True)
class StatusListTokenClaims:
    """The claims of a Status List Token."""

    subject: str
    issued_at: datetime
    status_list: StatusList
    expiration_time: Optional[datetime] = None
    time_to_live: Optional[TimeToLive] = None

    def __post_init__(self):
        if not isinstance(self.subject, str) or not self.subject.strip():
            raise InvalidArgument("The subject must not be empty.")

    def dump(self) -> dict:
        """Return the JWT payload representation of the claims."""
        payload: dict = {
            JWT_SUB: self.subject,
            JWT_IAT: to_epoch_seconds(self.issued_at),
            JWT_STATUS_LIST: self.status_list.dump(),
        }
        if self.expiration_time is not None:
            payload[JWT_EXP] = to_epoch_seconds(self.expiration_time)
        if self.time_to_live is not None:
            payload[JWT_TTL] = self.time_to_live.seconds
        return payload

    @classmethod
    def from_jwt_payload(cls, payload: dict) -> "StatusListTokenClaims":
        """Parse claims from a decoded JWT payload."""
        if not isinstance(payload, dict):
            raise MalformedToken("JWT payload must be an object")

        return cls._from_mapping(
            payload,
            sub=JWT_SUB,
            iat=JWT_IAT,
            exp=JWT_EXP,
            ttl=JWT_TTL,
            status_list=JWT_STATUS_LIST,
            load_status_list=StatusList.load,
        )

    def dump_cwt(self) -> dict:
        """Return the CWT payload representation of the claims."""
        payload: dict = {
            SUB: self.subject,
            IAT: to_epoch_seconds(self.issued_at),
            STATUS_LIST: self.status_list.dump_cbor(),
        }
        if self.expiration_time is not None:
            payload[EXP] = to_epoch_seconds(self.expiration_time)
        if self.time_to_live is not None:
            payload[TTL] = self.time_to_live.seconds
        return payload

    @classmethod
    def from_cwt_payload(cls, payload: Mapping) -> "StatusListTokenClaims":
        """Parse claims from a decoded CWT payload."""
        if not isinstance(payload, Mapping):
            raise MalformedToken("CWT payload must be a map")

        return cls._from_mapping(
            payload,
            sub=SUB,
            iat=IAT,
            exp=EXP,
            ttl=TTL,
            status_list=STATUS_LIST,
            load_status_list=StatusList.load_cbor,
        )

    @classmethod
    def _from_mapping(
        cls, payload: Mapping, *, sub, iat, exp, ttl, status_list, load_status_list
    ) -> "StatusListTokenClaims":
        subject = payload.get(sub)
        if not isinstance(subject, str) or not subject.strip():
            raise MalformedToken(f"Missing or invalid subject claim ({sub})")

        if payload.get(iat) is None:
            raise MalformedToken(f"Missing issued at claim ({iat})")
        issued_at = from_epoch_seconds(payload[iat])

        expiration_time = None
        if payload.get(exp) is not None:
            expiration_time = from_epoch_seconds(payload[exp])

        time_to_live = None
        if payload.get(ttl) is not None:
            try:
                time_to_live = TimeToLive.of_seconds(payload[ttl])
            except InvalidArgument as err:
                raise MalformedToken(f"Invalid time to live claim ({ttl}): {err}") from err

        if payload.get(status_list) is None:
            raise MalformedToken(f"Missing status list claim ({status_list})")

        return cls(
            subject=subject,
            issued_at=issued_at,
            status_list=load_status_list(payload[status_list]),
            expiration_time=expiration_time,
            time_to_live=time_to_live,
        )
