"""Status values, bit widths and references to a status in a Status List."""

from dataclasses import dataclass
from enum import Enum, IntEnum
from functools import total_ordering
from typing import Any, ClassVar

from .errors import InvalidArgument

VALID = 0x00
INVALID = 0x01
SUSPENDED = 0x02
APPLICATION_SPECIFIC = 0x03
APPLICATION_SPECIFIC_RANGE = range(0x0B, 0x0F + 1)

BITS_PER_BYTE = 8


class BitsPerStatus(IntEnum):
    """Number of bits used to encode a single status."""

    ONE = 1
    TWO = 2
    FOUR = 4
    EIGHT = 8

    @property
    def statuses_per_byte(self) -> int:
        """Number of statuses that fit in a byte."""
        return BITS_PER_BYTE // self.value

    @property
    def mask(self) -> int:
        return (1 << self.value) - 1

    @property
    def max_value(self) -> int:
        """Largest status value representable with this many bits."""
        return self.mask

    @classmethod
    def of(cls, bits: Any) -> "BitsPerStatus":
        """Return the member for bits, raising InvalidArgument for anything else."""
        if isinstance(bits, bool) or not isinstance(bits, int):
            raise InvalidArgument(f"bits must be int, got {type(bits).__name__}")
        try:
            return cls(bits)
        except ValueError as err:
            raise InvalidArgument(
                f"Invalid bits value {bits}, must be one of: 1, 2, 4, 8"
            ) from err


def is_application_specific(value: int) -> bool:
    """Return true for 0x03 and the 0x0B..0x0F range."""
    return value == APPLICATION_SPECIFIC or value in APPLICATION_SPECIFIC_RANGE


class StatusType(Enum):
    """The registered kinds of status."""

    VALID = "valid"
    INVALID = "invalid"
    SUSPENDED = "suspended"
    APPLICATION_SPECIFIC = "application_specific"
    RESERVED = "reserved"


@total_ordering
@dataclass(frozen=True)
class Status:
    """Status of a Referenced Token, classified from its raw byte value.

    `Status(value)` only classifies. Use `Status.of_width` when the value must also
    fit in a list of a given bit width.
    """

    value: int

    VALID: ClassVar["Status"]
    INVALID: ClassVar["Status"]
    SUSPENDED: ClassVar["Status"]

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise InvalidArgument(f"status value must be int, got {self.value!r}")
        if not 0 <= self.value <= 0xFF:
            raise InvalidArgument(f"status value {self.value} is not a byte")

    @classmethod
    def of(cls, value: int) -> "Status":
        return cls(value)

    @classmethod
    def of_width(cls, bits: BitsPerStatus, value: int) -> "Status":
        """Classify value, rejecting values too large for bits."""
        bits = BitsPerStatus.of(bits)
        if isinstance(value, int) and value > bits.max_value:
            raise InvalidArgument(
                f"status {value} too large for list with bits {bits.value}"
            )
        return cls(value)

    @property
    def type(self) -> StatusType:
        if self.value == VALID:
            return StatusType.VALID
        if self.value == INVALID:
            return StatusType.INVALID
        if self.value == SUSPENDED:
            return StatusType.SUSPENDED
        if is_application_specific(self.value):
            return StatusType.APPLICATION_SPECIFIC
        return StatusType.RESERVED

    @property
    def is_valid(self) -> bool:
        return self.type is StatusType.VALID

    @property
    def is_application_specific(self) -> bool:
        return self.type is StatusType.APPLICATION_SPECIFIC

    @property
    def is_reserved(self) -> bool:
        return self.type is StatusType.RESERVED

    def __lt__(self, other: "Status") -> bool:
        if not isinstance(other, Status):
            return NotImplemented
        return self.value < other.value

    def __int__(self) -> int:
        return self.value

    def __repr__(self) -> str:
        if self.type in (StatusType.VALID, StatusType.INVALID, StatusType.SUSPENDED):
            return f"Status.{self.type.name}"
        return f"Status.{self.type.name}(0x{self.value:02X})"


Status.VALID = Status(VALID)
Status.INVALID = Status(INVALID)
Status.SUSPENDED = Status(SUSPENDED)


@dataclass(frozen=True)
class StatusIndex:
    """Position of a Referenced Token within a Status List."""

    value: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise InvalidArgument(f"index must be int, got {self.value!r}")
        if self.value < 0:
            raise InvalidArgument(
                f"The index MUST be a non-negative number, zero or greater: {self.value}"
            )

    def __index__(self) -> int:
        return self.value

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class StatusReference:
    """The `status_list` claim of a Referenced Token."""

    index: StatusIndex
    uri: str

    def __post_init__(self):
        if not isinstance(self.index, StatusIndex):
            object.__setattr__(self, "index", StatusIndex(self.index))
        if not isinstance(self.uri, str) or not self.uri.strip():
            raise InvalidArgument("The uri must not be empty.")

    def dump(self) -> dict:
        """Return json serializable representation of the reference."""
        return {"idx": self.index.value, "uri": self.uri}

    @classmethod
    def load(cls, value: dict) -> "StatusReference":
        """Parse the reference from the `status_list` object of a Referenced Token."""
        if not isinstance(value, dict):
            raise InvalidArgument("status_list reference must be dict")

        idx = value.get("idx")
        if idx is None:
            raise InvalidArgument("idx missing from status_list reference")

        uri = value.get("uri")
        if uri is None:
            raise InvalidArgument("uri missing from status_list reference")

        return cls(StatusIndex(idx), uri)
