"""Bit packed status lists.

Statuses are packed least significant bit first: the status at index 0 of a list with
bits 1 lives in bit 0 of byte 0, index 1 in bit 1, and so on.
"""

from typing import Tuple, Union

from .encoding import Compressor, zlib_compress
from .errors import InvalidArgument, OutOfRange
from .status import BITS_PER_BYTE, BitsPerStatus, Status, StatusIndex

Index = Union[StatusIndex, int]


def position_of(bits: BitsPerStatus, index: Index) -> Tuple[int, int]:
    """Return the byte holding index and the offset of its first bit in that byte."""
    bits = BitsPerStatus.of(bits)
    index = StatusIndex(int(index)) if not isinstance(index, StatusIndex) else index
    # index / indexes per byte
    byte_idx = index.value // bits.statuses_per_byte
    # index mod indexes per byte * bits
    # Determines the number of shifts to move relevant bits all the way right
    bit_idx = (index.value % bits.statuses_per_byte) * bits.value
    return byte_idx, bit_idx


def read_status_byte(bits: BitsPerStatus, byte: int, bit_offset: int) -> int:
    """Return the raw status value found at bit_offset of byte."""
    bits = BitsPerStatus.of(bits)
    if not 0 <= bit_offset <= BITS_PER_BYTE - 1:
        raise InvalidArgument(
            f"Bit position must be in range [0, {BITS_PER_BYTE - 1}], got {bit_offset}"
        )
    # Shift relevant bits all the way right and mask out irrelevant bits
    return bits.mask & ((byte & 0xFF) >> bit_offset)


def read_status(bits: BitsPerStatus, lst: bytes, index: Index) -> Status:
    """Read and classify the status at index of a decompressed status list."""
    byte_idx, bit_idx = position_of(bits, index)
    if byte_idx >= len(lst):
        raise OutOfRange(int(index), len(lst))

    return Status.of_width(bits, read_status_byte(bits, lst[byte_idx], bit_idx))


class BitArray:
    """Variable size bit array."""

    def __init__(
        self,
        bits: Union[BitsPerStatus, int],
        lst: bytes,
    ):
        """Initialize the list."""
        self.bits = BitsPerStatus.of(bits)
        self.per_byte = self.bits.statuses_per_byte
        self.mask = self.bits.mask
        self.max = self.bits.max_value

        # len * indexes per byte
        self.size = len(lst) * self.per_byte
        self.lst = bytearray(lst)

    @classmethod
    def of_size(cls, bits: Union[BitsPerStatus, int], size: int) -> "BitArray":
        """Create empty list of a given size."""
        bits = BitsPerStatus.of(bits)
        per_byte = bits.statuses_per_byte
        if size < 1:
            raise InvalidArgument("size must be greater than 1")
        # size mod per_byte
        if size & (per_byte - 1) != 0:
            raise InvalidArgument(f"size must be multiple of {per_byte}")

        return cls(bits, bytearray(size // per_byte))

    @classmethod
    def with_at_least(cls, bits: Union[BitsPerStatus, int], size: int) -> "BitArray":
        """Create an empty list large enough to accommodate at least the given size."""
        bits = BitsPerStatus.of(bits)
        # Determine minimum number of bytes to fit size
        length = (size + bits.statuses_per_byte - 1) // bits.statuses_per_byte
        return cls(bits, bytearray(length))

    def __getitem__(self, index: int) -> Status:
        """Retrieve the status of an index."""
        if isinstance(index, slice):
            raise TypeError("Slices are not supported on BitArray")

        return self.get(index)

    def __setitem__(self, index: int, status: Union[Status, int]):
        """Set the status of an index."""
        return self.set(index, status)

    def __len__(self):
        """Return size of array."""
        return self.size

    def get(self, index: Index) -> Status:
        """Retrieve the status of an index."""
        return read_status(self.bits, self.lst, index)

    def set(self, index: Index, status: Union[Status, int]):
        """Set the status of an index."""
        status = Status.of_width(self.bits, int(status))
        byte_idx, bit_idx = position_of(self.bits, index)
        if byte_idx >= len(self.lst):
            raise OutOfRange(int(index), len(self.lst))

        byte = self.lst[byte_idx]
        # Create mask to clear bits getting reset
        # (0 where the bits will be, 1 everywhere else)
        clear_mask = ~(self.mask << bit_idx)
        self.lst[byte_idx] = (byte & clear_mask) | (status.value << bit_idx)

    def compressed(self, compress: Compressor = zlib_compress) -> bytes:
        """Return compressed list."""
        return compress(bytes(self.lst))
