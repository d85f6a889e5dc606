"""Schema-less reader for the protocol-buffer wire format.

The game master dump is a protobuf message with no published schema, so
nothing here knows about message types. :class:`WireDecoder` is a cursor
over an immutable byte buffer that yields one :data:`WireValue` per field:

- wire type 0: varint
- wire type 1: 64-bit fixed
- wire type 2: length-delimited (returned as a zero-copy ``memoryview``)
- wire type 5: 32-bit fixed

Group start/end (3/4) and anything else are rejected. Running off the end
of the buffer is always an error; the decoder never returns partial data.
"""

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, Union

MAX_VARINT_BYTES = 10
_UINT64_MASK = (1 << 64) - 1


class DecodeError(Exception):
    """Base class for fatal wire-format decoding errors."""


class BufferOverflowError(DecodeError):
    """Raised when a read would move the cursor past the end of the buffer."""


class InvalidMessageError(DecodeError):
    """Raised when a length-delimited field is longer than the bytes left."""


class UnsupportedWireTypeError(DecodeError):
    """Raised for group wire types and unknown wire type values."""


class WireType(IntEnum):
    VARINT = 0
    FIXED64 = 1
    LENGTH_DELIMITED = 2
    START_GROUP = 3
    END_GROUP = 4
    FIXED32 = 5


# ------------------------------------------------------------------
# Wire values
# ------------------------------------------------------------------

@dataclass(frozen=True)
class VarIntValue:
    field_number: int
    value: int
    wire_type = WireType.VARINT

    def as_signed(self) -> int:
        """Reinterpret the raw 64-bit value as two's complement."""
        if self.value & (1 << 63):
            return self.value - (1 << 64)
        return self.value


@dataclass(frozen=True)
class Fixed64Value:
    field_number: int
    data: bytes
    wire_type = WireType.FIXED64

    def as_double(self) -> float:
        return struct.unpack("<d", self.data)[0]


@dataclass(frozen=True)
class Fixed32Value:
    field_number: int
    data: bytes
    wire_type = WireType.FIXED32

    def as_float(self) -> float:
        return struct.unpack("<f", self.data)[0]


@dataclass(frozen=True)
class LengthDelimitedValue:
    """A borrowed sub-range of the parent buffer. No bytes are copied."""

    field_number: int
    data: memoryview
    wire_type = WireType.LENGTH_DELIMITED

    def __len__(self) -> int:
        return len(self.data)

    def as_text(self) -> str:
        return bytes(self.data).decode("utf-8", errors="replace")


WireValue = Union[VarIntValue, Fixed64Value, Fixed32Value, LengthDelimitedValue]


# ------------------------------------------------------------------
# Decoder
# ------------------------------------------------------------------

class WireDecoder:
    """Forward-only cursor over a protobuf-encoded buffer.

    Construct directly over ``bytes`` (offset 0) or over the payload of a
    length-delimited field via :meth:`from_value`. Sub-decoders share the
    parent's memory.
    """

    def __init__(self, buffer: Union[bytes, bytearray, memoryview]):
        self._buffer = memoryview(buffer)
        self._pos = 0

    @classmethod
    def from_value(cls, value: WireValue) -> "WireDecoder":
        """Open a decoder over the payload of a length-delimited field."""
        if not isinstance(value, LengthDelimitedValue):
            raise InvalidMessageError(
                f"Field {value.field_number} is not length-delimited "
                f"(wire type {int(value.wire_type)})"
            )
        return cls(value.data)

    @property
    def position(self) -> int:
        return self._pos

    def bytes_remaining(self) -> int:
        return len(self._buffer) - self._pos

    def _read_byte(self) -> int:
        if self._pos >= len(self._buffer):
            raise BufferOverflowError(
                f"Read past end of buffer at offset {self._pos} "
                f"(length {len(self._buffer)})"
            )
        byte = self._buffer[self._pos]
        self._pos += 1
        return byte

    def read_varint(self) -> int:
        """Read a base-128 varint, least-significant group first.

        At most ten bytes are consumed. A stream that still has the
        continuation bit set after ten bytes stops there and yields the
        value accumulated so far, truncated to 64 bits.
        """
        result = 0
        for i in range(MAX_VARINT_BYTES):
            byte = self._read_byte()
            result |= (byte & 0x7F) << (7 * i)
            if not byte & 0x80:
                break
        return result & _UINT64_MASK

    def read_fixed(self, n: int) -> bytes:
        """Read exactly *n* raw bytes."""
        if n > self.bytes_remaining():
            raise BufferOverflowError(
                f"Cannot read {n} bytes at offset {self._pos}: "
                f"only {self.bytes_remaining()} left"
            )
        data = self._buffer[self._pos:self._pos + n].tobytes()
        self._pos += n
        return data

    def _read_slice(self, n: int) -> memoryview:
        if n > self.bytes_remaining():
            raise InvalidMessageError(
                f"Length-delimited field declares {n} bytes at offset "
                f"{self._pos}, but only {self.bytes_remaining()} remain"
            )
        view = self._buffer[self._pos:self._pos + n]
        self._pos += n
        return view

    def read_field(self) -> WireValue:
        """Read one key and its payload."""
        key = self.read_varint()
        field_number = key >> 3
        wire_type = key & 0x7

        if wire_type == WireType.VARINT:
            return VarIntValue(field_number, self.read_varint())
        if wire_type == WireType.FIXED64:
            return Fixed64Value(field_number, self.read_fixed(8))
        if wire_type == WireType.LENGTH_DELIMITED:
            length = self.read_varint()
            return LengthDelimitedValue(field_number, self._read_slice(length))
        if wire_type == WireType.FIXED32:
            return Fixed32Value(field_number, self.read_fixed(4))

        raise UnsupportedWireTypeError(
            f"Unsupported wire type {wire_type} for field {field_number} "
            f"at offset {self._pos}"
        )

    def iter_fields(self) -> Iterator[WireValue]:
        """Yield fields until the buffer is exhausted."""
        while self.bytes_remaining():
            yield self.read_field()
