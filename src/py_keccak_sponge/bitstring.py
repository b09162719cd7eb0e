# Copyright (c) 2023-2024, Andrey Dubovik <andrei@dubovik.eu>

"""A NumPy-backed bitstring, a sequence of bits of arbitrary length."""

# Load standard packages
from collections.abc import Iterable, Iterator
from typing import Union
import re

# Load external packages
import numpy as np
import numpy.typing as ntp

# Load local packages
from .errors import FormatError, RangeError

# Define constants
BLOCK = 8  # bits per byte
BITSTRING_RE = re.compile(r'[01\s]*')

# Define types
Array = ntp.NDArray[np.uint8]
Bits = Union['Bitstring', bytes, bytearray, str, Iterable[bool]]


def nbytes(length: int) -> int:
    """Compute the number of bytes needed to hold a given number of bits."""
    return (length + BLOCK - 1)//BLOCK


def lower_mask(count: int) -> int:
    """Compute a byte mask with the count%8 lowest bits set (all bits for 0)."""
    count %= BLOCK
    return 0xff if count == 0 else (1 << count) - 1


def unpack(data: Array, length: int) -> Array:
    """Expand bytes into an array of bits, least significant bit first."""
    return np.unpackbits(data, count=length, bitorder='little')


def pack(bits: Array) -> Array:
    """Compress an array of bits into bytes, least significant bit first."""
    return np.packbits(np.asarray(bits, dtype=np.uint8), bitorder='little')


def check_length(length: int) -> None:
    if length < 0:
        raise RangeError(f'Negative bitstring length {length}')


class Bitstring:
    """A sequence of bits of a specific length.

    Bits are stored in whole bytes, bit 0 of a byte being its least
    significant bit. The unused high bits of the last byte are kept at zero, so
    that two bitstrings of the same length are equal exactly when their byte
    buffers are equal.
    """

    _data: Array
    _length: int

    __hash__ = None  # mutable

    def __init__(self, length: int = 0) -> None:
        """Allocate a bitstring of a given length with all bits cleared."""
        check_length(length)
        self._length = length
        self._data = np.zeros(nbytes(length), dtype=np.uint8)

    @classmethod
    def _wrap(cls, data: Array, length: int) -> 'Bitstring':
        """Take ownership of a byte buffer, mask the trailing bits."""
        bs = cls.__new__(cls)
        bs._data = data
        bs._length = length
        if length%BLOCK != 0:
            bs._data[-1] &= lower_mask(length)
        return bs

    @classmethod
    def from_bytes(cls, data: bytes, length: int = -1) -> 'Bitstring':
        """Make a bitstring out of the first length bits of a byte sequence."""
        count = len(data)*BLOCK
        if length == -1:
            length = count
        check_length(length)
        if length > count:
            raise RangeError(f'Length {length} exceeds the {count} bits of data')
        buf = np.frombuffer(bytes(data), dtype=np.uint8)[:nbytes(length)].copy()
        return cls._wrap(buf, length)

    @classmethod
    def from_array(cls, bits: Array) -> 'Bitstring':
        """Make a bitstring out of a NumPy array of 0s and 1s."""
        bits = np.asarray(bits, dtype=np.uint8).reshape(-1)
        return cls._wrap(pack(bits), len(bits))

    @classmethod
    def from_bits(cls, bits: Iterable[bool]) -> 'Bitstring':
        """Make a bitstring out of a sequence of booleans."""
        return cls.from_array(np.fromiter((bool(b) for b in bits), dtype=np.uint8))

    @classmethod
    def parse(cls, text: str, length: int = -1) -> 'Bitstring':
        """Parse a string of 0s and 1s, whitespace is ignored.

        The first character is bit 0. When length is given, the parsed bits
        are truncated or extended with zeros to that length.
        """
        if BITSTRING_RE.fullmatch(text) is None:
            raise FormatError(f'Invalid bitstring representation {text!r}')
        digits = ''.join(text.split())
        if length == -1:
            length = len(digits)
        check_length(length)
        bits = np.zeros(length, dtype=np.uint8)
        n = min(length, len(digits))
        bits[:n] = [c == '1' for c in digits[:n]]
        return cls.from_array(bits)

    @classmethod
    def zeros(cls, length: int) -> 'Bitstring':
        return cls(length)

    @classmethod
    def ones(cls, length: int) -> 'Bitstring':
        check_length(length)
        return cls._wrap(np.full(nbytes(length), 0xff, dtype=np.uint8), length)

    @classmethod
    def one(cls) -> 'Bitstring':
        return cls.ones(1)

    @classmethod
    def zero(cls) -> 'Bitstring':
        return cls(1)

    @classmethod
    def random(cls, length: int, rng: None | np.random.Generator = None) -> 'Bitstring':
        """Draw a uniformly random bitstring (for fuzz testing)."""
        check_length(length)
        rng = np.random.default_rng() if rng is None else rng
        data = rng.integers(0, 256, nbytes(length), dtype=np.uint8)
        return cls._wrap(data, length)

    @property
    def byte_count(self) -> int:
        return len(self._data)

    def __len__(self) -> int:
        return self._length

    def check_index(self, index: int) -> int:
        """Raise an error for an index outside of the bitstring."""
        if not 0 <= index < self._length:
            raise RangeError(f'Bit index {index} out of range for length {self._length}')
        return index

    def __getitem__(self, index: int) -> bool:
        self.check_index(index)
        return bool(self._data[index >> 3] >> (index & 7) & 1)

    def __setitem__(self, index: int, value: bool) -> None:
        self.check_index(index)
        if value:
            self._data[index >> 3] |= 1 << (index & 7)
        else:
            self._data[index >> 3] &= ~(1 << (index & 7)) & 0xff

    def __iter__(self) -> Iterator[bool]:
        for bit in self.to_array():
            yield bool(bit)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bitstring):
            return NotImplemented
        return self._length == other._length and np.array_equal(self._data, other._data)

    def to_array(self) -> Array:
        """Expand into a NumPy array of 0s and 1s."""
        return unpack(self._data, self._length)

    def to_bytes(self) -> bytes:
        return self._data.tobytes()

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def copy(self) -> 'Bitstring':
        """Make a deep copy."""
        return Bitstring._wrap(self._data.copy(), self._length)

    def clear(self) -> None:
        """Set all bits to zero, keep the length."""
        self._data[:] = 0

    def load_array(self, bits: Array) -> None:
        """Overwrite all bits, in place, from an array of 0s and 1s."""
        bits = np.asarray(bits, dtype=np.uint8).reshape(-1)
        if len(bits) != self._length:
            raise RangeError(f'Expected {self._length} bits, got {len(bits)}')
        self._data[:] = pack(bits)

    # Bitwise operations are done in place, on bitstrings of equal length

    def _operand(self, other: 'Bitstring') -> Array:
        if other._length != self._length:
            raise RangeError(
                f'Bitstring length mismatch: {other._length} instead of {self._length}'
            )
        return other._data

    def and_(self, other: 'Bitstring') -> 'Bitstring':
        self._data &= self._operand(other)
        return self

    def or_(self, other: 'Bitstring') -> 'Bitstring':
        self._data |= self._operand(other)
        return self

    def xor(self, other: 'Bitstring') -> 'Bitstring':
        self._data ^= self._operand(other)
        return self

    __iand__ = and_
    __ior__ = or_
    __ixor__ = xor

    def __and__(self, other: 'Bitstring') -> 'Bitstring':
        return self.copy().and_(other)

    def __or__(self, other: 'Bitstring') -> 'Bitstring':
        return self.copy().or_(other)

    def __xor__(self, other: 'Bitstring') -> 'Bitstring':
        return self.copy().xor(other)

    def append(self, bits: Bits) -> 'Bitstring':
        """Append bits at the end, in place."""
        other = as_bitstring(bits)
        if self._length%BLOCK == 0:
            self._data = np.concatenate((self._data, other._data))
        else:
            self._data = pack(np.concatenate((self.to_array(), other.to_array())))
        self._length += other._length
        return self

    def prepend(self, bits: Bits) -> 'Bitstring':
        """Insert bits at the beginning, in place."""
        other = as_bitstring(bits)
        if other._length%BLOCK == 0:
            self._data = np.concatenate((other._data, self._data))
        else:
            self._data = pack(np.concatenate((other.to_array(), self.to_array())))
        self._length += other._length
        return self

    def truncate(self, length: int) -> 'Bitstring':
        """Get a new bitstring made of the first length bits."""
        if not 0 <= length <= self._length:
            raise RangeError(f'Cannot truncate {self._length} bits to {length} bits')
        return Bitstring._wrap(self._data[:nbytes(length)].copy(), length)

    def substring(self, index: int, length: int) -> 'Bitstring':
        """Get a new bitstring made of length bits starting at index."""
        if index < 0 or length < 0 or index + length > self._length:
            raise RangeError(
                f'Substring [{index}, {index + length}) out of range for length {self._length}'
            )
        if index%BLOCK == 0 and length%BLOCK == 0:
            data = self._data[index//BLOCK:(index + length)//BLOCK].copy()
            return Bitstring._wrap(data, length)
        return Bitstring.from_array(self.to_array()[index:index + length])

    def swap_bits(self, lhs: int, rhs: int) -> 'Bitstring':
        a, b = self[lhs], self[rhs]
        self[lhs], self[rhs] = b, a
        return self

    def to_bin_string(self, spacing: int = 0) -> str:
        """Render as 0s and 1s, bit 0 first, optionally grouped."""
        text = ''.join('1' if b else '0' for b in self.to_array())
        if spacing > 0:
            text = ' '.join(text[i:i + spacing] for i in range(0, len(text), spacing))
        return text

    def to_hex_string(self, spacing: bool = True, uppercase: bool = True) -> str:
        """Render the underlying bytes in hexadecimal."""
        fmt = '%02X' if uppercase else '%02x'
        return (' ' if spacing else '').join(fmt % b for b in self._data)

    def __str__(self) -> str:
        return f'({self._length}) {self.to_hex_string()}'

    def __repr__(self) -> str:
        return 'Bitstring(length=%i, hex=%r)' % (
            self._length, self.to_hex_string(spacing=False, uppercase=False)
        )


def as_bitstring(bits: Bits) -> Bitstring:
    """Coerce bytes, a textual representation or booleans into a bitstring."""
    if isinstance(bits, Bitstring):
        return bits
    if isinstance(bits, (bytes, bytearray)):
        return Bitstring.from_bytes(bits)
    if isinstance(bits, str):
        return Bitstring.parse(bits)
    return Bitstring.from_bits(bits)
