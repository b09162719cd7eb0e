# Copyright (c) 2023-2024, Andrey Dubovik <andrei@dubovik.eu>

"""The state of a Keccak sponge, a 5x5xw lattice of bits.

The bit at coordinates (x, y, z) lives at index w*(5*y + x) + z of a flat
bitstring. Lanes, rows, columns, planes, sheets and slices are lightweight
views over that bitstring: they hold coordinates and a reference to the
owning state, never a copy of the bits.
"""

# Load standard packages
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from itertools import chain

# Load external packages
import numpy as np

# Load local packages
from .bitstring import Array, Bits, Bitstring, as_bitstring
from .errors import ConfigError, RangeError

Coord = tuple[int, int, int]


class SpongeSize(Enum):
    """The seven permitted widths of a Keccak state."""

    W01 = 25
    W02 = 50
    W04 = 100
    W08 = 200
    W16 = 400
    W32 = 800
    W64 = 1600

    @property
    def b(self) -> int:
        """Total number of bits."""
        return self.value

    @property
    def w(self) -> int:
        """Lane depth."""
        return self.value//25

    @property
    def l(self) -> int:
        """Base-2 logarithm of the lane depth."""
        return self.w.bit_length() - 1

    @classmethod
    def of(cls, b: int) -> 'SpongeSize':
        """Look up a size by its width in bits."""
        try:
            return cls(b)
        except ValueError:
            raise ConfigError(f'Invalid state width {b}') from None

    def __str__(self) -> str:
        return f'B={self.b}, W={self.w}, L={self.l}'


def check_rate(size: SpongeSize, rate: int) -> None:
    if not 1 <= rate < size.b:
        raise ConfigError(f'Invalid rate {rate} for width {size.b}')


def check_coordinate(value: int, bound: int, name: str) -> None:
    if not 0 <= value < bound:
        raise RangeError(f'Coordinate {name}={value} out of range [0, {bound})')


@dataclass(frozen=True)
class View(ABC):
    """A prototype for a named cross-section of the state."""

    state: 'SpongeState' = field(repr=False)

    @abstractmethod
    def coordinates(self) -> Iterator[Coord]:
        """Enumerate the (x, y, z) coordinates covered, in traversal order."""

    def __iter__(self) -> Iterator[bool]:
        for x, y, z in self.coordinates():
            yield self.state[x, y, z]

    def __len__(self) -> int:
        return sum(1 for _ in self.coordinates())

    def to_bitstring(self) -> Bitstring:
        """Materialize a copy of the bits."""
        return Bitstring.from_bits(self)


@dataclass(frozen=True)
class Bit(View):
    x: int
    y: int
    z: int

    def __post_init__(self) -> None:
        self.state.index(self.x, self.y, self.z)

    def coordinates(self) -> Iterator[Coord]:
        yield self.x, self.y, self.z

    @property
    def value(self) -> bool:
        return self.state[self.x, self.y, self.z]

    def __bool__(self) -> bool:
        return self.value


@dataclass(frozen=True)
class Row(View):
    """The five bits with fixed y and z."""

    y: int
    z: int

    def __post_init__(self) -> None:
        check_coordinate(self.y, 5, 'y')
        check_coordinate(self.z, self.state.size.w, 'z')

    def coordinates(self) -> Iterator[Coord]:
        for x in range(5):
            yield x, self.y, self.z

    def __len__(self) -> int:
        return 5


@dataclass(frozen=True)
class Column(View):
    """The five bits with fixed x and z."""

    x: int
    z: int

    def __post_init__(self) -> None:
        check_coordinate(self.x, 5, 'x')
        check_coordinate(self.z, self.state.size.w, 'z')

    def coordinates(self) -> Iterator[Coord]:
        for y in range(5):
            yield self.x, y, self.z

    def __len__(self) -> int:
        return 5


@dataclass(frozen=True)
class Lane(View):
    """The w bits with fixed x and y."""

    x: int
    y: int

    def __post_init__(self) -> None:
        check_coordinate(self.x, 5, 'x')
        check_coordinate(self.y, 5, 'y')

    @property
    def depth(self) -> int:
        return self.state.size.w

    def coordinates(self) -> Iterator[Coord]:
        for z in range(self.depth):
            yield self.x, self.y, z

    def __len__(self) -> int:
        return self.depth

    @property
    def value(self) -> int:
        """The lane as an unsigned integer, bit z having weight 2**z."""
        start = self.state.index(self.x, self.y, 0)
        return lane_value(self.state.bitstring.substring(start, self.depth).to_array())


@dataclass(frozen=True)
class Plane(View):
    """The 5*w bits with fixed y."""

    y: int

    def __post_init__(self) -> None:
        check_coordinate(self.y, 5, 'y')

    @property
    def depth(self) -> int:
        return self.state.size.w

    def coordinates(self) -> Iterator[Coord]:
        for x in range(5):
            for z in range(self.depth):
                yield x, self.y, z

    def __len__(self) -> int:
        return 5*self.depth

    def lanes(self) -> Iterator[Lane]:
        for x in range(5):
            yield Lane(self.state, x, self.y)

    def rows(self) -> Iterator[Row]:
        for z in range(self.depth):
            yield Row(self.state, self.y, z)


@dataclass(frozen=True)
class Sheet(View):
    """The 5*w bits with fixed x."""

    x: int

    def __post_init__(self) -> None:
        check_coordinate(self.x, 5, 'x')

    @property
    def depth(self) -> int:
        return self.state.size.w

    def coordinates(self) -> Iterator[Coord]:
        for y in range(5):
            for z in range(self.depth):
                yield self.x, y, z

    def __len__(self) -> int:
        return 5*self.depth

    def columns(self) -> Iterator[Column]:
        for z in range(self.depth):
            yield Column(self.state, self.x, z)

    def lanes(self) -> Iterator[Lane]:
        for y in range(5):
            yield Lane(self.state, self.x, y)


@dataclass(frozen=True)
class Slice(View):
    """The 25 bits with fixed z."""

    z: int

    def __post_init__(self) -> None:
        check_coordinate(self.z, self.state.size.w, 'z')

    def coordinates(self) -> Iterator[Coord]:
        for y in range(5):
            for x in range(5):
                yield x, y, self.z

    def __len__(self) -> int:
        return 25

    def columns(self) -> Iterator[Column]:
        for x in range(5):
            yield Column(self.state, x, self.z)

    def rows(self) -> Iterator[Row]:
        for y in range(5):
            yield Row(self.state, y, self.z)


def lane_value(bits: Array) -> int:
    """Convert the bits of a lane into an unsigned integer (little endian)."""
    return int.from_bytes(np.packbits(bits, bitorder='little').tobytes(), 'little')


class SpongeState:
    """A Keccak state of a given width, split into rate and capacity."""

    size: SpongeSize
    rate: int
    _bitstring: Bitstring

    def __init__(self, size: SpongeSize, rate: int) -> None:
        """Allocate a cleared state."""
        check_rate(size, rate)
        self.size = size
        self.rate = rate
        self._bitstring = Bitstring(size.b)

    @classmethod
    def from_bitstring(cls, bitstring: Bitstring, rate: int) -> 'SpongeState':
        """Wrap an existing bitstring, its length determines the width."""
        size = SpongeSize.of(len(bitstring))
        check_rate(size, rate)
        s = SpongeState.__new__(SpongeState)
        s.size = size
        s.rate = rate
        s._bitstring = bitstring
        return s

    @property
    def capacity(self) -> int:
        return self.size.b - self.rate

    @property
    def bitstring(self) -> Bitstring:
        return self._bitstring

    @bitstring.setter
    def bitstring(self, value: Bitstring) -> None:
        if len(value) != self.size.b:
            raise RangeError(f'Invalid bitstring length {len(value)} instead of {self.size.b}')
        self._bitstring = value

    def copy(self) -> 'SpongeState':
        """Make a clone with own storage."""
        return SpongeState.from_bitstring(self._bitstring.copy(), self.rate)

    def clear(self) -> None:
        """Zero all bits, keep size and rate."""
        self._bitstring.clear()

    def index(self, x: int, y: int, z: int) -> int:
        """Map lattice coordinates to a flat bit index."""
        check_coordinate(x, 5, 'x')
        check_coordinate(y, 5, 'y')
        check_coordinate(z, self.size.w, 'z')
        return self.size.w*(5*y + x) + z

    def __getitem__(self, key: int | Coord) -> bool:
        if isinstance(key, tuple):
            key = self.index(*key)
        return self._bitstring[key]

    def __setitem__(self, key: int | Coord, value: bool) -> None:
        if isinstance(key, tuple):
            key = self.index(*key)
        self._bitstring[key] = value

    def __iter__(self) -> Iterator[bool]:
        return iter(self._bitstring)

    # Views

    def bit(self, x: int, y: int, z: int) -> Bit:
        return Bit(self, x, y, z)

    def row(self, y: int, z: int) -> Row:
        return Row(self, y, z)

    def column(self, x: int, z: int) -> Column:
        return Column(self, x, z)

    def lane(self, x: int, y: int) -> Lane:
        return Lane(self, x, y)

    def plane(self, y: int) -> Plane:
        return Plane(self, y)

    def sheet(self, x: int) -> Sheet:
        return Sheet(self, x)

    def slice(self, z: int) -> Slice:
        return Slice(self, z)

    def rows(self) -> Iterator[Row]:
        for y in range(5):
            for z in range(self.size.w):
                yield Row(self, y, z)

    def columns(self) -> Iterator[Column]:
        for x in range(5):
            for z in range(self.size.w):
                yield Column(self, x, z)

    def lanes(self) -> Iterator[Lane]:
        for y in range(5):
            for x in range(5):
                yield Lane(self, x, y)

    def planes(self) -> Iterator[Plane]:
        for y in range(5):
            yield Plane(self, y)

    def sheets(self) -> Iterator[Sheet]:
        for x in range(5):
            yield Sheet(self, x)

    def slices(self) -> Iterator[Slice]:
        for z in range(self.size.w):
            yield Slice(self, z)

    # Modification. A bulk operation over all views of a kind walks the views
    # in the order of the generators above, and the bits of each view in its
    # own traversal order.

    def _apply(self, views: Iterable[View], bits: Bits, xor: bool) -> None:
        coords = chain.from_iterable(v.coordinates() for v in views)
        idx = np.array([self.index(*c) for c in coords], dtype=np.intp)
        values = as_bitstring(bits).to_array()
        if len(values) != len(idx):
            raise RangeError(f'Expected {len(idx)} bits, got {len(values)}')
        flat = self._bitstring.to_array()
        if xor:
            flat[idx] ^= values
        else:
            flat[idx] = values
        self._bitstring.load_array(flat)

    def set_row(self, row: Row, bits: Bits) -> None:
        self._apply([row], bits, False)

    def set_rows(self, bits: Bits) -> None:
        self._apply(self.rows(), bits, False)

    def set_column(self, column: Column, bits: Bits) -> None:
        self._apply([column], bits, False)

    def set_columns(self, bits: Bits) -> None:
        self._apply(self.columns(), bits, False)

    def set_lane(self, lane: Lane, bits: Bits) -> None:
        self._apply([lane], bits, False)

    def set_lanes(self, bits: Bits) -> None:
        self._apply(self.lanes(), bits, False)

    def set_plane(self, plane: Plane, bits: Bits) -> None:
        self._apply([plane], bits, False)

    def set_planes(self, bits: Bits) -> None:
        self._apply(self.planes(), bits, False)

    def set_sheet(self, sheet: Sheet, bits: Bits) -> None:
        self._apply([sheet], bits, False)

    def set_sheets(self, bits: Bits) -> None:
        self._apply(self.sheets(), bits, False)

    def set_slice(self, slice: Slice, bits: Bits) -> None:
        self._apply([slice], bits, False)

    def set_slices(self, bits: Bits) -> None:
        self._apply(self.slices(), bits, False)

    def xor_row(self, row: Row, bits: Bits) -> None:
        self._apply([row], bits, True)

    def xor_rows(self, bits: Bits) -> None:
        self._apply(self.rows(), bits, True)

    def xor_column(self, column: Column, bits: Bits) -> None:
        self._apply([column], bits, True)

    def xor_columns(self, bits: Bits) -> None:
        self._apply(self.columns(), bits, True)

    def xor_lane(self, lane: Lane, bits: Bits) -> None:
        self._apply([lane], bits, True)

    def xor_lanes(self, bits: Bits) -> None:
        self._apply(self.lanes(), bits, True)

    def xor_plane(self, plane: Plane, bits: Bits) -> None:
        self._apply([plane], bits, True)

    def xor_planes(self, bits: Bits) -> None:
        self._apply(self.planes(), bits, True)

    def xor_sheet(self, sheet: Sheet, bits: Bits) -> None:
        self._apply([sheet], bits, True)

    def xor_sheets(self, bits: Bits) -> None:
        self._apply(self.sheets(), bits, True)

    def xor_slice(self, slice: Slice, bits: Bits) -> None:
        self._apply([slice], bits, True)

    def xor_slices(self, bits: Bits) -> None:
        self._apply(self.slices(), bits, True)

    def xor(self, bits: Bitstring) -> None:
        """XOR a full-width bitstring into the state."""
        self._bitstring.xor(bits)

    # Array access, used by the permutation

    def lattice(self) -> Array:
        """Get a copy of the bits as an array indexed by [x, y, z]."""
        w = self.size.w
        return self._bitstring.to_array().reshape(5, 5, w).swapaxes(0, 1)

    def load_lattice(self, a: Array) -> None:
        """Overwrite the bits from an array indexed by [x, y, z]."""
        w = self.size.w
        if a.shape != (5, 5, w):
            raise RangeError(f'Invalid lattice shape {a.shape} for width {self.size.b}')
        self._bitstring.load_array(a.swapaxes(0, 1).reshape(-1))

    def lane_values(self) -> list[int]:
        """Get the 25 lanes as unsigned integers, x varying fastest."""
        a = self.lattice()
        return [lane_value(a[x, y]) for y in range(5) for x in range(5)]

    def to_bytes(self) -> bytes:
        return self._bitstring.to_bytes()

    def to_bin_string(self, spacing: int = 0) -> str:
        return self._bitstring.to_bin_string(spacing)

    def to_hex_string(self, spacing: bool = True, uppercase: bool = True) -> str:
        return self._bitstring.to_hex_string(spacing, uppercase)

    def __str__(self) -> str:
        return f'{self.size}, rate={self.rate}: {self.to_hex_string()}'
