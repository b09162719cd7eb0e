# Copyright (c) 2023-2024, Andrey Dubovik <andrei@dubovik.eu>

"""The sponge construction: padding, absorbing and squeezing."""

# Load standard packages
from dataclasses import dataclass
from enum import Enum
from typing import Callable

# Load local packages
from .bitstring import Bits, Bitstring, as_bitstring
from .errors import ConfigError, RangeError
from .keccak import keccak_p
from .state import SpongeSize, SpongeState


def pad(r: int, m: int) -> Bitstring:
    """Compute the pad10*1 padding of an m-bit message for rate r."""
    j = (-m - 2)%r
    p = Bitstring(j + 2)
    p[0] = True
    p[j + 1] = True
    return p


class Phase(Enum):
    IDLE = 'idle'
    ABSORBING = 'absorbing'
    SQUEEZING = 'squeezing'
    DONE = 'done'


@dataclass
class Snapshot:
    """The state lanes right after a permutation."""

    phase: Phase
    block: int
    depth: int
    lanes: list[int]

    def __repr__(self) -> str:
        digits = (self.depth + 3)//4
        lanes = ' '.join(f'{v:0{digits}x}' for v in self.lanes)
        return f'{self.phase.value} {self.block}: {lanes}'


Observer = Callable[[Snapshot], None]


class Sponge:
    """A sponge construction over Keccak-p.

    Each call to process() clears the state, absorbs the message followed by
    the domain suffix and the padding, and squeezes the requested number of
    bits. The final state remains available for inspection afterwards. When
    tracing is enabled, a snapshot of the lanes is recorded after every
    permutation of the last process() call; an observer, if given, receives
    the same snapshots as they are taken.
    """

    state: SpongeState
    suffix: Bitstring
    rounds: None | int
    phase: Phase
    trace: None | list[Snapshot]
    observer: None | Observer
    verbose: bool

    def __init__(
            self,
            size: SpongeSize,
            rate: int,
            suffix: Bits = '',
            rounds: None | int = None,
            trace: bool = False,
            observer: None | Observer = None,
            verbose: bool = False,
        ) -> None:
        if rounds is not None and rounds < 0:
            raise ConfigError(f'Invalid number of rounds {rounds}')
        self.state = SpongeState(size, rate)
        self.suffix = as_bitstring(suffix).copy()
        self.rounds = rounds
        self.phase = Phase.IDLE
        self.trace = [] if trace else None
        self.observer = observer
        self.verbose = verbose

    @property
    def size(self) -> SpongeSize:
        return self.state.size

    @property
    def rate(self) -> int:
        return self.state.rate

    @property
    def capacity(self) -> int:
        return self.state.capacity

    def permute(self, block: int) -> None:
        """Run the permutation, record a snapshot when requested."""
        keccak_p(self.state, self.rounds)
        if self.trace is None and self.observer is None:
            return
        snapshot = Snapshot(self.phase, block, self.size.w, self.state.lane_values())
        if self.trace is not None:
            self.trace.append(snapshot)
        if self.observer is not None:
            self.observer(snapshot)

    def absorb(self, message: Bitstring) -> None:
        """Reset the state and absorb a padded message."""
        self.phase = Phase.ABSORBING
        if self.trace is not None:
            self.trace.clear()
        self.state.clear()
        rate = self.rate
        message = message.copy().append(self.suffix)
        message.append(pad(rate, len(message)))
        assert len(message)%rate == 0
        n = len(message)//rate
        zeros = Bitstring(self.capacity)
        for i in range(n):
            if self.verbose:
                print(f"Absorbing block {i + 1}/{n}")
            block = message.substring(rate*i, rate).append(zeros)
            self.state.xor(block)
            self.permute(i)

    def squeeze(self, length: int) -> Bitstring:
        """Extract length bits, permuting between rate-sized blocks."""
        if length < 0:
            raise RangeError(f'Negative output length {length}')
        self.phase = Phase.SQUEEZING
        out = Bitstring()
        block = 0
        while True:
            if self.verbose:
                print(f"Squeezing block {block + 1}")
            out.append(self.state.bitstring.truncate(self.rate))
            if len(out) >= length:
                break
            block += 1
            self.permute(block)
        self.phase = Phase.DONE
        return out.truncate(length)

    def process(self, data: bytes, output_length: int, input_length: int = -1) -> bytes:
        """Hash the first input_length bits of data (all bits by default).

        The output holds output_length bits, the unused high bits of the
        last byte being zero.
        """
        if output_length < 0:
            raise RangeError(f'Negative output length {output_length}')
        message = Bitstring.from_bytes(data, input_length)
        self.absorb(message)
        return self.squeeze(output_length).to_bytes()

    def lane_values(self) -> list[int]:
        """Get the 25 lanes of the current state as unsigned integers."""
        return self.state.lane_values()


def save_trace(trace: list[Snapshot], path: str) -> None:
    """Write a trace to a file."""
    with open(path, 'w') as f:
        for snapshot in trace:
            f.write(snapshot.__repr__())
            f.write('\n')
