# Copyright (c) 2023-2024, Andrey Dubovik <andrei@dubovik.eu>

"""Named parameter sets of the Keccak family (SHA-3, SHAKE, RawSHAKE)."""

# Load standard packages
from dataclasses import dataclass

# Load local packages
from .errors import ConfigError
from .sponge import Observer, Sponge
from .state import SpongeSize, check_rate

SHA3_LENGTHS = (224, 256, 384, 512)
SHAKE_STRENGTHS = (128, 256)

# Domain separation suffixes, appended to the message before padding
SHA3_SUFFIX = '01'
SHAKE_SUFFIX = '1111'
RAWSHAKE_SUFFIX = '11'
KECCAK_SUFFIX = ''


@dataclass(frozen=True)
class Algorithm:
    """A sponge parameter set.

    Fixed-length hashes carry their output length; extendable-output
    functions (XOFs) leave it to the caller.
    """

    name: str
    capacity: int
    suffix: str
    output_bits: None | int = None
    size: SpongeSize = SpongeSize.W64
    rounds: None | int = None

    def __post_init__(self) -> None:
        check_rate(self.size, self.rate)
        if self.rounds is not None and self.rounds < 0:
            raise ConfigError(f'Invalid number of rounds {self.rounds}')

    @property
    def rate(self) -> int:
        return self.size.b - self.capacity

    @property
    def extendable(self) -> bool:
        return self.output_bits is None

    @property
    def digest_size(self) -> None | int:
        """Output length in bytes, None for XOFs."""
        return None if self.output_bits is None else (self.output_bits + 7)//8

    @property
    def block_size(self) -> int:
        """Rate in bytes."""
        return (self.rate + 7)//8

    def output_length(self, output_bits: None | int = None) -> int:
        """Resolve the number of output bits for a computation."""
        if self.output_bits is None:
            if output_bits is None:
                raise ConfigError(f'{self.name} requires an output length')
            return output_bits
        if output_bits is not None and output_bits != self.output_bits:
            raise ConfigError(
                f'{self.name} has a fixed output of {self.output_bits} bits, not {output_bits}'
            )
        return self.output_bits

    def sponge(
            self,
            trace: bool = False,
            observer: None | Observer = None,
            verbose: bool = False,
        ) -> Sponge:
        """Make a sponge for this parameter set."""
        return Sponge(
            self.size,
            self.rate,
            suffix = self.suffix,
            rounds = self.rounds,
            trace = trace,
            observer = observer,
            verbose = verbose,
        )

    def compute(self, data: bytes, output_bits: None | int = None, input_bits: int = -1) -> bytes:
        """Hash the first input_bits bits of data (all bits by default)."""
        length = self.output_length(output_bits)
        return self.sponge().process(data, length, input_bits)

    def hexdigest(self, data: bytes, output_bits: None | int = None) -> str:
        return self.compute(data, output_bits).hex()


SHA3_224 = Algorithm('SHA3-224', 448, SHA3_SUFFIX, 224)
SHA3_256 = Algorithm('SHA3-256', 512, SHA3_SUFFIX, 256)
SHA3_384 = Algorithm('SHA3-384', 768, SHA3_SUFFIX, 384)
SHA3_512 = Algorithm('SHA3-512', 1024, SHA3_SUFFIX, 512)
SHAKE128 = Algorithm('SHAKE128', 256, SHAKE_SUFFIX)
SHAKE256 = Algorithm('SHAKE256', 512, SHAKE_SUFFIX)
RAWSHAKE128 = Algorithm('RawSHAKE128', 256, RAWSHAKE_SUFFIX)
RAWSHAKE256 = Algorithm('RawSHAKE256', 512, RAWSHAKE_SUFFIX)
KECCAK_224 = Algorithm('Keccak-224', 448, KECCAK_SUFFIX, 224)
KECCAK_256 = Algorithm('Keccak-256', 512, KECCAK_SUFFIX, 256)
KECCAK_384 = Algorithm('Keccak-384', 768, KECCAK_SUFFIX, 384)
KECCAK_512 = Algorithm('Keccak-512', 1024, KECCAK_SUFFIX, 512)

ALGORITHMS: dict[str, Algorithm] = {a.name: a for a in (
    SHA3_224, SHA3_256, SHA3_384, SHA3_512,
    SHAKE128, SHAKE256,
    RAWSHAKE128, RAWSHAKE256,
    KECCAK_224, KECCAK_256, KECCAK_384, KECCAK_512,
)}


def get(name: str) -> Algorithm:
    """Look up an algorithm by name (case insensitive)."""
    for key, algorithm in ALGORITHMS.items():
        if key.lower() == name.lower():
            return algorithm
    raise ConfigError(f'Unknown algorithm {name!r}')


def sha3(bits: int) -> Algorithm:
    """Select SHA3-224, SHA3-256, SHA3-384 or SHA3-512."""
    if bits not in SHA3_LENGTHS:
        raise ConfigError(f'Invalid SHA-3 hash length {bits}')
    return ALGORITHMS[f'SHA3-{bits}']


def keccak(bits: int) -> Algorithm:
    """Select the original Keccak submission (no domain suffix)."""
    if bits not in SHA3_LENGTHS:
        raise ConfigError(f'Invalid Keccak hash length {bits}')
    return ALGORITHMS[f'Keccak-{bits}']


def shake(strength: int) -> Algorithm:
    """Select SHAKE128 or SHAKE256."""
    if strength not in SHAKE_STRENGTHS:
        raise ConfigError(f'Invalid SHAKE security strength {strength}')
    return ALGORITHMS[f'SHAKE{strength}']


def rawshake(strength: int) -> Algorithm:
    """Select RawSHAKE128 or RawSHAKE256."""
    if strength not in SHAKE_STRENGTHS:
        raise ConfigError(f'Invalid RawSHAKE security strength {strength}')
    return ALGORITHMS[f'RawSHAKE{strength}']


def generic_keccak(b: int, rate: int, rounds: None | int = None) -> Algorithm:
    """Make a generic sponge over Keccak-f[b] (or Keccak-p[b, rounds])."""
    size = SpongeSize.of(b)
    name = f'Keccak-f[{b}]' if rounds is None else f'Keccak-p[{b},{rounds}]'
    return Algorithm(name, b - rate, KECCAK_SUFFIX, size=size, rounds=rounds)


def resolve(algorithm: Algorithm | str) -> Algorithm:
    return get(algorithm) if isinstance(algorithm, str) else algorithm


def compute(data: bytes, algorithm: Algorithm | str, output_bits: None | int = None) -> bytes:
    """Compute a message digest (or an XOF output of output_bits bits)."""
    return resolve(algorithm).compute(data, output_bits)


def compute_hex(data: bytes, algorithm: Algorithm | str, output_bits: None | int = None) -> str:
    """Compute a message digest, render it in lowercase hexadecimal."""
    return compute(data, algorithm, output_bits).hex()
