# Copyright (c) 2023-2024, Andrey Dubovik <andrei@dubovik.eu>

"""Keccak, SHA-3 and SHAKE on a bit-addressable sponge state."""

from .algorithms import (
    ALGORITHMS,
    Algorithm,
    KECCAK_224,
    KECCAK_256,
    KECCAK_384,
    KECCAK_512,
    RAWSHAKE128,
    RAWSHAKE256,
    SHA3_224,
    SHA3_256,
    SHA3_384,
    SHA3_512,
    SHAKE128,
    SHAKE256,
    compute,
    compute_hex,
    generic_keccak,
    get,
    rawshake,
    sha3,
    shake,
)
from .bitstring import Bitstring
from .errors import ConfigError, FormatError, RangeError, Sha3Error
from .keccak import ROUND_CONSTANTS, keccak_p
from .sponge import Phase, Snapshot, Sponge, pad, save_trace
from .state import SpongeSize, SpongeState
