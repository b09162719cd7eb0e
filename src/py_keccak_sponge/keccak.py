# Copyright (c) 2023-2024, Andrey Dubovik <andrei@dubovik.eu>

"""A NumPy-based implementation of the Keccak-p permutation.

The step mappings operate on arrays of bits indexed by [x, y, z], for any of
the seven permitted lane depths.
"""

# Load external packages
import numpy as np

# Load local packages
from .bitstring import Array
from .errors import ConfigError
from .state import SpongeState


def rc(t: int) -> int:
    """Compute a round constant bit with an 8-bit LFSR."""
    r = [1,0,0,0,0,0,0,0]
    for _ in range(t%255):
        r = [0] + r
        r[0] ^= r[8]
        r[4] ^= r[8]
        r[5] ^= r[8]
        r[6] ^= r[8]
        r = r[:8]
    return r[0]


def rho_offsets() -> Array:
    """Tabulate the rotation offsets of the lanes, before reduction mod w."""
    offsets = np.zeros((5, 5), dtype=np.int64)
    x, y = 1, 0
    for t in range(24):
        offsets[x,y] = (t+1)*(t+2)//2
        x, y = y, (2*x + 3*y)%5
    return offsets


# The LFSR has period 255, so all round constant bits fit a static table
RC_BITS = tuple(rc(t) for t in range(255))
RHO_OFFSETS = rho_offsets()


def round_constant(ir: int, l: int = 6) -> int:
    """Compute the lane constant of round ir for lanes of depth 2**l."""
    value = 0
    for j in range(l + 1):
        value |= RC_BITS[(j + 7*ir)%255] << 2**j-1
    return value


ROUND_CONSTANTS = tuple(round_constant(i) for i in range(24))


def theta(a: Array) -> Array:
    w = a.shape[2]
    x, z = np.indices((5, w))
    c = a[:,0,:] ^ a[:,1,:] ^ a[:,2,:] ^ a[:,3,:] ^ a[:,4,:]
    d = c[(x-1)%5,z] ^ c[(x+1)%5,(z-1)%w]
    return a ^ d[:,None,:]


def rho(a: Array) -> Array:
    w = a.shape[2]
    a = a.copy()
    for x in range(5):
        for y in range(5):
            a[x,y] = np.roll(a[x,y], RHO_OFFSETS[x,y]%w)
    return a


def pi(a: Array) -> Array:
    x, y = np.indices((5, 5))
    return a[(x+3*y)%5,x]


def chi(a: Array) -> Array:
    x, = np.indices((5,))
    return a[x] ^ ((a[(x+1)%5] ^ 1) & a[(x+2)%5])


def iota(a: Array, ir: int) -> Array:
    w = a.shape[2]
    l = w.bit_length() - 1
    RC = np.zeros(w, dtype=np.uint8)
    for j in range(l + 1):
        RC[2**j-1] = RC_BITS[(j + 7*ir)%255]
    a = a.copy()
    a[0,0] ^= RC
    return a


def keccak_round(a: Array, ir: int) -> Array:
    """Apply round ir of Keccak-p."""
    return iota(chi(pi(rho(theta(a)))), ir)


def keccak_p(state: SpongeState, rounds: None | int = None) -> None:
    """Apply Keccak-p[b, rounds] to a state in place.

    Keccak-f uses 12 + 2*l rounds. Reduced-round variants run the last rounds
    of Keccak-f, i.e. round indices 12 + 2*l - rounds to 12 + 2*l - 1.
    """
    nr = 12 + 2*state.size.l
    if rounds is None:
        rounds = nr
    if rounds < 0:
        raise ConfigError(f'Invalid number of rounds {rounds}')
    a = state.lattice()
    for ir in range(nr - rounds, nr):
        a = keccak_round(a, ir)
    state.load_lattice(a)


def keccak_f(state: SpongeState) -> None:
    """Apply the full Keccak-f permutation to a state in place."""
    keccak_p(state)
