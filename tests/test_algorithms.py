import secrets

import numpy as np
import pytest

from py_keccak_sponge import algorithms
from py_keccak_sponge.algorithms import (
    ALGORITHMS, KECCAK_256, RAWSHAKE128, RAWSHAKE256, SHA3_224, SHA3_256, SHA3_384, SHA3_512,
    SHAKE128, SHAKE256, compute, compute_hex, generic_keccak, get, rawshake, sha3, shake,
)
from py_keccak_sponge.errors import ConfigError, RangeError
from py_keccak_sponge.state import SpongeSize

# NIST and Keccak team test vectors
VECTORS = [
    ('SHA3-224', b'', '6b4e03423667dbb73b6e15454f0eb1abd4597f9a1b078e3f5b5a6bc7'),
    ('SHA3-256', b'', 'a7ffc6f8bf1ed76651c14756a061d662f580ff4de43b49fa82d80a4b80f8434a'),
    ('SHA3-384', b'', '0c63a75b845e4f7d01107d852e4c2485c51a50aaaa94fc61995e71bbee983a2a'
                      'c3713831264adb47fb6bd1e058d5f004'),
    ('SHA3-512', b'', 'a69f73cca23a9ac5c8b567dc185a756e97c982164fe25859e0d1dcc1475c80a6'
                      '15b2123af1f5f94c11e3e9402c3ac558f500199d95b6d3e301758586281dcd26'),
    ('SHA3-224', b'abc', 'e642824c3f8cf24ad09234ee7d3c766fc9a3a5168d0c94ad73b46fdf'),
    ('SHA3-256', b'abc', '3a985da74fe225b2045c172d6bd390bd855f086e3e9d525b46bfe24511431532'),
    ('SHA3-384', b'abc', 'ec01498288516fc926459f58e2c6ad8df9b473cb0fc08c2596da7cf0e49be4b2'
                         '98d88cea927ac7f539f1edf228376d25'),
    ('SHA3-512', b'abc', 'b751850b1a57168a5693cd924b6b096e08f621827444f70d884f5d0240d2712e'
                         '10e116e9192af3c91a7ec57647e3934057340b4cf408d5a56592f8274eec53f0'),
    ('Keccak-224', b'', 'f71837502ba8e10837bdd8d365adb85591895602fc552b48b7390abd'),
    ('Keccak-256', b'', 'c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470'),
    ('Keccak-256', b'abc', '4e03657aea45a94fc7d47ba826c8d667c0d1e6e33a64a036ec44f58fa12d6c45'),
]

XOF_VECTORS = [
    ('SHAKE128', b'', 256, '7f9c2ba4e88f827d616045507605853ed73b8093f6efbc88eb1a6eacfa66ef26'),
    ('SHAKE256', b'', 512, '46b9dd2b0ba88d13233b3feb743eeb243fcd52ea62b81b82b50c27646ed5762f'
                           'd75dc4ddd8c0f200cb05019d67b592f6fc821c49479ab48640292eacb3b7c4be'),
]


def hamming_bits(a: bytes, b: bytes) -> int:
    x = np.frombuffer(a, dtype=np.uint8) ^ np.frombuffer(b, dtype=np.uint8)
    return int(np.unpackbits(x).sum())


@pytest.mark.parametrize('name, msg, digest', VECTORS)
def test_fixed_length_vectors(name, msg, digest):
    assert compute_hex(msg, name) == digest
    assert ALGORITHMS[name].hexdigest(msg) == digest


@pytest.mark.parametrize('name, msg, bits, digest', XOF_VECTORS)
def test_xof_vectors(name, msg, bits, digest):
    assert compute(msg, name, bits).hex() == digest


def test_multi_block_message():
    # 200 bytes span two SHA3-256 blocks (rate 136 bytes)
    msg = b'\xa3'*200
    assert SHA3_256.compute(msg).hex() == (
        '79f38adec5c20307a98ef76e8324afbfd46cfd81b22e3973c65fa1bd9de31787'
    )


def test_rawshake_relates_to_shake():
    # SHAKE(M) = RawSHAKE(M || 11), the appended bits being 1, 1
    for strength, bits in ((128, 256), (256, 512)):
        raw = rawshake(strength).compute(b'\x03', bits, input_bits=2)
        assert raw == shake(strength).compute(b'', bits)
    assert RAWSHAKE128.compute(b'abc', 128) != SHAKE128.compute(b'abc', 128)


def test_sha3_relates_to_keccak():
    # SHA3(M) = Keccak(M || 01), the appended bits being 0, 1
    assert KECCAK_256.compute(b'\x02', input_bits=2) == SHA3_256.compute(b'')


@pytest.mark.parametrize('algorithm', [SHAKE128, SHAKE256, RAWSHAKE128, RAWSHAKE256])
def test_xof_prefix_property(algorithm):
    msg = b'The quick brown fox jumps over the lazy dog'
    short = algorithm.compute(msg, 8*100)
    long = algorithm.compute(msg, 8*(100 + 250))
    assert len(short) == 100 and len(long) == 350
    assert long[:100] == short


def test_parameter_sets():
    assert [a.capacity for a in (SHA3_224, SHA3_256, SHA3_384, SHA3_512)] == [448, 512, 768, 1024]
    assert SHA3_256.rate == 1088
    assert SHA3_256.digest_size == 32
    assert SHA3_256.block_size == 136
    assert not SHA3_256.extendable
    assert SHAKE128.extendable and SHAKE128.rate == 1344
    assert SHAKE256.digest_size is None
    assert sha3(384) is SHA3_384
    assert algorithms.keccak(256) is KECCAK_256
    assert get('shake256') is SHAKE256


@pytest.mark.parametrize('selector, arg', [
    (sha3, 128), (sha3, 1024), (algorithms.keccak, 160), (shake, 512), (rawshake, 64),
])
def test_invalid_selectors(selector, arg):
    with pytest.raises(ConfigError):
        selector(arg)


def test_invalid_output_lengths():
    with pytest.raises(ConfigError):
        SHAKE128.compute(b'abc')
    with pytest.raises(ConfigError):
        SHA3_256.compute(b'abc', 512)
    assert SHA3_256.compute(b'abc', 256) == SHA3_256.compute(b'abc')
    with pytest.raises(ConfigError):
        get('MD5')


def test_negative_input_length():
    assert SHA3_256.compute(b'abc', input_bits=-1) == SHA3_256.compute(b'abc')
    with pytest.raises(RangeError):
        SHA3_256.compute(b'abc', input_bits=-5)
    with pytest.raises(RangeError):
        SHAKE128.compute(b'abc', -8)


def test_generic_keccak():
    f200 = generic_keccak(200, 40)
    assert f200.size is SpongeSize.W08 and f200.capacity == 160
    out = f200.compute(b'abc', 100)
    assert len(out) == 13
    reduced = generic_keccak(1600, 1088, rounds=12)
    assert reduced.name == 'Keccak-p[1600,12]'
    assert reduced.compute(b'', 256) != KECCAK_256.compute(b'')
    with pytest.raises(ConfigError):
        generic_keccak(200, 200)
    with pytest.raises(ConfigError):
        generic_keccak(300, 100)


def test_avalanche():
    fracs = []
    for _ in range(16):
        msg = secrets.token_bytes(64)
        msg2 = bytearray(msg)
        msg2[secrets.randbelow(64)] ^= 1 << secrets.randbelow(8)
        d1 = SHA3_256.compute(msg)
        d2 = SHA3_256.compute(bytes(msg2))
        fracs.append(hamming_bits(d1, d2)/256)
    fracs = np.array(fracs, dtype=float)
    assert 0.4 < fracs.mean() < 0.6
    assert fracs.min() > 0.25
