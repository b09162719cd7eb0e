# Copyright (c) 2023-2024, Andrey Dubovik <andrei@dubovik.eu>

"""Compute Keccak, SHA-3 and SHAKE digests from the command line."""

# Load standard packages
import argparse
import binascii
import dataclasses
import os
import sys

# Load local packages
from .algorithms import ALGORITHMS, get
from .errors import Sha3Error
from .sponge import Snapshot, save_trace


def hex_bytes(s: str) -> bytes:
    s = s.strip()
    try:
        return binascii.unhexlify(s[2:] if s.startswith('0x') else s)
    except (binascii.Error, ValueError) as e:
        raise argparse.ArgumentTypeError(f'Bad hexadecimal input: {e}')


def make_parser() -> argparse.ArgumentParser:
    """Build the argument parser, defaults can be overridden from the environment."""
    p = argparse.ArgumentParser(
        prog='py_keccak_sponge',
        description='Compute Keccak, SHA-3 and SHAKE digests',
    )
    algorithm = os.getenv('KECCAK_ALGORITHM', 'SHA3-256')
    rounds = os.getenv('KECCAK_ROUNDS', '').strip()
    if rounds and not rounds.isdigit():
        p.error(f'KECCAK_ROUNDS must be a non-negative integer, not {rounds!r}')
    p.add_argument('files', nargs='*', help='Input files, "-" for stdin (default)')
    p.add_argument('-s', '--string', action='append', default=[],
                   help='Hash a UTF-8 string (repeatable)')
    p.add_argument('-x', '--hex', action='append', default=[], type=hex_bytes,
                   help='Hash bytes given in hexadecimal (repeatable)')
    p.add_argument('-a', '--algorithm', default=algorithm,
                   help=f'One of {", ".join(ALGORITHMS)} (default {algorithm})')
    p.add_argument('-n', '--bits', type=int, default=None,
                   help='Output length in bits, required for SHAKE and RawSHAKE')
    p.add_argument('--rounds', type=int, default=int(rounds) if rounds else None,
                   help='Number of rounds for reduced-round Keccak-p (default: all)')
    p.add_argument('--lanes', action='store_true', help='Print the 25 lanes of the final state')
    p.add_argument('--trace', default='', help='Write the state after every permutation to a file')
    p.add_argument('-v', '--verbose', action='store_true', help='Report absorbed and squeezed blocks')
    return p


def read_inputs(args: argparse.Namespace) -> list[tuple[str, bytes]]:
    """Collect (label, data) pairs in the order strings, hex, files."""
    inputs = [(repr(s), s.encode('utf8')) for s in args.string]
    inputs += [(f'0x{b.hex()}', b) for b in args.hex]
    for path in args.files:
        if path == '-':
            inputs.append(('-', sys.stdin.buffer.read()))
        else:
            with open(path, 'rb') as f:
                inputs.append((path, f.read()))
    if not inputs:
        inputs.append(('-', sys.stdin.buffer.read()))
    return inputs


def main(argv: None | list[str] = None) -> int:
    parser = make_parser()
    args = parser.parse_args(argv)
    trace: list[Snapshot] = []
    try:
        algorithm = get(args.algorithm)
        if args.rounds is not None:
            algorithm = dataclasses.replace(algorithm, rounds=args.rounds)
        length = algorithm.output_length(args.bits)
        digits = (algorithm.size.w + 3)//4
        for label, data in read_inputs(args):
            sponge = algorithm.sponge(trace=bool(args.trace), verbose=args.verbose)
            digest = sponge.process(data, length)
            print(f'{digest.hex()}  {label}')
            if args.lanes:
                for i, v in enumerate(sponge.lane_values()):
                    print(f'  A[{i%5},{i//5}] = {v:0{digits}x}')
            if sponge.trace is not None:
                trace += sponge.trace
    except Sha3Error as e:
        parser.error(str(e))
    except OSError as e:
        parser.error(f'Cannot read {e.filename}: {e.strerror}')
    if args.trace:
        save_trace(trace, args.trace)
    return 0


if __name__ == '__main__':
    sys.exit(main())
