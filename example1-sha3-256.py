from py_keccak_sponge import SHA3_256, SHAKE128, save_trace


def show(snapshot):
    lane = snapshot.lanes[0]
    print(f'{snapshot.phase.value:>9} block {snapshot.block}: A[0,0] = {lane:016x}')


# Sandbox
if __name__ == '__main__':
    # A message spanning two blocks of SHA3-256 (rate 1088 bits)
    msg = b'The quick brown fox jumps over the lazy dog' * 4

    # Watch the state after every permutation
    sponge = SHA3_256.sponge(trace=True, observer=show)
    digest = sponge.process(msg, 256)
    print(digest.hex())
    save_trace(sponge.trace, 'sha3-256.trace')

    # Final lanes, e.g. for display
    for y in range(5):
        print(' '.join(f'{v:016x}' for v in sponge.lane_values()[5*y:5*y+5]))

    # SHAKE128 output is a prefix of any longer output
    short = SHAKE128.compute(msg, 256)
    long = SHAKE128.compute(msg, 4096)
    print(short.hex(), long.startswith(short))
