# a51/model/keystream.py
# A5/1 keystream generator
#
# after key setup, every cycle:
#   1. majority clock (clocking.clock)
#   2. output bit = msb(R1) ^ msb(R2) ^ msb(R3)
# 228 cycles per frame: the first 114 bits are the A->B burst, the next 114
# (continuing from the same state) are the B->A burst.
#
# packing: bit i of a burst goes to byte i // 8, bit position 7 - (i % 8)
# (msb-first, same as helpers.bytes_from_bits); 114 bits -> 15 bytes with
# the 6 low bits of the last byte left at zero.

from typing import List, NamedTuple, Optional, Tuple

from a51.model.clocking import CipherState, clock, clock_all_three, clock_flags, output_bit
from a51.model.helpers import KeyLike, bytes_from_bits
from a51.model.key_setup import Phase, frame_bits, key_bits, key_setup, mix

BURST_BITS = 114
BURST_BYTES = (BURST_BITS + 7) // 8  # 15
KEYSTREAM_BITS = 2 * BURST_BITS      # 228


class TraceRow(NamedTuple):
    phase: str
    cycle: int
    state: CipherState                 # register values after this cycle
    clocked: Tuple[bool, bool, bool]
    out: Optional[int]                 # None while loading/mixing


def keystream_bits(state: CipherState, n: int = KEYSTREAM_BITS) -> Tuple[List[int], CipherState]:
    bits: List[int] = []
    for _ in range(n):
        state = clock(state)
        bits.append(output_bit(state))
    return bits, state


def _burst(state: CipherState) -> Tuple[bytes, CipherState]:
    out = bytearray(BURST_BYTES)
    for i in range(BURST_BITS):
        state = clock(state)
        # store the bit msb first
        out[i // 8] |= output_bit(state) << (7 - (i & 7))
    return bytes(out), state


def run(state: CipherState) -> Tuple[bytes, bytes, CipherState]:
    atob, state = _burst(state)
    btoa, state = _burst(state)
    return atob, btoa, state


def generate_keystream(key: KeyLike, frame: int) -> Tuple[bytes, bytes]:
    atob, btoa, _ = run(key_setup(key, frame))
    return atob, btoa


def split_bursts(bits: List[int]) -> Tuple[bytes, bytes]:
    # pack a 228-bit stream the same way run() does
    if len(bits) != KEYSTREAM_BITS:
        raise ValueError(f"Expected {KEYSTREAM_BITS} keystream bits, got {len(bits)}")
    return bytes_from_bits(bits[:BURST_BITS]), bytes_from_bits(bits[BURST_BITS:])


def trace(key: KeyLike, frame: int) -> List[TraceRow]:
    # cycle-by-cycle register trace through all 414 cycles
    rows: List[TraceRow] = []
    state = CipherState()
    all_three = (True, True, True)

    for phase, bits in ((Phase.LOAD_KEY, key_bits(key)), (Phase.LOAD_FRAME, frame_bits(frame))):
        for i, bit in enumerate(bits):
            r1, r2, r3 = clock_all_three(state)
            state = CipherState(r1 ^ bit, r2 ^ bit, r3 ^ bit)
            rows.append(TraceRow(phase.value, i, state, all_three, None))

    for i in range(Phase.MIX.cycles):
        flags = clock_flags(state)
        state = mix(state, 1)
        rows.append(TraceRow(Phase.MIX.value, i, state, flags, None))

    for name in ("atob", "btoa"):
        for i in range(BURST_BITS):
            flags = clock_flags(state)
            state = clock(state)
            rows.append(TraceRow(name, i, state, flags, output_bit(state)))

    return rows


if __name__ == "__main__":
    import random

    from a51.model.helpers import hex_bytes

    key = bytes([0x12, 0x23, 0x45, 0x67, 0x89, 0xAB, 0xCD, 0xEF])
    atob, btoa = generate_keystream(key, 0x134)
    print("AtoB:", hex_bytes(atob))
    print("BtoA:", hex_bytes(btoa))

    # bit-list path and byte-packing path must agree
    random.seed(0xA51)
    for _ in range(50):
        k = bytes(random.getrandbits(8) for _ in range(8))
        f = random.getrandbits(22)
        s = key_setup(k, f)
        bits, end_bits = keystream_bits(s)
        a, b, end_run = run(s)
        assert (a, b) == split_bursts(bits), f"packing mismatch for key={k.hex()} frame={f:#x}"
        assert end_bits == end_run

    rows = trace(key, 0x134)
    assert rows[-1].state == run(key_setup(key, 0x134))[2]
    print(f"trace: {len(rows)} cycles")
    print("keystream.py: self-test OK")
