# a51/model/key_setup.py
# A5/1 key setup: loads a 64-bit key and a 22-bit frame number into R1..R3
#
# phases (strictly in this order, no way back):
#   LOAD_KEY   64 cycles   clock all three, xor key bit i into bit 0 of each
#   LOAD_FRAME 22 cycles   clock all three, xor frame bit i into bit 0 of each
#   MIX       100 cycles   majority clocking, output discarded
#   READY                  state is handed to the keystream generator
#
# bit order:
# - key bit i = bit (i % 8) of key byte (i // 8), counted from the byte's LSB
#   (so the first bit loaded is the LSB of key[0])
# - frame bit i = bit i of the frame number, LSB first; only bits 0..21 are read

from enum import Enum
from typing import List

from a51.model.clocking import CipherState, clock, clock_all_three
from a51.model.helpers import (FRAME_BITS, KEY_BYTES, KeyLike, normalize_frame,
                               normalize_key)

KEY_BITS = KEY_BYTES * 8  # 64
MIX_CYCLES = 100


class Phase(Enum):
    LOAD_KEY = "load_key"
    LOAD_FRAME = "load_frame"
    MIX = "mix"
    READY = "ready"

    @property
    def cycles(self) -> int:
        return _PHASE_CYCLES[self]


_PHASE_CYCLES = {
    Phase.LOAD_KEY: KEY_BITS,
    Phase.LOAD_FRAME: FRAME_BITS,
    Phase.MIX: MIX_CYCLES,
    Phase.READY: 0,
}

SETUP_CYCLES = KEY_BITS + FRAME_BITS + MIX_CYCLES  # 186


def key_bits(key: KeyLike) -> List[int]:
    raw = normalize_key(key)
    return [(raw[i // 8] >> (i & 7)) & 1 for i in range(KEY_BITS)]


def frame_bits(frame: int) -> List[int]:
    frame = normalize_frame(frame)
    return [(frame >> i) & 1 for i in range(FRAME_BITS)]


def _load_bit(state: CipherState, bit: int) -> CipherState:
    state = clock_all_three(state)
    r1, r2, r3 = state
    return CipherState(r1 ^ bit, r2 ^ bit, r3 ^ bit)


def load_key(state: CipherState, key: KeyLike) -> CipherState:
    for bit in key_bits(key):
        state = _load_bit(state, bit)
    return state


def load_frame(state: CipherState, frame: int) -> CipherState:
    for bit in frame_bits(frame):
        state = _load_bit(state, bit)
    return state


def mix(state: CipherState, cycles: int = MIX_CYCLES) -> CipherState:
    for _ in range(cycles):
        state = clock(state)
    return state


def key_setup(key: KeyLike, frame: int) -> CipherState:
    state = CipherState(0, 0, 0)
    state = load_key(state, key)
    state = load_frame(state, frame)
    state = mix(state)
    return state


if __name__ == "__main__":
    key = bytes([0x12, 0x23, 0x45, 0x67, 0x89, 0xAB, 0xCD, 0xEF])
    frame = 0x134

    s = CipherState()
    for phase in (Phase.LOAD_KEY, Phase.LOAD_FRAME, Phase.MIX):
        if phase is Phase.LOAD_KEY:
            s = load_key(s, key)
        elif phase is Phase.LOAD_FRAME:
            s = load_frame(s, frame)
        else:
            s = mix(s)
        print(f"{phase.name:<10} ({phase.cycles:3d} cycles): "
              f"R1={s.r1:05X} R2={s.r2:06X} R3={s.r3:06X}")

    assert s == key_setup(key, frame)
    print("key_setup.py: self-test OK")
