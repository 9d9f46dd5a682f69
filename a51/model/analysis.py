# a51/model/analysis.py
# numpy views of the keystream for statistics and batch runs
#
# - batch generation over many frames -> (N, 2, 15) uint8
# - avalanche matrix: flip each of the 64 key bits and 22 frame bits once,
#   record which of the 228 keystream bits changed -> (86, 228) uint8
# - bit balance per keystream position over a range of frames
# - clock rate: how often each register moves during keystream generation

from typing import Dict, Iterable, Optional

import numpy as np

from a51.model.clocking import CipherState, clock, clock_flags
from a51.model.helpers import FRAME_BITS, KeyLike, bits_array, normalize_frame, normalize_key
from a51.model.key_setup import KEY_BITS, key_setup
from a51.model.keystream import BURST_BITS, BURST_BYTES, KEYSTREAM_BITS, generate_keystream


def generate_keystream_batch(key: KeyLike, frames: Iterable[int]) -> np.ndarray:
    key = normalize_key(key)
    rows = [generate_keystream(key, fn) for fn in frames]
    out = np.zeros((len(rows), 2, BURST_BYTES), dtype=np.uint8)
    for i, (atob, btoa) in enumerate(rows):
        out[i, 0] = np.frombuffer(atob, dtype=np.uint8)
        out[i, 1] = np.frombuffer(btoa, dtype=np.uint8)
    return out


def keystream_bit_array(atob: bytes, btoa: bytes) -> np.ndarray:
    # 228 bits in generation order, padding bits dropped
    return np.concatenate([bits_array(atob, BURST_BITS), bits_array(btoa, BURST_BITS)])


def _flip_key_bit(key: bytes, i: int) -> bytes:
    # same bit numbering as the key loading order
    buf = bytearray(key)
    buf[i // 8] ^= 1 << (i & 7)
    return bytes(buf)


def avalanche_matrix(key: KeyLike, frame: int) -> np.ndarray:
    key = normalize_key(key)
    frame = normalize_frame(frame)
    base = keystream_bit_array(*generate_keystream(key, frame))

    diffs = np.zeros((KEY_BITS + FRAME_BITS, KEYSTREAM_BITS), dtype=np.uint8)
    for i in range(KEY_BITS):
        diffs[i] = base ^ keystream_bit_array(*generate_keystream(_flip_key_bit(key, i), frame))
    for j in range(FRAME_BITS):
        diffs[KEY_BITS + j] = base ^ keystream_bit_array(*generate_keystream(key, frame ^ (1 << j)))
    return diffs


def sensitivity_report(key: KeyLike, frame: int, diffs: Optional[np.ndarray] = None) -> Dict[str, float]:
    if diffs is None:
        diffs = avalanche_matrix(key, frame)
    distances = diffs.sum(axis=1)
    key_d = distances[:KEY_BITS]
    frame_d = distances[KEY_BITS:]
    return {
        "mean_flip_fraction": float(diffs.mean()),
        "key_mean_distance": float(key_d.mean()),
        "frame_mean_distance": float(frame_d.mean()),
        "min_distance": int(distances.min()),
        "max_distance": int(distances.max()),
        "unchanged_inputs": int(np.count_nonzero(distances == 0)),
    }


def bit_balance(key: KeyLike, frames: Iterable[int]) -> np.ndarray:
    # fraction of ones at every one of the 228 keystream positions
    batch = generate_keystream_batch(key, frames)
    if batch.shape[0] == 0:
        raise ValueError("bit_balance needs at least one frame")
    bits = np.unpackbits(batch, axis=2)[:, :, :BURST_BITS].reshape(batch.shape[0], KEYSTREAM_BITS)
    return bits.mean(axis=0)


def clock_counts(state: CipherState, cycles: int = KEYSTREAM_BITS) -> np.ndarray:
    counts = np.zeros(3, dtype=np.int64)
    for _ in range(cycles):
        counts += np.array(clock_flags(state), dtype=np.int64)
        state = clock(state)
    return counts


def clock_rate(key: KeyLike, frame: int, cycles: int = KEYSTREAM_BITS) -> np.ndarray:
    return clock_counts(key_setup(key, frame), cycles) / float(cycles)


if __name__ == "__main__":
    key = bytes([0x12, 0x23, 0x45, 0x67, 0x89, 0xAB, 0xCD, 0xEF])
    report = sensitivity_report(key, 0x134)
    for k, v in report.items():
        print(f"{k:>22}: {v}")
    rate = clock_rate(key, 0x134)
    print("clock rate R1/R2/R3:", " ".join(f"{r:.3f}" for r in rate))
    balance = bit_balance(key, range(256))
    print(f"bit balance: mean={balance.mean():.3f} min={balance.min():.3f} max={balance.max():.3f}")
