# a51/model/helpers.py
# common helper functions used across the model and the vector generators
# provides parity, bit/byte conversion and key/frame parsing utilities

from typing import Iterable, Sequence, Union

import numpy as np

KeyLike = Union[bytes, bytearray, Sequence[int]]

KEY_BYTES = 8
FRAME_BITS = 22
FRAME_MASK = (1 << FRAME_BITS) - 1  # 0x3FFFFF


def parity(x: int) -> int:
    # xor of every bit of a non-negative int, folded 16 -> 8 -> 4 -> 2 -> 1
    if x < 0:
        raise ValueError(f"parity expects a non-negative int, got {x}")
    # wider values are folded down to 32 bits first
    while x >> 32:
        x = (x & 0xFFFFFFFF) ^ (x >> 32)
    x ^= x >> 16
    x ^= x >> 8
    x ^= x >> 4
    x ^= x >> 2
    x ^= x >> 1
    return x & 1


def bytes_from_bits(bits: Iterable[int]) -> bytes:
    out = bytearray()
    acc = 0
    n = 0
    for bit in bits:
        acc = (acc << 1) | (bit & 1)
        n += 1
        if n == 8:
            out.append(acc)
            acc = 0
            n = 0
    if n:
        # pad last byte with zeros on the right
        out.append(acc << (8 - n))
    return bytes(out)


def bits_array(data: bytes, nbits: int) -> np.ndarray:
    # msb-first unpack, truncated to the first nbits
    return np.unpackbits(np.frombuffer(bytes(data), dtype=np.uint8))[:nbits]


def normalize_key(key: KeyLike) -> bytes:
    if isinstance(key, (bytes, bytearray)):
        raw = bytes(key)
    else:
        try:
            values = list(key)
        except TypeError:
            raise ValueError(f"A5/1 key must be {KEY_BYTES} bytes, got {type(key).__name__}") from None
        for v in values:
            if isinstance(v, bool) or not isinstance(v, (int, np.integer)):
                raise ValueError(f"Key bytes must be integers, got {type(v).__name__}")
            if not 0 <= v <= 0xFF:
                raise ValueError(f"Key bytes must be in 0..255, got {v}")
        raw = bytes(values)
    if len(raw) != KEY_BYTES:
        raise ValueError(f"A5/1 key must be {KEY_BYTES} bytes, got {len(raw)}")
    return raw


def normalize_frame(frame: int) -> int:
    # only the low 22 bits take part in the key setup, higher bits are dropped
    if isinstance(frame, bool) or not isinstance(frame, (int, np.integer)):
        raise TypeError(f"Frame number must be an integer, got {type(frame).__name__}")
    frame = int(frame)
    if frame < 0:
        raise ValueError(f"Frame number must be non-negative, got {frame}")
    return frame & FRAME_MASK


def parse_key_hex(s: str) -> bytes:
    s = s.replace(" ", "").replace("\n", "")
    if s.lower().startswith("0x"):
        s = s[2:]
    return normalize_key(bytes.fromhex(s))


def hex_bytes(data: bytes) -> str:
    return " ".join(f"{b:02X}" for b in data)


def hamming_distance_bytes(a: bytes, b: bytes) -> int:
    if len(a) != len(b):
        raise ValueError(f"Sequences must have equal length: {len(a)} != {len(b)}")

    distance = 0
    for byte_a, byte_b in zip(a, b):
        xor = byte_a ^ byte_b
        # count set bits in XOR
        distance += bin(xor).count('1')
    return distance


def first_mismatch(a: bytes, b: bytes) -> int:
    # index of the first differing byte, -1 when equal
    for i, (x, y) in enumerate(zip(a, b)):
        if x != y:
            return i
    if len(a) != len(b):
        return min(len(a), len(b))
    return -1
