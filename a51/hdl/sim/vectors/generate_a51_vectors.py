#!/usr/bin/env python3
# a51/hdl/sim/vectors/generate_a51_vectors.py
# generate test vectors for A5/1 keystream hdl verification
# outputs vectors in a format easily readable by verilog testbenches
#
# python -m a51.hdl.sim.vectors.generate_a51_vectors

from pathlib import Path
import random
from typing import List, Tuple

from a51.model.helpers import FRAME_BITS, FRAME_MASK, KEY_BYTES
from a51.model.keystream import BURST_BYTES, generate_keystream
from a51.model.selftest import KAT_FRAME, KAT_KEY

Vector = Tuple[str, bytes, int, bytes, bytes]


def bytes_to_hex_string(data: bytes) -> str:
    return " ".join(f"{b:02X}" for b in data)


def _vector(name: str, key: bytes, frame: int) -> Vector:
    atob, btoa = generate_keystream(key, frame)
    return (name, key, frame, atob, btoa)


def build_vectors(num_random: int = 10) -> List[Vector]:
    vectors = []

    # test case 1: published known-answer vector
    vectors.append(_vector("known_answer", KAT_KEY, KAT_FRAME))

    # test case 2: all zeros (registers only leave zero through the frame bits)
    vectors.append(_vector("zero_key_zero_frame", bytes(KEY_BYTES), 0))

    # test case 3: all ones key
    vectors.append(_vector("ones_key", bytes([0xFF] * KEY_BYTES), 0))

    # test case 4: largest frame number
    vectors.append(_vector("max_frame", KAT_KEY, FRAME_MASK))

    # test case 5: alternating patterns
    vectors.append(_vector("pattern_aa", bytes([0xAA] * KEY_BYTES), 0x2AAAAA))
    vectors.append(_vector("pattern_55", bytes([0x55] * KEY_BYTES), 0x155555))

    # walking-one keys, one per byte (LSB = first bit loaded)
    for i in range(KEY_BYTES):
        key = bytes([0x01 if j == i else 0 for j in range(KEY_BYTES)])
        vectors.append(_vector(f"walking_one_{i}", key, KAT_FRAME))

    # random test cases
    random.seed(0x4135315F564543)  # "A51_VEC" in ASCII
    for i in range(num_random):
        key = bytes([random.randint(0, 255) for _ in range(KEY_BYTES)])
        frame = random.getrandbits(FRAME_BITS)
        vectors.append(_vector(f"random_{i:02d}", key, frame))

    return vectors


def generate_test_vectors(output_file: str, num_random: int = 10) -> List[Vector]:
    vectors = build_vectors(num_random)

    with open(output_file, 'w') as f:
        f.write("// A5/1 Keystream Test Vectors\n")
        f.write("// Generated from golden model (keystream.py)\n")
        f.write(f"// Format: test_name | key (8 bytes) | frame ({FRAME_BITS} bits) | AtoB (15 bytes) | BtoA (15 bytes)\n")
        f.write("// Each byte in hex, space-separated, keystream msb-first\n")
        f.write("//\n")
        f.write(f"// Total test vectors: {len(vectors)}\n")
        f.write("//\n\n")

        for name, key, frame, atob, btoa in vectors:
            f.write(f"// Test: {name}\n")
            f.write(f"KEY:   {bytes_to_hex_string(key)}\n")
            f.write(f"FRAME: {frame:06X}\n")
            f.write(f"AtoB:  {bytes_to_hex_string(atob)}\n")
            f.write(f"BtoA:  {bytes_to_hex_string(btoa)}\n")
            f.write("\n")

    print(f"Generated {len(vectors)} test vectors")
    print(f"Written to: {output_file}")

    # also create a compact binary format for faster HDL loading if needed
    bin_file = str(Path(output_file).with_suffix('.bin'))
    with open(bin_file, 'wb') as f:
        # header: number of vectors (4 bytes)
        f.write(len(vectors).to_bytes(4, 'little'))
        # each vector: key (8) + frame (4, little-endian) + AtoB (15) + BtoA (15)
        for name, key, frame, atob, btoa in vectors:
            f.write(key)
            f.write(frame.to_bytes(4, 'little'))
            f.write(atob)
            f.write(btoa)

    print(f"Binary format: {bin_file}")

    return vectors


def read_binary_vectors(path: str) -> List[Tuple[bytes, int, bytes, bytes]]:
    data = Path(path).read_bytes()
    count = int.from_bytes(data[:4], 'little')
    rec_len = KEY_BYTES + 4 + 2 * BURST_BYTES
    if len(data) != 4 + count * rec_len:
        raise ValueError(f"Expected {4 + count * rec_len} bytes for {count} vectors, got {len(data)}")
    out = []
    for i in range(count):
        rec = data[4 + i * rec_len: 4 + (i + 1) * rec_len]
        key = rec[:KEY_BYTES]
        frame = int.from_bytes(rec[KEY_BYTES:KEY_BYTES + 4], 'little')
        atob = rec[KEY_BYTES + 4:KEY_BYTES + 4 + BURST_BYTES]
        btoa = rec[KEY_BYTES + 4 + BURST_BYTES:]
        out.append((key, frame, atob, btoa))
    return out


if __name__ == "__main__":
    output_dir = Path(__file__).parent
    output_dir.mkdir(parents=True, exist_ok=True)

    output_file = output_dir / "a51_keystream_vectors.txt"

    print("A5/1 Keystream Test Vector Generator")
    print("=" * 50)

    vectors = generate_test_vectors(str(output_file), num_random=20)

    print("\nTest vector summary:")
    print(f"  Key size:    {KEY_BYTES} bytes")
    print(f"  Frame size:  {FRAME_BITS} bits")
    print(f"  Output size: 2 x {BURST_BYTES} bytes (2 x 114 bits)")
    print("\nReady for HDL verification!")
